"""
Routes package for the SUTUTEH member portal
"""
# Export blueprints for registration in app.py
from routes.public import public_bp
from routes.registration import registration_bp
from routes.password_recovery import recovery_bp
from routes.questions import questions_bp

__all__ = [
    'public_bp',
    'registration_bp',
    'recovery_bp',
    'questions_bp',
]

"""
Models package for the SUTUTEH member portal
"""
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

# Import all models here to ensure they're registered
from models.user import User, UserProfile
from models.catalog import University, UniversityPosition, EducationalProgram, EducationalLevel
from models.contact import ContactMessage, ContactReply

__all__ = [
    'db',
    'User',
    'UserProfile',
    'University',
    'UniversityPosition',
    'EducationalProgram',
    'EducationalLevel',
    'ContactMessage',
    'ContactReply',
]

"""
Member identity and profile models.

A member row is pre-seeded (email + birthdate) before self-registration;
password, profile fields and ``registration_complete`` are filled in by the
registration workflow. The OTP challenge lives on the identity row: at most
one per member, overwritten on every new code.
"""
from models import db
from datetime import datetime

STATUS_ACTIVE = 'Activo'
STATUS_INACTIVE = 'Inactivo'


class User(db.Model):
    """Authentication record for a union member"""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=True)
    registration_complete = db.Column(db.Boolean, nullable=False, default=False)
    status = db.Column(db.String(20), nullable=False, default=STATUS_ACTIVE)
    verified = db.Column(db.Boolean, nullable=False, default=False)

    # Current OTP challenge (hash of the signed code, never the code itself)
    otp_hash = db.Column(db.String(255), nullable=True)
    otp_issued_at = db.Column(db.DateTime, nullable=True)
    otp_verified = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    profile = db.relationship('UserProfile', backref='user', uselist=False, lazy=True,
                              cascade='all, delete-orphan')

    @property
    def is_active(self):
        return self.status == STATUS_ACTIVE

    @property
    def has_challenge(self):
        return bool(self.otp_hash) and self.otp_issued_at is not None

    def __repr__(self):
        return f'<User {self.email}>'


class UserProfile(db.Model):
    """Personal and employment data captured when registration completes"""
    __tablename__ = 'user_profiles'

    id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True)
    birthdate = db.Column(db.Date, nullable=False)
    first_name = db.Column(db.String(100), nullable=True)
    last_name = db.Column(db.String(100), nullable=True)
    maternal_last_name = db.Column(db.String(100), nullable=True)
    gender = db.Column(db.String(20), nullable=True)
    curp = db.Column(db.String(18), nullable=True)
    phone = db.Column(db.String(10), nullable=True)
    university_id = db.Column(db.Integer, db.ForeignKey('universities.id'), nullable=True)
    position_id = db.Column(db.Integer, db.ForeignKey('university_positions.id'), nullable=True)
    program_id = db.Column(db.Integer, db.ForeignKey('educational_programs.id'), nullable=True)
    level_id = db.Column(db.Integer, db.ForeignKey('educational_levels.id'), nullable=True)
    worker_number = db.Column(db.String(30), nullable=True)
    union_role_id = db.Column(db.Integer, nullable=True)
    seniority_date = db.Column(db.Date, nullable=True)

    def __repr__(self):
        return f'<UserProfile {self.id}>'

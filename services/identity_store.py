"""
Persistence for member identities.

Every method is a single round trip: read, or write-and-commit. Nothing spans
several statements, so an OTP saved just before a failed email stays saved;
the member simply asks for a new code.
"""
from datetime import datetime

from models import db
from models.user import User, UserProfile
from utils.validators import normalize_email


class IdentityStore:
    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    def find_by_email(self, email):
        return User.query.filter_by(email=normalize_email(email)).first()

    def find_by_email_and_birthdate(self, email, birthdate):
        """Pre-seeded member matched by both email and birthdate, or None."""
        return (
            User.query.join(UserProfile, UserProfile.id == User.id)
            .filter(User.email == normalize_email(email), UserProfile.birthdate == birthdate)
            .first()
        )

    def update(self, identity, **fields):
        for name, value in fields.items():
            setattr(identity, name, value)
        identity.updated_at = datetime.utcnow()
        self._commit()
        return identity

    def complete_registration(self, identity, password_hash, **profile_fields):
        """Profile fields, password and the completed flag go out in one commit."""
        profile = identity.profile
        if profile is None:
            raise LookupError(f"User {identity.id} has no profile row")
        for name, value in profile_fields.items():
            setattr(profile, name, value)
        return self.update(identity, password_hash=password_hash, registration_complete=True)

    def save_challenge(self, identity, otp_hash, issued_at):
        """Overwrite the live challenge (last write wins)."""
        return self.update(identity, otp_hash=otp_hash, otp_issued_at=issued_at, otp_verified=False)

    def mark_challenge_verified(self, identity):
        return self.update(identity, otp_verified=True)

    def clear_challenge(self, identity, **fields):
        return self.update(identity, otp_hash=None, otp_issued_at=None, otp_verified=False, **fields)

    def _commit(self):
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

"""
Credential hashing for passwords and OTP tokens
"""
from werkzeug.security import generate_password_hash, check_password_hash


class CredentialHasher:
    """
    Slow, salted one-way hashing (Werkzeug). Every call to ``hash`` uses a
    fresh random salt, so the same secret never produces the same stored value.
    """

    def __init__(self, method="scrypt", salt_length=16):
        self.method = method
        self.salt_length = salt_length

    def hash(self, secret):
        """Generate hash for a password or a signed OTP token"""
        return generate_password_hash(secret, method=self.method, salt_length=self.salt_length)

    def verify(self, secret, hashed):
        """Verify secret against hash; malformed or empty hashes simply fail"""
        if not secret or not hashed:
            return False
        try:
            return check_password_hash(hashed, secret)
        except ValueError:
            return False

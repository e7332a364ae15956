"""
One-time code generation, storage and verification.

The plaintext code only ever travels to the member by email. What is stored
is a slow hash of an HMAC token over the code, keyed with the server OTP
secret, so reading the database is not enough to rebuild a usable code.

Codes come from a plain uniform draw over [100000, 999999] (``random``,
not ``secrets``). The 900000-value space is small; the signing secret is
what keeps stored hashes from being brute-forced offline, so it must be
long and private.
"""
import enum
import hashlib
import hmac
import random
from datetime import datetime, timedelta

OTP_MIN = 100000
OTP_MAX = 999999
OTP_LENGTH = 6
OTP_EXPIRY_MINUTES = 10


class VerifyResult(enum.Enum):
    OK = "ok"
    EXPIRED = "expired"
    MISMATCH = "mismatch"
    NOT_FOUND = "not_found"


def is_code_format(code):
    return isinstance(code, str) and len(code) == OTP_LENGTH and code.isdigit()


class OtpEngine:
    """
    Issues and checks the single live challenge stored on a member identity.

    ``store`` persists the challenge (see services.identity_store), ``hasher``
    is a CredentialHasher, ``clock`` returns naive UTC datetimes.
    """

    def __init__(self, hasher, store, secret, clock=None, rng=None):
        if not secret:
            raise ValueError("OTP signing secret must not be empty")
        self.hasher = hasher
        self.store = store
        self.secret = secret.encode("utf-8") if isinstance(secret, str) else secret
        self.clock = clock or datetime.utcnow
        self.rng = rng or random

    def generate_code(self):
        return str(self.rng.randint(OTP_MIN, OTP_MAX))

    def sign(self, code):
        """Deterministic token for a code; the same code always signs the same way."""
        return hmac.new(self.secret, f"otp|{code}".encode("utf-8"), hashlib.sha256).hexdigest()

    def issue(self, identity):
        """Create a new challenge, replacing any previous one. Returns the plaintext code."""
        code = self.generate_code()
        self.store.save_challenge(identity, self.hasher.hash(self.sign(code)), self.clock())
        return code

    def elapsed(self, identity):
        return self.clock() - identity.otp_issued_at

    def within(self, identity, ttl):
        """True while the challenge age is at most ``ttl`` (exactly ttl still counts)."""
        return self.elapsed(identity) <= ttl

    def verify(self, identity, submitted_code, ttl=timedelta(minutes=OTP_EXPIRY_MINUTES)):
        if not identity.otp_hash or identity.otp_issued_at is None:
            return VerifyResult.NOT_FOUND
        if not self.within(identity, ttl):
            return VerifyResult.EXPIRED
        code = (submitted_code or "").strip() if isinstance(submitted_code, str) else str(submitted_code or "")
        if not is_code_format(code):
            return VerifyResult.MISMATCH
        if not self.hasher.verify(self.sign(code), identity.otp_hash):
            return VerifyResult.MISMATCH
        return VerifyResult.OK

    def consume(self, identity, **fields):
        """Invalidate the challenge so the code can never verify again."""
        self.store.clear_challenge(identity, **fields)

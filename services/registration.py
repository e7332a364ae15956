"""
Member self-registration.

    Unregistered --send_code--> PendingVerification --verify_code--> Verified
        --complete--> Complete

A member can only start if an administrator pre-seeded a row with the same
email and birthdate; both must match, so the endpoint does not reveal which
emails exist.
"""
import logging
from datetime import timedelta

from utils.errors import (
    CompromisedPasswordError,
    ConflictError,
    ExpiredError,
    MismatchError,
    NoActiveCodeError,
    NotFoundError,
    ValidationError,
)
from utils.otp_helper import VerifyResult
from utils.validators import validate_password

logger = logging.getLogger(__name__)

REGISTRATION_CODE_TTL = timedelta(minutes=10)
DEFAULT_UNION_ROLE_ID = 1
CODE_TEMPLATE = "registration_code"
CODE_SUBJECT = "Tu código de verificación (SUTUTEH)"


class RegistrationWorkflow:
    def __init__(self, store, otp, notifier, templates, hasher, breach_checker, require_verified=False):
        self.store = store
        self.otp = otp
        self.notifier = notifier
        self.templates = templates
        self.hasher = hasher
        self.breach_checker = breach_checker
        self.require_verified = require_verified

    def find_pending(self, email, birthdate):
        """Pre-seeded member that has not completed registration yet."""
        identity = self.store.find_by_email_and_birthdate(email, birthdate)
        if identity is None:
            raise NotFoundError("Usuario no encontrado")
        if identity.registration_complete:
            raise ConflictError("Usuario ya registrado")
        return identity

    def send_code(self, email, birthdate):
        identity = self.find_pending(email, birthdate)
        code = self.otp.issue(identity)
        html = self.templates.render(CODE_TEMPLATE, codigo=code)
        message_id = self.notifier.send(identity.email, CODE_SUBJECT, html)
        logger.info("Registration code sent to user %s (message %s)", identity.id, message_id)
        return identity

    def verify_code(self, email, code):
        identity = self.store.find_by_email(email)
        if identity is None:
            raise NotFoundError("Usuario no encontrado")
        if identity.registration_complete:
            raise ConflictError("Usuario ya registrado")

        result = self.otp.verify(identity, code, REGISTRATION_CODE_TTL)
        if result is VerifyResult.NOT_FOUND:
            raise NoActiveCodeError("No se ha solicitado un código de verificación para este usuario.")
        if result is VerifyResult.EXPIRED:
            raise ExpiredError("El código ha expirado")
        if result is VerifyResult.MISMATCH:
            raise MismatchError("Código incorrecto")

        self.otp.consume(identity, verified=True)
        logger.info("User %s verified registration email", identity.id)
        return identity

    def complete(self, email, password, profile):
        """
        Set the password and profile fields and mark registration complete.

        ``profile`` maps UserProfile column names to values. Verification of the
        email code is only enforced when ``require_verified`` is set.
        """
        identity = self.store.find_by_email(email)
        if identity is None or identity.profile is None:
            raise NotFoundError("Usuario no encontrado")
        if identity.registration_complete:
            raise ConflictError("Usuario ya registrado")
        if self.require_verified and not identity.verified:
            raise ConflictError("Debe verificar su correo electrónico antes de completar el registro.")

        is_valid, pwd_error = validate_password(password)
        if not is_valid:
            raise ValidationError([{"field": "password", "msg": pwd_error}])
        if self.breach_checker.is_compromised(password):
            raise CompromisedPasswordError()

        fields = dict(profile)
        fields.setdefault("union_role_id", DEFAULT_UNION_ROLE_ID)
        self.store.complete_registration(identity, self.hasher.hash(password), **fields)
        logger.info("User %s completed registration", identity.id)
        return identity

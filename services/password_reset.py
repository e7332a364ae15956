"""
Password recovery by emailed code.

    Requested --verify_code--> CodeVerified --reset_password--> Reset

Verification and the password change arrive as separate requests, so the
challenge survives the verify step (it is only marked verified) and the final
step re-checks its age against a longer window measured from the same issue
time. The challenge is cleared once the password changes.
"""
import logging
from datetime import timedelta

from utils.errors import (
    CaptchaError,
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

RESET_CODE_TTL = timedelta(minutes=10)
RESET_WINDOW = timedelta(minutes=15)
CODE_TEMPLATE = "password_recovery_code"
CODE_SUBJECT = "Código de Recuperación de Contraseña - SUTUTEH"


class PasswordResetWorkflow:
    def __init__(self, store, otp, notifier, templates, hasher, breach_checker, captcha):
        self.store = store
        self.otp = otp
        self.notifier = notifier
        self.templates = templates
        self.hasher = hasher
        self.breach_checker = breach_checker
        self.captcha = captcha

    def check_email(self, email, captcha_token):
        """CAPTCHA plus account eligibility, before any code is sent."""
        if not self.captcha.verify(captcha_token):
            raise CaptchaError("reCAPTCHA inválido. Por favor, inténtelo de nuevo.")

        identity = self.store.find_by_email(email)
        if identity is None:
            raise NotFoundError("No existe una cuenta asociada a este correo electrónico.")
        if not identity.registration_complete:
            raise ConflictError("Esta cuenta no ha completado el proceso de registro.")
        if not identity.is_active:
            raise ConflictError("Esta cuenta no está activa. Contacte al administrador.")
        return identity

    def _find_eligible(self, email, missing_message="Usuario no válido para recuperación de contraseña."):
        """Registered, active member; anyone else is refused at every step."""
        identity = self.store.find_by_email(email)
        if identity is None:
            raise NotFoundError(missing_message)
        if not identity.registration_complete or not identity.is_active:
            raise NotFoundError("Usuario no válido para recuperación de contraseña.")
        return identity

    def send_code(self, email):
        identity = self._find_eligible(email)

        code = self.otp.issue(identity)
        html = self.templates.render(CODE_TEMPLATE, codigo=code)
        message_id = self.notifier.send(identity.email, CODE_SUBJECT, html)
        logger.info("Password recovery code sent to user %s (message %s)", identity.id, message_id)
        return identity

    def verify_code(self, email, code):
        identity = self._find_eligible(email, "Usuario no encontrado.")

        result = self.otp.verify(identity, code, RESET_CODE_TTL)
        if result is VerifyResult.NOT_FOUND:
            raise NoActiveCodeError("No se ha solicitado recuperación de contraseña para este usuario.")
        if result is VerifyResult.EXPIRED:
            raise ExpiredError("El código ha expirado. Solicite uno nuevo.")
        if result is VerifyResult.MISMATCH:
            raise MismatchError("Código incorrecto. Verifique e intente nuevamente.")

        self.store.mark_challenge_verified(identity)
        return identity

    def reset_password(self, email, password, confirm_password):
        if password != confirm_password:
            raise MismatchError("Las contraseñas no coinciden.")
        is_valid, pwd_error = validate_password(password)
        if not is_valid:
            raise ValidationError([{"field": "password", "msg": pwd_error}])
        if self.breach_checker.is_compromised(password):
            raise CompromisedPasswordError(
                "Esta contraseña ha sido comprometida en filtraciones de datos. "
                "Por favor, elija una contraseña diferente."
            )

        identity = self._find_eligible(email, "Usuario no encontrado.")
        if not identity.has_challenge or not identity.otp_verified:
            raise NoActiveCodeError("Debe verificar el código de recuperación antes de cambiar la contraseña.")
        if not self.otp.within(identity, RESET_WINDOW):
            raise ExpiredError("El proceso de recuperación ha expirado. Inicie nuevamente.")

        self.otp.consume(identity, password_hash=self.hasher.hash(password))
        logger.info("User %s reset their password", identity.id)
        return identity

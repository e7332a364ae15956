"""
Domain errors raised by the workflows and turned into JSON responses.

Each error carries the HTTP status and the message shown to the member.
Technical details go to the logs, never to the response body.
"""


class PortalError(Exception):
    """Base class for errors with a user-facing message."""
    status_code = 400
    default_message = "Solicitud inválida."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {"error": self.message}


class ValidationError(PortalError):
    """Malformed input; carries a list of ``{field, msg}`` entries."""
    default_message = "Datos inválidos."

    def __init__(self, errors, message=None):
        super().__init__(message)
        self.errors = list(errors)

    def to_dict(self):
        return {"errors": self.errors}


class NotFoundError(PortalError):
    status_code = 404
    default_message = "Usuario no encontrado"


class ConflictError(PortalError):
    """Operation not allowed in the current state (already registered, inactive...)."""
    default_message = "Usuario ya registrado"


class ExpiredError(PortalError):
    default_message = "El código ha expirado"


class MismatchError(PortalError):
    default_message = "Código incorrecto"


class NoActiveCodeError(PortalError):
    """No stored challenge: never requested, or already consumed."""
    default_message = "No se ha solicitado un código de verificación."


class CompromisedPasswordError(PortalError):
    default_message = "La contraseña ha sido comprometida. Por favor, elige otra."


class CaptchaError(PortalError):
    default_message = "reCAPTCHA inválido."


class ExternalServiceError(PortalError):
    """A collaborator we depend on (SMTP, reCAPTCHA) failed."""
    status_code = 502
    default_message = "Servicio externo no disponible. Intente más tarde."

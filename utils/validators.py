"""
Input validation helpers for request bodies
"""
import re
from datetime import date

from utils.errors import ValidationError

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}")
# Upper, lower, digit and one of @$!%*?&, at least 8 chars, nothing else allowed
PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]{8,}$")

PASSWORD_RULES_MSG = (
    "La contraseña debe tener al menos 8 caracteres, incluir mayúsculas, "
    "minúsculas, números y caracteres especiales."
)


def validate_email(email):
    """True when the value looks like an email address"""
    return bool(email) and isinstance(email, str) and EMAIL_RE.match(email.strip()) is not None


def validate_password(password):
    """Returns (is_valid, error_message)."""
    if not password or not isinstance(password, str):
        return False, "La contraseña es requerida"
    if not PASSWORD_RE.match(password):
        return False, PASSWORD_RULES_MSG
    return True, None


def parse_iso_date(value):
    """Parse 'YYYY-MM-DD' (a trailing time part is ignored). None when invalid."""
    if isinstance(value, date):
        return value
    if not value or not isinstance(value, str) or not ISO_DATE_RE.match(value.strip()):
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def normalize_email(email):
    return (email or "").strip().lower()


def request_data(req):
    """JSON object body, form data when there is no JSON, {} for any other JSON value."""
    data = req.get_json(silent=True)
    if data is None:
        return req.form
    return data if isinstance(data, dict) else {}


class FieldValidator:
    """
    Collects field errors for a request body and raises them together.

    Usage:
        v = FieldValidator(data)
        email = v.email("correo_electronico", "Correo inválido")
        v.raise_if_errors()
    """

    def __init__(self, data):
        self.data = data or {}
        self.errors = []

    def _raw(self, field):
        value = self.data.get(field)
        return value.strip() if isinstance(value, str) else value

    def error(self, field, msg):
        self.errors.append({"field": field, "msg": msg})

    def required(self, field, msg):
        value = self._raw(field)
        if value is None or value == "":
            self.error(field, msg)
            return None
        return value

    def email(self, field, msg):
        value = self._raw(field)
        if not validate_email(value):
            self.error(field, msg)
            return None
        return normalize_email(value)

    def iso_date(self, field, msg, optional=False):
        value = self._raw(field)
        if optional and not value:
            return None
        parsed = parse_iso_date(value)
        if parsed is None:
            self.error(field, msg)
        return parsed

    def length(self, field, msg, min_len=None, max_len=None):
        value = self._raw(field)
        text = "" if value is None else str(value)
        if (min_len is not None and len(text) < min_len) or (max_len is not None and len(text) > max_len):
            self.error(field, msg)
            return None
        return text

    def integer(self, field, msg, optional=False):
        value = self._raw(field)
        if optional and (value is None or value == ""):
            return None
        if isinstance(value, bool):
            self.error(field, msg)
            return None
        try:
            return int(str(value))
        except (TypeError, ValueError):
            self.error(field, msg)
            return None

    def one_of(self, field, choices, msg):
        value = self._raw(field)
        if value not in choices:
            self.error(field, msg)
            return None
        return value

    def raise_if_errors(self):
        if self.errors:
            raise ValidationError(self.errors)

"""
Email delivery (Flask-Mail) and HTML email templates
"""
import re
from pathlib import Path

from flask import current_app
from flask_mail import Mail, Message
from markupsafe import escape

from utils.errors import ExternalServiceError

mail = Mail()

# ${name} or {{name}} markers
_PLACEHOLDER_RE = re.compile(r"\$\{(\w+)\}|\{\{\s*(\w+)\s*\}\}")


class Notifier:
    """Sends one HTML email per call and returns the message id."""

    def __init__(self, mail_ext, sender=None):
        self.mail = mail_ext
        self.sender = sender

    def send(self, to, subject, html):
        # Check if mail server is configured
        if not current_app.config.get('MAIL_SERVER') or not current_app.config.get('MAIL_USERNAME'):
            current_app.logger.error("Mail is not configured (MAIL_SERVER / MAIL_USERNAME missing)")
            raise ExternalServiceError("El servicio de correo no está configurado.")

        msg = Message(
            subject=subject,
            recipients=[to],
            html=html,
            sender=self.sender or current_app.config.get('MAIL_DEFAULT_SENDER'),
        )
        try:
            self.mail.send(msg)
        except Exception as e:
            current_app.logger.error(f"SMTP error sending email to {to}: {str(e)}", exc_info=True)
            raise ExternalServiceError("No se pudo enviar el correo electrónico.") from e
        return msg.msgId


class EmailTemplates:
    """
    HTML templates loaded once from a directory (``<name>.html``).
    Values are HTML-escaped before substitution.
    """

    def __init__(self, directory):
        self.directory = Path(directory)
        self._templates = {
            path.stem: path.read_text(encoding="utf-8")
            for path in sorted(self.directory.glob("*.html"))
        }

    def names(self):
        return sorted(self._templates)

    def render(self, name, **values):
        try:
            template = self._templates[name]
        except KeyError:
            raise LookupError(f"Email template '{name}' not found in {self.directory}") from None

        def _sub(match):
            key = match.group(1) or match.group(2)
            if key not in values:
                return match.group(0)
            value = values[key]
            return str(escape("" if value is None else value))

        return _PLACEHOLDER_RE.sub(_sub, template)

"""
Contact questions and replies
"""
import logging

from models import db
from models.contact import ContactMessage, ContactReply, STATE_ANSWERED
from utils.errors import ExternalServiceError, NotFoundError

logger = logging.getLogger(__name__)

REPLY_TEMPLATE = "question_reply"
REPLY_SUBJECT = "Respuesta a tu consulta - SUTUTEH"


class QuestionService:
    def __init__(self, notifier, templates, session=None):
        self.notifier = notifier
        self.templates = templates
        self.session = session if session is not None else db.session

    def create(self, nombre, apellido_paterno, email, mensaje, apellido_materno='', telefono=None):
        """Question from a visitor who is not logged in (no user id)."""
        message = ContactMessage(
            user_id=None,
            nombre=nombre,
            apellido_paterno=apellido_paterno,
            apellido_materno=apellido_materno or '',
            correo_electronico=email,
            telefono=telefono,
            mensaje=mensaje,
        )
        self.session.add(message)
        self.session.commit()
        return message

    def list_all(self):
        messages = ContactMessage.query.order_by(ContactMessage.creado_en.desc(), ContactMessage.id.desc()).all()
        return [
            {
                'id': m.id,
                'registrado': m.user_id is not None,
                'nombre': m.nombre,
                'apellidoP': m.apellido_paterno,
                'apellidoM': m.apellido_materno,
                'telefono': m.telefono,
                'correo': m.correo_electronico,
                'date': m.creado_en.strftime('%Y-%m-%d') if m.creado_en else None,
                'question': m.mensaje,
                'estado': m.estado,
                'responses': [r.respuesta for r in m.replies],
            }
            for m in messages
        ]

    def _get(self, message_id):
        message = self.session.get(ContactMessage, message_id)
        if message is None:
            raise NotFoundError("Pregunta no encontrada.")
        return message

    def _save_reply(self, message, respuesta, respondido_por):
        self.session.add(ContactReply(mensaje_id=message.id, respuesta=respuesta.strip(), respondido_por=respondido_por))
        message.estado = STATE_ANSWERED
        self.session.commit()

    def reply(self, message_id, respuesta):
        """
        Store a reply and email it when the question came from a non-member.

        Returns (email_sent, warning). The reply stays saved when the email
        fails; the failure is reported as a warning instead of an error.
        """
        message = self._get(message_id)
        self._save_reply(message, respuesta, message.user_id)
        if message.user_id is not None:
            return False, None

        html = self.templates.render(
            REPLY_TEMPLATE,
            nombre=message.nombre or 'Usuario',
            pregunta=message.mensaje or '',
            respuesta=respuesta,
        )
        try:
            message_id_sent = self.notifier.send(message.correo_electronico, REPLY_SUBJECT, html)
        except ExternalServiceError as e:
            logger.warning("Reply to question %s saved but email failed: %s", message.id, e.message)
            return False, e.message
        logger.info("Reply to question %s emailed (message %s)", message.id, message_id_sent)
        return True, None

    def reply_as_admin(self, message_id, respuesta):
        message = self._get(message_id)
        self._save_reply(message, respuesta, None)
        return message

    def delete(self, message_id):
        message = self.session.get(ContactMessage, message_id)
        if message is not None:
            self.session.delete(message)
            self.session.commit()

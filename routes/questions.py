"""
Contact question routes: submit, list, reply, delete
"""
from flask import Blueprint, current_app, jsonify, request

from models import db
from services import get_services
from utils.errors import PortalError
from utils.validators import FieldValidator, request_data

questions_bp = Blueprint('questions', __name__, url_prefix='/api/preguntas')


@questions_bp.route('', methods=['POST'])
@questions_bp.route('/', methods=['POST'])
def create_question():
    """Question from a visitor (no account)"""
    data = request_data(request)
    v = FieldValidator(data)
    nombre = v.required('nombre', 'El nombre es requerido')
    apellido_paterno = v.required('apellidoPaterno', 'El apellido paterno es requerido')
    email = v.email('email', 'Email inválido')
    mensaje = v.required('mensaje', 'El mensaje es requerido')
    v.raise_if_errors()

    try:
        question = get_services().questions.create(
            nombre=nombre,
            apellido_paterno=apellido_paterno,
            apellido_materno=(data.get('apellidoMaterno') or '').strip(),
            telefono=data.get('telefono') or None,
            email=email,
            mensaje=mensaje,
        )
    except Exception as e:
        current_app.logger.error(f"Error en POST /api/preguntas: {str(e)}", exc_info=True)
        db.session.rollback()
        return jsonify({'error': 'Error interno al crear la pregunta.'}), 500
    return jsonify({'id': question.id, 'message': 'Pregunta creada correctamente'}), 201


@questions_bp.route('', methods=['GET'])
@questions_bp.route('/', methods=['GET'])
def list_questions():
    try:
        return jsonify(get_services().questions.list_all())
    except Exception as e:
        current_app.logger.error(f"Error en GET /preguntas: {str(e)}", exc_info=True)
        return jsonify({'error': 'Error interno al consultar preguntas.'}), 500


@questions_bp.route('/<int:message_id>/responder', methods=['POST'])
def reply(message_id):
    """Save a reply; visitors without an account also get it by email"""
    data = request_data(request)
    v = FieldValidator(data)
    respuesta = v.required('respuesta', 'La respuesta es requerida')
    v.raise_if_errors()

    try:
        email_sent, warning = get_services().questions.reply(message_id, respuesta)
    except PortalError:
        raise
    except Exception as e:
        current_app.logger.error(f"Error en POST /preguntas/{message_id}/responder: {str(e)}", exc_info=True)
        db.session.rollback()
        return jsonify({'error': 'Error interno al responder la pregunta.'}), 500

    if warning:
        return jsonify({
            'message': 'Respuesta guardada, pero hubo un error al enviar el correo.',
            'emailSent': False,
            'warning': warning,
        })
    if email_sent:
        return jsonify({'message': 'Respuesta guardada y enviada por correo.', 'emailSent': True})
    return jsonify({'message': 'Respuesta guardada correctamente.', 'emailSent': False})


@questions_bp.route('/<int:message_id>/responder-admin', methods=['POST'])
def reply_as_admin(message_id):
    data = request_data(request)
    v = FieldValidator(data)
    respuesta = v.required('respuesta', 'La respuesta es requerida')
    v.raise_if_errors()

    try:
        get_services().questions.reply_as_admin(message_id, respuesta)
    except PortalError:
        raise
    except Exception as e:
        current_app.logger.error(f"Error en POST /preguntas/{message_id}/responder-admin: {str(e)}", exc_info=True)
        db.session.rollback()
        return jsonify({'error': 'Error interno al guardar la respuesta.'}), 500
    return jsonify({'message': 'Respuesta guardada correctamente (admin).'})


@questions_bp.route('/<int:message_id>', methods=['DELETE'])
def delete_question(message_id):
    try:
        get_services().questions.delete(message_id)
    except Exception as e:
        current_app.logger.error(f"Error en DELETE /preguntas/{message_id}: {str(e)}", exc_info=True)
        db.session.rollback()
        return jsonify({'error': 'Error interno al eliminar la pregunta.'}), 500
    return jsonify({'message': 'Pregunta eliminada correctamente.'})

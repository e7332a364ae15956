"""
Registration routes: breach check, pre-registration lookup, email code, profile completion, catalogs
"""
from flask import Blueprint, current_app, jsonify, request

from models import db
from models.catalog import EducationalLevel, EducationalProgram, University, UniversityPosition
from services import get_services
from utils.errors import PortalError
from utils.validators import FieldValidator, request_data

registration_bp = Blueprint('registration', __name__, url_prefix='/api/registro')

GENDERS = ("Masculino", "Femenino", "Otro")


@registration_bp.route('/checkPasswordCompromised', methods=['POST'])
def check_password_compromised():
    """Reject passwords present in the breach corpus"""
    data = request_data(request)
    password = data.get("password")
    if not isinstance(password, str):
        password = ""
    if not password:
        return jsonify({"errors": [{"field": "password", "msg": "La contraseña es requerida"}]}), 400
    try:
        compromised = get_services().breach_checker.is_compromised(password)
    except Exception as e:
        current_app.logger.error(f"Error en /checkPasswordCompromised: {str(e)}", exc_info=True)
        return jsonify({"error": "Error interno al validar contraseña."}), 500
    if compromised:
        return jsonify({"error": "La contraseña ha sido comprometida. Por favor, elige otra."}), 400
    return jsonify({"message": "Contraseña segura."})


@registration_bp.route('/validarUsuario', methods=['POST'])
def validate_member():
    """Tell the form whether email + birthdate match a member who can still register"""
    data = request_data(request)
    v = FieldValidator(data)
    email = v.email("correo_electronico", "Correo electrónico inválido")
    birthdate = v.iso_date("fecha_nacimiento", "Fecha de nacimiento inválida")
    if v.errors:
        return jsonify({"success": False, "errors": v.errors}), 400

    try:
        identity = get_services().store.find_by_email_and_birthdate(email, birthdate)
    except Exception as e:
        current_app.logger.error(f"Error validando usuario: {str(e)}", exc_info=True)
        return jsonify({"error": "Error al validar usuario"}), 500

    if identity is None:
        return jsonify({"exists": False, "message": "Usuario no encontrado"}), 404
    if identity.registration_complete:
        return jsonify({"exists": True, "registered": True, "message": "Usuario ya completó el registro"}), 400
    return jsonify({"exists": True, "registered": False, "id": identity.id})


@registration_bp.route('/validarCaptcha', methods=['POST'])
def validate_captcha():
    data = request_data(request)
    token = data.get("tokenCaptcha")
    token = token.strip() if isinstance(token, str) else ""
    if not token:
        return jsonify({"error": "Falta el token de reCAPTCHA."}), 400
    if not get_services().captcha.verify(token):
        return jsonify({"error": "reCAPTCHA inválido."}), 400
    return jsonify({"message": "Captcha válido."})


@registration_bp.route('/enviarCodigo', methods=['POST'])
def send_code():
    """Email a verification code to a pre-seeded member (email + birthdate must match)"""
    data = request_data(request)
    v = FieldValidator(data)
    email = v.email("correo_electronico", "Correo inválido")
    birthdate = v.iso_date("fecha_nacimiento", "Fecha inválida")
    v.raise_if_errors()

    try:
        get_services().registration.send_code(email, birthdate)
    except PortalError:
        raise
    except Exception as e:
        current_app.logger.error(f"Error en /enviarCodigo: {str(e)}", exc_info=True)
        db.session.rollback()
        return jsonify({"error": "Error interno al enviar el código."}), 500
    return jsonify({"message": "Código de verificación enviado exitosamente."})


@registration_bp.route('/validarCodigo', methods=['POST'])
def verify_code():
    data = request_data(request)
    v = FieldValidator(data)
    email = v.email("correo_electronico", "Correo inválido")
    code = v.length("codigo", "Código debe tener 6 dígitos", min_len=6, max_len=6)
    v.raise_if_errors()

    try:
        get_services().registration.verify_code(email, code)
    except PortalError:
        raise
    except Exception as e:
        current_app.logger.error(f"Error en /validarCodigo: {str(e)}", exc_info=True)
        db.session.rollback()
        return jsonify({"error": "Error interno al validar el código."}), 500
    return jsonify({"message": "Código verificado correctamente."})


@registration_bp.route('/actualizarUsuario', methods=['POST'])
def complete_registration():
    """Final step: password and profile"""
    data = request_data(request)
    v = FieldValidator(data)
    email = v.email("correo_electronico", "Correo inválido")
    password = data.get("password")
    if not isinstance(password, str):
        password = ""
    if len(password) < 8:
        v.error("password", "La contraseña debe tener al menos 8 caracteres")
    profile = {
        "first_name": v.required("firstName", "Nombre requerido"),
        "last_name": v.required("lastName", "Apellido paterno requerido"),
        "maternal_last_name": v.required("maternalLastName", "Apellido materno requerido"),
        "gender": v.one_of("gender", GENDERS, "Género inválido"),
        "curp": v.length("curp", "CURP debe tener 18 caracteres", min_len=18, max_len=18),
        "phone": v.length("phone", "Teléfono debe tener 10 dígitos", min_len=10, max_len=10),
        "university_id": v.integer("universityOrigin", "Universidad inválida"),
        "position_id": v.integer("universityPosition", "Puesto inválido"),
        "program_id": v.integer("educationalProgram", "Programa inválido", optional=True),
        "worker_number": v.required("workerNumber", "Número de trabajador requerido"),
        "level_id": v.integer("educationalLevel", "Nivel educativo inválido"),
        "seniority_date": v.iso_date("antiguedad", "Fecha de antigüedad inválida", optional=True),
    }
    v.raise_if_errors()
    profile["curp"] = profile["curp"].upper()
    profile["worker_number"] = str(profile["worker_number"])

    try:
        get_services().registration.complete(email, password, profile)
    except PortalError:
        raise
    except Exception as e:
        current_app.logger.error(f"Error en /actualizarUsuario: {str(e)}", exc_info=True)
        db.session.rollback()
        return jsonify({"error": "Error interno al actualizar usuario."}), 500
    return jsonify({"message": "Usuario actualizado y registro completado."})


def _catalog(model, label):
    try:
        rows = model.query.order_by(model.nombre).all()
    except Exception as e:
        current_app.logger.error(f"Error al consultar {label}: {str(e)}", exc_info=True)
        return jsonify({"error": f"Error al obtener {label}"}), 500
    return jsonify([row.to_dict() for row in rows])


@registration_bp.route('/universidades', methods=['GET'])
def universities():
    return _catalog(University, "universidades")


@registration_bp.route('/puestos', methods=['GET'])
def positions():
    return _catalog(UniversityPosition, "puestos")


@registration_bp.route('/programas', methods=['GET'])
def programs():
    return _catalog(EducationalProgram, "programas educativos")


@registration_bp.route('/niveles', methods=['GET'])
def levels():
    return _catalog(EducationalLevel, "niveles educativos")

"""
Password recovery routes: CAPTCHA + eligibility, send code, verify code, set new password
"""
from flask import Blueprint, current_app, jsonify, request

from models import db
from services import get_services
from utils.errors import PortalError
from utils.validators import FieldValidator, request_data

recovery_bp = Blueprint('password_recovery', __name__, url_prefix='/api/recuperarContrasena')


@recovery_bp.route('/verificarCorreoCaptcha', methods=['POST'])
def check_email_captcha():
    data = request_data(request)
    v = FieldValidator(data)
    email = v.email("email", "Correo electrónico inválido")
    token = v.required("tokenCaptcha", "Token de reCAPTCHA requerido")
    v.raise_if_errors()

    try:
        get_services().password_reset.check_email(email, token)
    except PortalError:
        raise
    except Exception as e:
        current_app.logger.error(f"Error en /verificarCorreoCaptcha: {str(e)}", exc_info=True)
        return jsonify({"error": "Error interno del servidor."}), 500
    return jsonify({"message": "Correo verificado correctamente."})


@recovery_bp.route('/enviarCodigo', methods=['POST'])
def send_code():
    data = request_data(request)
    v = FieldValidator(data)
    email = v.email("email", "Correo electrónico inválido")
    v.raise_if_errors()

    try:
        get_services().password_reset.send_code(email)
    except PortalError:
        raise
    except Exception as e:
        current_app.logger.error(f"Error en /enviarCodigo (recuperación): {str(e)}", exc_info=True)
        db.session.rollback()
        return jsonify({"error": "Error interno al enviar el código de recuperación."}), 500
    return jsonify({"message": "Código de recuperación enviado exitosamente a su correo electrónico."})


@recovery_bp.route('/verificarCodigo', methods=['POST'])
def verify_code():
    data = request_data(request)
    v = FieldValidator(data)
    email = v.email("email", "Correo electrónico inválido")
    code = v.length("codigo", "El código debe tener 6 dígitos", min_len=6, max_len=6)
    v.raise_if_errors()

    try:
        get_services().password_reset.verify_code(email, code)
    except PortalError:
        raise
    except Exception as e:
        current_app.logger.error(f"Error en /verificarCodigo: {str(e)}", exc_info=True)
        db.session.rollback()
        return jsonify({"error": "Error interno al verificar el código."}), 500
    return jsonify({"message": "Código verificado correctamente. Puede proceder a cambiar su contraseña."})


@recovery_bp.route('/actualizarContrasena', methods=['POST'])
def update_password():
    data = request_data(request)
    v = FieldValidator(data)
    email = v.email("email", "Correo electrónico inválido")
    password = data.get("password")
    confirm_password = data.get("confirmPassword")
    if not isinstance(password, str) or len(password) < 8:
        v.error("password", "La contraseña debe tener al menos 8 caracteres")
    if not isinstance(confirm_password, str) or not confirm_password:
        v.error("confirmPassword", "Confirmación de contraseña requerida")
    v.raise_if_errors()

    try:
        get_services().password_reset.reset_password(email, password, confirm_password)
    except PortalError:
        raise
    except Exception as e:
        current_app.logger.error(f"Error en /actualizarContrasena: {str(e)}", exc_info=True)
        db.session.rollback()
        return jsonify({"error": "Error interno al actualizar la contraseña."}), 500
    return jsonify({"message": "Contraseña actualizada exitosamente. Ya puede iniciar sesión con su nueva contraseña."})

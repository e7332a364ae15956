"""End-to-end tests for the /api/recuperarContrasena flow."""
import pytest

from models import db
from models.user import STATUS_INACTIVE, User
from tests.conftest import STRONG_PASSWORD, get_user, seed_member
from tests.test_otp_engine import SequenceRng
from utils.validators import PASSWORD_RULES_MSG

CHECK = "/api/recuperarContrasena/verificarCorreoCaptcha"
SEND = "/api/recuperarContrasena/enviarCodigo"
VERIFY = "/api/recuperarContrasena/verificarCodigo"
RESET = "/api/recuperarContrasena/actualizarContrasena"

EMAIL = "socio@sututeh.com"
NEW_PASSWORD = "NuevaClave2025!"


@pytest.fixture
def member(app):
    return seed_member(app, email=EMAIL, registration_complete=True, password=STRONG_PASSWORD)


def reset(client, password=NEW_PASSWORD, confirm=None, email=EMAIL):
    return client.post(RESET, json={
        "email": email,
        "password": password,
        "confirmPassword": password if confirm is None else confirm,
    })


def request_and_verify(client, notifier):
    assert client.post(SEND, json={"email": EMAIL}).status_code == 200
    response = client.post(VERIFY, json={"email": EMAIL, "codigo": notifier.last_code()})
    assert response.status_code == 200
    return response


def password_matches(app, password):
    user = get_user(app, EMAIL)
    return app.extensions["portal"].hasher.verify(password, user.password_hash)


class TestHappyPath:
    def test_full_recovery(self, app, client, notifier, captcha, member):
        response = client.post(CHECK, json={"email": EMAIL, "tokenCaptcha": "tok"})
        assert response.status_code == 200
        assert response.get_json() == {"message": "Correo verificado correctamente."}
        assert captcha.tokens == ["tok"]

        response = client.post(SEND, json={"email": EMAIL})
        assert response.status_code == 200
        assert notifier.sent[-1]["subject"] == "Código de Recuperación de Contraseña - SUTUTEH"
        assert notifier.sent[-1]["to"] == EMAIL

        response = client.post(VERIFY, json={"email": EMAIL, "codigo": notifier.last_code()})
        assert response.status_code == 200
        assert get_user(app, EMAIL).otp_verified is True

        response = reset(client)
        assert response.status_code == 200
        assert response.get_json() == {
            "message": "Contraseña actualizada exitosamente. Ya puede iniciar sesión con su nueva contraseña."
        }

        user = get_user(app, EMAIL)
        assert user.otp_hash is None
        assert user.otp_issued_at is None
        assert password_matches(app, NEW_PASSWORD)
        assert not password_matches(app, STRONG_PASSWORD)

    def test_second_reset_with_the_same_verification_fails(self, app, client, notifier, member):
        request_and_verify(client, notifier)
        assert reset(client).status_code == 200

        response = reset(client, password="OtraClave2025!")
        assert response.status_code == 400
        assert response.get_json() == {
            "error": "Debe verificar el código de recuperación antes de cambiar la contraseña."
        }
        assert password_matches(app, NEW_PASSWORD)


class TestEligibility:
    def test_rejected_captcha(self, app, client, captcha, member):
        captcha.result = False
        response = client.post(CHECK, json={"email": EMAIL, "tokenCaptcha": "tok"})
        assert response.status_code == 400
        assert response.get_json() == {"error": "reCAPTCHA inválido. Por favor, inténtelo de nuevo."}

    def test_missing_captcha_token(self, client, member):
        response = client.post(CHECK, json={"email": EMAIL})
        assert response.status_code == 400
        assert response.get_json()["errors"][0]["field"] == "tokenCaptcha"

    def test_unknown_email(self, client):
        response = client.post(CHECK, json={"email": "nadie@sututeh.com", "tokenCaptcha": "tok"})
        assert response.status_code == 404
        assert response.get_json() == {"error": "No existe una cuenta asociada a este correo electrónico."}

    def test_incomplete_registration(self, app, client):
        seed_member(app, email=EMAIL)
        response = client.post(CHECK, json={"email": EMAIL, "tokenCaptcha": "tok"})
        assert response.status_code == 400
        assert response.get_json() == {"error": "Esta cuenta no ha completado el proceso de registro."}

    def test_inactive_account(self, app, client, notifier):
        seed_member(app, email=EMAIL, registration_complete=True, status=STATUS_INACTIVE, password=STRONG_PASSWORD)
        response = client.post(CHECK, json={"email": EMAIL, "tokenCaptcha": "tok"})
        assert response.status_code == 400
        assert response.get_json() == {"error": "Esta cuenta no está activa. Contacte al administrador."}

        response = client.post(SEND, json={"email": EMAIL})
        assert response.status_code == 404
        assert notifier.sent == []

    def test_send_code_to_unregistered_member(self, app, client, notifier):
        seed_member(app, email=EMAIL)
        response = client.post(SEND, json={"email": EMAIL})
        assert response.status_code == 404
        assert response.get_json() == {"error": "Usuario no válido para recuperación de contraseña."}
        assert get_user(app, EMAIL).otp_hash is None


class TestVerifyCode:
    def test_wrong_code(self, app, client, member):
        app.extensions["portal"].otp.rng = SequenceRng(777777)
        client.post(SEND, json={"email": EMAIL})

        response = client.post(VERIFY, json={"email": EMAIL, "codigo": "777778"})
        assert response.status_code == 400
        assert response.get_json() == {"error": "Código incorrecto. Verifique e intente nuevamente."}
        assert get_user(app, EMAIL).otp_verified is False

    def test_expired_code(self, client, notifier, clock, member):
        client.post(SEND, json={"email": EMAIL})
        clock.advance(minutes=11)

        response = client.post(VERIFY, json={"email": EMAIL, "codigo": notifier.last_code()})
        assert response.status_code == 400
        assert response.get_json() == {"error": "El código ha expirado. Solicite uno nuevo."}

    def test_no_code_requested(self, client, member):
        response = client.post(VERIFY, json={"email": EMAIL, "codigo": "123456"})
        assert response.status_code == 400
        assert response.get_json() == {
            "error": "No se ha solicitado recuperación de contraseña para este usuario."
        }

    def test_unknown_email(self, client):
        response = client.post(VERIFY, json={"email": "nadie@sututeh.com", "codigo": "123456"})
        assert response.status_code == 404
        assert response.get_json() == {"error": "Usuario no encontrado."}


class TestResetPassword:
    def test_reset_without_verification(self, app, client, member):
        client.post(SEND, json={"email": EMAIL})
        response = reset(client)

        assert response.status_code == 400
        assert response.get_json() == {
            "error": "Debe verificar el código de recuperación antes de cambiar la contraseña."
        }
        assert password_matches(app, STRONG_PASSWORD)

    def test_reset_at_exactly_fifteen_minutes(self, app, client, notifier, clock, member):
        request_and_verify(client, notifier)
        clock.advance(minutes=15)
        assert reset(client).status_code == 200

    def test_reset_window_closes_after_fifteen_minutes(self, app, client, notifier, clock, member):
        request_and_verify(client, notifier)
        clock.advance(minutes=15, seconds=1)

        response = reset(client)
        assert response.status_code == 400
        assert response.get_json() == {"error": "El proceso de recuperación ha expirado. Inicie nuevamente."}
        assert password_matches(app, STRONG_PASSWORD)

    def test_new_code_request_voids_an_earlier_verification(self, app, client, notifier, member):
        request_and_verify(client, notifier)
        client.post(SEND, json={"email": EMAIL})
        assert reset(client).status_code == 400

    def test_passwords_must_match(self, app, client, notifier, member):
        request_and_verify(client, notifier)
        response = reset(client, confirm="NuevaClave2025?")
        assert response.status_code == 400
        assert response.get_json() == {"error": "Las contraseñas no coinciden."}

    def test_weak_password(self, app, client, notifier, member):
        request_and_verify(client, notifier)
        response = reset(client, password="nuevaclave")
        assert response.status_code == 400
        assert response.get_json() == {"errors": [{"field": "password", "msg": PASSWORD_RULES_MSG}]}

    def test_breached_password(self, app, client, notifier, breach_checker, member):
        breach_checker.compromised.add("Password1!")
        request_and_verify(client, notifier)

        response = reset(client, password="Password1!")
        assert response.status_code == 400
        assert response.get_json() == {
            "error": "Esta contraseña ha sido comprometida en filtraciones de datos. "
                     "Por favor, elija una contraseña diferente."
        }
        assert get_user(app, EMAIL).otp_verified is True

    def test_short_password_and_missing_confirmation(self, client, member):
        response = client.post(RESET, json={"email": EMAIL, "password": "Ab1!"})
        assert response.status_code == 400
        fields = [e["field"] for e in response.get_json()["errors"]]
        assert fields == ["password", "confirmPassword"]


def deactivate(app, email=EMAIL):
    with app.app_context():
        User.query.filter_by(email=email).first().status = STATUS_INACTIVE
        db.session.commit()


class TestEligibilityIsRechecked:
    NOT_ELIGIBLE = {"error": "Usuario no válido para recuperación de contraseña."}

    def test_deactivated_before_verifying(self, app, client, notifier, member):
        client.post(SEND, json={"email": EMAIL})
        deactivate(app)

        response = client.post(VERIFY, json={"email": EMAIL, "codigo": notifier.last_code()})
        assert response.status_code == 404
        assert response.get_json() == self.NOT_ELIGIBLE
        assert get_user(app, EMAIL).otp_verified is False

    def test_deactivated_after_verifying(self, app, client, notifier, member):
        request_and_verify(client, notifier)
        deactivate(app)

        response = reset(client)
        assert response.status_code == 404
        assert response.get_json() == self.NOT_ELIGIBLE
        assert password_matches(app, STRONG_PASSWORD)

    def test_registration_code_cannot_set_a_password(self, app, client, notifier):
        seed_member(app, email=EMAIL)
        response = client.post("/api/registro/enviarCodigo", json={
            "correo_electronico": EMAIL,
            "fecha_nacimiento": "2000-01-01",
        })
        assert response.status_code == 200

        response = client.post(VERIFY, json={"email": EMAIL, "codigo": notifier.last_code()})
        assert response.status_code == 404
        assert response.get_json() == self.NOT_ELIGIBLE

        response = reset(client)
        assert response.status_code == 404

        user = get_user(app, EMAIL)
        assert user.password_hash is None
        assert user.registration_complete is False
        assert user.otp_hash is not None

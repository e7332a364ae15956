"""
Main Flask application entry point for the SUTUTEH member portal
"""
import logging
import os

from flask import Flask, jsonify, request

from config import Config
from models import db
from services import EXTENSION_KEY, PortalServices
from services.identity_store import IdentityStore
from services.password_reset import PasswordResetWorkflow
from services.questions import QuestionService
from services.registration import RegistrationWorkflow
from utils.auth_utils import CredentialHasher
from utils.breach_checker import BreachChecker
from utils.captcha_helper import RecaptchaVerifier
from utils.errors import PortalError
from utils.mail import EmailTemplates, Notifier, mail
from utils.otp_helper import OtpEngine


def build_services(app, notifier=None, breach_checker=None, captcha_verifier=None, clock=None):
    """Construct every collaborator once for this app; replacements win over defaults."""
    config = app.config
    hasher = CredentialHasher(method=config["PASSWORD_HASH_METHOD"])
    breach_checker = breach_checker or BreachChecker(
        api_url=config["PWNED_PASSWORDS_API_URL"],
        user_agent=config["PWNED_PASSWORDS_USER_AGENT"],
        timeout=config["HTTP_TIMEOUT_SECONDS"],
    )
    captcha_verifier = captcha_verifier or RecaptchaVerifier(
        config.get("RECAPTCHA_SECRET_KEY"),
        timeout=config["HTTP_TIMEOUT_SECONDS"],
    )
    notifier = notifier or Notifier(mail, sender=config.get("MAIL_DEFAULT_SENDER"))
    templates = EmailTemplates(config["EMAIL_TEMPLATE_DIR"])
    store = IdentityStore(db.session)
    otp = OtpEngine(hasher, store, config["OTP_SIGNING_SECRET"], clock=clock)

    return PortalServices(
        hasher=hasher,
        breach_checker=breach_checker,
        captcha=captcha_verifier,
        notifier=notifier,
        templates=templates,
        store=store,
        otp=otp,
        registration=RegistrationWorkflow(
            store, otp, notifier, templates, hasher, breach_checker,
            require_verified=config["REGISTRATION_REQUIRE_VERIFIED"],
        ),
        password_reset=PasswordResetWorkflow(
            store, otp, notifier, templates, hasher, breach_checker, captcha_verifier,
        ),
        questions=QuestionService(notifier, templates, db.session),
    )


def create_app(config_class=Config, notifier=None, breach_checker=None, captcha_verifier=None, clock=None):
    """Application factory pattern. DB init runs inside app_context; non-fatal on failure."""
    app = Flask(__name__)
    app.config.from_object(config_class)
    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    db.init_app(app)
    mail.init_app(app)

    app.extensions[EXTENSION_KEY] = build_services(
        app,
        notifier=notifier,
        breach_checker=breach_checker,
        captcha_verifier=captcha_verifier,
        clock=clock,
    )

    @app.errorhandler(PortalError)
    def handle_portal_error(e):
        if e.status_code >= 500:
            app.logger.error(f"{request.method} {request.path} failed: {e.message}")
        else:
            app.logger.info(f"{request.method} {request.path} rejected ({e.status_code}): {e.message}")
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(500)
    def handle_500_error(e):
        return jsonify({"error": "Error interno del servidor."}), 500

    # Create tables inside app context; do not crash if DB temporarily unavailable
    with app.app_context():
        try:
            db.create_all()
        except Exception as e:
            app.logger.warning("Database init skipped (non-fatal): %s", e)

    from routes import public_bp, registration_bp, recovery_bp, questions_bp

    app.register_blueprint(public_bp)
    app.register_blueprint(registration_bp)
    app.register_blueprint(recovery_bp)
    app.register_blueprint(questions_bp)

    return app


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 3001))
    create_app().run(host="0.0.0.0", port=port, debug=os.environ.get("FLASK_DEBUG", "false").lower() in ("true", "1"))

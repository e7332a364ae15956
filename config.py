"""
Configuration for the SUTUTEH member portal Flask app.
Production (Railway/Render): uses DATABASE_URL only; fails if missing.
Local: DATABASE_URL or DB_* fallback.
"""
import os
from pathlib import Path
from urllib.parse import quote_plus


def _is_production():
    """True when running on Railway, Render, or explicit production."""
    return (
        os.environ.get("RENDER") == "true"
        or os.environ.get("RAILWAY_ENVIRONMENT") is not None
        or os.environ.get("FLASK_ENV") == "production"
    )


def _env_flag(name, default="false"):
    return os.environ.get(name, default).lower() in ("true", "on", "1")


def _normalize_database_url(url):
    """Convert postgres:// to postgresql+psycopg2:// for SQLAlchemy/psycopg2."""
    if not url:
        return url
    url = url.strip()
    if url.startswith("postgres://"):
        return "postgresql+psycopg2://" + url[11:]
    if url.startswith("postgresql://") and "psycopg2" not in url:
        return "postgresql+psycopg2://" + url[13:]
    return url


def _get_database_uri():
    """Database URI: production = DATABASE_URL only; local = DATABASE_URL or DB_*."""
    url = os.environ.get("DATABASE_URL")
    if _is_production():
        if not url or not url.strip():
            raise RuntimeError(
                "DATABASE_URL is required in production (Railway/Render). "
                "Set it in your service environment variables."
            )
        return _normalize_database_url(url)

    if url and url.strip():
        return _normalize_database_url(url)

    host = os.environ.get("DB_HOST", "localhost")
    port = os.environ.get("DB_PORT", "5432")
    name = os.environ.get("DB_NAME", "sututeh")
    user = os.environ.get("DB_USER", "sututeh")
    password = os.environ.get("DB_PASSWORD", "")
    if password:
        password = quote_plus(password)
    return f"postgresql+psycopg2://{user}:{password}@{host}:{port}/{name}"


class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get("SECRET_KEY") or "dev-secret-key-change-in-production"

    # Signs the OTP token before it is hashed; a database dump alone must not
    # be enough to rebuild a valid code, so this secret has to be strong.
    OTP_SIGNING_SECRET = (
        os.environ.get("OTP_SIGNING_SECRET")
        or os.environ.get("JWT_SECRET")
        or SECRET_KEY
    )

    BASE_DIR = Path(__file__).parent
    EMAIL_TEMPLATE_DIR = Path(os.environ.get("EMAIL_TEMPLATE_DIR") or BASE_DIR / "templates" / "email")

    SQLALCHEMY_DATABASE_URI = _get_database_uri()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}

    MAIL_SERVER = os.environ.get("MAIL_SERVER")
    MAIL_PORT = int(os.environ.get("MAIL_PORT") or 465)
    MAIL_USE_TLS = _env_flag("MAIL_USE_TLS")
    MAIL_USE_SSL = _env_flag("MAIL_USE_SSL", "true")
    MAIL_USERNAME = os.environ.get("MAIL_USERNAME")
    MAIL_PASSWORD = os.environ.get("MAIL_PASSWORD")
    MAIL_DEFAULT_SENDER = ("SUTUTEH", os.environ.get("MAIL_DEFAULT_SENDER") or os.environ.get("MAIL_USERNAME") or "sistema@sututeh.com")

    RECAPTCHA_SECRET_KEY = os.environ.get("RECAPTCHA_SECRET_KEY")

    PWNED_PASSWORDS_API_URL = os.environ.get("PWNED_PASSWORDS_API_URL") or "https://api.pwnedpasswords.com/range/"
    PWNED_PASSWORDS_USER_AGENT = os.environ.get("PWNED_PASSWORDS_USER_AGENT") or "SUTUTEH-App"
    HTTP_TIMEOUT_SECONDS = float(os.environ.get("HTTP_TIMEOUT_SECONDS") or 5)

    # Werkzeug hash method, e.g. "scrypt" or "pbkdf2:sha256:600000"
    PASSWORD_HASH_METHOD = os.environ.get("PASSWORD_HASH_METHOD") or "scrypt"

    # Off by default: the final registration step accepts the profile without
    # a verified email code unless this is set.
    REGISTRATION_REQUIRE_VERIFIED = _env_flag("REGISTRATION_REQUIRE_VERIFIED")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

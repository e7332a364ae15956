"""Shared fixtures.

Every test gets a fresh app on an in-memory SQLite database, with the
outbound collaborators replaced:
- RecordingNotifier keeps sent emails (and the codes inside them)
- StubBreachChecker flags only the passwords a test marks as compromised
- StubCaptcha accepts tokens unless a test flips ``result``
- FrozenClock drives OTP issue/expiry times
"""
import re
from datetime import date, datetime, timedelta

import pytest

from app import create_app
from config import Config
from models import db
from models.user import STATUS_ACTIVE, User, UserProfile
from utils.errors import ExternalServiceError

CODE_RE = re.compile(r"\b(\d{6})\b")

STRONG_PASSWORD = "Sindicato2024$"


class TestingConfig(Config):
    __test__ = False

    TESTING = True
    SECRET_KEY = "test-secret-key"
    OTP_SIGNING_SECRET = "test-otp-signing-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    MAIL_SERVER = "localhost"
    MAIL_USERNAME = "sistema@sututeh.com"
    MAIL_DEFAULT_SENDER = ("SUTUTEH", "sistema@sututeh.com")
    RECAPTCHA_SECRET_KEY = "test-recaptcha-secret"
    REGISTRATION_REQUIRE_VERIFIED = False
    LOG_LEVEL = "DEBUG"


class StrictRegistrationConfig(TestingConfig):
    REGISTRATION_REQUIRE_VERIFIED = True


class FrozenClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class RecordingNotifier:
    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, to, subject, html):
        if self.fail:
            raise ExternalServiceError("No se pudo enviar el correo electrónico.")
        self.sent.append({"to": to, "subject": subject, "html": html})
        return f"<msg-{len(self.sent)}@test>"

    def last_code(self):
        assert self.sent, "no email was sent"
        match = CODE_RE.search(self.sent[-1]["html"])
        assert match, "no 6-digit code in the last email"
        return match.group(1)


class StubBreachChecker:
    def __init__(self):
        self.compromised = set()
        self.calls = []

    def is_compromised(self, password):
        self.calls.append(password)
        return password in self.compromised


class StubCaptcha:
    def __init__(self):
        self.result = True
        self.tokens = []

    def verify(self, token):
        self.tokens.append(token)
        return bool(token) and self.result


@pytest.fixture
def clock():
    return FrozenClock(datetime(2025, 3, 1, 12, 0, 0))


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def breach_checker():
    return StubBreachChecker()


@pytest.fixture
def captcha():
    return StubCaptcha()


@pytest.fixture
def app_factory(notifier, breach_checker, captcha, clock):
    """Build apps with the stub collaborators; drops their tables afterwards."""
    created = []

    def _make(config_class=TestingConfig, **overrides):
        collaborators = {
            "notifier": notifier,
            "breach_checker": breach_checker,
            "captcha_verifier": captcha,
            "clock": clock,
        }
        collaborators.update(overrides)
        app = create_app(config_class, **collaborators)
        created.append(app)
        return app

    yield _make

    for app in created:
        with app.app_context():
            db.session.remove()
            db.drop_all()


@pytest.fixture
def app(app_factory):
    return app_factory()


@pytest.fixture
def client(app):
    return app.test_client()


def seed_member(app, email="a@b.com", birthdate=date(2000, 1, 1), registration_complete=False,
                status=STATUS_ACTIVE, password=None):
    """Insert a pre-registered member the way the CSV import does."""
    with app.app_context():
        user = User(email=email, status=status, registration_complete=registration_complete)
        if password:
            user.password_hash = app.extensions["portal"].hasher.hash(password)
        user.profile = UserProfile(birthdate=birthdate)
        db.session.add(user)
        db.session.commit()
        return user.id


def get_user(app, email):
    """Fresh copy of the member row (profile loaded) for assertions."""
    with app.app_context():
        user = User.query.filter_by(email=email).first()
        if user is not None and user.profile is not None:
            user.profile.birthdate  # load before the session closes
        return user

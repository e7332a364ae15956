"""
Google reCAPTCHA v2 verification.
Fails closed: a rejected token is False, an unreachable service raises.
"""
import json
import logging
import urllib.error
import urllib.parse
import urllib.request

from utils.errors import ExternalServiceError

logger = logging.getLogger(__name__)

RECAPTCHA_VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"


class RecaptchaVerifier:
    def __init__(self, secret, timeout=5, opener=None, verify_url=RECAPTCHA_VERIFY_URL):
        self.secret = secret
        self.timeout = timeout
        self.opener = opener or urllib.request.urlopen
        self.verify_url = verify_url

    def verify(self, token):
        """True when Google accepts the token."""
        if not token:
            return False
        if not self.secret:
            logger.error("RECAPTCHA_SECRET_KEY is not configured; rejecting CAPTCHA")
            return False
        data = urllib.parse.urlencode({"secret": self.secret, "response": token}).encode()
        req = urllib.request.Request(self.verify_url, data=data, method="POST")
        try:
            with self.opener(req, timeout=self.timeout) as r:
                out = json.loads(r.read().decode())
        except (urllib.error.URLError, OSError, ValueError) as e:
            logger.error("reCAPTCHA verification failed: %s", e)
            raise ExternalServiceError("Error al validar reCAPTCHA.") from e
        return out.get("success") is True

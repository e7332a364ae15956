"""
Breached-password check against the Pwned Passwords range API (k-anonymity).

Only the first 5 hex characters of the SHA-1 digest leave the server; the
full digest suffix is matched locally against the returned candidates.

Service failures are fail-open: the password is treated as not compromised
so an outage never blocks registration or recovery. That outcome is reported
as ``BreachStatus.UNAVAILABLE`` and logged as a warning, so it can be told
apart from a genuine clean result.
"""
import enum
import hashlib
import logging
import urllib.error
import urllib.request

logger = logging.getLogger(__name__)

PWNED_RANGE_URL = "https://api.pwnedpasswords.com/range/"
PREFIX_LENGTH = 5


class BreachStatus(enum.Enum):
    BREACHED = "breached"
    CLEAN = "clean"
    UNAVAILABLE = "unavailable"


def sha1_split(password):
    """Upper-case SHA-1 hex digest split into (prefix, suffix)."""
    digest = hashlib.sha1(password.encode("utf-8")).hexdigest().upper()
    return digest[:PREFIX_LENGTH], digest[PREFIX_LENGTH:]


def find_suffix_count(body, suffix):
    """Breach count for ``suffix`` in a ``SUFFIX:COUNT`` listing, 0 when absent."""
    suffix = suffix.upper()
    for line in body.splitlines():
        candidate, _, count = line.partition(":")
        if candidate.strip().upper() == suffix:
            return int(count.strip() or 0)
    return 0


class BreachChecker:
    def __init__(self, api_url=PWNED_RANGE_URL, user_agent="SUTUTEH-App", timeout=5, opener=None):
        self.api_url = api_url if api_url.endswith("/") else api_url + "/"
        self.user_agent = user_agent
        self.timeout = timeout
        self.opener = opener or urllib.request.urlopen

    def _fetch_range(self, prefix):
        req = urllib.request.Request(
            self.api_url + prefix,
            headers={"User-Agent": self.user_agent, "Add-Padding": "true"},
            method="GET",
        )
        with self.opener(req, timeout=self.timeout) as r:
            return r.read().decode("utf-8")

    def check(self, password):
        """Classify the password as BREACHED, CLEAN or UNAVAILABLE."""
        prefix, suffix = sha1_split(password)
        try:
            body = self._fetch_range(prefix)
            count = find_suffix_count(body, suffix)
        except (urllib.error.URLError, OSError, ValueError, UnicodeDecodeError) as e:
            logger.warning("Breach check unavailable, assuming password is safe: %s", e)
            return BreachStatus.UNAVAILABLE
        if count > 0:
            logger.info("Password found in breach corpus (count=%s)", count)
            return BreachStatus.BREACHED
        logger.debug("Password not found in breach corpus")
        return BreachStatus.CLEAN

    def is_compromised(self, password):
        """True only for a confirmed breach; failures fall back to False."""
        return self.check(password) is BreachStatus.BREACHED

"""Credential redaction for logs.

Auth tokens pass through the client on every call, so anything that logs
headers, URLs or free-form messages goes through these helpers:

- ``sanitize_string`` masks bearer/basic credentials and JWTs inside text
- ``sanitize_headers`` masks sensitive header values entirely
- ``SanitizingFormatter`` applies ``sanitize_string`` to every log record
- ``setup_secure_logging`` installs that formatter on the root logger
"""

import logging
import re
import sys
from typing import Any, Dict, Mapping, Optional

SENSITIVE_PATTERNS = {
    "jwt_token": re.compile(r"eyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+"),
    "bearer_token": re.compile(r"(Bearer\s+)[A-Za-z0-9._~+/=-]+", re.IGNORECASE),
    "basic_auth": re.compile(r"(Basic\s+)[A-Za-z0-9+/=]+", re.IGNORECASE),
}

# Headers whose values are never logged
SENSITIVE_HEADERS = {
    "authorization",
    "proxy-authorization",
    "x-api-key",
    "cookie",
    "set-cookie",
}

SENSITIVE_QUERY_PARAMS = ("token", "access_token", "api_key", "apikey", "key", "secret")


def sanitize_string(value: Optional[str]) -> Optional[str]:
    """Redact credentials embedded in a string.

    The scheme prefix (``Bearer``/``Basic``) is kept so log readers can
    still tell which auth mode was used.

    :param value: String to sanitize
    :type value: Optional[str]
    :return: String with credentials replaced by ``<REDACTED>``
    :rtype: Optional[str]
    """
    if not value:
        return value
    value = SENSITIVE_PATTERNS["jwt_token"].sub("<REDACTED>", value)
    value = SENSITIVE_PATTERNS["bearer_token"].sub(r"\1<REDACTED>", value)
    value = SENSITIVE_PATTERNS["basic_auth"].sub(r"\1<REDACTED>", value)
    return value


def sanitize_headers(headers: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``headers`` safe for logging.

    :param headers: HTTP headers (dict or ``httpx.Headers``)
    :type headers: Mapping[str, Any]
    :return: Sanitized headers dictionary
    :rtype: Dict[str, Any]
    """
    sanitized: Dict[str, Any] = {}
    for key, value in headers.items():
        if key.lower() in SENSITIVE_HEADERS:
            if isinstance(value, str) and value:
                sanitized[key] = f"<REDACTED:length={len(value)}>"
            else:
                sanitized[key] = "<REDACTED>"
        elif isinstance(value, str):
            sanitized[key] = sanitize_string(value)
        else:
            sanitized[key] = value
    return sanitized


def sanitize_url(url: str) -> str:
    """Redact token-like query parameters from a URL."""
    if not url:
        return url
    for param in SENSITIVE_QUERY_PARAMS:
        url = re.sub(
            rf"([?&]{param}=)[^&#\s]+", r"\1<REDACTED>", url, flags=re.IGNORECASE
        )
    return url


class SanitizingFormatter(logging.Formatter):
    """Formatter that redacts credentials from the rendered message."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with automatic sanitization.

        :param record: Log record to format
        :type record: logging.LogRecord
        :return: Sanitized log line
        :rtype: str
        """
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            message = str(record.msg)
        record.msg = sanitize_string(message)
        record.args = None
        return super().format(record)


_LOGGING_CONFIGURED = False


def setup_secure_logging(level: str = "INFO") -> None:
    """Configure root logging with credential redaction.

    Safe to call more than once; only the first call installs the handler.

    :param level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    :type level: str
    """
    global _LOGGING_CONFIGURED

    if _LOGGING_CONFIGURED:
        logging.getLogger(__name__).debug(
            "Logging already configured, skipping duplicate setup"
        )
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        SanitizingFormatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        handlers=[handler],
        force=True,
    )
    # httpx logs every request line at INFO; keep it quieter than ours
    logging.getLogger("httpx").setLevel(
        max(logging.WARNING, getattr(logging, level.upper()))
    )

    _LOGGING_CONFIGURED = True


def log_headers(headers: Mapping[str, Any], logger: logging.Logger, level: str = "debug") -> None:
    """Log headers with sensitive values masked.

    :param headers: HTTP headers to log
    :type headers: Mapping[str, Any]
    :param logger: Logger instance to use
    :type logger: logging.Logger
    :param level: Log level name (debug, info, warning, error)
    :type level: str
    """
    log = getattr(logger, level)
    if logger.isEnabledFor(getattr(logging, level.upper())):
        log(f"Headers: {sanitize_headers(headers)}")

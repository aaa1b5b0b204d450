"""Fixed error messages for non-success HTTP status codes."""

from types import MappingProxyType
from typing import Mapping

STATUS_MESSAGES: Mapping[int, str] = MappingProxyType(
    {
        400: "Bad Request (400)",
        401: "Unauthorized (401)",
        403: "Forbidden (403)",
        404: "Not Found (404)",
        500: "Internal Server Error (500)",
        502: "Bad Gateway (502)",
        503: "Service Unavailable (503)",
    }
)


def is_success_status(status_code: int) -> bool:
    """Check if a status code is in the 2xx range.

    :param status_code: HTTP status code
    :type status_code: int
    :return: True if status code is in 200-299 range
    :rtype: bool
    """
    return 200 <= status_code < 300


def error_message_for_status(status_code: int) -> str:
    """Return the human-readable message for a failed status code.

    Codes without a dedicated entry fall back to ``"HTTP {code}"``.

    :param status_code: HTTP status code of the response
    :type status_code: int
    :return: Error message for the envelope
    :rtype: str
    """
    return STATUS_MESSAGES.get(status_code, f"HTTP {status_code}")

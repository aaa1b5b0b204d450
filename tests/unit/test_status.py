"""Unit tests for the status message table."""

import pytest

from rest_api_client.utils.http.status import (
    STATUS_MESSAGES,
    error_message_for_status,
    is_success_status,
)


@pytest.mark.parametrize(
    "status_code, message",
    [
        (400, "Bad Request (400)"),
        (401, "Unauthorized (401)"),
        (403, "Forbidden (403)"),
        (404, "Not Found (404)"),
        (500, "Internal Server Error (500)"),
        (502, "Bad Gateway (502)"),
        (503, "Service Unavailable (503)"),
    ],
)
def test_dedicated_messages(status_code, message):
    assert error_message_for_status(status_code) == message


@pytest.mark.parametrize("status_code", [301, 408, 409, 418, 429, 501, 504, 599])
def test_fallback_message(status_code):
    assert error_message_for_status(status_code) == f"HTTP {status_code}"


def test_table_is_read_only():
    with pytest.raises(TypeError):
        STATUS_MESSAGES[418] = "I'm a teapot"


def test_success_range():
    assert is_success_status(200)
    assert is_success_status(204)
    assert is_success_status(299)
    assert not is_success_status(199)
    assert not is_success_status(300)
    assert not is_success_status(404)

"""Structured exception classes for the REST API client.

Runtime failures (timeouts, network faults, HTTP status failures) never
leave :class:`~rest_api_client.client.ApiClient`; they are folded into the
response envelope. The classes here cover the two cases that do surface:
programmer errors caught at construction time, and the serialization fault
kind raised by :class:`~rest_api_client.utils.serialization.JsonSerializer`.
"""

import json
from typing import Any, Dict, Optional


class RestApiClientError(Exception):
    """Base exception for all REST API client errors.

    :param message: Human-readable error message
    :param code: Optional error code for programmatic handling
    :param details: Optional dictionary containing additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize the exception with message, code, and details."""
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format.

        :return: Dictionary containing error code, message, and details
        """
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }

    def to_json(self) -> str:
        """Convert exception to JSON string.

        :return: JSON-encoded string representation of the exception
        """
        return json.dumps(self.to_dict())


class ConfigurationError(RestApiClientError):
    """Raised for invalid client configuration or arguments.

    These indicate programmer error (a missing transport, an unsupported
    HTTP method) and are raised immediately instead of being captured
    into a response envelope.

    :param message: Description of the configuration error
    :param setting: Optional name of the problematic setting or argument
    """

    def __init__(self, message: str, setting: Optional[str] = None):
        """Initialize configuration error with message and optional setting."""
        details = {}
        if setting:
            details["setting"] = setting
        super().__init__(message=message, code="CONFIGURATION_ERROR", details=details)
        self.setting = setting


class SerializationError(RestApiClientError):
    """Raised when a payload cannot be encoded or a body cannot be decoded.

    :param message: Description of the serialization failure
    :param target_type: Optional name of the type being decoded into
    :param original_error: Optional underlying exception
    """

    def __init__(
        self,
        message: str,
        target_type: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        """Initialize serialization error with message and optional context."""
        details = {}
        if target_type:
            details["target_type"] = target_type
        if original_error:
            details["error_type"] = type(original_error).__name__
        super().__init__(message=message, code="SERIALIZATION_ERROR", details=details)
        self.target_type = target_type
        self.original_error = original_error


class RequestCancelledError(RestApiClientError):
    """Raised inside the client when the caller's cancellation event fires.

    It is converted to a "Request was cancelled" envelope before reaching
    the caller.
    """

    def __init__(self, message: str = "The operation was cancelled"):
        """Initialize cancellation error with message."""
        super().__init__(message=message, code="REQUEST_CANCELLED")

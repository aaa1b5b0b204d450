"""Asynchronous JSON REST API client.

This package wraps an ``httpx.AsyncClient`` with authentication header
injection, JSON (de)serialization, retry with exponential backoff and a
uniform :class:`ApiResponse` envelope for every outcome.

:var __version__: Current package version
:type __version__: str
"""

from .client import ApiClient, ResponseKind
from .exceptions import ConfigurationError, RestApiClientError, SerializationError
from .models.response import ApiResponse, ErrorKind
from .utils.http.headers import AuthType
from .utils.http.retry import RetryPolicy
from .utils.security import setup_secure_logging
from .utils.serialization import JsonSerializer, NamingPolicy, SerializerSettings

__version__ = "0.1.0"

__all__ = [
    "ApiClient",
    "ApiResponse",
    "AuthType",
    "ConfigurationError",
    "ErrorKind",
    "JsonSerializer",
    "NamingPolicy",
    "ResponseKind",
    "RestApiClientError",
    "RetryPolicy",
    "SerializationError",
    "SerializerSettings",
    "setup_secure_logging",
]

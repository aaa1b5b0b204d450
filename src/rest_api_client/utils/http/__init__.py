"""HTTP utilities public API (barrel module).

This package provides:
- Accept/auth header injection
- Retry policy with exponential backoff
- The fixed status-code message table
- Transport construction helpers

Recommended import pattern for consumers:
    from rest_api_client.utils.http import AuthType, RetryPolicy, apply_headers
"""

from .client_manager import create_http_client, create_limits, create_timeout
from .headers import API_KEY_HEADER, AuthType, apply_headers, has_default_authorization
from .retry import (
    RETRY_EXCEPTIONS,
    RETRY_STATUS_CODES,
    RetryPolicy,
    create_retry_policy,
    default_backoff,
    default_retry_policy,
    default_retry_predicate,
    exponential_backoff,
    should_retry_exception,
    should_retry_status,
)
from .status import STATUS_MESSAGES, error_message_for_status, is_success_status

__all__ = [
    "API_KEY_HEADER",
    "AuthType",
    "apply_headers",
    "has_default_authorization",
    "RETRY_EXCEPTIONS",
    "RETRY_STATUS_CODES",
    "RetryPolicy",
    "create_retry_policy",
    "default_backoff",
    "default_retry_policy",
    "default_retry_predicate",
    "exponential_backoff",
    "should_retry_exception",
    "should_retry_status",
    "STATUS_MESSAGES",
    "error_message_for_status",
    "is_success_status",
    "create_http_client",
    "create_limits",
    "create_timeout",
]

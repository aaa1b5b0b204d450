"""Accept and authentication header injection.

Every outgoing request gets ``Accept: application/json``. A per-call
token is attached according to :class:`AuthType`, unless the transport
already carries a default ``Authorization`` header. In that case the
request is treated as authenticated and the per-call token is ignored
without any log signal, even for ``AuthType.API_KEY``. Callers that set
both a default header and a per-call token get the default.
"""

from enum import Enum
from typing import Optional

import httpx

ACCEPT_JSON = "application/json"
API_KEY_HEADER = "X-API-Key"


class AuthType(str, Enum):
    """Authentication scheme applied to a request."""

    NONE = "none"
    BEARER = "bearer"
    BASIC = "basic"
    API_KEY = "api_key"


def has_default_authorization(client: httpx.AsyncClient) -> bool:
    """Check whether the transport sends an Authorization header on its own."""
    return "authorization" in client.headers


def apply_headers(
    request: httpx.Request,
    client: httpx.AsyncClient,
    auth_token: Optional[str] = None,
    auth_type: AuthType = AuthType.NONE,
) -> None:
    """Set Accept and auth headers on ``request`` in place.

    Basic credentials are used as given; encoding ``user:password`` to
    base64 is the caller's job.

    :param request: Request about to be sent
    :type request: httpx.Request
    :param client: Transport the request will be sent through
    :type client: httpx.AsyncClient
    :param auth_token: Ready-to-use credential, or None
    :type auth_token: Optional[str]
    :param auth_type: Scheme deciding which header carries the token
    :type auth_type: AuthType
    """
    request.headers["Accept"] = ACCEPT_JSON

    if not auth_token or not auth_token.strip() or auth_type == AuthType.NONE:
        return
    if has_default_authorization(client):
        return

    if auth_type == AuthType.BEARER:
        request.headers["Authorization"] = f"Bearer {auth_token}"
    elif auth_type == AuthType.BASIC:
        request.headers["Authorization"] = f"Basic {auth_token}"
    elif auth_type == AuthType.API_KEY:
        request.headers[API_KEY_HEADER] = auth_token

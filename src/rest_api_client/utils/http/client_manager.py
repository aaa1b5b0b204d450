"""Construction of the ``httpx.AsyncClient`` transport.

The client core never builds its own transport unless asked to through
:meth:`ApiClient.from_settings`. This module holds the factories used on
that path: timeout and limits objects and the transport itself, all
derived from :class:`~rest_api_client.config.settings.Settings`.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from ...config.settings import Settings

logger = logging.getLogger(__name__)


def create_timeout(
    connect: float = 5.0,
    read: float = 30.0,
    write: float = 10.0,
    pool: float = 5.0,
) -> httpx.Timeout:
    """Create a timeout configuration object.

    :param connect: Connection timeout in seconds
    :type connect: float
    :param read: Read timeout in seconds
    :type read: float
    :param write: Write timeout in seconds
    :type write: float
    :param pool: Pool timeout in seconds
    :type pool: float
    :return: Configured timeout object
    :rtype: httpx.Timeout
    """
    return httpx.Timeout(connect=connect, read=read, write=write, pool=pool)


def create_limits(
    max_keepalive_connections: int = 10,
    max_connections: int = 20,
    keepalive_expiry: float = 30.0,
) -> httpx.Limits:
    """Create a connection limits configuration object.

    :param max_keepalive_connections: Maximum number of keepalive connections
    :type max_keepalive_connections: int
    :param max_connections: Maximum total number of connections
    :type max_connections: int
    :param keepalive_expiry: Keepalive connection expiry time in seconds
    :type keepalive_expiry: float
    :return: Configured limits object
    :rtype: httpx.Limits
    """
    return httpx.Limits(
        max_keepalive_connections=max_keepalive_connections,
        max_connections=max_connections,
        keepalive_expiry=keepalive_expiry,
    )


def create_http_client(
    settings: Optional[Settings] = None, **kwargs: Any
) -> httpx.AsyncClient:
    """Build an ``httpx.AsyncClient`` from settings.

    Extra keyword arguments are passed to ``httpx.AsyncClient`` and take
    precedence over values derived from settings (tests use this to
    inject a ``transport``).

    :param settings: Client settings; loaded from the environment if None
    :type settings: Optional[Settings]
    :return: New transport owned by the caller
    :rtype: httpx.AsyncClient
    """
    settings = settings or Settings()
    config: Dict[str, Any] = {
        "timeout": create_timeout(
            settings.connect_timeout,
            settings.read_timeout,
            settings.write_timeout,
            settings.pool_timeout,
        ),
        "limits": create_limits(
            settings.max_keepalive_connections,
            settings.max_connections,
            settings.keepalive_expiry,
        ),
        "follow_redirects": settings.follow_redirects,
    }
    if settings.base_url:
        config["base_url"] = settings.base_url
    config.update(kwargs)

    client = httpx.AsyncClient(**config)
    logger.debug(
        "Created HTTP client (base_url=%s, follow_redirects=%s)",
        settings.base_url or "<none>",
        config["follow_redirects"],
    )
    return client

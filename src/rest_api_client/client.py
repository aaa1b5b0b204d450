"""Asynchronous JSON REST client returning uniform response envelopes.

This module provides :class:`ApiClient`, which wraps an ``httpx.AsyncClient``
and runs every call through the same pipeline:

1. Build the request for the method and URL
2. Inject Accept and authentication headers
3. Encode the payload as the JSON body (POST/PUT/PATCH only)
4. Send through the retry policy, racing the caller's cancellation event
5. Classify the status and decode the body
6. Close the response and return an :class:`ApiResponse`

No runtime failure escapes as an exception. Timeouts, cancellation,
network faults, HTTP error statuses and undecodable bodies all come back
as ``ApiResponse(success=False, ...)``.

Examples:
    >>> async with ApiClient(httpx.AsyncClient(base_url="https://x")) as api:
    ...     result = await api.get("/users/1", response_type=User)
    ...     if result.success:
    ...         print(result.data.name)
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union

import httpx

from .config.settings import Settings
from .exceptions import ConfigurationError, RequestCancelledError, SerializationError
from .models.response import ApiResponse, ErrorKind
from .utils.http.client_manager import create_http_client
from .utils.http.headers import AuthType, apply_headers
from .utils.http.retry import RetryPolicy, create_retry_policy, default_retry_policy
from .utils.http.status import error_message_for_status, is_success_status
from .utils.security import log_headers, sanitize_url, setup_secure_logging
from .utils.serialization import JsonSerializer, SerializerSettings

logger = logging.getLogger(__name__)

URLTypes = Union[str, httpx.URL]

SUPPORTED_METHODS = frozenset({"GET", "POST", "PUT", "DELETE", "PATCH"})
BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})
JSON_CONTENT_TYPE = "application/json; charset=utf-8"


class ResponseKind(str, Enum):
    """How a successful body is turned into ``ApiResponse.data``."""

    JSON = "json"
    RAW_TEXT = "raw_text"


def resolve_response_kind(response_type: Any) -> ResponseKind:
    """Requesting ``str`` selects raw-text passthrough; anything else is JSON."""
    return ResponseKind.RAW_TEXT if response_type is str else ResponseKind.JSON


class _CallState:
    """What the pipeline has learned so far, for failure envelopes."""

    __slots__ = ("body", "status_code")

    def __init__(self):
        self.body: Optional[str] = None
        self.status_code: Optional[int] = None


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class ApiClient:
    """JSON REST client over a shared ``httpx.AsyncClient``.

    The client holds no mutable state after construction, so one instance
    can serve any number of concurrent calls.

    :param http_client: Transport used for every request
    :type http_client: httpx.AsyncClient
    :param serializer_settings: JSON conventions; replaces all defaults
    :type serializer_settings: Optional[SerializerSettings]
    :param retry_policy: Retry strategy; defaults to 3 retries at 2/4/8s
    :type retry_policy: Optional[RetryPolicy]
    :param owns_http_client: Close ``http_client`` when this client closes
    :type owns_http_client: bool
    :raises ConfigurationError: If ``http_client`` is None
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        serializer_settings: Optional[SerializerSettings] = None,
        retry_policy: Optional[RetryPolicy] = None,
        owns_http_client: bool = False,
    ):
        if http_client is None:
            raise ConfigurationError("http_client is required", setting="http_client")
        self._http_client = http_client
        self._serializer = JsonSerializer(serializer_settings)
        self._retry_policy = retry_policy or default_retry_policy
        self._owns_http_client = owns_http_client

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        serializer_settings: Optional[SerializerSettings] = None,
        configure_logging: bool = False,
        **client_kwargs: Any,
    ) -> "ApiClient":
        """Create a client that owns a transport built from settings.

        :param settings: Client settings; loaded from the environment if None
        :type settings: Optional[Settings]
        :param serializer_settings: Optional JSON conventions
        :type serializer_settings: Optional[SerializerSettings]
        :param configure_logging: Install redacting root logging at
                                  ``settings.log_level``
        :type configure_logging: bool
        :param client_kwargs: Extra ``httpx.AsyncClient`` arguments
        :return: Client that closes its transport on ``aclose``
        :rtype: ApiClient
        """
        settings = settings or Settings()
        if configure_logging:
            setup_secure_logging(settings.log_level)
        return cls(
            create_http_client(settings, **client_kwargs),
            serializer_settings=serializer_settings,
            retry_policy=create_retry_policy(
                settings.retry_max_attempts, settings.retry_base_delay
            ),
            owns_http_client=True,
        )

    @property
    def http_client(self) -> httpx.AsyncClient:
        return self._http_client

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry_policy

    @property
    def serializer_settings(self) -> SerializerSettings:
        return self._serializer.settings

    @property
    def owns_http_client(self) -> bool:
        return self._owns_http_client

    # ------------------------------------------------------------------
    # Verb helpers
    # ------------------------------------------------------------------

    async def get(self, url: URLTypes, **options: Any) -> ApiResponse:
        """Send a GET request. See :meth:`send` for ``options``."""
        return await self.send("GET", url, **options)

    async def post(self, url: URLTypes, payload: Any = None, **options: Any) -> ApiResponse:
        """Send a POST request with ``payload`` as the JSON body."""
        return await self.send("POST", url, payload, **options)

    async def put(self, url: URLTypes, payload: Any = None, **options: Any) -> ApiResponse:
        """Send a PUT request with ``payload`` as the JSON body."""
        return await self.send("PUT", url, payload, **options)

    async def patch(self, url: URLTypes, payload: Any = None, **options: Any) -> ApiResponse:
        """Send a PATCH request with ``payload`` as the JSON body."""
        return await self.send("PATCH", url, payload, **options)

    async def delete(self, url: URLTypes, **options: Any) -> ApiResponse:
        """Send a DELETE request. See :meth:`send` for ``options``."""
        return await self.send("DELETE", url, **options)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def send(
        self,
        method: str,
        url: URLTypes,
        payload: Any = None,
        *,
        response_type: Any = None,
        auth_token: Optional[str] = None,
        auth_type: AuthType = AuthType.NONE,
        cancel_event: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> ApiResponse:
        """Execute one logical call and return its envelope.

        :param method: HTTP method (GET, POST, PUT, DELETE, PATCH)
        :type method: str
        :param url: Absolute URL, or relative to the transport's base_url
        :type url: Union[str, httpx.URL]
        :param payload: Body value for POST/PUT/PATCH; ignored otherwise
        :type payload: Any
        :param response_type: Type to decode into; ``str`` returns the raw
                              body; None returns plain JSON values
        :type response_type: Any
        :param auth_token: Ready-to-use credential
        :type auth_token: Optional[str]
        :param auth_type: Scheme used to attach ``auth_token``
        :type auth_type: AuthType
        :param cancel_event: Setting this event abandons the call
        :type cancel_event: Optional[asyncio.Event]
        :param timeout: Overall deadline in seconds, retries included
        :type timeout: Optional[float]
        :return: Envelope describing the outcome
        :rtype: ApiResponse
        :raises ConfigurationError: If ``method`` is not supported
        """
        method = method.upper()
        if method not in SUPPORTED_METHODS:
            raise ConfigurationError(f"Unsupported HTTP method: {method}", setting="method")

        state = _CallState()

        def pipeline() -> Awaitable[ApiResponse]:
            call = self._execute(
                method, url, payload, response_type, auth_token, auth_type, state
            )
            return asyncio.wait_for(call, timeout) if timeout is not None else call

        try:
            return await self._run_cancellable(pipeline, cancel_event)
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            logger.warning(f"{method} {sanitize_url(str(url))} timed out")
            return ApiResponse.fail(
                "Request timeout",
                ErrorKind.TIMEOUT,
                error_data=_describe(e),
                status_code=state.status_code,
            )
        except RequestCancelledError as e:
            logger.info(f"{method} {sanitize_url(str(url))} cancelled by caller")
            return ApiResponse.fail(
                "Request was cancelled",
                ErrorKind.CANCELLED,
                error_data=_describe(e),
                status_code=state.status_code,
            )
        except httpx.TransportError as e:
            logger.warning(f"{method} {sanitize_url(str(url))} network error: {e}")
            return ApiResponse.fail(
                f"Network error: {_describe(e)}",
                ErrorKind.NETWORK,
                error_data=state.body,
                status_code=state.status_code,
            )
        except SerializationError as e:
            logger.warning(f"{method} {sanitize_url(str(url))} JSON error: {e}")
            return ApiResponse.fail(
                f"JSON processing error: {_describe(e)}",
                ErrorKind.SERIALIZATION,
                error_data=state.body,
                status_code=state.status_code,
            )
        except Exception as e:
            logger.error(
                f"{method} {sanitize_url(str(url))} unexpected error: {e}", exc_info=True
            )
            return ApiResponse.fail(
                f"Unexpected error: {_describe(e)}",
                ErrorKind.UNEXPECTED,
                error_data=state.body,
                status_code=state.status_code,
            )

    async def _execute(
        self,
        method: str,
        url: URLTypes,
        payload: Any,
        response_type: Any,
        auth_token: Optional[str],
        auth_type: AuthType,
        state: _CallState,
    ) -> ApiResponse:
        kind = resolve_response_kind(response_type)

        content: Optional[bytes] = None
        if payload is not None:
            if method in BODY_METHODS:
                content = self._serializer.encode(payload).encode("utf-8")
            else:
                logger.debug(f"Ignoring payload for {method} request")

        async def attempt() -> httpx.Response:
            # Requests are single-use; rebuild headers and body every attempt
            request = self._build_request(method, url, content, auth_token, auth_type)
            return await self._http_client.send(request, stream=True)

        response = await self._retry_policy.execute(attempt)
        try:
            state.status_code = response.status_code
            raw = await response.aread()
            state.body = response.text if raw else None

            if not is_success_status(response.status_code):
                message = error_message_for_status(response.status_code)
                logger.warning(
                    "%s %s failed: %s",
                    method,
                    sanitize_url(str(response.request.url)),
                    message,
                )
                return ApiResponse.fail(
                    message,
                    ErrorKind.HTTP_STATUS,
                    error_data=state.body,
                    status_code=response.status_code,
                )

            if kind is ResponseKind.RAW_TEXT:
                data = response.text
            elif state.body is not None and state.body.strip():
                data = self._serializer.decode(state.body, response_type)
            else:
                data = None
            return ApiResponse.ok(data, status_code=response.status_code)
        finally:
            await response.aclose()

    def _build_request(
        self,
        method: str,
        url: URLTypes,
        content: Optional[bytes],
        auth_token: Optional[str],
        auth_type: AuthType,
    ) -> httpx.Request:
        headers = {"Content-Type": JSON_CONTENT_TYPE} if content is not None else None
        request = self._http_client.build_request(
            method, url, content=content, headers=headers
        )
        apply_headers(request, self._http_client, auth_token, auth_type)

        logger.debug(f"=== SEND: {request.method} {sanitize_url(str(request.url))}")
        log_headers(request.headers, logger)
        return request

    @staticmethod
    async def _run_cancellable(
        pipeline: Callable[[], Awaitable[ApiResponse]],
        cancel_event: Optional[asyncio.Event],
    ) -> ApiResponse:
        """Await ``pipeline()`` unless ``cancel_event`` fires first.

        Both suspension points of the pipeline (network I/O and backoff
        sleeps) run inside one task, so cancelling that task unwinds
        either promptly and closes any open response on the way out.
        """
        if cancel_event is None:
            return await pipeline()
        if cancel_event.is_set():
            raise RequestCancelledError()

        task = asyncio.ensure_future(pipeline())
        waiter = asyncio.ensure_future(cancel_event.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            waiter.cancel()
            raise
        waiter.cancel()

        if task.done():
            return task.result()

        task.cancel()
        await asyncio.wait({task})
        if not task.cancelled():
            # finished between the event firing and the cancel; still abandoned
            task.exception()
        raise RequestCancelledError()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        """Release the transport if this client owns it."""
        if self._owns_http_client:
            await self._http_client.aclose()
            logger.debug("Closed owned HTTP client")

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

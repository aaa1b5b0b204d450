"""Retry policy for the transport call.

A policy is a predicate that decides whether an attempt's outcome (a
response or an exception) deserves another try, plus a backoff function
mapping the 1-indexed retry number to a delay in seconds. Policies are
immutable so one instance can be shared by every call a client makes.

The default policy retries connectivity faults and responses with status
408, 429 or 503, up to three times, waiting 2, 4 and 8 seconds. There is
no jitter.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, FrozenSet, Optional, Tuple, Type

import httpx

from ...exceptions import ConfigurationError

logger = logging.getLogger(__name__)

RETRY_STATUS_CODES: FrozenSet[int] = frozenset({408, 429, 503})

# httpx timeouts are not listed; they surface as "Request timeout".
RETRY_EXCEPTIONS: Tuple[Type[Exception], ...] = (
    httpx.NetworkError,
    httpx.RemoteProtocolError,
    httpx.ProxyError,
)

RetryPredicate = Callable[[Optional[httpx.Response], Optional[BaseException]], bool]
BackoffFunction = Callable[[int], float]


def should_retry_status(status_code: int) -> bool:
    """Determine if a completed response status is retryable."""
    return status_code in RETRY_STATUS_CODES


def should_retry_exception(exc: BaseException) -> bool:
    """Determine if a transport exception is a retryable connectivity fault."""
    return isinstance(exc, RETRY_EXCEPTIONS)


def default_retry_predicate(
    response: Optional[httpx.Response], exception: Optional[BaseException]
) -> bool:
    """Retry on connectivity faults or on 408/429/503 responses.

    :param response: Response of the attempt, or None if it raised
    :type response: Optional[httpx.Response]
    :param exception: Exception raised by the attempt, or None
    :type exception: Optional[BaseException]
    :return: True if another attempt should be made
    :rtype: bool
    """
    if exception is not None:
        return should_retry_exception(exception)
    return response is not None and should_retry_status(response.status_code)


def default_backoff(attempt: int) -> float:
    """Pure exponential backoff: 2, 4, 8... seconds for attempts 1, 2, 3..."""
    return float(2**attempt)


def exponential_backoff(base_delay: float = 2.0) -> BackoffFunction:
    """Create a backoff function returning ``base_delay ** attempt``.

    :param base_delay: Base of the exponent in seconds
    :type base_delay: float
    :return: Backoff function
    :rtype: BackoffFunction
    """

    def backoff(attempt: int) -> float:
        return float(base_delay**attempt)

    return backoff


@dataclass(frozen=True)
class RetryPolicy:
    """Immutable retry strategy wrapping a single transport call.

    :param max_retries: Retries after the first attempt (0 disables retry)
    :type max_retries: int
    :param should_retry: Predicate over (response, exception)
    :type should_retry: RetryPredicate
    :param backoff: Maps the 1-indexed retry number to a delay in seconds
    :type backoff: BackoffFunction
    """

    max_retries: int = 3
    should_retry: RetryPredicate = default_retry_predicate
    backoff: BackoffFunction = default_backoff

    def __post_init__(self):
        if self.max_retries < 0:
            raise ConfigurationError(
                "max_retries must be zero or greater", setting="max_retries"
            )

    async def execute(
        self, operation: Callable[[], Awaitable[httpx.Response]]
    ) -> httpx.Response:
        """Run ``operation`` until it succeeds or retries are exhausted.

        ``operation`` is invoked once per attempt and must build a fresh
        request each time. Responses discarded in favour of a retry are
        closed before the backoff sleep. When the predicate declines or
        retries run out, the last response is returned or the last
        exception re-raised.

        :param operation: Zero-argument coroutine function performing one attempt
        :type operation: Callable[[], Awaitable[httpx.Response]]
        :return: The final response
        :rtype: httpx.Response
        """
        attempt = 0
        while True:
            try:
                response = await operation()
            except Exception as e:
                if attempt >= self.max_retries or not self.should_retry(None, e):
                    if attempt > 0:
                        logger.warning(f"Request failed after {attempt + 1} attempts: {e}")
                    raise
                reason = f"{type(e).__name__}: {e}"
            else:
                if attempt >= self.max_retries or not self.should_retry(response, None):
                    if attempt > 0:
                        logger.info(
                            "Request finished with status %d after %d attempts",
                            response.status_code,
                            attempt + 1,
                        )
                    return response
                reason = f"status {response.status_code}"
                await response.aclose()

            attempt += 1
            delay = self.backoff(attempt)
            logger.info(
                f"Retry {attempt}/{self.max_retries} after {delay:.2f}s ({reason})"
            )
            await asyncio.sleep(delay)

    @classmethod
    def no_retry(cls) -> "RetryPolicy":
        """Create a policy that performs exactly one attempt."""
        return cls(max_retries=0)


def create_retry_policy(max_retries: int = 3, base_delay: float = 2.0) -> RetryPolicy:
    """Create a default-shaped policy with a custom count and backoff base.

    :param max_retries: Retries after the first attempt
    :type max_retries: int
    :param base_delay: Base of the exponential backoff in seconds
    :type base_delay: float
    :return: Configured retry policy
    :rtype: RetryPolicy
    """
    return RetryPolicy(
        max_retries=max_retries,
        should_retry=default_retry_predicate,
        backoff=exponential_backoff(base_delay),
    )


default_retry_policy = RetryPolicy()

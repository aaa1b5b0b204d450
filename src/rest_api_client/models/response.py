"""Uniform response envelope returned by every client call.

Success and failure share one shape so callers branch on ``success``
instead of catching exceptions. The envelope is created fresh for each
call and handed to the caller; nothing else keeps a reference to it.
"""

from enum import Enum
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Categories of failure captured into the envelope.

    - TIMEOUT: a deadline inside the transport was exceeded
    - CANCELLED: the caller's cancellation signal fired
    - NETWORK: the transport could not complete the exchange
    - HTTP_STATUS: the server answered with a non-2xx status
    - SERIALIZATION: the body could not be decoded into the requested type
    - UNEXPECTED: anything else
    """

    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    NETWORK = "network"
    HTTP_STATUS = "http_status"
    SERIALIZATION = "serialization"
    UNEXPECTED = "unexpected"


class ApiResponse(BaseModel, Generic[T]):
    """Result of a single API call.

    :param success: Whether the call completed with a 2xx status and a
                    decodable body
    :type success: bool
    :param data: Decoded body, set only on success with a non-empty body
    :type data: Optional[T]
    :param error_message: Human-readable classification of the failure
    :type error_message: Optional[str]
    :param error_data: Raw response body or exception detail
    :type error_data: Optional[str]
    :param status_code: HTTP status of the final response, if one arrived
    :type status_code: Optional[int]
    :param error_kind: Machine-readable failure category
    :type error_kind: Optional[ErrorKind]
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    success: bool = Field(False, description="Whether the call succeeded")
    data: Optional[T] = Field(None, description="Decoded response payload")
    error_message: Optional[str] = Field(None, description="Failure summary")
    error_data: Optional[str] = Field(None, description="Raw body or error detail")
    status_code: Optional[int] = Field(None, description="HTTP status code")
    error_kind: Optional[ErrorKind] = Field(None, description="Failure category")

    @property
    def is_client_error(self) -> bool:
        """True when the status code is in the 400-499 range."""
        return self.status_code is not None and 400 <= self.status_code < 500

    @property
    def is_server_error(self) -> bool:
        """True when the status code is in the 500-599 range."""
        return self.status_code is not None and 500 <= self.status_code < 600

    @classmethod
    def ok(
        cls, data: Optional[T] = None, status_code: Optional[int] = None
    ) -> "ApiResponse[T]":
        """Build a successful envelope."""
        return cls(success=True, data=data, status_code=status_code)

    @classmethod
    def fail(
        cls,
        error_message: str,
        error_kind: ErrorKind,
        error_data: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> "ApiResponse[T]":
        """Build a failed envelope; ``data`` is always left unset."""
        return cls(
            success=False,
            error_message=error_message,
            error_data=error_data,
            status_code=status_code,
            error_kind=error_kind,
        )

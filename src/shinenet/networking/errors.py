"""Error taxonomy for the HttpClient.

Every failure delivered to callers is an ``HttpClientError`` tagged with an
``ErrorKind``. The retry decision is made from the kind alone (see
``classifier``), never from the exception class.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .types import HttpResponse


class ErrorKind(str, Enum):
    CONNECT_TIMEOUT = "connect_timeout"
    SEND_TIMEOUT = "send_timeout"
    RECEIVE_TIMEOUT = "receive_timeout"
    CONNECTION_FAILURE = "connection_failure"
    SERVER_ERROR = "server_error"
    CLIENT_ERROR = "client_error"
    UNEXPECTED_STATUS = "unexpected_status"
    DECODE_FAILURE = "decode_failure"
    CANCELLED = "cancelled"
    MALFORMED_REQUEST = "malformed_request"


class HttpClientError(Exception):
    """Base class for failures surfaced in an ``Err`` result."""

    default_kind = ErrorKind.CONNECTION_FAILURE

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind | None = None,
        response: HttpResponse | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind if kind is not None else self.default_kind
        self.response = response
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


class RequestTimeoutError(HttpClientError):
    """A transport phase (connect, send or receive) did not finish in time."""

    default_kind = ErrorKind.RECEIVE_TIMEOUT


class ConnectionFailureError(HttpClientError):
    """Refused, reset, DNS or any other non-timeout transport failure."""

    default_kind = ErrorKind.CONNECTION_FAILURE


class HttpStatusError(HttpClientError):
    """A response whose status was rejected by ``validate_status``."""

    default_kind = ErrorKind.SERVER_ERROR

    @classmethod
    def from_response(cls, response: HttpResponse) -> HttpStatusError:
        status = response.status_code
        if status >= 500:
            kind = ErrorKind.SERVER_ERROR
        elif 400 <= status < 500:
            kind = ErrorKind.CLIENT_ERROR
        else:
            kind = ErrorKind.UNEXPECTED_STATUS
        reason = f" {response.reason}" if response.reason else ""
        return cls(f"HTTP {status}{reason}", kind=kind, response=response)

    @property
    def status_code(self) -> int | None:
        return self.response.status_code if self.response else None


class ResponseDecodeError(HttpClientError):
    default_kind = ErrorKind.DECODE_FAILURE


class RequestCancelledError(HttpClientError):
    default_kind = ErrorKind.CANCELLED


class MalformedRequestError(HttpClientError, ValueError):
    """Raised synchronously for a request that cannot be dispatched."""

    default_kind = ErrorKind.MALFORMED_REQUEST


class PipelineDefectError(RuntimeError):
    """An interceptor hook broke its contract; this is a programming error."""

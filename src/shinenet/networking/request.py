"""Request descriptors and per-attempt request state."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from time import monotonic
from types import MappingProxyType
from typing import Any, Mapping

from .errors import MalformedRequestError


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


class ResponseMode(str, Enum):
    """How the response body is handed back to the caller."""

    BYTES = "bytes"
    JSON = "json"
    TEXT = "text"
    STREAM = "stream"


def _frozen(mapping: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class RequestDescriptor:
    """Immutable description of one outgoing request.

    ``path`` is either an absolute URL or a path joined to the client's
    ``base_url``. ``headers`` override the client defaults key by key.
    ``body`` is sent as-is; ``json_body`` is serialized as JSON. At most one
    of them may be set.
    """

    method: HttpMethod | str
    path: str
    params: Mapping[str, Any] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = None
    json_body: Any = None
    response_mode: ResponseMode | str = ResponseMode.BYTES

    def __post_init__(self) -> None:
        method = self.method
        if not isinstance(method, HttpMethod):
            try:
                method = HttpMethod(str(method).upper())
            except ValueError:
                raise MalformedRequestError(
                    f"unsupported HTTP method: {self.method!r}"
                ) from None
        try:
            mode = ResponseMode(self.response_mode)
        except ValueError:
            raise MalformedRequestError(
                f"unsupported response mode: {self.response_mode!r}"
            ) from None
        if not isinstance(self.path, str) or not self.path.strip():
            raise MalformedRequestError("path must be a non-empty string")
        if self.body is not None and self.json_body is not None:
            raise MalformedRequestError(
                "body and json_body are mutually exclusive"
            )

        object.__setattr__(self, "method", method)
        object.__setattr__(self, "response_mode", mode)
        object.__setattr__(self, "params", _frozen(self.params))
        object.__setattr__(self, "headers", _frozen(self.headers))

    @property
    def has_body(self) -> bool:
        return self.body is not None or self.json_body is not None


class CancelToken:
    """Cooperative cancellation flag shared between a caller and a request."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float) -> bool:
        """Sleep up to ``timeout`` seconds; return True if cancelled."""
        if timeout <= 0:
            return self._event.is_set()
        return self._event.wait(timeout)


@dataclass
class RequestContext:
    """State owned by a single attempt of a request."""

    descriptor: RequestDescriptor
    url: str
    attempt: int
    cancel_token: CancelToken
    started_at: float = field(default_factory=monotonic)
    extra: dict[str, Any] = field(default_factory=dict)

    def elapsed_seconds(self) -> float:
        return monotonic() - self.started_at

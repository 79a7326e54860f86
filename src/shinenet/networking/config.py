"""Configuration models for the HttpClient interface."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Mapping

DEFAULT_USER_AGENT = "ShineNETVPN/1.0"


def _default_headers() -> Mapping[str, str]:
    """Return the immutable headers advertised on every request."""

    return MappingProxyType(
        {
            "Accept": "application/json, text/plain, */*",
            "Accept-Encoding": "gzip, deflate",
            "Connection": "keep-alive",
            "X-Content-Type-Options": "nosniff",
        }
    )


def accept_below_500(status: int) -> bool:
    """Treat every status below 500 as a response the caller inspects."""

    return status < 500


@dataclass(frozen=True)
class HttpClientConfig:
    """Configuration for HttpClient behavior.

    A config is bound to a client for its whole life. To change settings,
    build a new config and a new client (see ``shared.reset``).
    """

    user_agent: str | None = DEFAULT_USER_AGENT
    default_headers: Mapping[str, str] = field(default_factory=_default_headers)
    connect_timeout_seconds: float = 8.0
    send_timeout_seconds: float = 8.0
    receive_timeout_seconds: float = 10.0
    follow_redirects: bool = True
    max_redirects: int = 3
    validate_status: Callable[[int], bool] = accept_below_500
    base_url: str = ""
    retries: int = 1
    backoff_seconds: float = 0.5
    verify_tls: bool = True

    def __post_init__(self) -> None:
        if self.retries < 0:
            raise ValueError("retries must be >= 0")
        if self.backoff_seconds < 0:
            raise ValueError("backoff_seconds must be >= 0")
        if self.max_redirects < 0:
            raise ValueError("max_redirects must be >= 0")
        if self.connect_timeout_seconds <= 0:
            raise ValueError("connect_timeout_seconds must be > 0")
        if self.send_timeout_seconds <= 0:
            raise ValueError("send_timeout_seconds must be > 0")
        if self.receive_timeout_seconds <= 0:
            raise ValueError("receive_timeout_seconds must be > 0")

        # Freeze copied headers to avoid post-init mutation side effects.
        object.__setattr__(
            self,
            "default_headers",
            MappingProxyType(dict(self.default_headers)),
        )

"""Result and response value types returned by the HttpClient."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Generic, Mapping, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E", bound=BaseException)


@dataclass(frozen=True)
class HttpResponse:
    """A received response, with its body decoded per the response mode."""

    status_code: int
    headers: Mapping[str, str]
    body: Any
    url: str = ""
    reason: str = ""
    elapsed_s: float | None = None


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome."""

    value: T
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return True

    def with_meta(self, meta: Mapping[str, Any]) -> Ok[T]:
        return replace(self, meta=dict(meta))


@dataclass(frozen=True)
class Err(Generic[E]):
    """Failed outcome carrying the classified error."""

    error: E
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return False

    def with_meta(self, meta: Mapping[str, Any]) -> Err[E]:
        return replace(self, meta=dict(meta))


Result = Union[Ok[T], Err[E]]

"""Delay policies applied between attempts."""

from __future__ import annotations

import random
from typing import Callable, Protocol


class BackoffPolicy(Protocol):
    def delay_for(self, attempt: int) -> float:
        """Return seconds to wait after ``attempt`` (1-based) failed."""
        ...


class FixedBackoff:
    """Same short delay before every retry."""

    def __init__(self, delay_seconds: float = 0.5) -> None:
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        self.delay_seconds = delay_seconds

    def delay_for(self, attempt: int) -> float:
        return self.delay_seconds


class ExponentialBackoff:
    """``base * 2**(attempt - 1)`` capped at ``max_seconds``.

    With ``jitter`` enabled the delay is drawn uniformly from
    ``[0, capped delay]``.
    """

    def __init__(
        self,
        base_seconds: float = 0.5,
        max_seconds: float = 5.0,
        *,
        jitter: bool = False,
        rng: Callable[[], float] = random.random,
    ) -> None:
        if base_seconds < 0:
            raise ValueError("base_seconds must be >= 0")
        if max_seconds < base_seconds:
            raise ValueError("max_seconds must be >= base_seconds")
        self.base_seconds = base_seconds
        self.max_seconds = max_seconds
        self.jitter = jitter
        self._rng = rng

    def delay_for(self, attempt: int) -> float:
        exponent = max(0, attempt - 1)
        # Bound the exponent so huge attempt numbers cannot overflow.
        delay = min(self.max_seconds, self.base_seconds * 2 ** min(exponent, 32))
        if self.jitter:
            delay *= self._rng()
        return max(0.0, delay)

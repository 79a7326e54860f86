"""Retry classification for request outcomes.

The classifier is a total, pure function: it never raises and performs no
I/O. Only timeouts and 5xx responses are worth resending; everything else
would fail the same way again.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from .errors import ErrorKind, HttpClientError
from .types import Err, HttpResponse, Ok


class Verdict(str, Enum):
    RETRYABLE = "retryable"
    TERMINAL = "terminal"


RETRYABLE_KINDS = frozenset(
    {
        ErrorKind.CONNECT_TIMEOUT,
        ErrorKind.SEND_TIMEOUT,
        ErrorKind.RECEIVE_TIMEOUT,
        ErrorKind.SERVER_ERROR,
    }
)


def classify_status(status: Any) -> Verdict:
    if isinstance(status, int) and status >= 500:
        return Verdict.RETRYABLE
    return Verdict.TERMINAL


def classify_kind(kind: Any) -> Verdict:
    if isinstance(kind, ErrorKind) and kind in RETRYABLE_KINDS:
        return Verdict.RETRYABLE
    return Verdict.TERMINAL


def classify(outcome: Any) -> Verdict:
    """Decide whether an attempt's outcome warrants another attempt."""
    if isinstance(outcome, Ok):
        outcome = outcome.value
    elif isinstance(outcome, Err):
        outcome = outcome.error

    if isinstance(outcome, HttpResponse):
        return classify_status(outcome.status_code)
    if isinstance(outcome, HttpClientError):
        if outcome.response is not None:
            return classify_status(outcome.response.status_code)
        return classify_kind(outcome.kind)
    if isinstance(outcome, ErrorKind):
        return classify_kind(outcome)
    return Verdict.TERMINAL

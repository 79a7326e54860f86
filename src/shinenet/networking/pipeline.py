"""Interceptor pipeline run around every attempt.

Hooks resolve by returning a ``Result``. ``on_request`` hooks run in
registration order and may short-circuit by returning a result; the
transport runs next; then ``on_response``/``on_error`` hooks run in the same
registration order, each receiving the previous hook's result.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Iterable, Optional

from .errors import PipelineDefectError
from .request import RequestContext
from .types import Err, Ok, Result

logger = logging.getLogger(__name__)

Dispatch = Callable[[RequestContext], Result[Any, Exception]]


class Interceptor:
    """Base class for pipeline hooks. Override any subset of the hooks."""

    def on_request(
        self, context: RequestContext
    ) -> Optional[Result[Any, Exception]]:
        """Return None to proceed, or a result to short-circuit."""
        return None

    def on_response(
        self, context: RequestContext, result: Ok[Any]
    ) -> Result[Any, Exception]:
        return result

    def on_error(
        self, context: RequestContext, result: Err[Exception]
    ) -> Result[Any, Exception]:
        return result


class CallbackInterceptor(Interceptor):
    """Interceptor assembled from plain callables."""

    def __init__(
        self,
        *,
        on_request: Callable[[RequestContext], Any] | None = None,
        on_response: Callable[[RequestContext, Ok[Any]], Any] | None = None,
        on_error: Callable[[RequestContext, Err[Exception]], Any] | None = None,
    ) -> None:
        self._on_request = on_request
        self._on_response = on_response
        self._on_error = on_error

    def on_request(self, context):
        if self._on_request is None:
            return None
        return self._on_request(context)

    def on_response(self, context, result):
        if self._on_response is None:
            return result
        return self._on_response(context, result)

    def on_error(self, context, result):
        if self._on_error is None:
            return result
        return self._on_error(context, result)


class RequestTimingInterceptor(Interceptor):
    """Stamp the request start and log how long the response took."""

    def on_request(self, context):
        context.extra["request_start"] = int(time.time() * 1000)
        return None

    def on_response(self, context, result):
        start = context.extra.get("request_start")
        if start is not None:
            duration = int(time.time() * 1000) - start
            logger.info("HTTP request to %s took %dms", context.url, duration)
        return result

    def on_error(self, context, result):
        logger.debug(
            "HTTP request to %s failed on attempt %d: %s",
            context.url,
            context.attempt,
            result.error,
        )
        return result


def _is_result(value: object) -> bool:
    return isinstance(value, (Ok, Err))


class Pipeline:
    """Interceptors composed with a dispatch function at construction."""

    def __init__(
        self, interceptors: Iterable[Interceptor], dispatch: Dispatch
    ) -> None:
        self._interceptors = tuple(interceptors)
        self._dispatch = dispatch

    @property
    def interceptors(self) -> tuple[Interceptor, ...]:
        return self._interceptors

    def __call__(self, context: RequestContext) -> Result[Any, Exception]:
        for interceptor in self._interceptors:
            short_circuit = interceptor.on_request(context)
            if short_circuit is None:
                continue
            if not _is_result(short_circuit):
                raise PipelineDefectError(
                    f"{type(interceptor).__name__}.on_request returned "
                    f"{type(short_circuit).__name__}; expected None or a Result"
                )
            return short_circuit

        result = self._dispatch(context)
        for interceptor in self._interceptors:
            if result.ok:
                hook_name = "on_response"
                result = interceptor.on_response(context, result)
            else:
                hook_name = "on_error"
                result = interceptor.on_error(context, result)
            if not _is_result(result):
                raise PipelineDefectError(
                    f"{type(interceptor).__name__}.{hook_name} returned "
                    f"{type(result).__name__}; expected a Result"
                )
        return result

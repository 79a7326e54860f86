"""Synchronous HTTP client for the ShineNET networking layer.

``HttpClient.request`` runs each attempt through the interceptor pipeline,
classifies the outcome and, for timeouts and 5xx responses only, waits per
the backoff policy and resends the same descriptor. The number of resends
is capped by ``HttpClientConfig.retries`` (one by default). Callers always
get a ``Result``; transport failures never escape as exceptions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from time import monotonic
from typing import Any, Callable, Iterable, Mapping

from .backoff import BackoffPolicy, FixedBackoff
from .classifier import Verdict, classify
from .config import HttpClientConfig
from .errors import (
    ErrorKind,
    HttpClientError,
    HttpStatusError,
    MalformedRequestError,
    RequestCancelledError,
)
from .pipeline import Interceptor, Pipeline, RequestTimingInterceptor
from .request import (
    CancelToken,
    HttpMethod,
    RequestContext,
    RequestDescriptor,
    ResponseMode,
)
from .transport import RequestsTransport, Transport, decode_json_body
from .types import Err, HttpResponse, Result

logger = logging.getLogger(__name__)

_ABSOLUTE_PREFIXES = ("http://", "https://")


@dataclass(frozen=True)
class AttemptTiming:
    """Duration of one completed attempt, for external telemetry."""

    method: str
    url: str
    attempt: int
    elapsed_s: float
    status_code: int | None = None
    error_kind: ErrorKind | None = None


TimingObserver = Callable[[AttemptTiming], None]


class HttpClient:
    """Core HTTP client (sync).

    A client is read-only after construction and safe to share between
    threads; each ``request`` call owns its own attempt state.
    """

    def __init__(
        self,
        config: HttpClientConfig | None = None,
        *,
        interceptors: Iterable[Interceptor] = (),
        transport: Transport | None = None,
        backoff: BackoffPolicy | None = None,
        timing_observer: TimingObserver | None = None,
    ) -> None:
        """Create a new HttpClient.

        Args:
            config: Timeouts, headers, redirect, status and retry settings.
            interceptors: Hooks run after the built-in timing interceptor,
                in the given order.
            transport: Transport override; defaults to a pooled
                ``requests.Session`` built from ``config``.
            backoff: Delay policy between attempts; defaults to a fixed
                ``config.backoff_seconds`` delay.
            timing_observer: Receives one ``AttemptTiming`` per attempt.
        """
        self._config = config if config is not None else HttpClientConfig()
        self._transport = (
            transport
            if transport is not None
            else RequestsTransport(self._config)
        )
        self._backoff = (
            backoff
            if backoff is not None
            else FixedBackoff(self._config.backoff_seconds)
        )
        self._timing_observer = timing_observer
        self._pipeline = Pipeline(
            (RequestTimingInterceptor(), *interceptors), self._dispatch
        )

    @property
    def config(self) -> HttpClientConfig:
        return self._config

    @property
    def interceptors(self) -> tuple[Interceptor, ...]:
        return self._pipeline.interceptors

    def _max_attempts(self) -> int:
        """Return the total number of attempts for one request."""
        return 1 + max(0, self._config.retries)

    def _resolve_url(self, descriptor: RequestDescriptor) -> str:
        path = descriptor.path
        if path.startswith(_ABSOLUTE_PREFIXES):
            return path
        base_url = self._config.base_url
        if not base_url:
            raise MalformedRequestError(
                f"relative path {path!r} requires a base_url"
            )
        return f"{base_url.rstrip('/')}/{path.lstrip('/')}"

    def _dispatch(self, context: RequestContext) -> Result[Any, Exception]:
        """Innermost pipeline stage: transport call, status validation, decode.

        The status is judged before any JSON decoding, so a rejected status
        always surfaces as ``HttpStatusError`` with the raw body.
        """
        result = self._transport.send(context)
        if not result.ok:
            return result
        response: HttpResponse = result.value
        if not self._config.validate_status(response.status_code):
            return Err(HttpStatusError.from_response(response))
        if context.descriptor.response_mode is ResponseMode.JSON:
            return decode_json_body(response, context.url)
        return result

    def _observe(
        self, context: RequestContext, result: Result[Any, Exception]
    ) -> float:
        elapsed = context.elapsed_seconds()
        status_code, error_kind = _status_and_kind(result)
        timing = AttemptTiming(
            method=context.descriptor.method.value,
            url=context.url,
            attempt=context.attempt,
            elapsed_s=elapsed,
            status_code=status_code,
            error_kind=error_kind,
        )
        logger.debug(
            "%s %s attempt %d finished in %.3fs (status=%s, error=%s)",
            timing.method,
            timing.url,
            timing.attempt,
            timing.elapsed_s,
            status_code,
            error_kind.value if error_kind else None,
        )
        if self._timing_observer is not None:
            self._timing_observer(timing)
        return elapsed

    def _build_meta(
        self,
        descriptor: RequestDescriptor,
        url: str,
        result: Result[Any, Exception],
        attempts: int,
        timeout: Any,
        started_at: float,
        attempt_elapsed: list[float],
    ) -> dict[str, Any]:
        """Construct metadata dictionary for the final result."""
        meta: dict[str, Any] = {}
        meta["method"] = descriptor.method.value
        meta["url"] = url
        meta["attempts"] = attempts
        meta["timeout_s"] = timeout
        meta["elapsed_s"] = monotonic() - started_at
        meta["attempt_elapsed_s"] = list(attempt_elapsed)

        response: HttpResponse | None = None
        if result.ok and isinstance(result.value, HttpResponse):
            response = result.value
        elif not result.ok and isinstance(result.error, HttpClientError):
            response = result.error.response
        if response is not None:
            meta["status"] = response.status_code
            meta["status_code"] = response.status_code
            meta["url"] = response.url or url
            meta["reason"] = response.reason
        if not result.ok:
            error = result.error
            cause = getattr(error, "cause", None)
            meta["final_error"] = type(cause or error).__name__
            if isinstance(error, HttpClientError):
                meta["error_kind"] = error.kind.value
        return meta

    def _cancelled(
        self,
        descriptor: RequestDescriptor,
        url: str,
        attempts: int,
        discarded: Result[Any, Exception] | None = None,
    ) -> Err[Exception]:
        if discarded is not None:
            _release_stream(descriptor, discarded)
        logger.info(
            "%s %s cancelled after %d attempt(s)",
            descriptor.method.value,
            url,
            attempts,
        )
        return Err(RequestCancelledError(f"request to {url} cancelled"))

    def request(
        self,
        descriptor: RequestDescriptor,
        *,
        cancel_token: CancelToken | None = None,
    ) -> Result[Any, Exception]:
        """Execute a request with bounded retries.

        Args:
            descriptor: What to send. Resent verbatim on retry.
            cancel_token: Optional token; cancelling it aborts the request
                before the next attempt or during the backoff wait. A
                blocking ``requests`` call cannot be interrupted: an
                in-flight attempt runs until it completes or hits its
                timeout, then its result is discarded (a streamed body is
                closed) and the request resolves as cancelled.

        Returns:
            Ok with an HttpResponse, or Err with a classified
            HttpClientError. Metadata describes the whole request.

        Raises:
            MalformedRequestError: The descriptor cannot be dispatched.
        """
        url = self._resolve_url(descriptor)
        token = cancel_token if cancel_token is not None else CancelToken()
        started_at = monotonic()
        attempt_elapsed: list[float] = []
        timeout: Any = None
        max_attempts = self._max_attempts()
        attempt = 0
        result: Result[Any, Exception]

        while True:
            if token.cancelled:
                result = self._cancelled(descriptor, url, attempt)
                break

            attempt += 1
            context = RequestContext(
                descriptor=descriptor,
                url=url,
                attempt=attempt,
                cancel_token=token,
            )
            timeout_for = getattr(self._transport, "timeout_for", None)
            if timeout_for is not None:
                timeout = timeout_for(context)
            result = self._pipeline(context)
            attempt_elapsed.append(self._observe(context, result))

            if token.cancelled:
                result = self._cancelled(descriptor, url, attempt, result)
                break
            if (
                attempt >= max_attempts
                or classify(result) is not Verdict.RETRYABLE
            ):
                break

            _release_stream(descriptor, result)
            delay = self._backoff.delay_for(attempt)
            logger.info(
                "Retrying %s %s after attempt %d in %.2fs",
                descriptor.method.value,
                url,
                attempt,
                delay,
            )
            if token.wait(delay):
                result = self._cancelled(descriptor, url, attempt)
                break

        meta = self._build_meta(
            descriptor,
            url,
            result,
            attempts=attempt,
            timeout=timeout,
            started_at=started_at,
            attempt_elapsed=attempt_elapsed,
        )
        return result.with_meta(meta)

    def get(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        response_mode: ResponseMode | str = ResponseMode.BYTES,
        cancel_token: CancelToken | None = None,
    ) -> Result[Any, Exception]:
        """Perform an HTTP GET request."""
        return self.request(
            RequestDescriptor(
                HttpMethod.GET,
                path,
                params=params or {},
                headers=headers or {},
                response_mode=response_mode,
            ),
            cancel_token=cancel_token,
        )

    def post(
        self,
        path: str,
        *,
        body: Any = None,
        json: Any = None,
        headers: Mapping[str, str] | None = None,
        response_mode: ResponseMode | str = ResponseMode.BYTES,
        cancel_token: CancelToken | None = None,
    ) -> Result[Any, Exception]:
        """Perform an HTTP POST request.

        ``body`` and ``json`` are mutually exclusive.
        """
        return self.request(
            RequestDescriptor(
                HttpMethod.POST,
                path,
                headers=headers or {},
                body=body,
                json_body=json,
                response_mode=response_mode,
            ),
            cancel_token=cancel_token,
        )

    def put(
        self,
        path: str,
        *,
        body: Any = None,
        json: Any = None,
        headers: Mapping[str, str] | None = None,
        response_mode: ResponseMode | str = ResponseMode.BYTES,
        cancel_token: CancelToken | None = None,
    ) -> Result[Any, Exception]:
        return self.request(
            RequestDescriptor(
                HttpMethod.PUT,
                path,
                headers=headers or {},
                body=body,
                json_body=json,
                response_mode=response_mode,
            ),
            cancel_token=cancel_token,
        )

    def delete(
        self,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        response_mode: ResponseMode | str = ResponseMode.BYTES,
        cancel_token: CancelToken | None = None,
    ) -> Result[Any, Exception]:
        return self.request(
            RequestDescriptor(
                HttpMethod.DELETE,
                path,
                headers=headers or {},
                response_mode=response_mode,
            ),
            cancel_token=cancel_token,
        )

    def close(self) -> None:
        """Release pooled connections held by the transport."""
        self._transport.close()


def _status_and_kind(
    result: Result[Any, Exception],
) -> tuple[int | None, ErrorKind | None]:
    if result.ok:
        value = result.value
        if isinstance(value, HttpResponse):
            return value.status_code, None
        return None, None
    error = result.error
    if isinstance(error, HttpClientError):
        status = error.response.status_code if error.response else None
        return status, error.kind
    return None, None


def _release_stream(
    descriptor: RequestDescriptor, result: Result[Any, Exception]
) -> None:
    """Close a streamed body that will not reach the caller.

    An unread stream pins its pooled connection, whether it arrived as a
    success or inside a rejected-status error.
    """
    if descriptor.response_mode is not ResponseMode.STREAM:
        return
    if result.ok:
        response = result.value
    else:
        response = getattr(result.error, "response", None)
    close = getattr(getattr(response, "body", None), "close", None)
    if close is not None:
        close()

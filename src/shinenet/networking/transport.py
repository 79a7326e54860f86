"""Transport boundary: executes one attempt over a requests.Session.

Every ``requests`` exception is mapped to an ``Err`` carrying the matching
``ErrorKind`` here; nothing from the HTTP stack escapes as an exception.
"""

from __future__ import annotations

import json
import socket
from dataclasses import replace
from typing import Any, Protocol

import requests

from .config import HttpClientConfig
from .errors import (
    ConnectionFailureError,
    ErrorKind,
    RequestTimeoutError,
    ResponseDecodeError,
)
from .request import RequestContext, ResponseMode
from .types import Err, HttpResponse, Ok, Result

Timeout = tuple[float, float]


class Transport(Protocol):
    def send(self, context: RequestContext) -> Result[HttpResponse, Exception]:
        ...

    def close(self) -> None:
        ...


def _caused_by_timeout(error: BaseException) -> bool:
    """Walk args and exception chains looking for a socket timeout."""
    seen: set[int] = set()
    pending: list[Any] = [error]
    while pending:
        current = pending.pop()
        if not isinstance(current, BaseException) or id(current) in seen:
            continue
        seen.add(id(current))
        if isinstance(current, (socket.timeout, TimeoutError)):
            return True
        pending.extend(current.args)
        pending.append(current.__cause__)
        pending.append(current.__context__)
    return False


class RequestsTransport:
    """Transport backed by one pooled ``requests.Session``."""

    def __init__(self, config: HttpClientConfig) -> None:
        self._config = config
        self._session = requests.Session()
        if self._config.user_agent:
            self._session.headers["User-Agent"] = self._config.user_agent
        self._session.headers.update(self._config.default_headers)
        self._session.max_redirects = self._config.max_redirects

    def timeout_for(self, context: RequestContext) -> Timeout:
        """Resolve the (connect, read) timeout pair for an attempt.

        urllib3 applies the read timeout as the socket timeout for both
        uploading the body and reading the response.
        """
        config = self._config
        read = config.receive_timeout_seconds
        if context.descriptor.has_body:
            read = max(read, config.send_timeout_seconds)
        return (config.connect_timeout_seconds, read)

    def send(self, context: RequestContext) -> Result[HttpResponse, Exception]:
        descriptor = context.descriptor
        timeout = self.timeout_for(context)
        try:
            response = self._session.request(
                descriptor.method.value,
                context.url,
                params=dict(descriptor.params) or None,
                headers=dict(descriptor.headers) or None,
                data=descriptor.body,
                json=descriptor.json_body,
                timeout=timeout,
                allow_redirects=self._config.follow_redirects,
                stream=descriptor.response_mode is ResponseMode.STREAM,
                verify=self._config.verify_tls,
            )
        except requests.exceptions.RequestException as exc:
            return Err(self._map_exception(context, exc))
        return self._build_response(context, response)

    def _map_exception(
        self, context: RequestContext, e: requests.exceptions.RequestException
    ) -> Exception:
        """Map requests exceptions to client errors."""
        message = str(e) or type(e).__name__

        if isinstance(e, requests.exceptions.ConnectTimeout):
            return RequestTimeoutError(
                message, kind=ErrorKind.CONNECT_TIMEOUT, cause=e
            )

        if isinstance(e, requests.exceptions.Timeout):
            return RequestTimeoutError(
                message, kind=ErrorKind.RECEIVE_TIMEOUT, cause=e
            )

        if (
            isinstance(e, requests.exceptions.ConnectionError)
            and context.descriptor.has_body
            and _caused_by_timeout(e)
        ):
            return RequestTimeoutError(
                message, kind=ErrorKind.SEND_TIMEOUT, cause=e
            )

        # Refused, reset, DNS, too many redirects, invalid URL, ...
        return ConnectionFailureError(message, cause=e)

    def _build_response(
        self, context: RequestContext, response: requests.Response
    ) -> Result[HttpResponse, Exception]:
        """Wrap the response without judging its status or decoding JSON.

        JSON bodies stay as raw bytes here; ``decode_json_body`` runs only
        after the client has accepted the status.
        """
        mode = context.descriptor.response_mode
        try:
            elapsed_s: float | None = response.elapsed.total_seconds()
        except AttributeError:
            elapsed_s = None

        if mode is ResponseMode.STREAM:
            body: Any = response
        elif mode is ResponseMode.TEXT:
            body = response.text
        else:
            body = response.content
        return Ok(
            HttpResponse(
                status_code=response.status_code,
                headers=dict(response.headers),
                body=body,
                url=response.url,
                reason=response.reason,
                elapsed_s=elapsed_s,
            )
        )

    def close(self) -> None:
        self._session.close()


def decode_json_body(
    response: HttpResponse, url: str
) -> Result[HttpResponse, Exception]:
    """Decode an accepted response's JSON body.

    An empty body decodes to None. A 2xx body that is not JSON is a
    ``DECODE_FAILURE``; any other status keeps its raw bytes so the caller
    can still inspect the status.
    """
    raw = response.body
    if not raw:
        return Ok(replace(response, body=None))
    try:
        return Ok(replace(response, body=json.loads(raw)))
    except ValueError as exc:
        if 200 <= response.status_code < 300:
            return Err(
                ResponseDecodeError(
                    f"response from {url} is not valid JSON",
                    response=response,
                    cause=exc,
                )
            )
        return Ok(response)

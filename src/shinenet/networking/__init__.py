"""Outbound HTTP for the ShineNET client: timeouts, classification, retry."""

from .backoff import BackoffPolicy, ExponentialBackoff, FixedBackoff
from .classifier import Verdict, classify, classify_kind, classify_status
from .client import AttemptTiming, HttpClient
from .config import HttpClientConfig
from .errors import (
    ConnectionFailureError,
    ErrorKind,
    HttpClientError,
    HttpStatusError,
    MalformedRequestError,
    PipelineDefectError,
    RequestCancelledError,
    RequestTimeoutError,
    ResponseDecodeError,
)
from .pipeline import (
    CallbackInterceptor,
    Interceptor,
    Pipeline,
    RequestTimingInterceptor,
)
from .request import (
    CancelToken,
    HttpMethod,
    RequestContext,
    RequestDescriptor,
    ResponseMode,
)
from .lifecycle import (
    clear_interceptors,
    configure,
    register_interceptor,
    reset,
    shared,
)
from .transport import RequestsTransport, Transport
from .types import Err, HttpResponse, Ok, Result

__all__ = [
    "AttemptTiming",
    "BackoffPolicy",
    "CallbackInterceptor",
    "CancelToken",
    "ConnectionFailureError",
    "Err",
    "ErrorKind",
    "ExponentialBackoff",
    "FixedBackoff",
    "HttpClient",
    "HttpClientConfig",
    "HttpClientError",
    "HttpMethod",
    "HttpResponse",
    "HttpStatusError",
    "Interceptor",
    "MalformedRequestError",
    "Ok",
    "Pipeline",
    "PipelineDefectError",
    "RequestCancelledError",
    "RequestContext",
    "RequestDescriptor",
    "RequestTimeoutError",
    "RequestTimingInterceptor",
    "RequestsTransport",
    "ResponseDecodeError",
    "ResponseMode",
    "Result",
    "Transport",
    "Verdict",
    "classify",
    "classify_kind",
    "classify_status",
    "clear_interceptors",
    "configure",
    "register_interceptor",
    "reset",
    "shared",
]

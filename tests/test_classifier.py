import pytest

from shinenet.networking.classifier import (
    Verdict,
    classify,
    classify_kind,
    classify_status,
)
from shinenet.networking.errors import (
    ConnectionFailureError,
    ErrorKind,
    HttpStatusError,
    MalformedRequestError,
    RequestCancelledError,
    RequestTimeoutError,
    ResponseDecodeError,
)
from shinenet.networking.types import Err, HttpResponse, Ok


def _response(status: int) -> HttpResponse:
    return HttpResponse(status_code=status, headers={}, body=b"")


@pytest.mark.parametrize("status", [500, 501, 502, 503, 599])
def test_server_statuses_are_retryable(status):
    assert classify_status(status) is Verdict.RETRYABLE
    assert classify(Ok(_response(status))) is Verdict.RETRYABLE
    assert (
        classify(Err(HttpStatusError.from_response(_response(status))))
        is Verdict.RETRYABLE
    )


@pytest.mark.parametrize("status", [200, 204, 302, 400, 404, 499])
def test_non_server_statuses_are_terminal(status):
    assert classify_status(status) is Verdict.TERMINAL
    assert classify(Ok(_response(status))) is Verdict.TERMINAL


@pytest.mark.parametrize(
    "kind",
    [
        ErrorKind.CONNECT_TIMEOUT,
        ErrorKind.SEND_TIMEOUT,
        ErrorKind.RECEIVE_TIMEOUT,
    ],
)
def test_timeouts_are_retryable(kind):
    assert classify_kind(kind) is Verdict.RETRYABLE
    assert classify(Err(RequestTimeoutError("slow", kind=kind))) is (
        Verdict.RETRYABLE
    )


@pytest.mark.parametrize(
    "error",
    [
        ConnectionFailureError("refused"),
        RequestCancelledError("cancelled"),
        MalformedRequestError("bad"),
        ResponseDecodeError("not json"),
        HttpStatusError.from_response(_response(404)),
        HttpStatusError.from_response(_response(302)),
    ],
)
def test_other_failures_are_terminal(error):
    assert classify(Err(error)) is Verdict.TERMINAL


def test_client_error_kind_is_assigned_from_status():
    assert (
        HttpStatusError.from_response(_response(404)).kind
        is ErrorKind.CLIENT_ERROR
    )
    assert (
        HttpStatusError.from_response(_response(302)).kind
        is ErrorKind.UNEXPECTED_STATUS
    )


@pytest.mark.parametrize(
    "value", [None, "timeout", 503, object(), ValueError("boom"), Err(KeyError())]
)
def test_classifier_is_total(value):
    assert classify(value) is Verdict.TERMINAL


def test_decode_failure_on_server_response_follows_status():
    error = ResponseDecodeError("not json", response=_response(502))

    assert classify(Err(error)) is Verdict.RETRYABLE


@pytest.mark.parametrize("value", [["x"], {"kind": "x"}, {ErrorKind.SERVER_ERROR}])
def test_classify_kind_tolerates_unhashable_input(value):
    assert classify_kind(value) is Verdict.TERMINAL
    assert classify(value) is Verdict.TERMINAL

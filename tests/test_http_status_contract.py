# pyright: reportUnknownParameterType=false, reportUnknownMemberType=false
from unittest.mock import Mock, patch

from shinenet.networking.client import HttpClient
from shinenet.networking.config import HttpClientConfig
from shinenet.networking.errors import ErrorKind, HttpStatusError
from shinenet.networking.request import RequestDescriptor


def _mock_response(
    *,
    content: bytes = b"",
    status: int = 200,
    url: str = "http://example.com",
    reason: str = "OK",
):
    response = Mock()
    response.content = content
    response.status_code = status
    response.url = url
    response.reason = reason
    response.elapsed.total_seconds.return_value = 0.1
    response.headers = {"Content-Type": "application/json"}
    return response


def _client(**overrides) -> HttpClient:
    return HttpClient(HttpClientConfig(backoff_seconds=0.0, **overrides))


def test_get_404_is_ok_result_with_status_metadata():
    client = _client()

    with patch("requests.Session.request") as mock_request:
        mock_request.return_value = _mock_response(
            content=b"not found",
            status=404,
            reason="Not Found",
        )
        result = client.request(
            RequestDescriptor("GET", "http://example.com/missing")
        )

    assert result.ok
    assert result.value.body == b"not found"
    assert result.meta["status_code"] == 404
    assert result.meta["reason"] == "Not Found"
    assert mock_request.call_count == 1


def test_get_500_is_err_result_after_one_retry():
    client = _client()

    with patch("requests.Session.request") as mock_request:
        mock_request.return_value = _mock_response(
            content=b"server error",
            status=500,
            reason="Internal Server Error",
        )
        result = client.request(
            RequestDescriptor("GET", "http://example.com/error")
        )

    assert not result.ok
    assert isinstance(result.error, HttpStatusError)
    assert result.error.kind is ErrorKind.SERVER_ERROR
    assert result.error.response.body == b"server error"
    assert result.meta["status_code"] == 500
    assert result.meta["reason"] == "Internal Server Error"
    assert result.meta["attempts"] == 2
    assert mock_request.call_count == 2


def test_get_302_no_redirect_is_ok_result_with_status_metadata():
    client = _client(follow_redirects=False)

    with patch("requests.Session.request") as mock_request:
        mock_request.return_value = _mock_response(
            content=b"",
            status=302,
            reason="Found",
        )
        result = client.request(
            RequestDescriptor("GET", "http://example.com/redirect")
        )

    assert result.ok
    assert result.meta["status_code"] == 302
    assert result.meta["reason"] == "Found"
    mock_request.assert_called_once_with(
        "GET",
        "http://example.com/redirect",
        params=None,
        headers=None,
        data=None,
        json=None,
        timeout=(8.0, 10.0),
        allow_redirects=False,
        stream=False,
        verify=True,
    )


def test_json_mode_404_with_html_body_is_ok_result():
    client = _client()

    with patch("requests.Session.request") as mock_request:
        response = _mock_response(
            content=b"<html>not found</html>",
            status=404,
            reason="Not Found",
        )
        response.json.side_effect = ValueError("not json")
        mock_request.return_value = response
        result = client.request(
            RequestDescriptor(
                "GET", "http://example.com/missing", response_mode="json"
            )
        )

    assert result.ok
    assert result.value.status_code == 404
    assert result.value.body == b"<html>not found</html>"
    assert mock_request.call_count == 1


def test_json_mode_503_with_html_body_is_server_error():
    client = _client()

    with patch("requests.Session.request") as mock_request:
        response = _mock_response(
            content=b"<html>unavailable</html>",
            status=503,
            reason="Service Unavailable",
        )
        response.json.side_effect = ValueError("not json")
        mock_request.return_value = response
        result = client.request(
            RequestDescriptor(
                "GET", "http://example.com/status", response_mode="json"
            )
        )

    assert not result.ok
    assert isinstance(result.error, HttpStatusError)
    assert result.error.kind is ErrorKind.SERVER_ERROR
    assert result.error.response.body == b"<html>unavailable</html>"
    assert result.meta["attempts"] == 2
    assert mock_request.call_count == 2


def test_json_mode_200_is_decoded():
    client = _client()

    with patch("requests.Session.request") as mock_request:
        mock_request.return_value = _mock_response(content=b'{"ok": true}')
        result = client.request(
            RequestDescriptor(
                "GET", "http://example.com/status", response_mode="json"
            )
        )

    assert result.ok
    assert result.value.body == {"ok": True}


def test_json_mode_200_with_invalid_body_is_decode_failure():
    client = _client()

    with patch("requests.Session.request") as mock_request:
        mock_request.return_value = _mock_response(content=b"<html>")
        result = client.request(
            RequestDescriptor(
                "GET", "http://example.com/status", response_mode="json"
            )
        )

    assert not result.ok
    assert result.error.kind is ErrorKind.DECODE_FAILURE
    assert result.meta["status_code"] == 200
    assert mock_request.call_count == 1

import json
from unittest import mock

import pytest
import requests

from shared.infrastructure.api_client import (
    ApiError,
    BookingApiClient,
    MalformedResponseError,
    unwrap_envelope,
)


def make_response(status_code=200, body=None, raw=None):
    response = requests.Response()
    response.status_code = status_code
    response.reason = "OK" if status_code < 400 else "Error"
    response.url = "http://booking.test/api/v1/x"
    if raw is not None:
        response._content = raw
    elif body is not None:
        response._content = json.dumps(body).encode()
    else:
        response._content = b""
    return response


@pytest.fixture
def session():
    return mock.Mock(spec=requests.Session)


@pytest.fixture
def client(session):
    return BookingApiClient(session=session)


def test_defaults_come_from_settings(client):
    assert client.base_url == "http://booking.test/api/v1"
    assert client.timeout == 5


def test_request_sends_bearer_token_and_unwraps_envelope(client, session):
    session.request.return_value = make_response(body={"success": True, "data": [{"id": "g-1"}]})

    result = client.get("/guests", params={"email": "a@b.c"})

    assert result == [{"id": "g-1"}]
    args, kwargs = session.request.call_args
    assert args == ("GET", "http://booking.test/api/v1/guests")
    assert kwargs["headers"]["Authorization"] == "Bearer test-token"
    assert kwargs["params"] == {"email": "a@b.c"}
    assert kwargs["timeout"] == 5


def test_token_provider_wins_over_static_token(session):
    client = BookingApiClient(token="static", token_provider=lambda: "fresh", session=session)
    session.request.return_value = make_response(body=[])

    client.get("/rate-plans")

    assert session.request.call_args.kwargs["headers"]["Authorization"] == "Bearer fresh"


def test_bare_payload_is_returned_as_is(client, session):
    session.request.return_value = make_response(body={"id": "r-1"})

    assert client.post("/reservations", json={}) == {"id": "r-1"}


def test_unsuccessful_envelope_raises():
    with pytest.raises(ApiError, match="room sold out"):
        unwrap_envelope({"success": False, "message": ["room sold out"]})


def test_http_error_carries_status_and_server_message(client, session):
    session.request.return_value = make_response(500, body={"message": "database down"})

    with pytest.raises(ApiError) as exc_info:
        client.get("/guests")

    assert exc_info.value.status_code == 500
    assert "database down" in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, requests.exceptions.HTTPError)


def test_network_error_becomes_api_error(client, session):
    session.request.side_effect = requests.exceptions.ConnectionError("refused")

    with pytest.raises(ApiError, match="Connection error"):
        client.get("/guests")


def test_non_json_body_is_malformed(client, session):
    session.request.return_value = make_response(raw=b"<html>gateway</html>")

    with pytest.raises(MalformedResponseError):
        client.get("/guests")


def test_empty_body_returns_none(client, session):
    session.request.return_value = make_response(204)

    assert client.put("/reservations/r-1", json={"paymentStatus": "paid"}) is None

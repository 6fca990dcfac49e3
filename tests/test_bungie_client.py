"""Tests for bungie_client.py: the requests transport and its rate limiting."""

import time
from unittest.mock import MagicMock

import pytest
import requests

from raiddad.bungie_client import BungieClient, BungieRequest
from raiddad.config import DEFAULT_RETRY_AFTER, BungieConfig
from raiddad.errors import BungieTransportError


def _response(status=200, content=b'{"ErrorCode": 1}', headers=None):
    resp = MagicMock()
    resp.status_code = status
    resp.content = content
    resp.headers = headers or {}
    return resp


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def client(config, session):
    return BungieClient(config, session=session)


def test_session_carries_api_headers(client, session):
    session.headers.update.assert_called_once_with({
        "X-API-Key": "test-key",
        "User-Agent": "RaidDad/1.4.0 AppId/12345",
    })


def test_send_returns_body_and_status(client, session):
    session.request.return_value = _response(200, b'{"Response": {}}')
    request = BungieRequest(url="https://www.bungie.net/Platform/GroupV2/1/",
                            params={"components": "100"})

    body, status = client.send(request)
    assert (body, status) == (b'{"Response": {}}', 200)

    args, kwargs = session.request.call_args
    assert args == ("GET", "https://www.bungie.net/Platform/GroupV2/1/")
    assert kwargs["params"] == {"components": "100"}
    assert kwargs["timeout"] == 30


def test_non_200_is_returned_not_raised(client, session):
    session.request.return_value = _response(503, b"Service Unavailable")
    assert client.send(BungieRequest(url="https://example.com/")) == (b"Service Unavailable", 503)


def test_transport_failure_wrapped(client, session):
    session.request.side_effect = requests.ConnectionError("connection reset")
    with pytest.raises(BungieTransportError, match="connection reset"):
        client.send(BungieRequest(url="https://example.com/"))


def test_429_sets_cooldown(client, session):
    session.request.return_value = _response(429, b"", {"Retry-After": "3"})
    before = time.time()
    _, status = client.send(BungieRequest(url="https://example.com/"))
    assert status == 429
    assert client._rate_limited_until >= before + 3


def test_429_bad_retry_after_uses_default(client, session):
    session.request.return_value = _response(429, b"", {"Retry-After": "soon"})
    before = time.time()
    client.send(BungieRequest(url="https://example.com/"))
    assert client._rate_limited_until >= before + DEFAULT_RETRY_AFTER


def test_min_interval_between_requests(session):
    client = BungieClient(BungieConfig(api_key="k", max_requests_per_second=10), session=session)
    session.request.return_value = _response()
    start = time.time()
    for _ in range(3):
        client.send(BungieRequest(url="https://example.com/"))
    # Two enforced gaps of 0.1s
    assert time.time() - start >= 0.19

"""Tests for the fallback proxy to the upstream recipe service."""

from types import SimpleNamespace

import pytest
import requests

from cookbook.services import proxy
from cookbook.settings import settings


class FakeRawHeaders:
    """Mimics urllib3's header dict: items() yields repeated fields separately."""

    def __init__(self, pairs):
        self.pairs = pairs

    def items(self):
        return list(self.pairs)


class FakeResponse:
    def __init__(self, status_code=200, content=b"{}", headers=None):
        self.status_code = status_code
        self.content = content
        self.raw = SimpleNamespace(headers=FakeRawHeaders(headers or [("content-type", "application/json")]))


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response or FakeResponse()
        self.error = error
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.error:
            raise self.error
        return self.response


@pytest.fixture
def fallback_enabled(monkeypatch):
    monkeypatch.setattr(settings, "proxy_fallback_enabled", True)


def test_build_upstream_url():
    assert proxy.build_upstream_url("api.example.com", "/v1/recipes", "page=2") == (
        "https://api.example.com/v1/recipes?page=2"
    )
    assert proxy.build_upstream_url("api.example.com", "v1", "") == "https://api.example.com/v1"


def test_filter_headers_drops_hop_by_hop():
    headers = [("Connection", "keep-alive"), ("Content-Length", "10"), ("Accept", "application/json")]
    assert proxy.filter_headers(headers) == [("Accept", "application/json")]


def test_merge_headers_folds_repeats():
    merged = proxy.merge_headers([
        ("accept", "text/html"),
        ("accept", "application/json"),
        ("cookie", "a=1"),
        ("cookie", "b=2"),
    ])
    assert merged == {"accept": "text/html, application/json", "cookie": "a=1; b=2"}


def test_forward_wraps_network_errors(monkeypatch):
    monkeypatch.setattr(proxy, "session", FakeSession(error=requests.ConnectionError("refused")))
    with pytest.raises(proxy.UpstreamError):
        proxy.forward("GET", "api.example.com", "/x", "", [], b"")


def test_fallback_forwards_unhandled_requests(client, monkeypatch, fallback_enabled):
    fake = FakeSession(FakeResponse(
        status_code=201,
        content=b'{"upstream": true}',
        headers=[
            ("content-type", "application/json"),
            ("transfer-encoding", "chunked"),
            ("x-upstream", "1"),
            ("set-cookie", "session=abc; Path=/"),
            ("set-cookie", "theme=dark; Path=/"),
        ],
    ))
    monkeypatch.setattr(proxy, "session", fake)

    response = client.post(
        "/api/favourites?page=1",
        content=b'{"id": "r1"}',
        headers=[("x-tag", "a"), ("x-tag", "b")],
    )

    assert response.status_code == 201
    assert response.json() == {"upstream": True}
    assert response.headers["x-upstream"] == "1"
    assert response.headers.get_list("set-cookie") == ["session=abc; Path=/", "theme=dark; Path=/"]
    assert "transfer-encoding" not in response.headers

    method, url, kwargs = fake.calls[0]
    assert method == "POST"
    assert url == "https://testserver/api/favourites?page=1"
    assert kwargs["data"] == b'{"id": "r1"}'
    assert kwargs["allow_redirects"] is False
    assert kwargs["headers"]["x-tag"] == "a, b"
    assert kwargs["headers"]["host"] == "testserver"


def test_fallback_does_not_shadow_api_routes(client, monkeypatch, fallback_enabled):
    fake = FakeSession()
    monkeypatch.setattr(proxy, "session", fake)

    assert client.get("/api/ready").status_code == 200
    assert fake.calls == []


def test_fallback_upstream_failure(client, monkeypatch, fallback_enabled):
    monkeypatch.setattr(proxy, "session", FakeSession(error=requests.Timeout("slow")))

    response = client.get("/api/anything")

    assert response.status_code == 502

import pytest
from fastapi.testclient import TestClient
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from app.core.config import settings
from app.main import app


@pytest.fixture
def limited(monkeypatch):
    monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
    monkeypatch.setattr(settings, "RATE_LIMIT_REQUESTS", 2)
    monkeypatch.setattr(settings, "RATE_LIMIT_WINDOW", 60)


def test_headers_and_429(client, limited, fake_redis):
    r = client.get("/api/v1/tags/")
    assert r.status_code == 200
    assert r.headers["X-RateLimit-Limit"] == "2"
    assert r.headers["X-RateLimit-Remaining"] == "1"

    assert client.get("/api/v1/tags/").headers["X-RateLimit-Remaining"] == "0"

    r = client.get("/api/v1/tags/")
    assert r.status_code == 429
    body = r.json()
    assert body["detail"]["message"].startswith("Too many requests")
    assert 0 < body["detail"]["retry_after"] <= 60
    assert r.headers["Retry-After"] == str(body["detail"]["retry_after"])

    assert fake_redis.get("ratelimit:testclient:/api/v1/tags/") == "3"


def test_limits_are_per_path(client, limited):
    for _ in range(2):
        client.get("/api/v1/tags/")
    assert client.get("/api/v1/tags/").status_code == 429
    assert client.get("/api/v1/cities/").status_code == 200


def test_forwarded_header_from_untrusted_peer_is_ignored(client, limited, fake_redis):
    codes = [
        client.get("/api/v1/tags/", headers={"X-Forwarded-For": f"1.2.3.{i}"}).status_code
        for i in range(4)
    ]
    assert codes == [200, 200, 429, 429]
    assert fake_redis.get("ratelimit:testclient:/api/v1/tags/") == "4"


def test_trusted_proxy_limits_per_forwarded_ip(Session, limited):
    proxied = TestClient(ProxyHeadersMiddleware(app, trusted_hosts="testclient"))
    for _ in range(3):
        proxied.get("/api/v1/tags/", headers={"X-Forwarded-For": "10.0.0.1"})
    assert proxied.get("/api/v1/tags/", headers={"X-Forwarded-For": "10.0.0.1"}).status_code == 429
    assert proxied.get("/api/v1/tags/", headers={"X-Forwarded-For": "10.0.0.2"}).status_code == 200


def test_health_routes_exempt(client, limited):
    for _ in range(5):
        r = client.get("/healthz")
        assert r.status_code == 200
    assert "X-RateLimit-Limit" not in r.headers


def test_disabled_by_setting(client):
    r = client.get("/api/v1/tags/")
    assert "X-RateLimit-Limit" not in r.headers

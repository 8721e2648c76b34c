import pytest
from fastapi.testclient import TestClient
from starlette.datastructures import Headers

from app import create_app, sweep_expired
from helpers import FakeClock, make_settings
from middleware.gatekeeper import RateLimiter, resolve_client_ip
from security import RateLimit
from services.cache import TTLCache


@pytest.mark.parametrize(
    "headers, expected",
    [
        ({"x-forwarded-for": "203.0.113.5, 10.0.0.1"}, "203.0.113.5"),
        ({"x-real-ip": "198.51.100.7"}, "198.51.100.7"),
        ({"x-vercel-forwarded-for": "192.0.2.44"}, "192.0.2.44"),
        ({"x-forwarded-for": "203.0.113.5", "x-real-ip": "198.51.100.7"}, "203.0.113.5"),
        ({}, "127.0.0.1"),
    ],
)
def test_resolve_client_ip(headers, expected):
    assert resolve_client_ip(Headers(headers)) == expected


def test_dormant_limiter_always_allows():
    limiter = RateLimiter(TTLCache(), enforce=False)
    limit = RateLimit(window_seconds=60, max_requests=2)

    for _ in range(10):
        decision = limiter.check("1.2.3.4", "/api/coupons", limit)
        assert decision.allowed
        assert decision.remaining == 2


def test_enforced_limiter_blocks_after_quota_and_resets():
    clock = FakeClock()
    limiter = RateLimiter(TTLCache(clock=clock), enforce=True, clock=clock)
    limit = RateLimit(window_seconds=60, max_requests=2)

    first = limiter.check("1.2.3.4", "/api/coupons", limit)
    second = limiter.check("1.2.3.4", "/api/coupons", limit)
    third = limiter.check("1.2.3.4", "/api/coupons", limit)
    assert (first.allowed, first.remaining) == (True, 1)
    assert (second.allowed, second.remaining) == (True, 0)
    assert (third.allowed, third.remaining) == (False, 0)
    assert third.retry_after == 60

    # Other clients and other paths have their own windows
    assert limiter.check("5.6.7.8", "/api/coupons", limit).allowed
    assert limiter.check("1.2.3.4", "/api/events", limit).allowed

    clock.advance(61)
    assert limiter.check("1.2.3.4", "/api/coupons", limit).remaining == 1


def test_non_api_paths_skip_the_gatekeeper(api):
    response = api.get("/ready")
    assert response.status_code == 200
    assert "X-Frame-Options" not in response.headers
    assert "X-RateLimit-Limit" not in response.headers


def test_api_responses_carry_security_and_cors_headers(api):
    response = api.get("/api/cache")
    assert response.status_code == 200
    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert response.headers["X-RateLimit-Limit"] == "100"
    assert response.headers["X-RateLimit-Remaining"] == "100"


def test_allow_list_rejects_unknown_ip():
    app = create_app(settings=make_settings(enable_ip_whitelist=True))
    with TestClient(app, raise_server_exceptions=False) as client:
        blocked = client.get("/api/cache", headers={"X-Forwarded-For": "203.0.113.9"})
        allowed = client.get("/api/cache", headers={"X-Forwarded-For": "134.122.64.40"})

    assert blocked.status_code == 403
    assert blocked.json() == {
        "success": False,
        "error": "Access denied",
        "message": "Your IP address is not authorized to access this API",
        "ip": "203.0.113.9",
    }
    assert allowed.status_code == 200


def test_enforced_rate_limit_returns_429():
    app = create_app(settings=make_settings(enable_rate_limit=True))
    with TestClient(app, raise_server_exceptions=False) as client:
        statuses = [client.get("/api/coupons").status_code for _ in range(50)]
        limited = client.get("/api/coupons")

    assert statuses == [200] * 50
    assert limited.status_code == 429
    assert limited.headers["Retry-After"] == "900"
    assert limited.headers["X-RateLimit-Remaining"] == "0"
    body = limited.json()
    assert body["success"] is False
    assert body["error"] == "Rate limit exceeded"
    assert body["retryAfter"] == 900


def test_preflight_is_answered_with_cors_headers(api):
    response = api.options(
        "/api/coupons",
        headers={
            "Origin": "https://shop.example",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )

    assert response.status_code == 200
    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert "POST" in response.headers["Access-Control-Allow-Methods"]
    assert response.headers["Access-Control-Max-Age"] == "86400"


def test_sweep_drops_expired_rate_limit_windows():
    clock = FakeClock()
    store = TTLCache(clock=clock)
    app = create_app(settings=make_settings(enable_rate_limit=True), rate_limit_store=store)
    with TestClient(app, raise_server_exceptions=False) as client:
        for product_id in range(1, 201):
            client.get(f"/api/products/{product_id}")
        assert store.stats()["size"] == 200

        clock.advance(10_000)
        sweep_expired(client.app)

    assert store.stats()["size"] <= 1

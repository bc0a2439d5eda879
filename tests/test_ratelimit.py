"""Tests for the per-client rate limiter and its middleware."""

import pytest
from fastapi.testclient import TestClient

from spotjott.errors import RateLimitError
from spotjott.main import create_app
from spotjott.ratelimit import RateLimiter


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


class TestRateLimiter:
    """Test fixed-window counting."""

    def test_allows_up_to_max_then_rejects(self):
        clock = FakeClock()
        limiter = RateLimiter(max_requests=3, window_seconds=60, clock=clock)

        assert limiter.hit("1.2.3.4") == 2
        assert limiter.hit("1.2.3.4") == 1
        assert limiter.hit("1.2.3.4") == 0

        with pytest.raises(RateLimitError) as exc:
            limiter.hit("1.2.3.4")
        assert exc.value.status_code == 429
        assert 1 <= exc.value.retry_after <= 60

    def test_keys_are_independent(self):
        limiter = RateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())
        limiter.hit("a")
        limiter.hit("b")
        assert limiter.get_count("a") == 1
        assert limiter.get_count("b") == 1

    def test_next_window_resets_and_prunes(self):
        clock = FakeClock()
        limiter = RateLimiter(max_requests=1, window_seconds=60, clock=clock)
        limiter.hit("a")
        with pytest.raises(RateLimitError):
            limiter.hit("a")

        clock.now += 60
        assert limiter.get_count("a") == 0
        assert "a" not in limiter.counters
        assert limiter.hit("a") == 0

    def test_reset(self):
        limiter = RateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())
        limiter.hit("a")
        limiter.reset()
        assert limiter.get_count("a") == 0


class TestRateLimitMiddleware:
    """Test the 429 response at the HTTP edge."""

    def test_returns_429_with_retry_after(self):
        app = create_app(rate_limiter=RateLimiter(max_requests=2, window_seconds=900))
        client = TestClient(app)

        assert client.get("/").status_code == 200
        assert client.get("/").status_code == 200

        response = client.get("/")
        assert response.status_code == 429
        assert response.json() == {
            "success": False,
            "error": "Too many requests from this IP, please try again later.",
        }
        assert int(response.headers["Retry-After"]) >= 1

    def test_limiter_lives_on_app_state(self):
        limiter = RateLimiter(max_requests=5)
        app = create_app(rate_limiter=limiter)
        assert app.state.rate_limiter is limiter

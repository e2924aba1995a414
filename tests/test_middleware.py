from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.middleware import RateLimitMiddleware


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def build_app(max_requests: int, clock=None) -> FastAPI:
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, max_requests=max_requests, window_seconds=60, clock=clock)

    @app.get("/api/ping")
    async def ping():
        return {"ok": True}

    @app.get("/static/ping")
    async def static_ping():
        return {"ok": True}

    return app


def test_hit_counts_per_client_and_resets_after_window():
    clock = FakeClock()
    limiter = RateLimitMiddleware(app=None, max_requests=2, window_seconds=60, clock=clock)

    assert limiter.hit("1.1.1.1")
    assert limiter.hit("1.1.1.1")
    assert not limiter.hit("1.1.1.1")
    assert limiter.hit("2.2.2.2")

    clock.now = 61
    assert limiter.hit("1.1.1.1")


def test_requests_over_the_limit_get_429():
    client = TestClient(build_app(max_requests=2))
    assert client.get("/api/ping").status_code == 200
    assert client.get("/api/ping").status_code == 200

    response = client.get("/api/ping")
    assert response.status_code == 429
    assert response.json() == {"success": False, "message": "Too many requests, please try again later."}


def test_paths_outside_api_are_not_limited():
    client = TestClient(build_app(max_requests=1))
    for _ in range(3):
        assert client.get("/static/ping").status_code == 200


def test_zero_disables_the_limiter():
    client = TestClient(build_app(max_requests=0))
    for _ in range(5):
        assert client.get("/api/ping").status_code == 200


def test_expired_windows_are_forgotten():
    clock = FakeClock()
    limiter = RateLimitMiddleware(app=None, max_requests=5, window_seconds=60, clock=clock)

    for i in range(1000):
        clock.now = i * 61
        assert limiter.hit(f"10.0.{i // 256}.{i % 256}")

    assert len(limiter.windows) <= 1


def test_sweep_keeps_clients_inside_their_window():
    clock = FakeClock()
    limiter = RateLimitMiddleware(app=None, max_requests=1, window_seconds=60, clock=clock)
    limiter.hit("1.1.1.1")
    clock.now = 30
    limiter.hit("2.2.2.2")

    clock.now = 70
    limiter.hit("3.3.3.3")
    assert set(limiter.windows) == {"2.2.2.2", "3.3.3.3"}
    assert not limiter.hit("2.2.2.2")

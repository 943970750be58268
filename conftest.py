"""
pytest configuration – every test gets its own SQLite database, site
directory and application instance, so rate-limit and schema state never
leak between tests.
"""
import os

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("POSTGRES_PASSWORD", "test-password")

from visitor_service.config import Settings  # noqa: E402
from visitor_service.main import create_app  # noqa: E402
from visitor_service.rate_limit import FixedWindowRateLimiter  # noqa: E402
from visitor_service.store import VisitorStore  # noqa: E402


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def site_dir(tmp_path):
    site = tmp_path / "site"
    site.mkdir()
    (site / "index.html").write_text("<html><body>visitor form</body></html>")
    (site / "script.js").write_text("console.log('hi');")
    return site


@pytest.fixture
def settings(tmp_path, site_dir) -> Settings:
    return Settings(
        postgres_password="test-password",
        database_url=f"sqlite:///{tmp_path / 'visitors.db'}",
        static_dir=str(site_dir),
    )


@pytest.fixture
def store(settings):
    s = VisitorStore.from_settings(settings)
    yield s
    s.dispose()


@pytest.fixture
def limiter(settings, clock) -> FixedWindowRateLimiter:
    return FixedWindowRateLimiter(
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
        clock=clock,
    )


@pytest.fixture
def app(settings, store, limiter):
    return create_app(settings, store=store, limiter=limiter)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c

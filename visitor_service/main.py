from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import routes_health, routes_site, routes_visitors
from .config import Settings, get_settings
from .errors import (
    RateLimitExceeded,
    VisitorServiceError,
    rate_limit_exceeded_handler,
    visitor_service_error_handler,
)
from .middleware import SecurityHeadersMiddleware
from .rate_limit import FixedWindowRateLimiter
from .store import VisitorStore

log = logging.getLogger("visitor_service")

# ---------------------------------------------------------------------------
# Structured logging
# ---------------------------------------------------------------------------

def configure_logging(level: str = "info", fmt: str = "json") -> None:
    """Send logs to stdout, as JSON when fmt=json (default)."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    if fmt == "json":
        from pythonjsonlogger import jsonlogger
        handler.setFormatter(
            jsonlogger.JsonFormatter(
                "%(asctime)s %(name)s %(levelname)s %(message)s",
                rename_fields={"asctime": "timestamp", "levelname": "level"},
            )
        )
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root.addHandler(handler)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    store: VisitorStore = app.state.store
    limiter: FixedWindowRateLimiter = app.state.limiter

    if not store.ensure_schema():
        log.warning("Starting without the visitors table; inserts will retry schema creation")
    limiter.start_sweeper()
    try:
        yield
    finally:
        log.info("Shutting down gracefully")
        await limiter.stop_sweeper()
        store.dispose()


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[VisitorStore] = None,
    limiter: Optional[FixedWindowRateLimiter] = None,
) -> FastAPI:
    """
    Build the application with its own store and rate limiter.

    Each call gets fresh rate-limit state, exactly as a process restart does.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Visitor Service",
        version="0.1.0",
        description="Collects visitor registrations from the landing page and stores them in PostgreSQL.",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store or VisitorStore.from_settings(settings)
    app.state.limiter = limiter or FixedWindowRateLimiter(
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )

    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(VisitorServiceError, visitor_service_error_handler)

    if settings.allow_cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.allow_cors_origins,
            allow_methods=["GET", "POST"],
            allow_headers=["Content-Type"],
        )
    app.add_middleware(SecurityHeadersMiddleware)

    app.include_router(routes_visitors.router)
    app.include_router(routes_health.router)
    app.include_router(routes_site.router)
    return app

from __future__ import annotations

from fastapi import Request

from ..config import Settings
from ..rate_limit import FixedWindowRateLimiter
from ..store import VisitorStore


# ---------------------------------------------------------------------------
# Per-app components, attached to app.state by create_app()
# ---------------------------------------------------------------------------

def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> VisitorStore:
    return request.app.state.store


def get_limiter(request: Request) -> FixedWindowRateLimiter:
    return request.app.state.limiter

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from ..schemas import HealthOut
from ..store import VisitorStore
from .dependencies import get_store

router = APIRouter(prefix="/api", tags=["meta"])


@router.get(
    "/health",
    response_model=HealthOut,
    responses={503: {"model": HealthOut}},
)
async def health(store: VisitorStore = Depends(get_store)):
    """Report whether the database answers a trivial query."""
    if await run_in_threadpool(store.probe):
        return HealthOut(
            status="healthy",
            database="connected",
            timestamp=datetime.now(timezone.utc),
        )
    return JSONResponse(
        status_code=503,
        content={"status": "unhealthy", "database": "disconnected"},
    )

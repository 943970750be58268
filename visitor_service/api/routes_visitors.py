from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.concurrency import run_in_threadpool

from ..config import Settings
from ..errors import PayloadTooLarge, ValidationFailed
from ..rate_limit import FixedWindowRateLimiter, client_address
from ..schemas import ErrorOut, VisitorCreated
from ..store import VisitorStore
from ..validation import validate_submission
from .dependencies import get_app_settings, get_limiter, get_store

router = APIRouter(prefix="/api", tags=["visitors"])


async def read_json_body(request: Request, limit: int) -> Any:
    """
    Read and decode the request body, refusing anything over ``limit`` bytes.

    The declared Content-Length is checked first; the streamed body is
    checked too, since the header may be absent or wrong.
    """
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        raise PayloadTooLarge(limit)

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > limit:
            raise PayloadTooLarge(limit)

    # Only JSON bodies are decoded; anything else is an empty submission.
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if not body or not (content_type == "application/json" or content_type.endswith("+json")):
        return {}
    try:
        return json.loads(body)
    except (ValueError, RecursionError):
        raise ValidationFailed(["Request body must be valid JSON"])


@router.post(
    "/visitors",
    response_model=VisitorCreated,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorOut},
        413: {"model": ErrorOut},
        429: {"model": ErrorOut},
        500: {"model": ErrorOut},
    },
)
async def create_visitor(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    limiter: FixedWindowRateLimiter = Depends(get_limiter),
    store: VisitorStore = Depends(get_store),
) -> VisitorCreated:
    """
    Register a visitor.

    Runs rate limiting, the body size check, validation and sanitization
    in that order; only a fully valid submission is persisted.
    """
    limiter.hit(client_address(request, settings.trust_proxy_headers))

    payload = await read_json_body(request, settings.max_body_bytes)
    submission = validate_submission(payload)
    record = await run_in_threadpool(store.insert, submission)

    return VisitorCreated(
        success=True,
        message="Visitor information saved successfully",
        data=record,
    )

"""
errors.py — Error taxonomy and its JSON rendering
==================================================
Client-caused errors (validation, oversized body, rate limiting) are
reported with their detail. Store errors are logged server-side by the
store and reach the client only as an opaque message.
"""
from __future__ import annotations

import math
from typing import List

from fastapi import Request
from fastapi.responses import JSONResponse


class VisitorServiceError(Exception):
    """Base class for errors the HTTP layer knows how to render."""

    status_code = 500
    message = "Internal server error"

    def to_content(self) -> dict:
        return {"error": self.message}


class ValidationFailed(VisitorServiceError):
    """One or more submitted fields violate the field rules."""

    status_code = 400
    message = "Validation failed"

    def __init__(self, details: List[str]) -> None:
        super().__init__("; ".join(details))
        self.details = list(details)

    def to_content(self) -> dict:
        return {"error": self.message, "details": self.details}


class PayloadTooLarge(VisitorServiceError):
    status_code = 413
    message = "Request body too large"

    def __init__(self, limit: int) -> None:
        super().__init__(f"body exceeds {limit} bytes")
        self.limit = limit


class RateLimitExceeded(VisitorServiceError):
    """The client address used up its allowance for the current window."""

    status_code = 429
    message = "Too many requests, please try again later."

    def __init__(self, key: str, retry_after: float) -> None:
        super().__init__(f"rate limit exceeded for {key}")
        self.key = key
        self.retry_after = max(0.0, retry_after)


class StoreUnavailable(VisitorServiceError):
    """The visitor store could not complete an operation."""

    status_code = 500
    message = "Failed to save visitor information"


class SchemaNotReady(StoreUnavailable):
    """The visitors table does not exist yet and could not be created."""


async def visitor_service_error_handler(request: Request, exc: VisitorServiceError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_content(),
        headers={"Retry-After": str(math.ceil(exc.retry_after))},
    )

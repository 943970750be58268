from __future__ import annotations

import logging

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

log = logging.getLogger("visitor_service.middleware")

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}

# Headers that advertise the server stack.
SUPPRESSED_HEADERS = ("X-Powered-By", "Server")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Add the standard hardening headers to every response.

    Errors no exception handler claimed are turned into an opaque JSON 500
    here, so they carry the headers too.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            response = await call_next(request)
        except Exception:
            log.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=True)
            response = JSONResponse(status_code=500, content={"error": "Internal server error"})
        for name, value in SECURITY_HEADERS.items():
            response.headers[name] = value
        for name in SUPPRESSED_HEADERS:
            if name in response.headers:
                del response.headers[name]
        return response

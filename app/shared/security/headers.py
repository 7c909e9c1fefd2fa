"""
Secure HTTP headers middleware.

Adds security-related headers to every response. API responses are
also marked no-store: forecasts are generated per request and must not
be served from a shared cache.

The interactive docs (enabled in debug mode only) load their assets
from a CDN, so those paths skip the Content-Security-Policy header.

No business logic. Pure cross-cutting concern.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

SECURE_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Content-Security-Policy": "default-src 'self'",
}
API_PREFIX = "/api/"
DOCS_PATHS = ("/docs", "/redoc", "/openapi.json")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Sets restrictive default headers on all outgoing responses."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        path = request.url.path
        for header_name, header_value in SECURE_HEADERS.items():
            if header_name == "Content-Security-Policy" and path.startswith(DOCS_PATHS):
                continue
            response.headers[header_name] = header_value
        if path.startswith(API_PREFIX):
            response.headers["Cache-Control"] = "no-store"
        return response

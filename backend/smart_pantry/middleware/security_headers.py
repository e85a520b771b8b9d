"""
Smart Pantry Backend: Security Headers Middleware
==================================================

Adds browser hardening headers to every response:

    X-XSS-Protection: 1; mode=block
    X-Content-Type-Options: nosniff
    X-Frame-Options: SAMEORIGIN
    Strict-Transport-Security: max-age=31536000; preload

HSTS is only sent when COOKIE_SECURE is on, i.e. when the service is
deployed behind HTTPS. Sending it from a plain-HTTP dev server would pin
browsers to an HTTPS endpoint that does not exist.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from smart_pantry.config import settings

HSTS_VALUE = "max-age=31536000; preload"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "SAMEORIGIN"
        if settings.cookie_secure:
            response.headers["Strict-Transport-Security"] = HSTS_VALUE
        return response

"""
Smart Pantry Backend: CSRF Middleware
======================================

What:  Double-submit-cookie protection against cross-site request forgery.
How:   A random token lives in the `_csrf` cookie (readable by the frontend's
       JavaScript). Unsafe requests must repeat it in the X-CSRF-Token
       header. A cross-site attacker can make the browser send the cookie
       but cannot read it, so cannot produce the header.
Who:   Applied to every request. GET /csrf hands the token to clients that
       prefer reading it from a response body.

Flow:
    GET/HEAD/OPTIONS: pass through; if the client has no cookie yet, a new
        token is generated, exposed on request.state.csrf_token, set as a
        cookie and echoed in the X-CSRF-Token response header.
    POST/PUT/PATCH/DELETE: header and cookie must both be present and equal
        (secrets.compare_digest), otherwise 403 csrf_failed.
"""

import logging
import secrets

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from smart_pantry.config import settings
from smart_pantry.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "TRACE"})

# Same lifetime as the access-token cookie issued at login.
CSRF_COOKIE_MAX_AGE = settings.access_token_expire_minutes * 60


def generate_csrf_token() -> str:
    return secrets.token_urlsafe(32)


class CSRFMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not settings.csrf_enabled:
            return await call_next(request)

        cookie_token = request.cookies.get(settings.csrf_cookie_name)

        if request.method not in SAFE_METHODS:
            header_token = request.headers.get(settings.csrf_header_name)
            if (
                not cookie_token
                or not header_token
                or not secrets.compare_digest(cookie_token, header_token)
            ):
                rid = request_id_var.get("")
                logger.warning(
                    "[%s] CSRF check failed for %s %s (cookie=%s, header=%s)",
                    rid,
                    request.method,
                    request.url.path,
                    "present" if cookie_token else "missing",
                    "present" if header_token else "missing",
                )
                return JSONResponse(
                    status_code=403,
                    content={
                        "error": "csrf_failed",
                        "message": "Missing or invalid CSRF token",
                        "request_id": rid,
                    },
                )
            request.state.csrf_token = cookie_token
            return await call_next(request)

        issued = cookie_token is None
        token = cookie_token or generate_csrf_token()
        request.state.csrf_token = token

        response = await call_next(request)

        if issued:
            response.set_cookie(
                key=settings.csrf_cookie_name,
                value=token,
                max_age=CSRF_COOKIE_MAX_AGE,
                path="/",
                domain=settings.cookie_domain,
                secure=settings.cookie_secure,
                httponly=False,
                samesite=settings.cookie_samesite,
            )
            response.headers[settings.csrf_header_name] = token
        return response

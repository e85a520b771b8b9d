"""
Smart Pantry Backend: Request ID Middleware
============================================

What:  Assigns a short id to each request and returns it as X-Request-ID.
How:   Stores the id in a ContextVar (read by loggers and exception handlers)
       and on request.state.
Who:   Applied to every request; exception handlers in main.py echo the id
       in error bodies so a user report can be matched to the server log.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own id.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Uses the client's X-Request-ID when it sends one, otherwise generates
    the first 8 characters of a UUID4.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response

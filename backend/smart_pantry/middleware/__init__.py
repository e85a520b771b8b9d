"""
Smart Pantry Backend: Middleware Package
=========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters):
    Request → [CORS] → [Request ID] → [Rate Limit] → [Logging]
            → [Security Headers] → [CSRF] → [GZip] → Route Handler

    1. CORS outermost: every response, rejections included, carries the
       Access-Control-* headers the browser needs to read it
    2. Request ID: correlation id for every later log line and error body
    3. Rate Limit: reject abusive clients before any further processing
    4. Logging: sees the final status of everything below it; rate-limited
       requests never reach it
    5. Security Headers: added to every response below the rate limiter
    6. CSRF: double-submit check on unsafe methods; issues the cookie
    7. GZip: provided by Starlette

    Responses travel the same chain in reverse.
"""

"""
Smart Pantry Backend: Route Dependencies
=========================================

What:  Resolves the authenticated user for protected routes.
How:   Reads the access token from `Authorization: Bearer <token>` or, when
       the header is absent, from the `token` cookie set at login, and
       validates it with smart_pantry.security.decode_token.
Who:   Every route under /api, plus GET /verify-token.

The user row is not loaded: the token's claims are trusted until expiry.
Deleting an account therefore does not revoke its outstanding access
tokens; refresh does check that the account still exists.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from smart_pantry.config import settings
from smart_pantry.exceptions import AuthenticationError
from smart_pantry.security import ACCESS_TOKEN, decode_token

# auto_error=False: a missing header falls back to the cookie instead of a 403.
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthenticatedUser:
    id: int
    email: str


def extract_access_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials],
) -> Optional[str]:
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.access_cookie_name)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AuthenticatedUser:
    """
    FastAPI dependency returning the caller's identity.

    Raises:
        AuthenticationError: no token, or the token is invalid, expired, or
            a refresh token (401 with WWW-Authenticate: Bearer).
    """
    token = extract_access_token(request, credentials)
    if not token:
        raise AuthenticationError("Authentication required")

    claims = decode_token(token, expected_type=ACCESS_TOKEN)
    return AuthenticatedUser(id=claims["user_id"], email=claims.get("email", ""))

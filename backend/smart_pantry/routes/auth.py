"""
Smart Pantry Backend: Authentication Route Handlers
====================================================

What:  Sign-up, login, logout, token refresh, token check, CSRF token.
How:   Delegates to UserService; this module only moves tokens between
       response bodies and cookies.
Who:   The web frontend. Browser clients rely on the HttpOnly cookies;
       other clients use the tokens from the response body.

Cookies:
    token          access token, HttpOnly, lifetime of the access token
    refresh_token  refresh token, HttpOnly, lifetime of the refresh token
    Secure / SameSite / Domain come from COOKIE_SECURE, COOKIE_SAMESITE and
    COOKIE_DOMAIN.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from smart_pantry.config import settings
from smart_pantry.database import get_db_session
from smart_pantry.exceptions import AuthenticationError
from smart_pantry.middleware.csrf import generate_csrf_token
from smart_pantry.routes.dependencies import AuthenticatedUser, get_current_user
from smart_pantry.schemas.auth import (
    CsrfTokenResponse,
    RefreshTokenRequest,
    TokenEnvelope,
    TokenResponse,
    UserCredentials,
    UserResponse,
    VerifyTokenResponse,
)
from smart_pantry.schemas.common import ErrorResponse, MessageResponse
from smart_pantry.security import TokenPair
from smart_pantry.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


# ── Cookie helpers ────────────────────────────────────────────────────────
def _set_cookie(response: Response, key: str, value: str, max_age: int) -> None:
    response.set_cookie(
        key=key,
        value=value,
        max_age=max_age,
        path="/",
        domain=settings.cookie_domain,
        secure=settings.cookie_secure,
        httponly=True,
        samesite=settings.cookie_samesite,
    )


def set_auth_cookies(response: Response, pair: TokenPair) -> None:
    _set_cookie(
        response,
        settings.access_cookie_name,
        pair.access_token,
        settings.access_token_expire_minutes * 60,
    )
    _set_cookie(
        response,
        settings.refresh_cookie_name,
        pair.refresh_token,
        settings.refresh_token_expire_days * 24 * 60 * 60,
    )


def clear_auth_cookies(response: Response) -> None:
    for name in (settings.access_cookie_name, settings.refresh_cookie_name):
        response.delete_cookie(
            key=name,
            path="/",
            domain=settings.cookie_domain,
            secure=settings.cookie_secure,
            httponly=True,
            samesite=settings.cookie_samesite,
        )


def _token_envelope(pair: TokenPair, message: str) -> TokenEnvelope:
    tokens = TokenResponse(
        access_token=pair.access_token,
        token_type="bearer",
        expires_in=pair.access_expires_in,
        expires_at=pair.access_expires_at,
        refresh_token=pair.refresh_token,
    )
    return TokenEnvelope(data=tokens, message=message)


# ── Routes ────────────────────────────────────────────────────────────────
@router.post(
    "/signup",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Email already registered", "model": ErrorResponse}},
    summary="Register a new account",
)
async def sign_up(
    credentials: UserCredentials,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    user = await user_service.sign_up(db, credentials)
    return UserResponse.model_validate(user)


@router.post(
    "/login",
    response_model=TokenEnvelope,
    responses={401: {"description": "Invalid email or password", "model": ErrorResponse}},
    summary="Log in and receive access and refresh tokens",
)
async def log_in(
    credentials: UserCredentials,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> TokenEnvelope:
    pair = await user_service.log_in(db, credentials)
    set_auth_cookies(response, pair)
    return _token_envelope(pair, "Login successful")


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Clear the authentication cookies",
)
async def log_out(response: Response) -> MessageResponse:
    # Tokens are stateless; logging out only removes them from the browser.
    clear_auth_cookies(response)
    return MessageResponse(message="Successfully logged out")


@router.get(
    "/csrf",
    response_model=CsrfTokenResponse,
    summary="Get the CSRF token for unsafe requests",
)
async def csrf_token(request: Request) -> CsrfTokenResponse:
    token = getattr(request.state, "csrf_token", None) or generate_csrf_token()
    return CsrfTokenResponse(csrf_token=token)


@router.post(
    "/refresh-token",
    response_model=TokenEnvelope,
    responses={401: {"description": "Missing or invalid refresh token", "model": ErrorResponse}},
    summary="Exchange a refresh token for a new token pair",
)
async def refresh_token(
    request: Request,
    response: Response,
    body: Optional[RefreshTokenRequest] = None,
    db: AsyncSession = Depends(get_db_session),
) -> TokenEnvelope:
    token = (body.refresh_token if body else None) or request.cookies.get(
        settings.refresh_cookie_name
    )
    if not token:
        raise AuthenticationError("Refresh token required")

    pair = await user_service.refresh(db, token)
    set_auth_cookies(response, pair)
    return _token_envelope(pair, "Token refreshed")


@router.get(
    "/verify-token",
    response_model=VerifyTokenResponse,
    responses={401: {"description": "Missing or invalid access token", "model": ErrorResponse}},
    summary="Check that the current access token is valid",
)
async def verify_token(
    user: AuthenticatedUser = Depends(get_current_user),
) -> VerifyTokenResponse:
    return VerifyTokenResponse(user_id=user.id, email=user.email)

"""
Smart Pantry Backend: Password Hashing and JWT Tokens
======================================================

What:  bcrypt password hashing and HS256 JWT issuing/validation.
How:   `bcrypt` for hashes (cost from BCRYPT_ROUNDS), `PyJWT` for tokens.
       Access and refresh tokens share one signing key and are told apart
       by the `type` claim.
Who:   UserService (sign-up, login, refresh) and routes/dependencies.py.

Token claims:
    user_id  integer account id
    email    account email at issue time
    type     "access" | "refresh"
    iat/exp  issue and expiry times (UTC epoch seconds)
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Tuple

import bcrypt
import jwt

from smart_pantry.config import settings
from smart_pantry.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


# ── Passwords ─────────────────────────────────────────────────────────────
def hash_password(password: str) -> str:
    """Return the bcrypt hash of `password` as text."""
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """
    Constant-time check of `password` against a stored bcrypt hash.

    A malformed stored hash counts as a mismatch rather than an error, so a
    corrupt row cannot be told apart from a wrong password.
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


# ── Tokens ────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class TokenPair:
    access_token: str
    access_expires_at: datetime
    refresh_token: str
    refresh_expires_at: datetime

    @property
    def access_expires_in(self) -> int:
        return int(settings.access_token_expire_minutes * 60)


def create_token(
    user_id: int,
    email: str,
    token_type: str,
    expires_delta: timedelta,
) -> Tuple[str, datetime]:
    """Sign a token of `token_type` valid for `expires_delta`; returns (token, expires_at)."""
    now = datetime.now(timezone.utc)
    expires_at = now + expires_delta
    payload = {
        "user_id": user_id,
        "email": email,
        "type": token_type,
        "iat": now,
        "exp": expires_at,
    }
    token = jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return token, expires_at


def create_token_pair(user_id: int, email: str) -> TokenPair:
    access_token, access_expires_at = create_token(
        user_id,
        email,
        ACCESS_TOKEN,
        timedelta(minutes=settings.access_token_expire_minutes),
    )
    refresh_token, refresh_expires_at = create_token(
        user_id,
        email,
        REFRESH_TOKEN,
        timedelta(days=settings.refresh_token_expire_days),
    )
    return TokenPair(
        access_token=access_token,
        access_expires_at=access_expires_at,
        refresh_token=refresh_token,
        refresh_expires_at=refresh_expires_at,
    )


def decode_token(token: str, expected_type: str = ACCESS_TOKEN) -> Dict[str, Any]:
    """
    Verify signature, expiry and `type` claim; return the claims.

    Raises:
        AuthenticationError: for any invalid token. The message distinguishes
            only "expired" from "invalid"; the detail goes to the log.
    """
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", "user_id", "type"]},
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except jwt.InvalidTokenError as e:
        logger.info("Rejected %s token: %s", expected_type, type(e).__name__)
        raise AuthenticationError("Invalid token")

    if claims.get("type") != expected_type:
        logger.info("Rejected token: expected type %r, got %r", expected_type, claims.get("type"))
        raise AuthenticationError("Invalid token")

    if not isinstance(claims.get("user_id"), int):
        raise AuthenticationError("Invalid token")

    return claims

"""
Smart Pantry Backend: Authentication Schemas
=============================================

What:  Request and response bodies for /signup, /login, /refresh-token,
       /verify-token and /csrf.
How:   Pydantic v2 models; FastAPI rejects bodies that fail validation with 422.

Password rules:
    Non-empty, at most 72 bytes once UTF-8 encoded. bcrypt ignores everything
    past byte 72, so longer passwords would silently authenticate on a prefix.
"""

import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

# Deliberately loose: one "@", no spaces, a dot in the domain part.
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

BCRYPT_MAX_PASSWORD_BYTES = 72


class UserCredentials(BaseModel):
    """Body of POST /signup and POST /login."""
    email: str = Field(max_length=255, description="Account email address")
    password: str = Field(min_length=1, description="Plaintext password (max 72 bytes)")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Strips whitespace, lower-cases, and checks the basic address shape."""
        normalized = v.strip().lower()
        if not EMAIL_PATTERN.match(normalized):
            raise ValueError("Invalid email address")
        return normalized

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        if len(v.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
            raise ValueError(
                f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes"
            )
        return v


class UserResponse(BaseModel):
    """Public view of an account. The password hash is never included."""
    id: int
    email: str
    created_at: datetime

    model_config = {"from_attributes": True}


class TokenResponse(BaseModel):
    """
    What:  Token pair issued by /login and /refresh-token.

    Serialized in camelCase (accessToken, tokenType, expiresIn, expiresAt,
    refreshToken), the names the web frontend reads. The same tokens are
    also set as HttpOnly cookies; the body copy is for clients that prefer
    the Authorization header.
    """
    access_token: str
    token_type: str = Field(default="bearer")
    expires_in: int = Field(description="Access token lifetime in seconds")
    expires_at: datetime = Field(description="Access token expiry (UTC)")
    refresh_token: str

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class TokenEnvelope(BaseModel):
    """Body of /login and /refresh-token: {"data": {...tokens}, "message": "..."}."""
    data: TokenResponse
    message: Optional[str] = None


class RefreshTokenRequest(BaseModel):
    """
    Optional body of POST /refresh-token; the cookie is used when absent.

    Accepts both {"refreshToken": ...} and {"refresh_token": ...}.
    """
    refresh_token: Optional[str] = Field(default=None)

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class VerifyTokenResponse(BaseModel):
    message: str = Field(default="Token is valid")
    user_id: int
    email: str


class CsrfTokenResponse(BaseModel):
    csrf_token: str = Field(description="Echo this value in the X-CSRF-Token header")

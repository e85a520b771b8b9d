"""
Smart Pantry Backend: User Service (Authentication Usecase)
============================================================

What:  Account registration, login, and refresh-token rotation.
How:   bcrypt for passwords and PyJWT for tokens (smart_pantry.security);
       UserRepository for persistence.
Who:   routes/auth.py.

bcrypt runs in a worker thread (asyncio.to_thread); at cost 10 a hash takes
tens of milliseconds, which would otherwise stall the event loop.

Login never says which half of the credentials was wrong: an unknown
email and a wrong password produce the same AuthenticationError.
"""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from smart_pantry.exceptions import AuthenticationError, ConflictError
from smart_pantry.models.user import User
from smart_pantry.repositories.user_repository import user_repository
from smart_pantry.schemas.auth import UserCredentials
from smart_pantry.security import (
    REFRESH_TOKEN,
    TokenPair,
    create_token_pair,
    decode_token,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


class UserService:

    async def sign_up(self, db: AsyncSession, credentials: UserCredentials) -> User:
        """
        Register a new account.

        Raises:
            ConflictError: The email is already registered (409).
        """
        if await user_repository.get_by_email(db, credentials.email) is not None:
            logger.info("Sign-up rejected: email already registered")
            raise ConflictError("Email already exists", context={"field": "email"})

        password_hash = await asyncio.to_thread(hash_password, credentials.password)
        user = await user_repository.create(
            db,
            email=credentials.email,
            password_hash=password_hash,
        )
        logger.info("User %s registered", user.id)
        return user

    async def log_in(self, db: AsyncSession, credentials: UserCredentials) -> TokenPair:
        """
        Check credentials and issue an access/refresh token pair.

        Raises:
            AuthenticationError: Unknown email or wrong password (401).
        """
        user = await user_repository.get_by_email(db, credentials.email)
        if user is None or not await asyncio.to_thread(
            verify_password, credentials.password, user.password
        ):
            logger.info("Login failed")
            raise AuthenticationError(INVALID_CREDENTIALS)

        logger.info("User %s logged in", user.id)
        return create_token_pair(user.id, user.email)

    async def refresh(self, db: AsyncSession, refresh_token: str) -> TokenPair:
        """
        Exchange a valid refresh token for a new pair.

        The account must still exist; a refresh token outliving its user is
        rejected like any other invalid token.
        """
        claims = decode_token(refresh_token, expected_type=REFRESH_TOKEN)
        user = await user_repository.get_by_id(db, claims["user_id"])
        if user is None:
            logger.info("Refresh rejected: user %s no longer exists", claims["user_id"])
            raise AuthenticationError("Invalid token")
        return create_token_pair(user.id, user.email)


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()

"""
Smart Pantry Backend: User Repository
======================================

What:  Queries against the `users` table.
Who:   UserService.

Error translation:
    IntegrityError on insert → ConflictError (duplicate email, 409)
    any other SQLAlchemyError → DatabaseError (500, details logged only)
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from smart_pantry.exceptions import ConflictError, DatabaseError
from smart_pantry.models.user import User

logger = logging.getLogger(__name__)


class UserRepository:

    async def create(self, db: AsyncSession, email: str, password_hash: str) -> User:
        """
        Insert a user and flush so the primary key is assigned.

        The unique index on email is the final arbiter: two concurrent
        sign-ups with the same address both pass the service's pre-check,
        and the second one fails here.
        """
        user = User(email=email, password=password_hash)
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            logger.info("Duplicate email rejected on insert")
            raise ConflictError("Email already exists", context={"field": "email"})
        except SQLAlchemyError as e:
            logger.error("Database error creating user: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})
        return user

    async def get_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        try:
            result = await db.execute(select(User).where(User.email == email))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error looking up user by email: %s", str(e))
            raise DatabaseError(context={"error_type": type(e).__name__})

    async def get_by_id(self, db: AsyncSession, user_id: int) -> Optional[User]:
        try:
            return await db.get(User, user_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching user %s: %s", user_id, str(e))
            raise DatabaseError(context={"error_type": type(e).__name__})


# ── Singleton Instance ────────────────────────────────────────────────────
user_repository = UserRepository()

"""
Smart Pantry Backend: User SQLAlchemy Model
============================================

What:  ORM model for the `users` table.
How:   Inherits from the shared DeclarativeBase; Alembic migration 001 mirrors it.
Who:   Used by UserRepository for sign-up and login lookups.

Table Design:
    - Integer primary key: embedded in JWT `user_id` claims.
    - email: stored stripped and lower-cased; the unique constraint is what
      rejects duplicate registrations, including concurrent ones.
    - password: bcrypt hash only. The plaintext never reaches this layer and
      the hash never leaves the service layer.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from smart_pantry.database import Base


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """A registered account. Owns zero or more food items."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Login identifier, stored lower-cased",
    )

    # bcrypt output is 60 characters; 255 leaves room for another scheme.
    password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt password hash",
    )

    # ── Timestamps ────────────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
        onupdate=utc_now,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"

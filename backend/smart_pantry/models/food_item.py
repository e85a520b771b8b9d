"""
Smart Pantry Backend: FoodItem SQLAlchemy Model
================================================

What:  ORM model for the `food_items` table (one row per pantry entry).
How:   Inherits from the shared DeclarativeBase; Alembic migration 001 mirrors it.
Who:   Used by FoodItemRepository and, read-only, by the recipe prompt builder.

Query Patterns:
    - Pantry listing: WHERE user_id = :uid ORDER BY expiry_date, id
      → served by idx_food_items_user_expiry
    - "Expiring soon": same index, range scan on expiry_date
    - Single item: WHERE id = :id AND user_id = :uid (primary key lookup)
"""

from datetime import date, datetime

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from smart_pantry.database import Base
from smart_pantry.models.user import utc_now


class FoodItem(Base):
    """
    A food item in one user's pantry.

    Ownership never changes after creation: `user_id` is taken from the
    access token when the row is inserted and is not part of any update.
    """

    __tablename__ = "food_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Calendar date only; "days until expiry" is computed against today's UTC date.
    expiry_date: Mapped[date] = mapped_column(Date, nullable=False)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
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

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_food_items_quantity_non_negative"),
        Index("idx_food_items_user_expiry", "user_id", "expiry_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<FoodItem(id={self.id}, title='{self.title}', "
            f"expiry_date='{self.expiry_date}', user_id={self.user_id})>"
        )

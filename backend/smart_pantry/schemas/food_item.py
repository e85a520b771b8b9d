"""
Smart Pantry Backend: Food Item Schemas
========================================

What:  The API contract for /api/food-items.
How:   Write models validate client input; FoodItemResponse adds fields
       computed from today's UTC date (days_until_expiry, is_expired).
Who:   routes/food_items.py, and FoodItemService for the computed fields.

Envelope:
    Successful responses wrap the payload as {"data": ..., "message": ...?},
    the shape the web frontend already consumes.
"""

from datetime import date, datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


def utc_today() -> date:
    """Today's date in UTC. Expiry arithmetic never uses server-local time."""
    return datetime.now(timezone.utc).date()


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class FoodItemBase(BaseModel):
    title: str = Field(min_length=1, max_length=255, description="Item name")
    quantity: int = Field(ge=0, le=100_000, description="How many units are in the pantry")
    expiry_date: date = Field(description="Best-before date (YYYY-MM-DD)")

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Title must not be blank")
        return stripped


class FoodItemCreate(FoodItemBase):
    """Body of POST /api/food-items. Ownership comes from the token."""


class FoodItemUpdate(FoodItemBase):
    """Body of PUT /api/food-items/{id}: full replacement of the editable fields."""


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class FoodItemResponse(BaseModel):
    id: int
    title: str
    quantity: int
    expiry_date: date
    days_until_expiry: int = Field(description="Negative once the item has expired")
    is_expired: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, item, today: Optional[date] = None) -> "FoodItemResponse":
        """Build the response from a FoodItem row, relative to `today` (UTC by default)."""
        today = today or utc_today()
        days = (item.expiry_date - today).days
        return cls(
            id=item.id,
            title=item.title,
            quantity=item.quantity,
            expiry_date=item.expiry_date,
            days_until_expiry=days,
            is_expired=days < 0,
            created_at=item.created_at,
            updated_at=item.updated_at,
        )


class FoodItemEnvelope(BaseModel):
    data: FoodItemResponse
    message: Optional[str] = None


class FoodItemListEnvelope(BaseModel):
    data: List[FoodItemResponse]

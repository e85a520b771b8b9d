"""
Smart Pantry Backend: Food Item Repository
===========================================

What:  Queries against the `food_items` table.
How:   Every read is filtered by user_id, so an id belonging to another
       user is indistinguishable from a missing one.
Who:   FoodItemService and RecipeService.

Query plan (list_for_user):
    SELECT * FROM food_items
    WHERE user_id = :uid [AND expiry_date >= :after] [AND expiry_date <= :before]
    ORDER BY expiry_date ASC, id ASC
    → idx_food_items_user_expiry serves both the filter and the sort
"""

import logging
from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy import asc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from smart_pantry.exceptions import DatabaseError
from smart_pantry.models.food_item import FoodItem
from smart_pantry.schemas.food_item import FoodItemBase

logger = logging.getLogger(__name__)


class FoodItemRepository:

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: int,
        expiring_before: Optional[date] = None,
        expiring_after: Optional[date] = None,
    ) -> List[FoodItem]:
        """
        The user's items, soonest expiry first.

        Both bounds are inclusive; either may be omitted.
        """
        query = select(FoodItem).where(FoodItem.user_id == user_id)
        if expiring_after is not None:
            query = query.where(FoodItem.expiry_date >= expiring_after)
        if expiring_before is not None:
            query = query.where(FoodItem.expiry_date <= expiring_before)
        query = query.order_by(asc(FoodItem.expiry_date), asc(FoodItem.id))

        try:
            result = await db.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing food items for user %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve food items. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def get_for_user(self, db: AsyncSession, item_id: int, user_id: int) -> Optional[FoodItem]:
        try:
            result = await db.execute(
                select(FoodItem).where(FoodItem.id == item_id, FoodItem.user_id == user_id)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching food item %s: %s", item_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the food item. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def create(self, db: AsyncSession, user_id: int, data: FoodItemBase) -> FoodItem:
        item = FoodItem(
            title=data.title,
            quantity=data.quantity,
            expiry_date=data.expiry_date,
            user_id=user_id,
        )
        db.add(item)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating food item: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the food item. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return item

    async def update(self, db: AsyncSession, item: FoodItem, data: FoodItemBase) -> FoodItem:
        """Replace the editable fields of an already-loaded, already-authorized item."""
        item.title = data.title
        item.quantity = data.quantity
        item.expiry_date = data.expiry_date
        # Set here so the value is loaded on the instance without a refresh.
        item.updated_at = datetime.now(timezone.utc)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating food item %s: %s", item.id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the food item. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return item

    async def delete(self, db: AsyncSession, item: FoodItem) -> None:
        try:
            await db.delete(item)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting food item %s: %s", item.id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the food item. Please try again.",
                context={"error_type": type(e).__name__},
            )


# ── Singleton Instance ────────────────────────────────────────────────────
food_item_repository = FoodItemRepository()

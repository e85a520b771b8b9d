"""
Smart Pantry Backend: Food Item Service (Pantry Usecase)
=========================================================

What:  User-scoped CRUD over food items.
How:   Every lookup goes through FoodItemRepository.get_for_user, so an item
       owned by someone else raises the same NotFoundError as a missing one.
Who:   routes/food_items.py.
"""

import logging
from datetime import timedelta
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from smart_pantry.exceptions import NotFoundError
from smart_pantry.models.food_item import FoodItem
from smart_pantry.repositories.food_item_repository import food_item_repository
from smart_pantry.schemas.food_item import (
    FoodItemCreate,
    FoodItemResponse,
    FoodItemUpdate,
    utc_today,
)

logger = logging.getLogger(__name__)


class FoodItemService:

    async def list_items(
        self,
        db: AsyncSession,
        user_id: int,
        expiring_within_days: Optional[int] = None,
    ) -> List[FoodItemResponse]:
        """
        The user's items, soonest expiry first.

        With `expiring_within_days=N`, only items expiring between today and
        today+N (inclusive) are returned; expired items are excluded.
        """
        today = utc_today()
        if expiring_within_days is None:
            items = await food_item_repository.list_for_user(db, user_id)
        else:
            items = await food_item_repository.list_for_user(
                db,
                user_id,
                expiring_before=today + timedelta(days=expiring_within_days),
                expiring_after=today,
            )
        return [FoodItemResponse.from_model(item, today) for item in items]

    async def get_item(self, db: AsyncSession, user_id: int, item_id: int) -> FoodItemResponse:
        item = await self._get_owned(db, user_id, item_id)
        return FoodItemResponse.from_model(item)

    async def create_item(self, db: AsyncSession, user_id: int, data: FoodItemCreate) -> FoodItemResponse:
        item = await food_item_repository.create(db, user_id, data)
        logger.info("Food item %s created for user %s", item.id, user_id)
        return FoodItemResponse.from_model(item)

    async def update_item(
        self,
        db: AsyncSession,
        user_id: int,
        item_id: int,
        data: FoodItemUpdate,
    ) -> FoodItemResponse:
        item = await self._get_owned(db, user_id, item_id)
        item = await food_item_repository.update(db, item, data)
        logger.info("Food item %s updated", item_id)
        return FoodItemResponse.from_model(item)

    async def delete_item(self, db: AsyncSession, user_id: int, item_id: int) -> None:
        item = await self._get_owned(db, user_id, item_id)
        await food_item_repository.delete(db, item)
        logger.info("Food item %s deleted", item_id)

    async def _get_owned(self, db: AsyncSession, user_id: int, item_id: int) -> FoodItem:
        item = await food_item_repository.get_for_user(db, item_id, user_id)
        if item is None:
            raise NotFoundError(resource="food item", resource_id=str(item_id))
        return item


# ── Singleton Instance ────────────────────────────────────────────────────
food_item_service = FoodItemService()

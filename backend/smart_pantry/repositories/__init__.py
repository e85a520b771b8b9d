"""
Data-access layer: one class per table, one query per method.

Repositories take the request's AsyncSession as their first argument and
only flush; the commit belongs to get_db_session.
"""

from smart_pantry.repositories.food_item_repository import (
    FoodItemRepository,
    food_item_repository,
)
from smart_pantry.repositories.user_repository import UserRepository, user_repository

__all__ = [
    "FoodItemRepository",
    "UserRepository",
    "food_item_repository",
    "user_repository",
]

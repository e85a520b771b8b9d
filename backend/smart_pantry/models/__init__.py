"""
Smart Pantry Backend: ORM Models
================================

Importing this package registers every table on Base.metadata.
"""

from smart_pantry.models.food_item import FoodItem
from smart_pantry.models.user import User

__all__ = ["FoodItem", "User"]

"""
Smart Pantry Backend: Recipe Service (Recipe Suggestion Usecase)
=================================================================

What:  Loads the user's pantry and asks the LLM for a recipe.
Who:   routes/recipes.py.

Outcomes:
    empty pantry        → guidance message, model not called
    blank model output  → "could not generate" message
    model failure       → LLMServiceError / CircuitBreakerOpenError (503)
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from smart_pantry.repositories.food_item_repository import food_item_repository
from smart_pantry.services.gemini_service import gemini_service

logger = logging.getLogger(__name__)

EMPTY_PANTRY_MESSAGE = (
    "No food items registered. Add some items before requesting a recipe."
)
NO_RECIPE_MESSAGE = (
    "Could not generate a recipe. Try again with different food items."
)


class RecipeService:

    async def suggest(self, db: AsyncSession, user_id: int) -> str:
        items = await food_item_repository.list_for_user(db, user_id)
        if not items:
            logger.info("Recipe requested with an empty pantry (user %s)", user_id)
            return EMPTY_PANTRY_MESSAGE

        recipe = await gemini_service.generate_recipe(items)
        if not recipe:
            return NO_RECIPE_MESSAGE
        return recipe


# ── Singleton Instance ────────────────────────────────────────────────────
recipe_service = RecipeService()

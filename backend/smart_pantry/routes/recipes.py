"""
Smart Pantry Backend: Recipe Route Handlers
============================================

What:  GET /api/recipes/suggestions, a JSON array holding one recipe text.
How:   Delegates to RecipeService; Gemini failures surface as 503 through
       the global exception handlers.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from smart_pantry.database import get_db_session
from smart_pantry.routes.dependencies import AuthenticatedUser, get_current_user
from smart_pantry.schemas.common import ErrorResponse
from smart_pantry.services.recipe_service import recipe_service

router = APIRouter(prefix="/api/recipes", tags=["Recipes"])


@router.get(
    "/suggestions",
    response_model=List[str],
    responses={
        401: {"description": "Not authenticated", "model": ErrorResponse},
        503: {"description": "Recipe model unavailable", "model": ErrorResponse},
    },
    summary="Suggest a recipe that uses up soon-to-expire items",
)
async def get_recipe_suggestions(
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[str]:
    return [await recipe_service.suggest(db, user.id)]

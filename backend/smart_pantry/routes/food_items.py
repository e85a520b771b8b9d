"""
Smart Pantry Backend: Food Item Route Handlers
===============================================

What:  CRUD over the authenticated user's food items.
How:   Every handler depends on get_current_user; the user id is passed to
       FoodItemService and is never read from the request body.
Who:   The web frontend's pantry list and item form.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from smart_pantry.database import get_db_session
from smart_pantry.routes.dependencies import AuthenticatedUser, get_current_user
from smart_pantry.schemas.common import ErrorResponse, MessageResponse
from smart_pantry.schemas.food_item import (
    FoodItemCreate,
    FoodItemEnvelope,
    FoodItemListEnvelope,
    FoodItemUpdate,
)
from smart_pantry.services.food_item_service import food_item_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/food-items",
    tags=["Food Items"],
    responses={401: {"description": "Not authenticated", "model": ErrorResponse}},
)

NOT_FOUND = {404: {"description": "No such item for this user", "model": ErrorResponse}}


@router.get(
    "",
    response_model=FoodItemListEnvelope,
    summary="List food items, soonest expiry first",
)
async def list_food_items(
    response: Response,
    expiring_within_days: Optional[int] = Query(
        default=None,
        ge=0,
        le=365,
        description="Only items expiring between today and today + N days (inclusive)",
    ),
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> FoodItemListEnvelope:
    items = await food_item_service.list_items(db, user.id, expiring_within_days)
    response.headers["X-Total-Count"] = str(len(items))
    return FoodItemListEnvelope(data=items)


@router.get(
    "/{item_id}",
    response_model=FoodItemEnvelope,
    response_model_exclude_none=True,
    responses=NOT_FOUND,
    summary="Get one food item",
)
async def get_food_item(
    item_id: int = Path(ge=1),
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> FoodItemEnvelope:
    item = await food_item_service.get_item(db, user.id, item_id)
    return FoodItemEnvelope(data=item)


@router.post(
    "",
    response_model=FoodItemEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Add a food item",
)
async def create_food_item(
    body: FoodItemCreate,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> FoodItemEnvelope:
    item = await food_item_service.create_item(db, user.id, body)
    return FoodItemEnvelope(data=item, message="Food item created successfully")


@router.put(
    "/{item_id}",
    response_model=FoodItemEnvelope,
    responses=NOT_FOUND,
    summary="Replace a food item's title, quantity and expiry date",
)
async def update_food_item(
    body: FoodItemUpdate,
    item_id: int = Path(ge=1),
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> FoodItemEnvelope:
    item = await food_item_service.update_item(db, user.id, item_id, body)
    return FoodItemEnvelope(data=item, message="Food item updated successfully")


@router.delete(
    "/{item_id}",
    response_model=MessageResponse,
    responses=NOT_FOUND,
    summary="Delete a food item",
)
async def delete_food_item(
    item_id: int = Path(ge=1),
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await food_item_service.delete_item(db, user.id, item_id)
    return MessageResponse(message="Food item deleted successfully")

"""Food item routes"""

from typing import List

from fastapi import APIRouter, Depends, Response, status
import logging

from api.dependencies import get_current_user, get_store
from domain.schemas import (
    FoodItemCreate,
    FoodItemResponse,
    FoodItemUpdate,
    UserRecord,
)
from repositories import InventoryStore
from services.inventory_service import InventoryService

router = APIRouter(prefix="/food-items", tags=["Food Items"])
logger = logging.getLogger("freshtrack.api.food_items")


@router.get("", response_model=List[FoodItemResponse])
def list_food_items(
    user: UserRecord = Depends(get_current_user),
    store: InventoryStore = Depends(get_store),
):
    return InventoryService.get_food_items(store, user.id)


@router.post("", response_model=FoodItemResponse, status_code=status.HTTP_201_CREATED)
def create_food_item(
    payload: FoodItemCreate,
    user: UserRecord = Depends(get_current_user),
    store: InventoryStore = Depends(get_store),
):
    return InventoryService.create_food_item(store, user.id, payload)


@router.get("/{item_id}", response_model=FoodItemResponse)
def get_food_item(
    item_id: int,
    user: UserRecord = Depends(get_current_user),
    store: InventoryStore = Depends(get_store),
):
    return InventoryService.get_owned_food_item(store, user.id, item_id)


@router.patch("/{item_id}", response_model=FoodItemResponse)
def update_food_item(
    item_id: int,
    payload: FoodItemUpdate,
    user: UserRecord = Depends(get_current_user),
    store: InventoryStore = Depends(get_store),
):
    """Apply only the fields present in the body"""
    return InventoryService.update_food_item(store, user.id, item_id, payload)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_food_item(
    item_id: int,
    user: UserRecord = Depends(get_current_user),
    store: InventoryStore = Depends(get_store),
):
    InventoryService.delete_food_item(store, user.id, item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

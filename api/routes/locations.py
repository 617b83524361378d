"""Storage location routes"""

from typing import List

from fastapi import APIRouter, Depends, Query, Response, status
import logging

from api.dependencies import get_current_user, get_store
from domain.schemas import (
    LocationCreate,
    LocationResponse,
    LocationUpdate,
    UserRecord,
)
from repositories import InventoryStore
from services.inventory_service import InventoryService

router = APIRouter(prefix="/locations", tags=["Locations"])
logger = logging.getLogger("freshtrack.api.locations")


@router.get("", response_model=List[LocationResponse])
def list_locations(
    user: UserRecord = Depends(get_current_user),
    store: InventoryStore = Depends(get_store),
):
    return InventoryService.get_locations(store, user.id)


@router.post("", response_model=LocationResponse, status_code=status.HTTP_201_CREATED)
def create_location(
    payload: LocationCreate,
    user: UserRecord = Depends(get_current_user),
    store: InventoryStore = Depends(get_store),
):
    return InventoryService.create_location(store, user.id, payload)


@router.patch("/{location_id}", response_model=LocationResponse)
def update_location(
    location_id: int,
    payload: LocationUpdate,
    user: UserRecord = Depends(get_current_user),
    store: InventoryStore = Depends(get_store),
):
    return InventoryService.update_location(store, user.id, location_id, payload)


@router.delete("/{location_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_location(
    location_id: int,
    cascade: bool = Query(
        default=False, description="Also delete the food items stored here"
    ),
    user: UserRecord = Depends(get_current_user),
    store: InventoryStore = Depends(get_store),
):
    """
    Delete a location.

    A location that still holds food items answers 409 unless
    ``cascade=true`` is passed.
    """
    InventoryService.delete_location(store, user.id, location_id, cascade=cascade)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

from typing import List
import logging

from domain.schemas import (
    FoodItemCreate,
    FoodItemResponse,
    FoodItemUpdate,
    LocationCreate,
    LocationResponse,
    LocationUpdate,
)
from repositories import InventoryStore
from app.exceptions import ConflictError, NotFoundError, ServiceValidationError

logger = logging.getLogger("freshtrack.inventory")


class InventoryService:
    """Owner-scoped CRUD for locations and food items.

    Anything owned by another user is reported as missing, never as forbidden,
    so ids of other users' rows are not revealed.
    """

    # ------------------------------------------------------------------ locations

    @staticmethod
    def get_locations(store: InventoryStore, user_id: int) -> List[LocationResponse]:
        return store.list_locations(user_id)

    @staticmethod
    def get_owned_location(
        store: InventoryStore, user_id: int, location_id: int
    ) -> LocationResponse:
        location = store.get_location(location_id)
        if location is None or location.user_id != user_id:
            raise NotFoundError(f"Location {location_id} not found")
        return location

    @staticmethod
    def create_location(
        store: InventoryStore, user_id: int, payload: LocationCreate
    ) -> LocationResponse:
        location = store.create_location(user_id, payload)
        logger.info(f"Created location {location.id} ({location.name}) for user {user_id}")
        return location

    @staticmethod
    def update_location(
        store: InventoryStore, user_id: int, location_id: int, payload: LocationUpdate
    ) -> LocationResponse:
        InventoryService.get_owned_location(store, user_id, location_id)
        return store.update_location(location_id, payload.model_dump(exclude_unset=True))

    @staticmethod
    def delete_location(
        store: InventoryStore, user_id: int, location_id: int, cascade: bool = False
    ) -> int:
        """
        Delete a location owned by the user.

        A location that still holds food items is only deleted with
        ``cascade=True``, which removes those items first.

        Returns:
            Number of food items removed along with the location

        Raises:
            NotFoundError: If the location does not exist for this user
            ConflictError: If items still reference it and cascade is off
        """
        InventoryService.get_owned_location(store, user_id, location_id)
        held = store.list_food_items_by_location(location_id)
        if held and not cascade:
            raise ConflictError(
                f"Location {location_id} still holds {len(held)} food item(s)",
                details={"location_id": location_id, "food_items": len(held)},
                code="LOCATION_NOT_EMPTY",
            )

        removed = store.delete_food_items_by_location(location_id) if held else 0
        store.delete_location(location_id)
        logger.info(
            f"Deleted location {location_id} for user {user_id} "
            f"(removed {removed} food items)"
        )
        return removed

    @staticmethod
    def require_location(
        store: InventoryStore, user_id: int, location_id: int
    ) -> LocationResponse:
        """Validate a locationId carried in a payload (400, not 404)"""
        try:
            return InventoryService.get_owned_location(store, user_id, location_id)
        except NotFoundError:
            raise ServiceValidationError(
                f"Unknown location {location_id}",
                details={"field": "locationId", "value": location_id},
            )

    # ------------------------------------------------------------------ food items

    @staticmethod
    def get_food_items(store: InventoryStore, user_id: int) -> List[FoodItemResponse]:
        return store.list_food_items(user_id)

    @staticmethod
    def get_owned_food_item(
        store: InventoryStore, user_id: int, item_id: int
    ) -> FoodItemResponse:
        item = store.get_food_item(item_id)
        if item is None or item.user_id != user_id:
            raise NotFoundError(f"Food item {item_id} not found")
        return item

    @staticmethod
    def create_food_item(
        store: InventoryStore, user_id: int, payload: FoodItemCreate
    ) -> FoodItemResponse:
        InventoryService.require_location(store, user_id, payload.location_id)
        item = store.create_food_item(user_id, payload)
        logger.info(
            f"Created food item {item.id} ({item.name}) at location "
            f"{item.location_id} for user {user_id}"
        )
        return item

    @staticmethod
    def update_food_item(
        store: InventoryStore, user_id: int, item_id: int, payload: FoodItemUpdate
    ) -> FoodItemResponse:
        InventoryService.get_owned_food_item(store, user_id, item_id)
        changes = payload.model_dump(exclude_unset=True)
        if "location_id" in changes:
            InventoryService.require_location(store, user_id, changes["location_id"])
        return store.update_food_item(item_id, changes)

    @staticmethod
    def delete_food_item(store: InventoryStore, user_id: int, item_id: int) -> None:
        InventoryService.get_owned_food_item(store, user_id, item_id)
        store.delete_food_item(item_id)
        logger.info(f"Deleted food item {item_id} for user {user_id}")

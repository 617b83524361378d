"""
Entity store contract.

Every backend (in-process or relational) implements the same operations and
returns the same pydantic records, so services and routes never know which
one they are talking to.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, List, Mapping, Optional, Sequence

from domain.schemas import (
    FoodItemCreate,
    FoodItemResponse,
    LocationCreate,
    LocationResponse,
    SessionRecord,
    UserRecord,
)


class InventoryStore(ABC):
    """Uniform CRUD over users, locations, food items and login sessions.

    ``update_*``/``delete_*`` raise NotFoundError for unknown ids. Ids are
    integers assigned per entity type in increasing order.
    """

    # ------------------------------------------------------------------ lifecycle

    def init(self) -> None:
        """Prepare the backend (create schema, verify connectivity)."""

    def close(self) -> None:
        """Release backend resources."""

    # ------------------------------------------------------------------ users

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[UserRecord]: ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[UserRecord]: ...

    @abstractmethod
    def create_user(self, username: str, password_hash: str) -> UserRecord:
        """Create a user; raises ConflictError when the username is taken."""

    # ------------------------------------------------------------------ sessions

    @abstractmethod
    def create_session(
        self, token: str, user_id: int, expires_at: datetime
    ) -> SessionRecord: ...

    @abstractmethod
    def get_session(self, token: str) -> Optional[SessionRecord]: ...

    @abstractmethod
    def delete_session(self, token: str) -> bool: ...

    # ------------------------------------------------------------------ locations

    @abstractmethod
    def list_locations(self, user_id: int) -> List[LocationResponse]: ...

    @abstractmethod
    def get_location(self, location_id: int) -> Optional[LocationResponse]: ...

    @abstractmethod
    def create_location(
        self, user_id: int, payload: LocationCreate
    ) -> LocationResponse: ...

    @abstractmethod
    def update_location(
        self, location_id: int, changes: Mapping[str, Any]
    ) -> LocationResponse: ...

    @abstractmethod
    def delete_location(self, location_id: int) -> None: ...

    # ------------------------------------------------------------------ food items

    @abstractmethod
    def list_food_items(self, user_id: int) -> List[FoodItemResponse]: ...

    @abstractmethod
    def list_food_items_by_location(
        self, location_id: int
    ) -> List[FoodItemResponse]: ...

    @abstractmethod
    def get_food_item(self, item_id: int) -> Optional[FoodItemResponse]: ...

    @abstractmethod
    def create_food_item(
        self,
        user_id: int,
        payload: FoodItemCreate,
        purchased: Optional[datetime] = None,
    ) -> FoodItemResponse:
        """Create an item; ``purchased`` defaults to now and never changes afterwards."""

    @abstractmethod
    def create_food_items(
        self,
        user_id: int,
        payloads: Sequence[FoodItemCreate],
        purchased: Optional[datetime] = None,
    ) -> List[FoodItemResponse]:
        """Create several items in one transaction: all of them or none."""

    @abstractmethod
    def update_food_item(
        self, item_id: int, changes: Mapping[str, Any]
    ) -> FoodItemResponse: ...

    @abstractmethod
    def delete_food_item(self, item_id: int) -> None: ...

    @abstractmethod
    def delete_food_items_by_location(self, location_id: int) -> int: ...

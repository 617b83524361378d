"""
Ephemeral in-process entity store.

State lives for the lifetime of the process; ids restart at 1 on every boot.
"""

import itertools
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence

from app.exceptions import ConflictError, NotFoundError
from domain.schemas import (
    FoodItemCreate,
    FoodItemResponse,
    LocationCreate,
    LocationResponse,
    SessionRecord,
    UserRecord,
)
from repositories.store import InventoryStore


class MemoryStore(InventoryStore):
    """Dict-backed store with one lock around every operation"""

    def __init__(self):
        self._lock = threading.RLock()
        self._users: Dict[int, UserRecord] = {}
        self._sessions: Dict[str, SessionRecord] = {}
        self._locations: Dict[int, LocationResponse] = {}
        self._food_items: Dict[int, FoodItemResponse] = {}
        self._user_ids = itertools.count(1)
        self._location_ids = itertools.count(1)
        self._food_item_ids = itertools.count(1)

    # ------------------------------------------------------------------ users

    def get_user(self, user_id: int) -> Optional[UserRecord]:
        with self._lock:
            return self._users.get(user_id)

    def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        with self._lock:
            return next(
                (u for u in self._users.values() if u.username == username), None
            )

    def create_user(self, username: str, password_hash: str) -> UserRecord:
        with self._lock:
            if self.get_user_by_username(username) is not None:
                raise ConflictError(f"Username {username} already exists")
            user = UserRecord(
                id=next(self._user_ids), username=username, password_hash=password_hash
            )
            self._users[user.id] = user
            return user

    # ------------------------------------------------------------------ sessions

    def create_session(
        self, token: str, user_id: int, expires_at: datetime
    ) -> SessionRecord:
        with self._lock:
            record = SessionRecord(token=token, user_id=user_id, expires_at=expires_at)
            self._sessions[token] = record
            return record

    def get_session(self, token: str) -> Optional[SessionRecord]:
        with self._lock:
            return self._sessions.get(token)

    def delete_session(self, token: str) -> bool:
        with self._lock:
            return self._sessions.pop(token, None) is not None

    # ------------------------------------------------------------------ locations

    def list_locations(self, user_id: int) -> List[LocationResponse]:
        with self._lock:
            return [loc for loc in self._locations.values() if loc.user_id == user_id]

    def get_location(self, location_id: int) -> Optional[LocationResponse]:
        with self._lock:
            return self._locations.get(location_id)

    def create_location(
        self, user_id: int, payload: LocationCreate
    ) -> LocationResponse:
        with self._lock:
            location = LocationResponse(
                id=next(self._location_ids),
                name=payload.name,
                type=payload.type,
                user_id=user_id,
            )
            self._locations[location.id] = location
            return location

    def update_location(
        self, location_id: int, changes: Mapping[str, Any]
    ) -> LocationResponse:
        with self._lock:
            current = self._locations.get(location_id)
            if current is None:
                raise NotFoundError(f"Location {location_id} not found")
            updated = LocationResponse.model_validate(
                {**current.model_dump(), **changes}
            )
            self._locations[location_id] = updated
            return updated

    def delete_location(self, location_id: int) -> None:
        with self._lock:
            if self._locations.pop(location_id, None) is None:
                raise NotFoundError(f"Location {location_id} not found")

    # ------------------------------------------------------------------ food items

    def list_food_items(self, user_id: int) -> List[FoodItemResponse]:
        with self._lock:
            return [i for i in self._food_items.values() if i.user_id == user_id]

    def list_food_items_by_location(
        self, location_id: int
    ) -> List[FoodItemResponse]:
        with self._lock:
            return [
                i for i in self._food_items.values() if i.location_id == location_id
            ]

    def get_food_item(self, item_id: int) -> Optional[FoodItemResponse]:
        with self._lock:
            return self._food_items.get(item_id)

    def _build_item(
        self, user_id: int, payload: FoodItemCreate, purchased: datetime
    ) -> FoodItemResponse:
        return FoodItemResponse(
            id=next(self._food_item_ids),
            purchased=purchased,
            user_id=user_id,
            **payload.model_dump(),
        )

    def create_food_item(
        self,
        user_id: int,
        payload: FoodItemCreate,
        purchased: Optional[datetime] = None,
    ) -> FoodItemResponse:
        with self._lock:
            item = self._build_item(
                user_id, payload, purchased or datetime.now(timezone.utc)
            )
            self._food_items[item.id] = item
            return item

    def create_food_items(
        self,
        user_id: int,
        payloads: Sequence[FoodItemCreate],
        purchased: Optional[datetime] = None,
    ) -> List[FoodItemResponse]:
        purchased = purchased or datetime.now(timezone.utc)
        with self._lock:
            # build everything before publishing so a failure leaves no partial batch
            items = [self._build_item(user_id, p, purchased) for p in payloads]
            for item in items:
                self._food_items[item.id] = item
            return items

    def update_food_item(
        self, item_id: int, changes: Mapping[str, Any]
    ) -> FoodItemResponse:
        with self._lock:
            current = self._food_items.get(item_id)
            if current is None:
                raise NotFoundError(f"Food item {item_id} not found")
            updated = FoodItemResponse.model_validate(
                {**current.model_dump(), **changes}
            )
            self._food_items[item_id] = updated
            return updated

    def delete_food_item(self, item_id: int) -> None:
        with self._lock:
            if self._food_items.pop(item_id, None) is None:
                raise NotFoundError(f"Food item {item_id} not found")

    def delete_food_items_by_location(self, location_id: int) -> int:
        with self._lock:
            doomed = [
                i.id for i in self._food_items.values() if i.location_id == location_id
            ]
            for item_id in doomed:
                del self._food_items[item_id]
            return len(doomed)

"""
Durable entity store backed by SQLAlchemy (SQLite or PostgreSQL).
"""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator, List, Mapping, Optional, Sequence

from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app.exceptions import NotFoundError, PersistenceError
from domain.models import (
    AppUser,
    create_db_engine,
    create_session_factory,
    init_database,
)
from domain.schemas import (
    FoodItemCreate,
    FoodItemResponse,
    LocationCreate,
    LocationResponse,
    SessionRecord,
    UserRecord,
)
from repositories.store import InventoryStore
from repositories.user_repository import UserRepository, SessionRepository
from repositories.location_repository import LocationRepository
from repositories.food_item_repository import FoodItemRepository

logger = logging.getLogger("freshtrack.store.sql")


def _user_record(user: AppUser) -> UserRecord:
    return UserRecord(id=user.id, username=user.username, password_hash=user.password)


class SqlAlchemyStore(InventoryStore):
    """Entity store persisted in a relational database.

    One SQLAlchemy session per operation; the engine's connection pool is the
    only long-lived resource and is released by ``close()``.
    """

    def __init__(
        self,
        database_url: Optional[str] = None,
        echo: bool = False,
        engine: Optional[Engine] = None,
    ):
        if engine is None and database_url is None:
            raise ValueError("SqlAlchemyStore needs a database_url or an engine")
        self.engine = engine or create_db_engine(database_url, echo=echo)
        self.SessionLocal = create_session_factory(self.engine)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self.SessionLocal()
        try:
            yield db
        except OperationalError as exc:
            db.rollback()
            logger.error("Database unavailable: %s", exc)
            raise PersistenceError("Storage unavailable") from exc
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def init(self) -> None:
        try:
            init_database(self.engine)
        except OperationalError as exc:
            raise PersistenceError(f"Could not initialize database: {exc}") from exc

    def close(self) -> None:
        self.engine.dispose()
        logger.info("Database engine disposed")

    # ------------------------------------------------------------------ users

    def get_user(self, user_id: int) -> Optional[UserRecord]:
        with self._session() as db:
            user = UserRepository(db).get_by_id(user_id)
            return _user_record(user) if user else None

    def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        with self._session() as db:
            user = UserRepository(db).get_by_username(username)
            return _user_record(user) if user else None

    def create_user(self, username: str, password_hash: str) -> UserRecord:
        with self._session() as db:
            return _user_record(UserRepository(db).create_user(username, password_hash))

    # ------------------------------------------------------------------ sessions

    def create_session(
        self, token: str, user_id: int, expires_at: datetime
    ) -> SessionRecord:
        with self._session() as db:
            row = SessionRepository(db).create_session(token, user_id, expires_at)
            return SessionRecord.model_validate(row)

    def get_session(self, token: str) -> Optional[SessionRecord]:
        with self._session() as db:
            row = SessionRepository(db).get_by_id(token)
            return SessionRecord.model_validate(row) if row else None

    def delete_session(self, token: str) -> bool:
        with self._session() as db:
            return SessionRepository(db).delete(token)

    # ------------------------------------------------------------------ locations

    def list_locations(self, user_id: int) -> List[LocationResponse]:
        with self._session() as db:
            rows = LocationRepository(db).get_by_user_id(user_id)
            return [LocationResponse.model_validate(r) for r in rows]

    def get_location(self, location_id: int) -> Optional[LocationResponse]:
        with self._session() as db:
            row = LocationRepository(db).get_by_id(location_id)
            return LocationResponse.model_validate(row) if row else None

    def create_location(
        self, user_id: int, payload: LocationCreate
    ) -> LocationResponse:
        with self._session() as db:
            row = LocationRepository(db).create_location(user_id, payload)
            return LocationResponse.model_validate(row)

    def update_location(
        self, location_id: int, changes: Mapping[str, Any]
    ) -> LocationResponse:
        with self._session() as db:
            repo = LocationRepository(db)
            row = repo.get_by_id(location_id)
            if row is None:
                raise NotFoundError(f"Location {location_id} not found")
            return LocationResponse.model_validate(repo.update(row, changes))

    def delete_location(self, location_id: int) -> None:
        with self._session() as db:
            if not LocationRepository(db).delete(location_id):
                raise NotFoundError(f"Location {location_id} not found")

    # ------------------------------------------------------------------ food items

    def list_food_items(self, user_id: int) -> List[FoodItemResponse]:
        with self._session() as db:
            rows = FoodItemRepository(db).get_by_user_id(user_id)
            return [FoodItemResponse.model_validate(r) for r in rows]

    def list_food_items_by_location(
        self, location_id: int
    ) -> List[FoodItemResponse]:
        with self._session() as db:
            rows = FoodItemRepository(db).get_by_location_id(location_id)
            return [FoodItemResponse.model_validate(r) for r in rows]

    def get_food_item(self, item_id: int) -> Optional[FoodItemResponse]:
        with self._session() as db:
            row = FoodItemRepository(db).get_by_id(item_id)
            return FoodItemResponse.model_validate(row) if row else None

    def create_food_item(
        self,
        user_id: int,
        payload: FoodItemCreate,
        purchased: Optional[datetime] = None,
    ) -> FoodItemResponse:
        with self._session() as db:
            row = FoodItemRepository(db).create_item(
                user_id, payload, purchased or datetime.now(timezone.utc)
            )
            return FoodItemResponse.model_validate(row)

    def create_food_items(
        self,
        user_id: int,
        payloads: Sequence[FoodItemCreate],
        purchased: Optional[datetime] = None,
    ) -> List[FoodItemResponse]:
        purchased = purchased or datetime.now(timezone.utc)
        with self._session() as db:
            repo = FoodItemRepository(db)
            rows = [
                repo.create_item(user_id, p, purchased, commit=False) for p in payloads
            ]
            db.commit()
            for row in rows:
                db.refresh(row)
            return [FoodItemResponse.model_validate(r) for r in rows]

    def update_food_item(
        self, item_id: int, changes: Mapping[str, Any]
    ) -> FoodItemResponse:
        with self._session() as db:
            repo = FoodItemRepository(db)
            row = repo.get_by_id(item_id)
            if row is None:
                raise NotFoundError(f"Food item {item_id} not found")
            return FoodItemResponse.model_validate(repo.update(row, changes))

    def delete_food_item(self, item_id: int) -> None:
        with self._session() as db:
            if not FoodItemRepository(db).delete(item_id):
                raise NotFoundError(f"Food item {item_id} not found")

    def delete_food_items_by_location(self, location_id: int) -> int:
        with self._session() as db:
            return FoodItemRepository(db).delete_by_location_id(location_id)

"""
Repositories package - Data access layer.
"""

from repositories.base import BaseRepository
from repositories.store import InventoryStore
from repositories.user_repository import UserRepository, SessionRepository
from repositories.location_repository import LocationRepository
from repositories.food_item_repository import FoodItemRepository
from repositories.memory_store import MemoryStore
from repositories.sql_store import SqlAlchemyStore

__all__ = [
    "BaseRepository",
    "InventoryStore",
    "UserRepository",
    "SessionRepository",
    "LocationRepository",
    "FoodItemRepository",
    "MemoryStore",
    "SqlAlchemyStore",
]

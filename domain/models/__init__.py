"""
Domain models package - SQLAlchemy ORM models.
"""

from domain.models.database import (
    Base,
    create_db_engine,
    create_session_factory,
    init_database,
)
from domain.models.user import AppUser, UserSession
from domain.models.location import Location
from domain.models.food_item import FoodItem

__all__ = [
    # Database
    "Base",
    "create_db_engine",
    "create_session_factory",
    "init_database",
    # User models
    "AppUser",
    "UserSession",
    # Inventory models
    "Location",
    "FoodItem",
]

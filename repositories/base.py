"""
Base repository interface for data access layer.
This follows the Repository pattern to separate business logic from data access.
"""

from enum import Enum
from typing import Any, Generic, List, Mapping, Optional, Type, TypeVar
from sqlalchemy.orm import Session
from abc import ABC

ModelType = TypeVar("ModelType")


def column_value(value: Any) -> Any:
    """Enum members are stored as their plain value"""
    return value.value if isinstance(value, Enum) else value


class BaseRepository(Generic[ModelType], ABC):
    """
    Base repository providing common CRUD operations.
    All repositories should inherit from this class.
    """

    def __init__(self, db: Session, model: Type[ModelType]):
        self.db = db
        self.model = model

    def get_by_id(self, entity_id: int) -> Optional[ModelType]:
        """Get entity by primary key"""
        return self.db.get(self.model, entity_id)

    def get_by_user_id(self, user_id: int) -> List[ModelType]:
        """Get all entities owned by a user, oldest first"""
        return (
            self.db.query(self.model)
            .filter(self.model.user_id == user_id)
            .order_by(self.model.id)
            .all()
        )

    def create(self, entity: ModelType, commit: bool = True) -> ModelType:
        """Create new entity"""
        self.db.add(entity)
        if commit:
            self.db.commit()
            self.db.refresh(entity)
        else:
            self.db.flush()
        return entity

    def update(self, entity: ModelType, changes: Mapping[str, Any]) -> ModelType:
        """Apply a partial update to an existing entity"""
        for key, value in changes.items():
            setattr(entity, key, column_value(value))
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def delete(self, entity_id: int) -> bool:
        """Delete entity by ID"""
        entity = self.get_by_id(entity_id)
        if entity:
            self.db.delete(entity)
            self.db.commit()
            return True
        return False

"""
Food Item Repository - Data access layer for inventory items
"""

from datetime import datetime
from typing import List
from sqlalchemy.orm import Session

from repositories.base import BaseRepository, column_value
from domain.models import FoodItem
from domain.schemas import FoodItemCreate


class FoodItemRepository(BaseRepository[FoodItem]):
    """Repository for food item data access"""

    def __init__(self, db: Session):
        super().__init__(db, FoodItem)

    def get_by_location_id(self, location_id: int) -> List[FoodItem]:
        """Get all food items stored at a location"""
        return (
            self.db.query(FoodItem)
            .filter(FoodItem.location_id == location_id)
            .order_by(FoodItem.id)
            .all()
        )

    def create_item(
        self,
        user_id: int,
        payload: FoodItemCreate,
        purchased: datetime,
        commit: bool = True,
    ) -> FoodItem:
        item = FoodItem(
            name=payload.name,
            quantity=payload.quantity,
            unit=column_value(payload.unit),
            location_id=payload.location_id,
            expiry_date=payload.expiry_date,
            price=payload.price,
            purchased=purchased,
            user_id=user_id,
        )
        return self.create(item, commit=commit)

    def delete_by_location_id(self, location_id: int) -> int:
        """Delete all food items stored at a location"""
        count = (
            self.db.query(FoodItem)
            .filter(FoodItem.location_id == location_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return count

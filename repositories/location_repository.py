"""
Location Repository - Data access layer for storage locations
"""

from sqlalchemy.orm import Session

from repositories.base import BaseRepository, column_value
from domain.models import Location
from domain.schemas import LocationCreate


class LocationRepository(BaseRepository[Location]):
    """Repository for location data access"""

    def __init__(self, db: Session):
        super().__init__(db, Location)

    def create_location(self, user_id: int, payload: LocationCreate) -> Location:
        location = Location(
            name=payload.name, type=column_value(payload.type), user_id=user_id
        )
        return self.create(location)

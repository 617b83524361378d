"""
Storage location model.
"""

from sqlalchemy import Column, Integer, Text, Index

from domain.models.database import Base


class Location(Base):
    """Named place food items are kept (fridge at home, office pantry, ...)"""

    __tablename__ = "locations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    type = Column(Text, nullable=False)  # home, office, storage, other
    user_id = Column(Integer, nullable=False)

    __table_args__ = (
        Index("ix_locations_user_id", "user_id"),
        {"sqlite_autoincrement": True},
    )

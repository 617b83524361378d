"""
Food item inventory model.
"""

from sqlalchemy import (
    Column,
    Integer,
    Text,
    Date,
    TIMESTAMP,
    CheckConstraint,
    Index,
)

from domain.models.database import Base


class FoodItem(Base):
    """A perishable item held at a location"""

    __tablename__ = "food_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    quantity = Column(Integer, nullable=False)
    unit = Column(Text, nullable=False)  # pieces, g, kg, ml, l
    location_id = Column(Integer, nullable=False)
    expiry_date = Column(Date, nullable=False)
    price = Column(Integer)  # in cents
    purchased = Column(TIMESTAMP(timezone=True), nullable=False)
    user_id = Column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_food_item_quantity_nonneg"),
        CheckConstraint("price IS NULL OR price >= 0", name="ck_food_item_price_nonneg"),
        Index("ix_food_items_user_id", "user_id"),
        Index("ix_food_items_location_id", "location_id"),
        {"sqlite_autoincrement": True},
    )

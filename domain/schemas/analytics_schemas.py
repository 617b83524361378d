"""Schemas for read-only inventory projections"""

from typing import List

from pydantic import Field

from domain.schemas.base import CamelModel
from domain.schemas.inventory_schemas import FoodItemView


class ValueAtRisk(CamelModel):
    expired_cents: int = 0
    expiring_soon_cents: int = 0
    expired: float = Field(0.0, description="Display currency units")
    expiring_soon: float = Field(0.0, description="Display currency units")


class LocationUtilization(CamelModel):
    location_id: int
    name: str
    items: int
    value: float = Field(..., description="Display currency units")
    value_cents: int


class TopValueItem(CamelModel):
    id: int
    name: str
    value: float = Field(..., description="Display currency units")
    value_cents: int


class AnalyticsSummary(CamelModel):
    total_value_cents: int
    total_value: float
    value_at_risk: ValueAtRisk
    storage_utilization: List[LocationUtilization]
    top_items: List[TopValueItem]


class DashboardResponse(CamelModel):
    expiring_soon: List[FoodItemView]
    items_by_location: List[LocationUtilization]


class ShoppingListResponse(CamelModel):
    expired: List[FoodItemView]
    low_quantity: List[FoodItemView]

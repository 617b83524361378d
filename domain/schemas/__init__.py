"""
Domain schemas package - Pydantic models for validation.
"""

from domain.schemas.inventory_schemas import (
    UserRecord,
    UserResponse,
    SessionRecord,
    LocationCreate,
    LocationUpdate,
    LocationResponse,
    FoodItemCreate,
    FoodItemUpdate,
    FoodItemResponse,
    FoodItemView,
)
from domain.schemas.receipt_schemas import (
    CandidateItem,
    ExtractionResult,
    ReconcileRequest,
    ReconcileFailure,
    ReconcileResult,
)
from domain.schemas.analytics_schemas import (
    ValueAtRisk,
    LocationUtilization,
    TopValueItem,
    AnalyticsSummary,
    DashboardResponse,
    ShoppingListResponse,
)
from domain.schemas.auth_schemas import Credentials

__all__ = [
    # Inventory schemas
    "UserRecord",
    "UserResponse",
    "SessionRecord",
    "LocationCreate",
    "LocationUpdate",
    "LocationResponse",
    "FoodItemCreate",
    "FoodItemUpdate",
    "FoodItemResponse",
    "FoodItemView",
    # Receipt schemas
    "CandidateItem",
    "ExtractionResult",
    "ReconcileRequest",
    "ReconcileFailure",
    "ReconcileResult",
    # Analytics schemas
    "ValueAtRisk",
    "LocationUtilization",
    "TopValueItem",
    "AnalyticsSummary",
    "DashboardResponse",
    "ShoppingListResponse",
    # Auth schemas
    "Credentials",
]

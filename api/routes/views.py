"""Read-only dashboard, shopping list and analytics routes"""

from fastapi import APIRouter, Depends
import logging

from api.dependencies import get_current_user, get_settings, get_store
from app.config import Settings
from domain.schemas import (
    AnalyticsSummary,
    DashboardResponse,
    ShoppingListResponse,
    UserRecord,
)
from repositories import InventoryStore
from services.analytics_service import AnalyticsService
from services.expiry_service import ExpiryService

router = APIRouter(tags=["Views"])
logger = logging.getLogger("freshtrack.api.views")


@router.get("/dashboard/expiring", response_model=DashboardResponse)
def dashboard(
    user: UserRecord = Depends(get_current_user),
    store: InventoryStore = Depends(get_store),
):
    """Items expiring within a week plus per-location counts"""
    items = store.list_food_items(user.id)
    locations = store.list_locations(user.id)
    return DashboardResponse(
        expiring_soon=ExpiryService.expiring_soon(items),
        items_by_location=AnalyticsService.location_utilization(items, locations),
    )


@router.get("/shopping-list", response_model=ShoppingListResponse)
def shopping_list(
    user: UserRecord = Depends(get_current_user),
    store: InventoryStore = Depends(get_store),
    app_settings: Settings = Depends(get_settings),
):
    return ExpiryService.shopping_list(
        store.list_food_items(user.id),
        low_stock_threshold=app_settings.low_stock_threshold,
    )


@router.get("/analytics/summary", response_model=AnalyticsSummary)
def analytics_summary(
    user: UserRecord = Depends(get_current_user),
    store: InventoryStore = Depends(get_store),
    app_settings: Settings = Depends(get_settings),
):
    return AnalyticsService.summary(
        store.list_food_items(user.id),
        store.list_locations(user.id),
        top_limit=app_settings.top_value_limit,
    )

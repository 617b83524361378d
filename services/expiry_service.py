"""
Expiry Service - Freshness tiers for food items.

All freshness-driven views (dashboard, shopping list, analytics) classify
items through ``classify`` so the tier thresholds live in one place.
"""

from datetime import date, datetime, timezone
from typing import Iterable, List, Optional, Union
import logging

from domain.enums import FreshnessTier
from domain.schemas import FoodItemResponse, FoodItemView, ShoppingListResponse

logger = logging.getLogger("freshtrack.expiry")

CRITICAL_MAX_DAYS = 3
WARNING_MAX_DAYS = 7

DateLike = Union[date, datetime]


def _as_date(value: DateLike) -> date:
    return value.date() if isinstance(value, datetime) else value


def utc_today() -> date:
    """Current calendar day on the UTC clock, shared with reconciliation"""
    return datetime.now(timezone.utc).date()


def days_until_expiry(expiry_date: DateLike, today: Optional[DateLike] = None) -> int:
    """Whole calendar days from ``today`` to ``expiry_date`` (negative once past)."""
    today = _as_date(today) if today is not None else utc_today()
    return (_as_date(expiry_date) - today).days


def classify(expiry_date: DateLike, today: Optional[DateLike] = None) -> FreshnessTier:
    """
    Map an expiry date to a freshness tier.

    - days < 0  -> expired
    - 0..3      -> critical (an item expiring today is critical, not expired)
    - 4..7      -> warning
    - > 7       -> good
    """
    days = days_until_expiry(expiry_date, today)
    if days < 0:
        return FreshnessTier.EXPIRED
    if days <= CRITICAL_MAX_DAYS:
        return FreshnessTier.CRITICAL
    if days <= WARNING_MAX_DAYS:
        return FreshnessTier.WARNING
    return FreshnessTier.GOOD


class ExpiryService:
    @staticmethod
    def annotate(
        items: Iterable[FoodItemResponse], today: Optional[date] = None
    ) -> List[FoodItemView]:
        """Attach days-until-expiry and freshness tier to each item"""
        today = today or utc_today()
        return [
            FoodItemView(
                **item.model_dump(),
                days_until_expiry=days_until_expiry(item.expiry_date, today),
                status=classify(item.expiry_date, today),
            )
            for item in items
        ]

    @staticmethod
    def expiring_soon(
        items: Iterable[FoodItemResponse], today: Optional[date] = None
    ) -> List[FoodItemView]:
        """
        Items in the critical or warning tier, soonest expiry first.

        Already-expired items are left out; they show up on the shopping list.
        """
        views = [
            v
            for v in ExpiryService.annotate(items, today)
            if v.status in (FreshnessTier.CRITICAL, FreshnessTier.WARNING)
        ]
        views.sort(key=lambda v: v.expiry_date)
        return views

    @staticmethod
    def expired(
        items: Iterable[FoodItemResponse], today: Optional[date] = None
    ) -> List[FoodItemView]:
        return [
            v
            for v in ExpiryService.annotate(items, today)
            if v.status == FreshnessTier.EXPIRED
        ]

    @staticmethod
    def low_quantity(
        items: Iterable[FoodItemResponse],
        threshold: int = 1,
        today: Optional[date] = None,
    ) -> List[FoodItemView]:
        return [
            v for v in ExpiryService.annotate(items, today) if v.quantity <= threshold
        ]

    @staticmethod
    def shopping_list(
        items: Iterable[FoodItemResponse],
        today: Optional[date] = None,
        low_stock_threshold: int = 1,
    ) -> ShoppingListResponse:
        """Expired items to replace and items running low"""
        items = list(items)
        return ShoppingListResponse(
            expired=ExpiryService.expired(items, today),
            low_quantity=ExpiryService.low_quantity(items, low_stock_threshold, today),
        )

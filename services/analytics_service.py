from typing import Iterable, List, Optional
from datetime import date
import logging

from domain.enums import FreshnessTier
from domain.schemas import (
    AnalyticsSummary,
    FoodItemResponse,
    LocationResponse,
    LocationUtilization,
    TopValueItem,
    ValueAtRisk,
)
from services.expiry_service import classify

logger = logging.getLogger("freshtrack.analytics")

CENTS_PER_UNIT = 100


def item_value(item: FoodItemResponse) -> int:
    """Price times quantity in cents; unpriced items are worth nothing"""
    return (item.price or 0) * item.quantity


def to_display(cents: int) -> float:
    return round(cents / CENTS_PER_UNIT, 2)


class AnalyticsService:
    """Read-only projections over one owner's current items and locations."""

    @staticmethod
    def total_value(items: Iterable[FoodItemResponse]) -> int:
        return sum(item_value(i) for i in items)

    @staticmethod
    def value_at_risk(
        items: Iterable[FoodItemResponse], today: Optional[date] = None
    ) -> ValueAtRisk:
        """
        Value of expired items and of items expiring within the warning horizon.

        Critical and warning items are both counted as "expiring soon"; good
        items are excluded.
        """
        expired = 0
        expiring_soon = 0
        for item in items:
            tier = classify(item.expiry_date, today)
            if tier == FreshnessTier.EXPIRED:
                expired += item_value(item)
            elif tier in (FreshnessTier.CRITICAL, FreshnessTier.WARNING):
                expiring_soon += item_value(item)

        return ValueAtRisk(
            expired_cents=expired,
            expiring_soon_cents=expiring_soon,
            expired=to_display(expired),
            expiring_soon=to_display(expiring_soon),
        )

    @staticmethod
    def location_utilization(
        items: Iterable[FoodItemResponse], locations: Iterable[LocationResponse]
    ) -> List[LocationUtilization]:
        """Item count and value per location, empty locations included"""
        items = list(items)
        result = []
        for location in locations:
            held = [i for i in items if i.location_id == location.id]
            cents = sum(item_value(i) for i in held)
            result.append(
                LocationUtilization(
                    location_id=location.id,
                    name=location.name,
                    items=len(held),
                    value=to_display(cents),
                    value_cents=cents,
                )
            )
        return result

    @staticmethod
    def top_value_items(
        items: Iterable[FoodItemResponse], limit: int = 5
    ) -> List[TopValueItem]:
        # sorted() is stable, so equal values keep collection order
        valued = [(item_value(i), i) for i in items if item_value(i) > 0]
        ranked = sorted(valued, key=lambda pair: pair[0], reverse=True)[:limit]
        return [
            TopValueItem(id=i.id, name=i.name, value=to_display(v), value_cents=v)
            for v, i in ranked
        ]

    @staticmethod
    def summary(
        items: Iterable[FoodItemResponse],
        locations: Iterable[LocationResponse],
        today: Optional[date] = None,
        top_limit: int = 5,
    ) -> AnalyticsSummary:
        items = list(items)
        total = AnalyticsService.total_value(items)
        logger.debug("Computed analytics over %d items (total=%d cents)", len(items), total)
        return AnalyticsSummary(
            total_value_cents=total,
            total_value=to_display(total),
            value_at_risk=AnalyticsService.value_at_risk(items, today),
            storage_utilization=AnalyticsService.location_utilization(items, locations),
            top_items=AnalyticsService.top_value_items(items, top_limit),
        )

"""
Freshness tier tests.

Covers the classify boundaries and the views built on top of it
(expiring soon, shopping list, annotation).
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from domain.enums import FreshnessTier
from domain.schemas import FoodItemResponse
from services.expiry_service import ExpiryService, classify, days_until_expiry

from test_constants import FIXED_TODAY


def item(item_id: int, days: int, quantity: int = 2, name: str = None) -> FoodItemResponse:
    return FoodItemResponse(
        id=item_id,
        name=name or f"item-{item_id}",
        quantity=quantity,
        unit="pieces",
        location_id=1,
        expiry_date=FIXED_TODAY + timedelta(days=days),
        price=100,
        purchased=datetime(2024, 3, 1, tzinfo=timezone.utc),
        user_id=1,
    )


@pytest.mark.parametrize(
    "days,tier",
    [
        (-30, FreshnessTier.EXPIRED),
        (-1, FreshnessTier.EXPIRED),
        (0, FreshnessTier.CRITICAL),
        (3, FreshnessTier.CRITICAL),
        (4, FreshnessTier.WARNING),
        (7, FreshnessTier.WARNING),
        (8, FreshnessTier.GOOD),
        (365, FreshnessTier.GOOD),
    ],
)
def test_classify_boundaries(days, tier):
    assert classify(FIXED_TODAY + timedelta(days=days), FIXED_TODAY) == tier


def test_item_expiring_today_is_critical_not_expired():
    assert classify(FIXED_TODAY, FIXED_TODAY) == FreshnessTier.CRITICAL


def test_classify_ignores_time_of_day():
    """A datetime late in the evening still counts as that calendar day"""
    late = datetime(2024, 3, 10, 23, 59)
    assert days_until_expiry(late, FIXED_TODAY) == 0
    assert classify(date(2024, 3, 9), datetime(2024, 3, 10, 0, 1)) == FreshnessTier.EXPIRED


def test_expiring_soon_sorted_and_excludes_expired_and_good():
    items = [item(1, 6), item(2, -2), item(3, 1), item(4, 20), item(5, 3)]

    result = ExpiryService.expiring_soon(items, FIXED_TODAY)

    assert [v.id for v in result] == [3, 5, 1]
    assert [v.status for v in result] == [
        FreshnessTier.CRITICAL,
        FreshnessTier.CRITICAL,
        FreshnessTier.WARNING,
    ]
    assert result[0].days_until_expiry == 1


def test_shopping_list_collects_expired_and_low_stock():
    items = [
        item(1, -1, quantity=5),
        item(2, 10, quantity=1),
        item(3, 10, quantity=0),
        item(4, 10, quantity=6),
    ]

    shopping = ExpiryService.shopping_list(items, FIXED_TODAY, low_stock_threshold=1)

    assert [v.id for v in shopping.expired] == [1]
    assert [v.id for v in shopping.low_quantity] == [2, 3]


def test_annotate_serializes_camel_case():
    view = ExpiryService.annotate([item(1, 5)], FIXED_TODAY)[0]
    payload = view.model_dump(by_alias=True, mode="json")

    assert payload["daysUntilExpiry"] == 5
    assert payload["status"] == "warning"
    assert payload["expiryDate"] == "2024-03-15"

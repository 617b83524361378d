"""
Entity store contract tests.

Every test runs against both ``MemoryStore`` and ``SqlAlchemyStore`` (SQLite
in memory) through the parametrized ``store`` fixture.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from app.exceptions import ConflictError, NotFoundError
from domain.enums import LocationType, Unit
from domain.schemas import FoodItemCreate

from test_fixtures import make_food_item, make_location, make_user, store  # noqa: F401


# =============================================================================
# USERS AND SESSIONS
# =============================================================================


def test_usernames_are_unique(store):
    make_user(store, "sarah.martinez")
    with pytest.raises(ConflictError):
        make_user(store, "sarah.martinez")


def test_user_lookup(store):
    user = make_user(store, "michael.chen")

    assert store.get_user(user.id).username == "michael.chen"
    assert store.get_user_by_username("michael.chen").id == user.id
    assert store.get_user_by_username("nobody") is None
    assert store.get_user(user.id + 100) is None


def test_session_round_trip(store):
    user = make_user(store)
    expires = datetime.now(timezone.utc) + timedelta(hours=1)

    store.create_session("tok-123", user.id, expires)

    assert store.get_session("tok-123").user_id == user.id
    assert store.delete_session("tok-123") is True
    assert store.get_session("tok-123") is None
    assert store.delete_session("tok-123") is False


# =============================================================================
# LOCATIONS
# =============================================================================


def test_ids_increase_per_entity_type(store):
    user = make_user(store)
    first = make_location(store, user.id, name="A")
    second = make_location(store, user.id, name="B")
    store.delete_location(second.id)
    third = make_location(store, user.id, name="C")

    assert first.id < second.id < third.id


def test_location_update_is_partial(store):
    user = make_user(store)
    loc = make_location(store, user.id, name="Fridge")

    updated = store.update_location(loc.id, {"type": LocationType.OFFICE})

    assert updated.name == "Fridge"
    assert updated.type == LocationType.OFFICE
    assert store.get_location(loc.id).type == LocationType.OFFICE


def test_missing_ids_raise_not_found(store):
    with pytest.raises(NotFoundError):
        store.update_location(999, {"name": "x"})
    with pytest.raises(NotFoundError):
        store.delete_location(999)
    with pytest.raises(NotFoundError):
        store.update_food_item(999, {"quantity": 1})
    with pytest.raises(NotFoundError):
        store.delete_food_item(999)


# =============================================================================
# FOOD ITEMS
# =============================================================================


def test_price_round_trips_in_cents(store):
    user = make_user(store)
    loc = make_location(store, user.id)

    created = make_food_item(store, user.id, loc.id, price=1050)

    assert store.get_food_item(created.id).price == 1050


def test_purchased_is_stamped_and_kept(store):
    user = make_user(store)
    loc = make_location(store, user.id)
    item = make_food_item(store, user.id, loc.id)

    updated = store.update_food_item(item.id, {"quantity": 7})

    assert item.purchased is not None
    assert updated.quantity == 7
    assert updated.purchased == item.purchased


def test_expiry_is_a_calendar_date(store):
    user = make_user(store)
    loc = make_location(store, user.id)
    payload = FoodItemCreate.model_validate(
        {
            "name": "Salmon",
            "quantity": 1,
            "unit": "pieces",
            "locationId": loc.id,
            "expiryDate": "2024-05-02T23:30:00.000Z",
        }
    )

    item = store.create_food_item(user.id, payload)

    assert store.get_food_item(item.id).expiry_date == date(2024, 5, 2)


def test_ownership_isolation_with_colliding_names(store):
    """
    Verifies:
    - Two users can both own a "Fridge" holding "Milk"
    - Each listing only returns the caller's rows
    """
    sarah = make_user(store, "sarah")
    michael = make_user(store, "michael")
    s_loc = make_location(store, sarah.id, name="Fridge")
    m_loc = make_location(store, michael.id, name="Fridge")
    make_food_item(store, sarah.id, s_loc.id, name="Milk")
    make_food_item(store, michael.id, m_loc.id, name="Milk", quantity=3)

    s_items = store.list_food_items(sarah.id)
    m_items = store.list_food_items(michael.id)

    assert [i.user_id for i in s_items] == [sarah.id]
    assert [i.quantity for i in m_items] == [3]
    assert [loc.id for loc in store.list_locations(sarah.id)] == [s_loc.id]


def test_batch_create_and_delete_by_location(store):
    user = make_user(store)
    loc = make_location(store, user.id)
    other = make_location(store, user.id, name="Pantry")
    payloads = [
        FoodItemCreate(
            name=name,
            quantity=1,
            unit=Unit.PIECES,
            location_id=loc.id,
            expiry_date=date(2024, 3, 20),
            price=100,
        )
        for name in ("Eggs", "Butter", "Cream")
    ]

    created = store.create_food_items(user.id, payloads)
    make_food_item(store, user.id, other.id, name="Rice")

    assert [i.name for i in created] == ["Eggs", "Butter", "Cream"]
    assert len({i.purchased for i in created}) == 1
    assert len(store.list_food_items_by_location(loc.id)) == 3
    assert store.delete_food_items_by_location(loc.id) == 3
    assert [i.name for i in store.list_food_items(user.id)] == ["Rice"]

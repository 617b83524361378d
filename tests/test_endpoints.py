"""
HTTP endpoint tests for inventory, receipts and read views.

Each test gets a fresh app over ``MemoryStore`` with a signed-in user; the
vision model is replaced by ``FakeVision``.
"""

from datetime import timedelta

from app.config import Settings
from services.expiry_service import utc_today

from test_constants import (
    GARAGE_FREEZER,
    KITCHEN_FRIDGE,
    OFFICE_FRIDGE,
    STRUCTURED_REPLY,
    WEEKLY_SHOP_ITEMS,
)
from test_fixtures import FakeVision, auth_client, client, make_client, register  # noqa: F401


def create_location(client, body=KITCHEN_FRIDGE):
    r = client.post("/api/locations", json=body)
    assert r.status_code == 201, r.text
    return r.json()


def create_item(client, location_id, **overrides):
    body = {
        "name": "Whole milk 1L",
        "quantity": 2,
        "unit": "pieces",
        "locationId": location_id,
        "expiryDate": (utc_today() + timedelta(days=10)).isoformat(),
        "price": 129,
    }
    body.update(overrides)
    r = client.post("/api/food-items", json=body)
    assert r.status_code == 201, r.text
    return r.json()


def test_health_check(client):
    r = client.get("/api/health-check")
    assert r.status_code == 200
    assert r.json()["service"] == "FreshTrack"
    assert "X-Request-ID" in r.headers


# =============================================================================
# LOCATIONS
# =============================================================================


def test_location_crud(auth_client):
    loc = create_location(auth_client)
    assert loc["name"] == "Kitchen fridge"
    assert loc["type"] == "home"
    assert "userId" in loc

    r = auth_client.patch(f"/api/locations/{loc['id']}", json={"name": "Main fridge"})
    assert r.status_code == 200
    assert r.json()["name"] == "Main fridge"
    assert r.json()["type"] == "home"

    assert [x["id"] for x in auth_client.get("/api/locations").json()] == [loc["id"]]

    r = auth_client.delete(f"/api/locations/{loc['id']}")
    assert r.status_code == 204
    assert auth_client.get("/api/locations").json() == []


def test_location_with_items_needs_cascade(auth_client):
    loc = create_location(auth_client)
    create_item(auth_client, loc["id"])

    blocked = auth_client.delete(f"/api/locations/{loc['id']}")
    assert blocked.status_code == 409
    assert blocked.json()["error"]["code"] == "LOCATION_NOT_EMPTY"

    r = auth_client.delete(f"/api/locations/{loc['id']}?cascade=true")
    assert r.status_code == 204
    assert auth_client.get("/api/food-items").json() == []


def test_invalid_location_type_is_rejected(auth_client):
    r = auth_client.post("/api/locations", json={"name": "Boat", "type": "yacht"})
    assert r.status_code == 422


# =============================================================================
# FOOD ITEMS
# =============================================================================


def test_food_item_crud_uses_camel_case(auth_client):
    loc = create_location(auth_client)
    item = create_item(auth_client, loc["id"], price=1050)

    assert item["locationId"] == loc["id"]
    assert item["price"] == 1050
    assert "expiryDate" in item and "purchased" in item

    r = auth_client.patch(f"/api/food-items/{item['id']}", json={"quantity": 5})
    assert r.status_code == 200
    assert r.json()["quantity"] == 5
    assert r.json()["name"] == "Whole milk 1L"
    assert r.json()["purchased"] == item["purchased"]

    assert auth_client.delete(f"/api/food-items/{item['id']}").status_code == 204
    assert auth_client.delete(f"/api/food-items/{item['id']}").status_code == 404


def test_food_item_with_foreign_location_is_rejected(auth_client):
    r = auth_client.post(
        "/api/food-items",
        json={
            "name": "Ghost cheese",
            "quantity": 1,
            "unit": "pieces",
            "locationId": 999,
            "expiryDate": "2024-05-01",
        },
    )
    assert r.status_code == 400
    assert r.json()["error"]["details"]["field"] == "locationId"


def test_negative_quantity_is_rejected(auth_client):
    loc = create_location(auth_client)
    r = auth_client.post(
        "/api/food-items",
        json={
            "name": "Eggs",
            "quantity": -1,
            "unit": "pieces",
            "locationId": loc["id"],
            "expiryDate": "2024-05-01",
        },
    )
    assert r.status_code == 422


def test_users_cannot_see_each_others_items():
    sarah = make_client()
    register(sarah, "sarah")
    loc = create_location(sarah)
    item = create_item(sarah, loc["id"])

    michael = make_client(store=sarah.app.state.store)
    register(michael, "michael")

    assert michael.get("/api/food-items").json() == []
    assert michael.patch(f"/api/food-items/{item['id']}", json={"quantity": 9}).status_code == 404
    assert michael.delete(f"/api/locations/{loc['id']}").status_code == 404
    assert sarah.get("/api/food-items").json()[0]["quantity"] == 2


# =============================================================================
# RECEIPTS
# =============================================================================


def test_upload_returns_candidates():
    client = make_client(vision=FakeVision(structured=STRUCTURED_REPLY))
    register(client)

    r = client.post(
        "/api/receipts/upload",
        files={"receipt": ("receipt.png", b"\x89PNG receipt", "image/png")},
    )

    assert r.status_code == 200, r.text
    body = r.json()
    assert body["totalAmount"] == 448
    assert body["storeName"] == "Corner Market"
    assert body["date"] == "2024-03-09"
    assert set(body["items"][0]) == {"name", "price", "quantity", "confidence"}


def test_upload_without_file_is_400(auth_client):
    r = auth_client.post("/api/receipts/upload")
    assert r.status_code == 400


def test_upload_too_large_is_400(auth_client):
    r = auth_client.post(
        "/api/receipts/upload",
        files={"receipt": ("huge.jpg", b"x" * (64 * 1024 + 1), "image/jpeg")},
    )
    assert r.status_code == 400


def test_upload_failure_is_plain_text_500():
    client = make_client(
        vision=FakeVision(structured="I cannot read that", text="nothing useful")
    )
    register(client)

    r = client.post(
        "/api/receipts/upload",
        files={"receipt": ("blurry.jpg", b"blurry", "image/jpeg")},
    )

    assert r.status_code == 500
    assert r.headers["content-type"].startswith("text/plain")
    assert r.text == "Vision model did not return a JSON object"


def test_commit_creates_selected_items(auth_client):
    fridge = create_location(auth_client)
    freezer = create_location(auth_client, GARAGE_FREEZER)

    r = auth_client.post(
        "/api/receipts/commit",
        json={
            "items": WEEKLY_SHOP_ITEMS,
            "selectedIndices": [0, 2],
            "locationId": fridge["id"],
            "itemLocations": {"2": freezer["id"]},
        },
    )

    assert r.status_code == 201, r.text
    body = r.json()
    assert [i["name"] for i in body["created"]] == ["Whole milk 1L", "Greek yogurt"]
    assert [i["locationId"] for i in body["created"]] == [fridge["id"], freezer["id"]]
    assert body["failures"] == []
    assert len(auth_client.get("/api/food-items").json()) == 2


def test_commit_requires_location(auth_client):
    r = auth_client.post(
        "/api/receipts/commit",
        json={"items": WEEKLY_SHOP_ITEMS, "selectedIndices": [0]},
    )
    assert r.status_code == 422


def test_atomic_commit_failure_is_400(auth_client):
    fridge = create_location(auth_client)

    r = auth_client.post(
        "/api/receipts/commit",
        json={
            "items": WEEKLY_SHOP_ITEMS,
            "selectedIndices": [0, 1],
            "locationId": fridge["id"],
            "itemLocations": {"1": 4242},
            "atomic": True,
        },
    )

    assert r.status_code == 400
    assert r.json()["error"]["details"]["failures"][0]["index"] == 1
    assert auth_client.get("/api/food-items").json() == []


def test_app_settings_drive_commit_defaults_and_views():
    """
    Verifies:
    - Commit uses the app's default unit and expiry horizon
    - The dashboard counts days on the same calendar as the commit
    - Shopping list and analytics use the app's thresholds
    """
    client = make_client(
        app_settings=Settings(
            default_unit="kg",
            default_expiry_days=3,
            low_stock_threshold=2,
            top_value_limit=1,
        )
    )
    register(client)
    fridge = create_location(client)

    r = client.post(
        "/api/receipts/commit",
        json={
            "items": WEEKLY_SHOP_ITEMS,
            "selectedIndices": [0, 2],
            "locationId": fridge["id"],
        },
    )

    assert r.status_code == 201, r.text
    created = r.json()["created"]
    assert {i["unit"] for i in created} == {"kg"}
    assert {i["expiryDate"] for i in created} == {
        (utc_today() + timedelta(days=3)).isoformat()
    }

    dashboard = client.get("/api/dashboard/expiring").json()
    assert [i["daysUntilExpiry"] for i in dashboard["expiringSoon"]] == [3, 3]

    shopping = client.get("/api/shopping-list").json()
    assert sorted(i["name"] for i in shopping["lowQuantity"]) == [
        "Greek yogurt",
        "Whole milk 1L",
    ]

    summary = client.get("/api/analytics/summary").json()
    assert [t["name"] for t in summary["topItems"]] == ["Whole milk 1L"]


# =============================================================================
# VIEWS
# =============================================================================


def test_dashboard_and_shopping_list(auth_client):
    loc = create_location(auth_client)
    office = create_location(auth_client, OFFICE_FRIDGE)
    today = utc_today()
    create_item(auth_client, loc["id"], name="Yogurt", expiryDate=(today + timedelta(days=2)).isoformat())
    create_item(auth_client, loc["id"], name="Old bread", expiryDate=(today - timedelta(days=1)).isoformat())
    create_item(auth_client, office["id"], name="Apple", quantity=1)

    dashboard = auth_client.get("/api/dashboard/expiring").json()
    assert [i["name"] for i in dashboard["expiringSoon"]] == ["Yogurt"]
    assert dashboard["expiringSoon"][0]["status"] == "critical"
    counts = {u["name"]: u["items"] for u in dashboard["itemsByLocation"]}
    assert counts == {"Kitchen fridge": 2, "Office fridge": 1}

    shopping = auth_client.get("/api/shopping-list").json()
    assert [i["name"] for i in shopping["expired"]] == ["Old bread"]
    assert [i["name"] for i in shopping["lowQuantity"]] == ["Apple"]


def test_analytics_summary(auth_client):
    loc = create_location(auth_client)
    create_item(auth_client, loc["id"], name="Steak", price=500, quantity=2)
    create_item(auth_client, loc["id"], name="Cheese", price=300, quantity=1)

    summary = auth_client.get("/api/analytics/summary").json()

    assert summary["totalValue"] == 13.0
    assert summary["storageUtilization"] == [
        {"locationId": loc["id"], "name": "Kitchen fridge", "items": 2, "value": 13.0, "valueCents": 1300}
    ]
    assert [t["name"] for t in summary["topItems"]] == ["Steak", "Cheese"]

from datetime import date

import pytest
from sqlmodel import select

from models.store import Order, OrderItem, PointRedeem, Product
from services.orders import ORDER_STATUSES, PAYMENT_TYPES, order_stats, over_weight_fee, shipping_for, status_code

NOW = 1_700_000_000  # 2023-11-14 22:13:20 UTC
DAY = 24 * 60 * 60

CHECKOUT = {
    "user_name": "Mariam",
    "email": "mariam@example.com",
    "mobile": "97150000001",
    "address": "Al Wasl Road, Dubai",
    "amount": 50,
    "total": 60,
}


@pytest.fixture
def orders(seed):
    seed(
        Product(product_id=1, product_code="CUM", name="Cumin", price=30, images="3"),
        Product(product_id=2, product_code="SAF", name="Saffron", price=90),
        Product(product_id=3, product_code="OLD", name="Retired", price=10, status=0),
    )
    return seed(
        Order(
            order_id=1,
            user_name="Mariam",
            email="mariam@example.com",
            mobile="97150000001",
            amount=80,
            service_fee=2,
            discount=5,
            total=100,
            status=1,
            payment_status=1,
            created_at=NOW - DAY,
        ),
        Order(
            order_id=2,
            user_name="Mariam",
            email="mariam@example.com",
            mobile="97150000001",
            total=50,
            status=4,
            payment_status=0,
            created_at=NOW - 2 * DAY,
        ),
        Order(
            order_id=3,
            user_name="Omar",
            email="omar@example.com",
            mobile="97150000002",
            total=30,
            status=5,
            payment_status=2,
            created_at=NOW - 40 * DAY,
        ),
    )


@pytest.mark.parametrize(
    "value, names, default, expected",
    [
        ("card", PAYMENT_TYPES, 1, 2),
        ("on_the_way", ORDER_STATUSES, 0, 3),
        (4, ORDER_STATUSES, 0, 4),
        ("2", ORDER_STATUSES, 0, 2),
        ("teleported", ORDER_STATUSES, 0, 0),
        (None, PAYMENT_TYPES, 1, 1),
    ],
)
def test_status_code(value, names, default, expected):
    assert status_code(value, names, default) == expected


def test_shipping_and_over_weight_fees():
    assert [shipping_for(amount) for amount in (40, 100, 100.5, 200, 201)] == [10, 10, 4, 4, 0]
    assert [over_weight_fee(weight) for weight in (3, 8, 8.9, 10.5)] == [0, 0, 0, 2]


def test_create_order_translates_status_names(api):
    response = api.post("/api/orders", json={**CHECKOUT, "payment_type": "card", "status": "dispatched"})

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Guest order created successfully"
    assert body["data"]["order_id"] == 1
    assert body["data"]["payment_type"] == 2
    assert body["data"]["payment_status"] == 0
    assert body["data"]["status"] == 2


@pytest.mark.parametrize(
    "path, body, message",
    [
        ("/api/orders", {k: v for k, v in CHECKOUT.items() if k != "address"}, "Missing required field: address"),
        ("/api/orders", {**CHECKOUT, "email": "not-an-email"}, "Invalid email format"),
        ("/api/orders/guest", {**CHECKOUT, "amount": 0}, "Missing required field: amount"),
    ],
)
def test_create_order_validation(api, path, body, message):
    response = api.post(path, json=body)
    assert response.status_code == 400
    assert response.json() == {"success": False, "error": message}


def test_guest_checkout_does_not_need_an_address(api):
    body = {k: v for k, v in CHECKOUT.items() if k != "address"}
    response = api.post("/api/orders/guest", json={**body, "payment_status": "success"})

    assert response.status_code == 201
    assert response.json()["data"]["payment_status"] == 1


def test_list_orders_newest_id_first(api, orders):
    body = api.get("/api/orders", params={"limit": 2}).json()

    assert [o["order_id"] for o in body["data"]] == [3, 2]
    assert body["pagination"] == {"current_page": 1, "total_pages": 2, "total_items": 3, "items_per_page": 2}


@pytest.mark.parametrize(
    "params, expected",
    [
        ({"status": "completed"}, [2]),
        ({"payment_status": "success"}, [1]),
        ({"search": "omar"}, [3]),
        ({"start_date": "2023-11-13"}, [1]),
        ({"end_date": "2023-11-12"}, [3, 2]),
        ({"sort": "total", "order": "asc"}, [3, 2, 1]),
    ],
)
def test_list_orders_filters(api, orders, params, expected):
    assert [o["order_id"] for o in api.get("/api/orders", params=params).json()["data"]] == expected


def test_guest_lookup_by_mobile(api, orders):
    body = api.get("/api/orders/guest", params={"mobile": "97150000002"}).json()
    assert [o["order_id"] for o in body["data"]] == [3]


def test_get_update_delete_order(api, orders):
    assert api.get("/api/orders/2").json()["data"]["total"] == 50

    updated = api.put("/api/orders/2", json={"status": "cancelled", "awb_id": "AWB-77"}).json()
    assert updated["message"] == "Guest order updated successfully"
    assert updated["data"]["status"] == 5
    assert updated["data"]["awb_id"] == "AWB-77"

    assert api.delete("/api/orders/2").json()["message"] == "Guest order deleted successfully"
    missing = api.get("/api/orders/2")
    assert missing.status_code == 404
    assert missing.json()["error"] == "Guest order not found"


def test_order_update_needs_fields(api, orders):
    response = api.put("/api/orders/1", json={})
    assert response.status_code == 400
    assert response.json()["error"] == "No valid fields to update"


def test_invalid_order_id(api):
    response = api.get("/api/orders/0")
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid order ID"


def test_order_item_lifecycle(api, orders):
    created = api.post(
        "/api/orders/items",
        json={"order_id": 1, "product_id": 1, "price": 30, "quantity": 2, "total": 60, "tracking_id": "TRK-1"},
    )
    assert created.status_code == 201
    item = created.json()["data"]
    assert item["name"] == "Cumin"
    assert item["product_name"] == "Cumin"
    assert item["product_code"] == "CUM"

    fetched = api.get(f"/api/orders/items/{item['id']}").json()["data"]
    assert fetched["user_name"] == "Mariam"
    assert fetched["email"] == "mariam@example.com"

    updated = api.put(f"/api/orders/items/{item['id']}", json={"item_status": 1, "is_paid": 1}).json()
    assert updated["message"] == "Order item updated successfully"
    assert (updated["data"]["item_status"], updated["data"]["is_paid"]) == (1, 1)

    assert api.delete(f"/api/orders/items/{item['id']}").json()["message"] == "Order item deleted successfully"
    assert api.get(f"/api/orders/items/{item['id']}").status_code == 404


@pytest.mark.parametrize(
    "changes, status, message",
    [
        ({"order_id": 99}, 404, "Order not found"),
        ({"product_id": 99}, 404, "Product not found"),
        ({"tracking_id": ""}, 400, "Missing required field: tracking_id"),
    ],
)
def test_order_item_create_errors(api, orders, changes, status, message):
    body = {"order_id": 1, "product_id": 1, "price": 30, "quantity": 1, "total": 30, "tracking_id": "T", **changes}
    response = api.post("/api/orders/items", json=body)
    assert response.status_code == status
    assert response.json()["error"] == message


def test_list_items_filters(api, orders, seed):
    seed(
        OrderItem(order_id=1, product_id=1, price=30, quantity=1, total=30, tracking_id="TRK-A", created_at=10),
        OrderItem(order_id=1, product_id=2, name="Saffron tin", price=90, quantity=1, total=90, is_paid=1, created_at=20),
        OrderItem(order_id=2, product_id=2, price=90, quantity=2, total=180, created_at=30),
    )

    body = api.get("/api/orders/items", params={"order_id": 1}).json()
    assert [i["product_name"] for i in body["data"]] == ["Saffron tin", "Cumin"]
    assert body["pagination"]["items_per_page"] == 20

    assert len(api.get("/api/orders/items", params={"is_paid": 1}).json()["data"]) == 1
    assert len(api.get("/api/orders/items", params={"tracking_id": "TRK"}).json()["data"]) == 1


def test_add_items_reprices_order_and_credits_points(api, orders, db):
    response = api.post(
        "/api/orders/add-items",
        json={"orderId": 1, "items": [{"id": 1, "price": 30, "quantity": 2, "weight": 5}]},
    )

    assert response.status_code == 200
    # subtotal 140, shipping 4, over weight 2, service fee 2, discount 5
    assert response.json()["data"] == {
        "orderId": 1,
        "itemsAdded": 1,
        "additionalAmount": 60,
        "newTotal": 143,
        "pointsEarned": 180,
    }

    order = api.get("/api/orders/1").json()["data"]
    assert (order["amount"], order["shipping_charges"], order["delivery_charges"], order["total"]) == (140, 4, 4, 143)

    with db.session() as session:
        items = session.exec(select(OrderItem).where(OrderItem.order_id == 1)).all()
        ledger = session.exec(select(PointRedeem)).all()
    assert [(i.product_id, i.quantity, i.total, i.tracking_id) for i in items] == [(1, 2, 60, "")]
    assert [(p.mobile, p.redeem_points, p.status) for p in ledger] == [("97150000001", -180, 2)]


@pytest.mark.parametrize(
    "body, status, message",
    [
        ({"orderId": 1, "items": []}, 400, "Order ID and items are required"),
        ({"items": [{"id": 1, "price": 1, "quantity": 1}]}, 400, "Order ID and items are required"),
        ({"orderId": 99, "items": [{"id": 1, "price": 1, "quantity": 1}]}, 404, "Order not found"),
    ],
)
def test_add_items_errors(api, orders, body, status, message):
    response = api.post("/api/orders/add-items", json=body)
    assert response.status_code == status
    assert response.json()["error"] == message


def test_order_stats(db, orders):
    stats = order_stats(db, period=30, now=NOW)

    assert stats["summary"] == {"total_orders": 2, "total_revenue": 150, "average_order_value": 75}
    assert sorted((s["status_name"], s["count"]) for s in stats["orders_by_status"]) == [
        ("completed", 1),
        ("placed", 1),
    ]
    assert sorted((s["payment_status_name"], s["count"]) for s in stats["orders_by_payment_status"]) == [
        ("pending", 1),
        ("success", 1),
    ]
    assert stats["daily_orders"] == [
        {"date": "2023-11-13", "orders": 1, "revenue": 100},
        {"date": "2023-11-12", "orders": 1, "revenue": 50},
    ]
    assert stats["top_customers"] == [
        {"user_name": "Mariam", "email": "mariam@example.com", "order_count": 2, "total_spent": 150}
    ]


def test_order_stats_for_date_range(api, orders):
    body = api.get("/api/orders/stats", params={"start_date": "2023-09-01", "end_date": "2023-11-12"}).json()
    assert body["data"]["summary"]["total_orders"] == 2
    assert order_stats(api.app.state.db, start_date=date(2023, 11, 13), end_date=date(2023, 11, 13), now=NOW)[
        "summary"
    ]["total_revenue"] == 100


def test_top_sellers(api, orders, seed):
    seed(
        OrderItem(order_id=1, product_id=1, price=30, quantity=2, total=60),
        OrderItem(order_id=2, product_id=1, price=30, quantity=1, total=30),
        OrderItem(order_id=2, product_id=2, price=90, quantity=5, total=450),
        OrderItem(order_id=3, product_id=3, price=10, quantity=9, total=90),
    )

    body = api.get("/api/products/top-sellers").json()
    assert [(p["product_id"], p["total_sold"]) for p in body["data"]["products"]] == [(2, 5), (1, 3)]
    assert body["data"]["total_items"] == 2

    assert [p["name"] for p in api.get("/api/products/top-sellers", params={"limit": 1}).json()["data"]["products"]] == [
        "Saffron"
    ]


def test_top_sellers_limit_is_bounded(api):
    response = api.get("/api/products/top-sellers", params={"limit": 51})
    assert response.status_code == 400
    assert response.json()["error"] == "Limit must be between 1 and 50"

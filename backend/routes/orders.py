"""Order routes: storefront checkout, admin order management and line items."""

from datetime import date

from fastapi import APIRouter, Depends, Query

from models.payloads import AddItemsRequest, OrderCreate, OrderItemCreate, OrderItemUpdate, OrderUpdate
from routes.deps import envelope, get_db, positive_id
from services import orders
from services.database import Database

router = APIRouter(prefix="/api")


@router.get("/orders")
async def list_orders(
    page: int = Query(1),
    limit: int = Query(10),
    sort: str = Query("order_id"),
    order: str = Query("DESC"),
    status: str | None = Query(None),
    payment_status: str | None = Query(None),
    order_status: str | None = Query(None),
    search: str | None = Query(None),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    db: Database = Depends(get_db),
) -> dict:
    result = orders.list_orders(
        db, page, limit, sort, order, status, payment_status, order_status, search, start_date, end_date
    )
    return envelope(result["orders"], pagination=result["pagination"])


@router.post("/orders", status_code=201)
async def create_order(payload: OrderCreate, db: Database = Depends(get_db)) -> dict:
    order = orders.create_order(db, payload, orders.STOREFRONT_REQUIRED)
    return envelope(order, message="Guest order created successfully")


@router.get("/orders/guest")
async def list_guest_orders(
    page: int = Query(1),
    limit: int = Query(10),
    sort: str = Query("order_id"),
    order: str = Query("DESC"),
    status: str | None = Query(None),
    payment_status: str | None = Query(None),
    mobile: str | None = Query(None),
    email: str | None = Query(None),
    search: str | None = Query(None),
    db: Database = Depends(get_db),
) -> dict:
    """Customer-facing lookup; a mobile number or e-mail narrows the search."""
    result = orders.list_orders(
        db, page, limit, sort, order, status, payment_status, search=mobile or email or search
    )
    return envelope(result["orders"], pagination=result["pagination"])


@router.post("/orders/guest", status_code=201)
async def create_guest_order(payload: OrderCreate, db: Database = Depends(get_db)) -> dict:
    order = orders.create_order(db, payload, orders.GUEST_REQUIRED)
    return envelope(order, message="Guest order created successfully")


@router.get("/orders/stats")
async def order_stats(
    period: int = Query(30),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    db: Database = Depends(get_db),
) -> dict:
    return envelope(orders.order_stats(db, period, start_date, end_date))


@router.post("/orders/add-items")
async def add_items(payload: AddItemsRequest, db: Database = Depends(get_db)) -> dict:
    result = orders.add_items(db, payload.orderId, payload.items)
    return envelope(result, message="Items added to order successfully")


@router.get("/orders/items")
async def list_items(
    page: int = Query(1),
    limit: int = Query(20),
    order_id: int | None = Query(None),
    product_id: int | None = Query(None),
    item_status: int | None = Query(None),
    is_paid: int | None = Query(None),
    tracking_id: str | None = Query(None),
    db: Database = Depends(get_db),
) -> dict:
    result = orders.list_items(db, page, limit, order_id, product_id, item_status, is_paid, tracking_id)
    return envelope(result["items"], pagination=result["pagination"])


@router.post("/orders/items", status_code=201)
async def create_item(payload: OrderItemCreate, db: Database = Depends(get_db)) -> dict:
    return envelope(orders.create_item(db, payload), message="Order item created successfully")


@router.get("/orders/items/{item_id}")
async def get_item(item_id: int, db: Database = Depends(get_db)) -> dict:
    positive_id(item_id, "item")
    return envelope(orders.get_item(db, item_id))


@router.put("/orders/items/{item_id}")
async def update_item(item_id: int, payload: OrderItemUpdate, db: Database = Depends(get_db)) -> dict:
    positive_id(item_id, "item")
    return envelope(orders.update_item(db, item_id, payload), message="Order item updated successfully")


@router.delete("/orders/items/{item_id}")
async def delete_item(item_id: int, db: Database = Depends(get_db)) -> dict:
    positive_id(item_id, "item")
    orders.delete_item(db, item_id)
    return envelope(message="Order item deleted successfully")


@router.get("/orders/{order_id}")
async def get_order(order_id: int, db: Database = Depends(get_db)) -> dict:
    positive_id(order_id, "order")
    return envelope(orders.get_order(db, order_id))


@router.put("/orders/{order_id}")
async def update_order(order_id: int, payload: OrderUpdate, db: Database = Depends(get_db)) -> dict:
    positive_id(order_id, "order")
    return envelope(orders.update_order(db, order_id, payload), message="Guest order updated successfully")


@router.delete("/orders/{order_id}")
async def delete_order(order_id: int, db: Database = Depends(get_db)) -> dict:
    positive_id(order_id, "order")
    orders.delete_order(db, order_id)
    return envelope(message="Guest order deleted successfully")

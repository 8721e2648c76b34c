"""Storefront orders and their line items.

Status fields are stored as numeric codes. Writers may send either the code
or its name (``"cash"``, ``"pending"``, ``"dispatched"``...); names are
translated on the way in.
"""

import logging
import math
import re
import time
from datetime import date, datetime, time as dt_time, timezone

from sqlalchemy import func
from sqlmodel import Session, col, or_, select

from errors import NotFoundError, ValidationError
from models.payloads import AddedItem, OrderCreate, OrderItemCreate, OrderItemUpdate, OrderUpdate
from models.store import Order, OrderItem, PointRedeem, Product
from services.database import Database
from services.pagination import check_page, count, normalize_order, order_by, page_info, paginate, pick_sort
from services.points import EARNED_STATUS

logger = logging.getLogger(__name__)

ORDER_SORT_FIELDS = ("order_id", "user_name", "email", "total", "created_at", "status", "payment_status", "order_status")

PAYMENT_TYPES = {"cash": 1, "card": 2}
PAYMENT_STATUSES = {"pending": 0, "success": 1, "failed": 2}
ORDER_STATUSES = {"pending": 0, "placed": 1, "dispatched": 2, "on_the_way": 3, "completed": 4, "cancelled": 5}

CODED_FIELDS = {
    "payment_type": (PAYMENT_TYPES, 1),
    "payment_status": (PAYMENT_STATUSES, 0),
    "status": (ORDER_STATUSES, 0),
}

STOREFRONT_REQUIRED = ("user_name", "email", "mobile", "address")
GUEST_REQUIRED = ("user_name", "email", "mobile", "amount", "total")

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# Shipping on the merchandise subtotal: 10 up to 100, 4 up to 200, free above
SHIPPING_BANDS = ((100, 10), (200, 4))
FREE_WEIGHT_KG = 8
OVER_WEIGHT_FEE_PER_KG = 1
POINTS_PER_UNIT_SPENT = 3

DAY_SECONDS = 24 * 60 * 60


def status_code(value, names: dict[str, int], default: int | None) -> int | None:
    """Numeric code for a status given by name or number."""
    if value is None:
        return default
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text in names:
        return names[text]
    try:
        return int(text)
    except ValueError:
        return default


def _encode_codes(changes: dict) -> dict:
    for field, (names, default) in CODED_FIELDS.items():
        if field in changes:
            changes[field] = status_code(changes[field], names, default)
    return changes


def _day_start(day: date) -> int:
    return int(datetime.combine(day, dt_time.min, tzinfo=timezone.utc).timestamp())


def shipping_for(subtotal: float) -> float:
    for ceiling, charge in SHIPPING_BANDS:
        if subtotal <= ceiling:
            return charge
    return 0


def over_weight_fee(weight: float) -> float:
    if weight > FREE_WEIGHT_KG:
        return math.floor(weight - FREE_WEIGHT_KG) * OVER_WEIGHT_FEE_PER_KG
    return 0


def list_orders(
    db: Database,
    page: int = 1,
    limit: int = 10,
    sort: str = "order_id",
    order: str = "DESC",
    status: str | None = None,
    payment_status: str | None = None,
    order_status: str | None = None,
    search: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> dict:
    check_page(page, limit)
    sort = pick_sort(sort, ORDER_SORT_FIELDS, "order_id")
    order = normalize_order(order, "DESC")

    conditions = []
    if status:
        conditions.append(Order.status == status_code(status, ORDER_STATUSES, None))
    if payment_status:
        conditions.append(Order.payment_status == status_code(payment_status, PAYMENT_STATUSES, None))
    if order_status:
        conditions.append(Order.order_status == order_status)
    if search:
        pattern = f"%{search}%"
        conditions.append(
            or_(col(Order.user_name).like(pattern), col(Order.email).like(pattern), col(Order.mobile).like(pattern))
        )
    if start_date:
        conditions.append(Order.created_at >= _day_start(start_date))
    if end_date:
        # The whole end day is included
        conditions.append(Order.created_at < _day_start(end_date) + DAY_SECONDS)

    with db.session() as session:
        statement = select(Order).where(*conditions)
        total = count(session, statement)
        statement = paginate(statement.order_by(order_by(getattr(Order, sort), order)), page, limit)
        orders = [row.model_dump() for row in session.exec(statement).all()]
    return {"orders": orders, "pagination": page_info(page, limit, total)}


def _load_order(session: Session, order_id: int, missing: str = "Guest order not found") -> Order:
    order = session.get(Order, order_id)
    if order is None:
        raise NotFoundError(missing)
    return order


def get_order(db: Database, order_id: int) -> dict:
    with db.session() as session:
        return _load_order(session, order_id).model_dump()


def create_order(db: Database, payload: OrderCreate, required: tuple[str, ...] = STOREFRONT_REQUIRED) -> dict:
    data = payload.model_dump()
    for field in required:
        if not data.get(field):
            raise ValidationError(f"Missing required field: {field}")
    if not _EMAIL_RE.match(data["email"] or ""):
        raise ValidationError("Invalid email format")

    order = Order(**_encode_codes(data))
    with db.session() as session:
        session.add(order)
        session.commit()
        session.refresh(order)
        logger.info("Created order %s for %s", order.order_id, order.mobile)
        return order.model_dump()


def update_order(db: Database, order_id: int, payload: OrderUpdate) -> dict:
    changes = {field: value for field, value in payload.model_dump(exclude_unset=True).items() if value is not None}
    with db.session() as session:
        order = _load_order(session, order_id)
        if not changes:
            raise ValidationError("No valid fields to update")

        for field, value in _encode_codes(changes).items():
            setattr(order, field, value)
        order.updated_at = int(time.time())
        session.add(order)
        session.commit()
        session.refresh(order)
        return order.model_dump()


def delete_order(db: Database, order_id: int) -> None:
    with db.session() as session:
        session.delete(_load_order(session, order_id))
        session.commit()
        logger.info("Deleted order %s", order_id)


def _item_select():
    return select(
        OrderItem,
        func.coalesce(OrderItem.name, Product.name),
        Product.product_code,
        Product.images,
    ).outerjoin(Product, OrderItem.product_id == Product.product_id)


def _present_item(row) -> dict:
    item, product_name, product_code, product_images = row
    data = item.model_dump()
    data["product_name"] = product_name
    data["product_code"] = product_code
    data["product_images"] = product_images
    return data


def list_items(
    db: Database,
    page: int = 1,
    limit: int = 20,
    order_id: int | None = None,
    product_id: int | None = None,
    item_status: int | None = None,
    is_paid: int | None = None,
    tracking_id: str | None = None,
) -> dict:
    check_page(page, limit)

    conditions = []
    if order_id:
        conditions.append(OrderItem.order_id == order_id)
    if product_id:
        conditions.append(OrderItem.product_id == product_id)
    if item_status is not None:
        conditions.append(OrderItem.item_status == item_status)
    if is_paid is not None:
        conditions.append(OrderItem.is_paid == is_paid)
    if tracking_id:
        conditions.append(col(OrderItem.tracking_id).like(f"%{tracking_id}%"))

    with db.session() as session:
        total = count(session, select(OrderItem).where(*conditions))
        statement = paginate(
            _item_select()
            .where(*conditions)
            .order_by(col(OrderItem.created_at).desc(), col(OrderItem.id).desc()),
            page,
            limit,
        )
        items = [_present_item(row) for row in session.exec(statement).all()]
    return {"items": items, "pagination": page_info(page, limit, total)}


def _find_item(session: Session, item_id: int) -> dict:
    row = session.exec(_item_select().where(OrderItem.id == item_id)).first()
    if row is None:
        raise NotFoundError("Order item not found")
    return _present_item(row)


def get_item(db: Database, item_id: int) -> dict:
    """Line item with its product details and the ordering customer."""
    with db.session() as session:
        data = _find_item(session, item_id)
        order = session.get(Order, data["order_id"])
        data["user_name"] = order.user_name if order else None
        data["email"] = order.email if order else None
        return data


def create_item(db: Database, payload: OrderItemCreate) -> dict:
    data = payload.model_dump()
    for field in ("order_id", "product_id", "price", "quantity", "total", "tracking_id"):
        if not data.get(field):
            raise ValidationError(f"Missing required field: {field}")

    with db.session() as session:
        _load_order(session, data["order_id"], "Order not found")
        product = session.get(Product, data["product_id"])
        if product is None:
            raise NotFoundError("Product not found")

        item = OrderItem(**{**data, "name": data["name"] or product.name})
        session.add(item)
        session.commit()
        session.refresh(item)
        return _find_item(session, item.id)


def update_item(db: Database, item_id: int, payload: OrderItemUpdate) -> dict:
    changes = {field: value for field, value in payload.model_dump(exclude_unset=True).items() if value is not None}
    with db.session() as session:
        item = session.get(OrderItem, item_id)
        if item is None:
            raise NotFoundError("Order item not found")
        if not changes:
            raise ValidationError("No valid fields to update")

        for field, value in changes.items():
            setattr(item, field, value)
        session.add(item)
        session.commit()
        return _find_item(session, item_id)


def delete_item(db: Database, item_id: int) -> None:
    with db.session() as session:
        item = session.get(OrderItem, item_id)
        if item is None:
            raise NotFoundError("Order item not found")
        session.delete(item)
        session.commit()


def add_items(db: Database, order_id: int | None, items: list[AddedItem] | None) -> dict:
    """Append items to a placed order, re-price it and credit the customer's points.

    Everything happens in one transaction; a failure leaves the order untouched.
    """
    if not order_id or not items:
        raise ValidationError("Order ID and items are required")

    additional_amount = sum(item.price * item.quantity for item in items)
    additional_weight = sum(item.weight * item.quantity for item in items)

    with db.session() as session:
        order = _load_order(session, order_id, "Order not found")

        subtotal = (order.amount or 0) + additional_amount
        shipping = shipping_for(subtotal)
        new_total = (
            subtotal
            + shipping
            + over_weight_fee(additional_weight)
            + (order.service_fee or 0)
            - (order.discount or 0)
            - (order.redeem_amount or 0)
        )

        order.amount = subtotal
        order.shipping_charges = shipping
        order.delivery_charges = shipping
        order.total = new_total
        order.updated_at = int(time.time())
        session.add(order)

        for item in items:
            session.add(
                OrderItem(
                    order_id=order_id,
                    product_id=item.id,
                    price=item.price,
                    quantity=item.quantity,
                    total=item.price * item.quantity,
                )
            )

        points = math.floor(additional_amount * POINTS_PER_UNIT_SPENT)
        if order.mobile and points > 0:
            # Earned points are stored negative
            session.add(PointRedeem(mobile=order.mobile, redeem_points=-points, status=EARNED_STATUS))

        session.commit()

    logger.info("Added %d items to order %s (+%.2f)", len(items), order_id, additional_amount)
    return {
        "orderId": order_id,
        "itemsAdded": len(items),
        "additionalAmount": additional_amount,
        "newTotal": new_total,
        "pointsEarned": points,
    }


def _status_name(code, names: dict[str, int]) -> str:
    for name, value in names.items():
        if value == code:
            return name
    return "unknown"


def order_stats(
    db: Database,
    period: int = 30,
    start_date: date | None = None,
    end_date: date | None = None,
    now: float | None = None,
) -> dict:
    """Order counts and revenue over a date range, or the last ``period`` days."""
    now = time.time() if now is None else now
    if start_date and end_date:
        window = (Order.created_at >= _day_start(start_date), Order.created_at < _day_start(end_date) + DAY_SECONDS)
    else:
        days = period if period and period > 0 else 30
        window = (Order.created_at >= int(now - days * DAY_SECONDS),)

    with db.session() as session:
        total_orders, revenue = session.exec(
            select(func.count(col(Order.order_id)), func.coalesce(func.sum(Order.total), 0)).where(*window)
        ).one()

        by_status = session.exec(
            select(Order.status, func.count(col(Order.order_id))).where(*window).group_by(Order.status)
        ).all()
        by_payment = session.exec(
            select(Order.payment_status, func.count(col(Order.order_id)))
            .where(*window)
            .group_by(Order.payment_status)
        ).all()

        order_count = func.count(col(Order.order_id))
        top_customers = session.exec(
            select(Order.user_name, Order.email, order_count, func.sum(Order.total))
            .where(*window)
            .group_by(Order.user_name, Order.email)
            .order_by(order_count.desc())
            .limit(10)
        ).all()

        recent = session.exec(
            select(Order.created_at, Order.total).where(Order.created_at >= int(now - 7 * DAY_SECONDS))
        ).all()

    daily: dict[str, dict] = {}
    for created_at, total in recent:
        day = datetime.fromtimestamp(created_at, tz=timezone.utc).date().isoformat()
        bucket = daily.setdefault(day, {"date": day, "orders": 0, "revenue": 0.0})
        bucket["orders"] += 1
        bucket["revenue"] += total or 0

    revenue = float(revenue or 0)
    return {
        "summary": {
            "total_orders": total_orders,
            "total_revenue": round(revenue, 2),
            "average_order_value": round(revenue / total_orders, 2) if total_orders else 0,
        },
        "orders_by_status": [
            {"status_name": _status_name(code, ORDER_STATUSES), "count": n} for code, n in by_status
        ],
        "orders_by_payment_status": [
            {"payment_status_name": _status_name(code, PAYMENT_STATUSES), "count": n} for code, n in by_payment
        ],
        "daily_orders": sorted(daily.values(), key=lambda bucket: bucket["date"], reverse=True)[:7],
        "top_customers": [
            {"user_name": name, "email": email, "order_count": n, "total_spent": spent}
            for name, email, n, spent in top_customers
        ],
    }

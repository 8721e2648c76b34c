"""Product catalogue queries.

Every product dict returned here carries the joined category and
subcategory names, a rounded discount percentage when a special price
applies, parsed image ids and the URL of the first image.
"""

import json
import logging
import math

from sqlalchemy import func
from sqlmodel import Session, col, or_, select

from errors import NotFoundError, ValidationError
from models.store import Category, OrderItem, Product, StoredFile, SubCategory
from services.database import Database
from services.pagination import check_page, count, order_by, page_info, paginate

logger = logging.getLogger(__name__)

PRODUCT_SORT_FIELDS = ("product_id", "name", "price", "created_at")
LANGUAGES = ("en", "ar")
CHECKOUT_PAGE_LIMIT = 50
TRUTHY_FLAGS = ("1", "true")


def validate_listing(sort: str, order: str, lang: str | None = None) -> str:
    """Reject unknown sort fields, orders and languages. Returns the normalized order."""
    if sort not in PRODUCT_SORT_FIELDS:
        raise ValidationError("Invalid sort field")
    if order.upper() not in ("ASC", "DESC"):
        raise ValidationError("Invalid order parameter")
    if lang is not None and lang not in LANGUAGES:
        raise ValidationError("Invalid language parameter. Must be en or ar")
    return order.upper()


def discount_percentage(price: float, special_price: float | None) -> int | None:
    if special_price and price > special_price:
        return int(math.floor((price - special_price) / price * 100 + 0.5))
    return None


def parse_images(images: str | None):
    """JSON-decoded image ids when the column holds JSON, otherwise the raw string."""
    if not images:
        return images
    try:
        return json.loads(images)
    except (TypeError, ValueError):
        return images


def _to_int(value) -> int | None:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def first_image_id(images) -> int | None:
    if not images:
        return None
    if isinstance(images, bool):
        return None
    if isinstance(images, (int, float)):
        return int(images)
    if isinstance(images, list):
        return _to_int(images[0]) if images else None
    if isinstance(images, str):
        return _to_int(images.split(",")[0])
    return None


def _image_urls(session: Session, file_ids: set[int]) -> dict[int, str]:
    if not file_ids:
        return {}
    rows = session.exec(select(StoredFile).where(col(StoredFile.id).in_(file_ids))).all()
    return {row.id: f"{row.file_path}{row.file_name}" for row in rows}


def _joined_select():
    return (
        select(Product, Category.name, SubCategory.name)
        .outerjoin(Category, Product.category_id == Category.id)
        .outerjoin(SubCategory, Product.sub_category_id == SubCategory.id)
    )


def _serialize(session: Session, rows) -> list[dict]:
    products = []
    for product, category_name, subcategory_name in rows:
        data = product.model_dump()
        data["category_name"] = category_name
        data["subcategory_name"] = subcategory_name
        data["discount_percentage"] = discount_percentage(product.price, product.special_price)
        data["images"] = parse_images(product.images)
        products.append(data)

    urls = _image_urls(session, {fid for p in products if (fid := first_image_id(p["images"])) is not None})
    for data in products:
        data["image_url"] = urls.get(first_image_id(data["images"]))
    return products


def _status_value(status: str | None) -> int | None:
    if not status:
        return None
    if status == "active":
        return 1
    if status == "inactive":
        return 0
    return _to_int(status)


def list_products(
    db: Database,
    page: int | None = None,
    limit: int | None = None,
    sort: str = "product_id",
    order: str = "ASC",
    category_id: int | None = None,
    subcategory_id: int | None = None,
    status: str | None = "active",
    search: str | None = None,
    min_price: float | None = None,
    max_price: float | None = None,
    lang: str = "en",
    include_children: bool = False,
) -> dict:
    """Filtered product listing. Pagination applies only when both page and limit are given."""
    check_page(page, limit)
    order = validate_listing(sort, order)

    conditions = []
    status_value = _status_value(status)
    if status_value is not None:
        conditions.append(Product.status == status_value)
    if not include_children:
        conditions.append(or_(col(Product.parent_product_id).is_(None), Product.parent_product_id == 0))
    if category_id:
        conditions.append(Product.category_id == category_id)
    if subcategory_id:
        conditions.append(Product.sub_category_id == subcategory_id)
    if min_price:
        conditions.append(Product.price >= min_price)
    if max_price:
        conditions.append(Product.price <= max_price)
    if search:
        name_column = Product.name_ar if lang == "ar" else Product.name
        pattern = f"%{search}%"
        conditions.append(or_(col(name_column).like(pattern), col(Product.product_description).like(pattern)))

    should_paginate = page is not None and limit is not None
    with db.session() as session:
        total = count(session, select(Product).where(*conditions))
        statement = _joined_select().where(*conditions).order_by(order_by(getattr(Product, sort), order))
        if should_paginate:
            statement = paginate(statement, page, limit)
        products = _serialize(session, session.exec(statement).all())

    pagination = page_info(page, limit, total) if should_paginate else {"total_items": total}
    return {"products": products, "pagination": pagination}


def get_product(db: Database, product_id: int) -> dict:
    with db.session() as session:
        row = session.exec(_joined_select().where(Product.product_id == product_id)).first()
        if row is None:
            raise NotFoundError("Product not found")
        return _serialize(session, [row])[0]


def get_child_products(db: Database, parent_id: int) -> list[dict]:
    """Active variants of a parent product, cheapest first."""
    with db.session() as session:
        statement = (
            _joined_select()
            .where(Product.parent_product_id == parent_id, Product.status == 1)
            .order_by(col(Product.price).asc())
        )
        return _serialize(session, session.exec(statement).all())


def get_featured_products(db: Database, limit: int = 10, lang: str = "en") -> list[dict]:
    if limit < 1 or limit > 50:
        raise ValidationError("Invalid limit parameter. Must be between 1 and 50")
    if lang not in LANGUAGES:
        raise ValidationError("Invalid language parameter. Must be en or ar")

    with db.session() as session:
        statement = _joined_select().where(Product.status == 1).order_by(col(Product.created_at).desc()).limit(limit)
        return _serialize(session, session.exec(statement).all())


def get_products_by_category(
    db: Database,
    category_id: int,
    page: int = 1,
    limit: int = 10,
    sort: str = "product_id",
    order: str = "ASC",
    lang: str = "en",
) -> dict:
    check_page(page, limit)
    order = validate_listing(sort, order, lang)

    conditions = (Product.category_id == category_id, Product.status == 1)
    with db.session() as session:
        total = count(session, select(Product).where(*conditions))
        statement = paginate(
            _joined_select().where(*conditions).order_by(order_by(getattr(Product, sort), order)),
            page,
            limit,
        )
        products = _serialize(session, session.exec(statement).all())
    return {"products": products, "pagination": page_info(page, limit, total)}


def get_checkout_page_products(db: Database, lang: str = "en") -> list[dict]:
    """Active products flagged for the checkout upsell strip, newest first."""
    if lang not in LANGUAGES:
        raise ValidationError("Invalid language parameter. Must be en or ar")

    with db.session() as session:
        statement = (
            _joined_select()
            .where(Product.status == 1, col(Product.checkout_page).in_(TRUTHY_FLAGS))
            .order_by(col(Product.created_at).desc())
            .limit(CHECKOUT_PAGE_LIMIT)
        )
        return _serialize(session, session.exec(statement).all())


def get_file(db: Database, file_id: int) -> dict:
    with db.session() as session:
        stored = session.get(StoredFile, file_id)
        if stored is None:
            raise NotFoundError("File not found")
        return stored.model_dump()


def get_top_sellers(db: Database, limit: int = 8) -> list[dict]:
    """Active products ranked by units sold across all order items."""
    if limit < 1 or limit > 50:
        raise ValidationError("Limit must be between 1 and 50")

    total_sold = func.sum(OrderItem.quantity)
    with db.session() as session:
        statement = (
            _joined_select()
            .add_columns(total_sold)
            .join(OrderItem, OrderItem.product_id == Product.product_id)
            .where(Product.status == 1)
            .group_by(Product.product_id, Category.name, SubCategory.name)
            .order_by(total_sold.desc(), col(Product.product_id).asc())
            .limit(limit)
        )
        rows = session.exec(statement).all()
        products = _serialize(session, [(product, category, sub) for product, category, sub, _ in rows])
    for data, (*_, sold) in zip(products, rows):
        data["total_sold"] = int(sold or 0)
    return products

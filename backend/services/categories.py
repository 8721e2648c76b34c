"""Category and subcategory queries."""

import logging

from sqlalchemy import func
from sqlmodel import Session, col, select

from errors import NotFoundError
from models.store import Category, Product, SubCategory
from services.database import Database
from services.pagination import check_page, count, normalize_order, order_by, page_info, paginate, pick_sort

logger = logging.getLogger(__name__)

CATEGORY_SORT_FIELDS = ("id", "name", "cat_priority", "created_at", "status")
SUBCATEGORY_SORT_FIELDS = ("id", "name", "cat_priority", "sort_order", "created_at")
STATUS_FILTERS = {"active": 1, "inactive": 0}


def _subcategories_of(session: Session, category_name: str) -> list[dict]:
    statement = (
        select(SubCategory)
        .where(SubCategory.category_name == category_name, SubCategory.status == 1)
        .order_by(col(SubCategory.cat_priority).asc())
    )
    return [row.model_dump() for row in session.exec(statement).all()]


def list_categories(
    db: Database,
    page: int | None = None,
    limit: int | None = None,
    sort: str = "cat_priority",
    order: str = "ASC",
    status: str | None = None,
    include_subcategories: bool = False,
    parent_id: int | None = None,
) -> dict:
    check_page(page, limit)
    sort = pick_sort(sort, CATEGORY_SORT_FIELDS, "cat_priority")
    order = normalize_order(order, "ASC")

    conditions = []
    if status in STATUS_FILTERS:
        conditions.append(Category.status == STATUS_FILTERS[status])
    if parent_id is not None:
        conditions.append(Category.parent_id == parent_id)

    should_paginate = page is not None and limit is not None
    with db.session() as session:
        statement = select(Category).where(*conditions)
        total = count(session, statement)
        statement = statement.order_by(order_by(getattr(Category, sort), order))
        if should_paginate:
            statement = paginate(statement, page, limit)

        categories = []
        for category in session.exec(statement).all():
            data = category.model_dump()
            if include_subcategories:
                data["subcategories"] = _subcategories_of(session, category.name)
            categories.append(data)

    pagination = page_info(page, limit, total) if should_paginate else {"total_items": total}
    return {"categories": categories, "pagination": pagination}


def _active_category(db: Database, condition, include_subcategories: bool) -> dict:
    with db.session() as session:
        category = session.exec(select(Category).where(condition, Category.status == 1)).first()
        if category is None:
            raise NotFoundError("Category not found")
        data = category.model_dump()
        if include_subcategories:
            data["subcategories"] = _subcategories_of(session, category.name)
        return data


def get_category(db: Database, category_id: int, include_subcategories: bool = False) -> dict:
    return _active_category(db, Category.id == category_id, include_subcategories)


def get_category_by_url(db: Database, category_url: str, include_subcategories: bool = False) -> dict:
    return _active_category(db, Category.category_url == category_url, include_subcategories)


def get_category_hierarchy(db: Database) -> list[dict]:
    """Active categories in priority order, each with its active subcategories."""
    with db.session() as session:
        categories = session.exec(
            select(Category).where(Category.status == 1).order_by(col(Category.cat_priority).asc())
        ).all()
        subcategories = session.exec(
            select(SubCategory).where(SubCategory.status == 1).order_by(col(SubCategory.cat_priority).asc())
        ).all()

    by_category: dict[str, list[dict]] = {}
    for sub in subcategories:
        by_category.setdefault(sub.category_name, []).append(sub.model_dump())

    return [
        {**category.model_dump(), "subcategories": by_category.get(category.name, [])}
        for category in categories
    ]


def get_categories_with_product_count(db: Database) -> list[dict]:
    """Active categories with the number of active products filed under each."""
    product_count = func.count(col(Product.product_id))
    statement = (
        select(Category, product_count)
        .outerjoin(Product, (Product.category_id == Category.id) & (Product.status == 1))
        .where(Category.status == 1)
        .group_by(Category.id)
        .order_by(col(Category.cat_priority).asc())
    )
    with db.session() as session:
        return [
            {**category.model_dump(), "product_count": total}
            for category, total in session.exec(statement).all()
        ]


def get_subcategories_by_category(
    db: Database,
    category_id: int,
    page: int = 1,
    limit: int = 10,
    sort: str = "cat_priority",
    order: str = "ASC",
) -> dict:
    check_page(page, limit)
    sort = pick_sort(sort, SUBCATEGORY_SORT_FIELDS, "cat_priority")
    order = normalize_order(order, "ASC")

    with db.session() as session:
        category = session.get(Category, category_id)
        if category is None:
            raise NotFoundError("Category not found")

        statement = select(SubCategory).where(
            SubCategory.category_name == category.name, SubCategory.status == 1
        )
        total = count(session, statement)
        statement = paginate(statement.order_by(order_by(getattr(SubCategory, sort), order)), page, limit)
        subcategories = [row.model_dump() for row in session.exec(statement).all()]

    return {"subcategories": subcategories, "pagination": page_info(page, limit, total)}


def get_subcategory(db: Database, subcategory_id: int) -> dict:
    with db.session() as session:
        sub = session.exec(
            select(SubCategory).where(SubCategory.id == subcategory_id, SubCategory.status == 1)
        ).first()
        if sub is None:
            raise NotFoundError("Subcategory not found")
        return sub.model_dump()

"""Shared pagination, sorting and serialization helpers for the service layer."""

import math

from sqlalchemy import func
from sqlmodel import Session, select

from errors import ValidationError

SORT_ORDERS = ("ASC", "DESC")


def normalize_order(order: str | None, default: str = "ASC") -> str:
    """Upper-cased ASC/DESC; anything else falls back to the default."""
    value = (order or "").upper()
    return value if value in SORT_ORDERS else default


def pick_sort(sort: str | None, allowed: tuple[str, ...], default: str) -> str:
    return sort if sort in allowed else default


def order_by(column, order: str):
    return column.desc() if order == "DESC" else column.asc()


def check_page(page: int | None, limit: int | None, max_limit: int = 100) -> None:
    """Raise ValidationError for out-of-range pagination parameters."""
    if (page is not None and page < 1) or (limit is not None and (limit < 1 or limit > max_limit)):
        raise ValidationError("Invalid pagination parameters")


def page_info(page: int, limit: int, total: int) -> dict:
    return {
        "current_page": page,
        "total_pages": math.ceil(total / limit) if limit else 0,
        "total_items": total,
        "items_per_page": limit,
    }


def count(session: Session, statement) -> int:
    """Row count of an arbitrary select statement."""
    return session.exec(select(func.count()).select_from(statement.subquery())).one()


def paginate(statement, page: int, limit: int):
    return statement.offset((page - 1) * limit).limit(limit)

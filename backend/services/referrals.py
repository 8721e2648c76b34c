"""Order referrals: who referred an order, looked up by phone number."""

import re

from sqlmodel import col, select

from errors import ValidationError
from models.store import OrderReferral
from services.database import Database

_NON_DIGITS = re.compile(r"\D")


def normalize_number(number) -> str:
    return _NON_DIGITS.sub("", str(number))


def _order_id(value) -> int:
    if isinstance(value, bool):
        raise ValidationError("order_id must be an integer id from DB (not awb_id)")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise ValidationError("order_id must be an integer id from DB (not awb_id)")


def create_referral(db: Database, order_id, name: str, number) -> dict:
    if order_id is None or not name or not number:
        raise ValidationError("order_id, name and number are required")
    referral = OrderReferral(order_id=_order_id(order_id), name=name, number=normalize_number(number))

    with db.session() as session:
        session.add(referral)
        session.commit()
        session.refresh(referral)
        return referral.model_dump()


def list_referrals(db: Database, mobile: str) -> list[dict]:
    number = normalize_number(mobile or "")
    if not number:
        raise ValidationError("mobile is required")
    with db.session() as session:
        statement = (
            select(OrderReferral)
            .where(OrderReferral.number == number)
            .order_by(col(OrderReferral.created_at).desc(), col(OrderReferral.id).desc())
        )
        return [row.model_dump() for row in session.exec(statement).all()]

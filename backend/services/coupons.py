"""Coupon administration, validation and redemption."""

import logging
from datetime import date

from sqlmodel import Session, col, or_, select

from errors import CouponCodeExistsError, NotFoundError, ValidationError
from models.payloads import CouponCreate, CouponUpdate
from models.store import Coupon
from services.database import Database
from services.pagination import check_page, count, page_info, paginate

logger = logging.getLogger(__name__)

UNLIMITED = "unlimited"
NULLABLE_FIELDS = ("numberoftime", "expire_date")


def remaining_uses(coupon: Coupon) -> int | str:
    if coupon.numberoftime:
        return coupon.numberoftime - coupon.numberoftimeused
    return UNLIMITED


def list_coupons(
    db: Database,
    page: int = 1,
    limit: int = 10,
    status: int | None = None,
    search: str | None = None,
) -> dict:
    check_page(page, limit)

    conditions = []
    if status is not None:
        conditions.append(Coupon.status == status)
    if search:
        pattern = f"%{search}%"
        conditions.append(or_(col(Coupon.name).like(pattern), col(Coupon.coupon_code).like(pattern)))

    with db.session() as session:
        statement = select(Coupon).where(*conditions)
        total = count(session, statement)
        statement = paginate(statement.order_by(col(Coupon.created_at).desc()), page, limit)
        coupons = [coupon.model_dump() for coupon in session.exec(statement).all()]
    return {"coupons": coupons, "pagination": page_info(page, limit, total)}


def _load(session: Session, coupon_id: int) -> Coupon:
    coupon = session.get(Coupon, coupon_id)
    if coupon is None:
        raise NotFoundError("Coupon not found")
    return coupon


def _code_taken(session: Session, code: str, exclude_id: int | None = None) -> bool:
    statement = select(Coupon.coupon_id).where(Coupon.coupon_code == code)
    if exclude_id is not None:
        statement = statement.where(Coupon.coupon_id != exclude_id)
    return session.exec(statement).first() is not None


def get_coupon(db: Database, coupon_id: int) -> dict:
    with db.session() as session:
        return _load(session, coupon_id).model_dump()


def create_coupon(db: Database, payload: CouponCreate) -> dict:
    with db.session() as session:
        if _code_taken(session, payload.coupon_code):
            raise CouponCodeExistsError(payload.coupon_code)
        coupon = Coupon(**payload.model_dump(), numberoftimeused=0)
        session.add(coupon)
        session.commit()
        session.refresh(coupon)
        logger.info("Created coupon %s (%s)", coupon.coupon_id, coupon.coupon_code)
        return coupon.model_dump()


def update_coupon(db: Database, coupon_id: int, payload: CouponUpdate) -> dict:
    """Apply the fields present in the payload; unknown coupons raise NotFoundError."""
    changes = {
        field: value
        for field, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or field in NULLABLE_FIELDS
    }
    with db.session() as session:
        coupon = _load(session, coupon_id)
        new_code = changes.get("coupon_code")
        if new_code and new_code != coupon.coupon_code and _code_taken(session, new_code, coupon_id):
            raise CouponCodeExistsError(new_code)
        if not changes:
            return coupon.model_dump()

        for field, value in changes.items():
            setattr(coupon, field, value)
        session.add(coupon)
        session.commit()
        session.refresh(coupon)
        return coupon.model_dump()


def delete_coupon(db: Database, coupon_id: int) -> None:
    with db.session() as session:
        coupon = _load(session, coupon_id)
        session.delete(coupon)
        session.commit()
        logger.info("Deleted coupon %s", coupon_id)


def _check_usable(session: Session, code: str, today: date | None) -> Coupon:
    coupon = session.exec(select(Coupon).where(Coupon.coupon_code == code, Coupon.status == 1)).first()
    if coupon is None:
        raise ValidationError("Invalid coupon code")

    today = today or date.today()
    if coupon.expire_date and coupon.expire_date < today:
        raise ValidationError("Coupon has expired")

    if coupon.numberoftime and coupon.numberoftimeused >= coupon.numberoftime:
        raise ValidationError("Coupon usage limit exceeded")
    return coupon


def validate_coupon(db: Database, code: str, today: date | None = None) -> dict:
    """Summary of a redeemable coupon; raises ValidationError explaining why not otherwise."""
    with db.session() as session:
        coupon = _check_usable(session, code, today)
        return {
            "coupon_id": coupon.coupon_id,
            "name": coupon.name,
            "discount": coupon.discount,
            "coupon_code": coupon.coupon_code,
            "remaining_uses": remaining_uses(coupon),
        }


def use_coupon(db: Database, code: str, today: date | None = None) -> dict:
    """Validate and count one redemption."""
    with db.session() as session:
        coupon = _check_usable(session, code, today)
        coupon.numberoftimeused += 1
        session.add(coupon)
        session.commit()
        session.refresh(coupon)
        logger.info("Coupon %s used (%d times)", coupon.coupon_code, coupon.numberoftimeused)
        return {
            "coupon_id": coupon.coupon_id,
            "discount": coupon.discount,
            "remaining_uses": remaining_uses(coupon),
        }

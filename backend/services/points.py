"""Loyalty point ledger keyed by customer mobile number.

Rows with negative ``redeem_points`` and status 2 record points earned;
every other row records a redemption.
"""

import logging
from datetime import datetime, timezone

from sqlmodel import Session, col, select

from errors import NotFoundError, ValidationError
from models.store import PointRedeem
from services.database import Database

logger = logging.getLogger(__name__)

EARNED_STATUS = 2
DEFAULT_STATUS = 1


def _present(row: PointRedeem) -> dict:
    return {
        "id": row.id,
        "mobile": row.mobile,
        "redeemPoints": row.redeem_points,
        "status": row.status,
        "createdAt": row.created_at,
    }


def _latest(session: Session, mobile: str, status: int | None = None) -> PointRedeem | None:
    statement = select(PointRedeem).where(PointRedeem.mobile == mobile)
    if status is not None:
        statement = statement.where(PointRedeem.status == status)
    statement = statement.order_by(col(PointRedeem.created_at).desc(), col(PointRedeem.id).desc())
    return session.exec(statement).first()


def list_points(db: Database, mobile: str) -> list[dict]:
    if not mobile:
        raise ValidationError("mobile is required")
    with db.session() as session:
        statement = (
            select(PointRedeem)
            .where(PointRedeem.mobile == mobile)
            .order_by(col(PointRedeem.created_at).desc(), col(PointRedeem.id).desc())
        )
        return [_present(row) for row in session.exec(statement).all()]


def record_points(db: Database, mobile: str, redeem_points: int, status: int | None = None) -> dict:
    """Add a ledger row, folding newly earned points into the latest earned row."""
    if not mobile:
        raise ValidationError("mobile and redeem_points are required")
    status = DEFAULT_STATUS if status is None else status

    with db.session() as session:
        if redeem_points < 0 and status == EARNED_STATUS:
            existing = _latest(session, mobile, EARNED_STATUS)
            if existing is not None:
                # Both negative, so this accumulates the earned total
                existing.redeem_points += redeem_points
                existing.created_at = datetime.now(timezone.utc)
                session.add(existing)
                session.commit()
                return {
                    "id": existing.id,
                    "mobile": mobile,
                    "redeem_points": existing.redeem_points,
                    "status": status,
                    "action": "updated_existing_earned_points",
                }

        row = PointRedeem(mobile=mobile, redeem_points=redeem_points, status=status)
        session.add(row)
        session.commit()
        session.refresh(row)
        return {
            "id": row.id,
            "mobile": mobile,
            "redeem_points": redeem_points,
            "status": status,
            "action": "created_new_record",
        }


def update_latest_points(
    db: Database, mobile: str | None, redeem_points: int | None = None, status: int | None = None
) -> dict:
    """Overwrite points and/or status on the most recent row for a mobile."""
    if not mobile:
        raise ValidationError("mobile is required")

    with db.session() as session:
        row = _latest(session, mobile)
        if row is None:
            raise NotFoundError("No record found for this mobile")
        if redeem_points is None and status is None:
            raise ValidationError("Nothing to update")

        if redeem_points is not None:
            row.redeem_points = redeem_points
        if status is not None:
            row.status = status
        session.add(row)
        session.commit()
        logger.info("Updated points record %s for %s", row.id, mobile)
        return {"id": row.id, "mobile": mobile, "redeem_points": redeem_points, "status": status}

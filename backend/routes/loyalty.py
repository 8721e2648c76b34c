"""Loyalty points and order referral routes."""

from fastapi import APIRouter, Depends, Query

from models.payloads import PointsRecord, PointsUpdate, ReferralCreate
from routes.deps import envelope, get_db
from services import points, referrals
from services.database import Database

router = APIRouter(prefix="/api")


@router.get("/points")
async def list_points(mobile: str | None = Query(None), db: Database = Depends(get_db)) -> dict:
    return envelope(points.list_points(db, mobile or ""))


@router.post("/points")
async def record_points(payload: PointsRecord, db: Database = Depends(get_db)) -> dict:
    return envelope(points.record_points(db, payload.mobile, payload.redeem_points, payload.status))


@router.put("/points")
async def update_points(payload: PointsUpdate, db: Database = Depends(get_db)) -> dict:
    return envelope(points.update_latest_points(db, payload.mobile, payload.redeem_points, payload.status))


@router.put("/points/{mobile}")
async def update_points_for_mobile(mobile: str, payload: PointsUpdate, db: Database = Depends(get_db)) -> dict:
    return envelope(points.update_latest_points(db, mobile, payload.redeem_points, payload.status))


@router.post("/referrals")
async def create_referral(payload: ReferralCreate, db: Database = Depends(get_db)) -> dict:
    return envelope(referrals.create_referral(db, payload.order_id, payload.name, payload.number))


@router.get("/referrals/{mobile}")
async def list_referrals(mobile: str, db: Database = Depends(get_db)) -> dict:
    return envelope(referrals.list_referrals(db, mobile))

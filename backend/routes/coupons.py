"""Coupon routes: admin CRUD plus storefront validate/use."""

from fastapi import APIRouter, Depends, Query

from errors import ValidationError
from models.payloads import CouponCreate, CouponUpdate
from routes.deps import envelope, get_db, positive_id
from services import coupons
from services.database import Database

router = APIRouter(prefix="/api")


def _clean_code(code: str) -> str:
    code = code.strip()
    if not code:
        raise ValidationError("Invalid coupon code")
    return code


@router.get("/coupons")
async def list_coupons(
    page: int = Query(1),
    limit: int = Query(10),
    status: int | None = Query(None),
    search: str | None = Query(None),
    db: Database = Depends(get_db),
) -> dict:
    result = coupons.list_coupons(db, page, limit, status, search)
    return envelope(result["coupons"], pagination=result["pagination"])


@router.post("/coupons", status_code=201)
async def create_coupon(payload: CouponCreate, db: Database = Depends(get_db)) -> dict:
    return envelope(coupons.create_coupon(db, payload), message="Coupon created successfully")


@router.get("/coupons/validate/{code}")
async def validate_coupon(code: str, db: Database = Depends(get_db)) -> dict:
    return envelope(coupons.validate_coupon(db, _clean_code(code)), message="Coupon is valid")


@router.post("/coupons/use/{code}")
async def use_coupon(code: str, db: Database = Depends(get_db)) -> dict:
    return envelope(coupons.use_coupon(db, _clean_code(code)), message="Coupon used successfully")


@router.get("/coupons/{coupon_id}")
async def get_coupon(coupon_id: int, db: Database = Depends(get_db)) -> dict:
    positive_id(coupon_id, "coupon")
    return envelope(coupons.get_coupon(db, coupon_id))


@router.put("/coupons/{coupon_id}")
async def update_coupon(coupon_id: int, payload: CouponUpdate, db: Database = Depends(get_db)) -> dict:
    positive_id(coupon_id, "coupon")
    return envelope(coupons.update_coupon(db, coupon_id, payload), message="Coupon updated successfully")


@router.delete("/coupons/{coupon_id}")
async def delete_coupon(coupon_id: int, db: Database = Depends(get_db)) -> dict:
    positive_id(coupon_id, "coupon")
    coupons.delete_coupon(db, coupon_id)
    return envelope(message="Coupon deleted successfully")

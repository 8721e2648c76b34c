"""Request bodies accepted by the write endpoints."""

from datetime import date
from typing import Any, Optional, Union

from pydantic import BaseModel, Field


class CouponCreate(BaseModel):
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    discount: float = Field(ge=0)
    coupon_code: str = Field(min_length=1)
    numberoftime: Optional[int] = Field(default=None, ge=0)
    expire_date: Optional[date] = None
    status: int = 1


class CouponUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    discount: Optional[float] = Field(default=None, ge=0)
    coupon_code: Optional[str] = Field(default=None, min_length=1)
    numberoftime: Optional[int] = Field(default=None, ge=0)
    numberoftimeused: Optional[int] = Field(default=None, ge=0)
    expire_date: Optional[date] = None
    status: Optional[int] = None


class PointsRecord(BaseModel):
    mobile: str = Field(min_length=1)
    redeem_points: int
    status: Optional[int] = None


class PointsUpdate(BaseModel):
    mobile: Optional[str] = None
    redeem_points: Optional[int] = None
    status: Optional[int] = None


class ReferralCreate(BaseModel):
    # Checked by the referral service so clients get its specific messages
    order_id: Any = None
    name: Optional[str] = None
    number: Any = None


class ProductUpdateNotice(BaseModel):
    type: str
    data: Optional[dict] = None


class OrderCreate(BaseModel):
    # Required fields depend on the endpoint and are checked by the order service
    user_name: Optional[str] = None
    user_city: Optional[str] = None
    email: Optional[str] = None
    mobile: Optional[str] = None
    whatsapp_number: Optional[str] = None
    amount: float = 0
    delivery_charges: float = 0
    discount: float = 0
    service_fee: float = 0
    redeem_amount: float = 0
    shipping_charges: float = 0
    over_weight_fee: float = 0
    total: float = 0
    address: Optional[str] = None
    delivery_type: str = "1"
    card_type: Optional[str] = None
    # Names ("cash", "pending", "placed", ...) or their numeric codes
    payment_type: Union[int, str] = 1
    payment_status: Union[int, str] = 0
    vat_number: Optional[str] = None
    awb_id: Optional[str] = None
    status: Union[int, str] = 1
    order_status: Optional[str] = None


class OrderUpdate(BaseModel):
    user_name: Optional[str] = None
    user_city: Optional[str] = None
    email: Optional[str] = None
    mobile: Optional[str] = None
    whatsapp_number: Optional[str] = None
    amount: Optional[float] = None
    delivery_charges: Optional[float] = None
    discount: Optional[float] = None
    service_fee: Optional[float] = None
    redeem_amount: Optional[float] = None
    shipping_charges: Optional[float] = None
    over_weight_fee: Optional[float] = None
    total: Optional[float] = None
    address: Optional[str] = None
    delivery_type: Optional[str] = None
    card_type: Optional[str] = None
    payment_type: Optional[Union[int, str]] = None
    payment_status: Optional[Union[int, str]] = None
    vat_number: Optional[str] = None
    awb_id: Optional[str] = None
    status: Optional[Union[int, str]] = None
    order_status: Optional[str] = None


class OrderItemCreate(BaseModel):
    order_id: Optional[int] = None
    product_id: Optional[int] = None
    name: Optional[str] = None
    price: Optional[float] = None
    quantity: Optional[int] = None
    total: Optional[float] = None
    tracking_id: Optional[str] = None
    item_status: int = 0
    is_paid: int = 0
    pay_vendor: int = 0
    pay_vendor_status: int = 0


class OrderItemUpdate(BaseModel):
    product_id: Optional[int] = None
    name: Optional[str] = None
    price: Optional[float] = None
    quantity: Optional[int] = None
    total: Optional[float] = None
    tracking_id: Optional[str] = None
    item_status: Optional[int] = None
    is_paid: Optional[int] = None
    pay_vendor: Optional[int] = None
    pay_vendor_status: Optional[int] = None


class AddedItem(BaseModel):
    id: int
    price: float = Field(ge=0)
    quantity: int = Field(ge=1)
    weight: float = 0


class AddItemsRequest(BaseModel):
    orderId: Optional[int] = None
    items: Optional[list[AddedItem]] = None

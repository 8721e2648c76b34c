"""SQLModel tables for the storefront catalogue, orders, coupons and loyalty data."""

import time
from datetime import date, datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


def _epoch() -> int:
    return int(time.time())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Category(SQLModel, table=True):
    __tablename__ = "af_category"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=255, index=True)
    category_url: Optional[str] = Field(default=None, max_length=255, index=True)
    cat_priority: int = Field(default=0)
    parent_id: Optional[int] = Field(default=None)
    meta_title: Optional[str] = Field(default=None, max_length=255)
    meta_keywords: Optional[str] = Field(default=None, max_length=500)
    meta_description: Optional[str] = Field(default=None, max_length=1000)
    status: int = Field(default=1)
    created_at: int = Field(default_factory=_epoch)


class SubCategory(SQLModel, table=True):
    """Linked to its parent category by name, not id."""

    __tablename__ = "af_subcategory"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)
    name_ar: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    description_ar: Optional[str] = None
    category_name: str = Field(max_length=255, index=True)
    category_url: Optional[str] = Field(default=None, max_length=255)
    cat_priority: int = Field(default=0)
    image: Optional[str] = Field(default=None, max_length=500)
    status: int = Field(default=1)
    sort_order: int = Field(default=0)
    created_at: int = Field(default_factory=_epoch)
    updated_at: int = Field(default_factory=_epoch)


class Product(SQLModel, table=True):
    __tablename__ = "af_products"

    product_id: Optional[int] = Field(default=None, primary_key=True)
    product_code: str = Field(max_length=100)
    category_id: Optional[int] = Field(default=None, index=True)
    sub_category_id: Optional[int] = Field(default=None, index=True)
    parent_product_id: Optional[int] = Field(default=None, index=True)
    name: str = Field(max_length=255)
    name_ar: Optional[str] = Field(default=None, max_length=255)
    product_url: Optional[str] = Field(default=None, max_length=255)
    brand_name: Optional[str] = Field(default=None, max_length=255)
    product_unit: str = Field(default="", max_length=50)
    price: float = Field(default=0)
    special_price: Optional[float] = None
    product_description: Optional[str] = None
    quantity: int = Field(default=0)
    # Comma separated file ids or a JSON array of them
    images: Optional[str] = Field(default=None, max_length=1000)
    checkout_page: Optional[str] = Field(default=None, max_length=10)
    status: int = Field(default=1)
    created_at: int = Field(default_factory=_epoch)
    updated_at: int = Field(default_factory=_epoch)


class StoredFile(SQLModel, table=True):
    __tablename__ = "af_files"

    id: Optional[int] = Field(default=None, primary_key=True)
    file_path: str = Field(max_length=500)
    file_name: str = Field(max_length=255)
    file_type: Optional[str] = Field(default=None, max_length=100)


class Blog(SQLModel, table=True):
    __tablename__ = "af_blogs"

    id: Optional[int] = Field(default=None, primary_key=True)
    blog_title: str = Field(max_length=255)
    blog_url: str = Field(max_length=255, index=True)
    description: Optional[str] = None
    images: Optional[str] = Field(default=None, max_length=500)
    category_id: Optional[int] = Field(default=None)
    status: int = Field(default=1)
    created_at: int = Field(default_factory=_epoch)
    updated_at: int = Field(default_factory=_epoch)


class Event(SQLModel, table=True):
    __tablename__ = "af_events"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)
    event_url: str = Field(max_length=255)
    status: int = Field(default=1)
    created_at: int = Field(default_factory=_epoch)


class Coupon(SQLModel, table=True):
    __tablename__ = "af_coupon"

    coupon_id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)
    description: str = Field(default="", max_length=1000)
    discount: float
    coupon_code: str = Field(max_length=100, unique=True, index=True)
    # 0 or None means unlimited
    numberoftime: Optional[int] = Field(default=None)
    numberoftimeused: int = Field(default=0)
    expire_date: Optional[date] = None
    status: int = Field(default=1)
    created_at: datetime = Field(default_factory=_utcnow)


class PointRedeem(SQLModel, table=True):
    """Loyalty ledger row. Negative points with status 2 are earned points."""

    __tablename__ = "af_pointredeems"

    id: Optional[int] = Field(default=None, primary_key=True)
    mobile: str = Field(max_length=50, index=True)
    redeem_points: int
    status: int = Field(default=1)
    created_at: datetime = Field(default_factory=_utcnow)


class OrderReferral(SQLModel, table=True):
    __tablename__ = "af_order_referrals"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(index=True)
    name: str = Field(max_length=255)
    number: str = Field(max_length=50, index=True)
    created_at: datetime = Field(default_factory=_utcnow)


class Order(SQLModel, table=True):
    """Storefront order. Customers check out without accounts."""

    __tablename__ = "af_guestorders"

    order_id: Optional[int] = Field(default=None, primary_key=True)
    user_name: str = Field(max_length=255)
    user_city: Optional[str] = Field(default=None, max_length=255)
    email: str = Field(max_length=255, index=True)
    mobile: str = Field(max_length=50, index=True)
    whatsapp_number: Optional[str] = Field(default=None, max_length=50)
    amount: float = Field(default=0)
    delivery_charges: float = Field(default=0)
    discount: float = Field(default=0)
    service_fee: float = Field(default=0)
    redeem_amount: float = Field(default=0)
    shipping_charges: float = Field(default=0)
    over_weight_fee: float = Field(default=0)
    total: float = Field(default=0)
    address: Optional[str] = None
    delivery_type: str = Field(default="1", max_length=20)
    card_type: Optional[str] = Field(default=None, max_length=50)
    # 1 cash, 2 card
    payment_type: int = Field(default=1)
    # 0 pending, 1 success, 2 failed
    payment_status: int = Field(default=0)
    vat_number: Optional[str] = Field(default=None, max_length=100)
    awb_id: Optional[str] = Field(default=None, max_length=100)
    # 0 pending, 1 placed, 2 dispatched, 3 on the way, 4 completed, 5 cancelled
    status: int = Field(default=1)
    order_status: Optional[str] = Field(default=None, max_length=100)
    created_at: int = Field(default_factory=_epoch, index=True)
    updated_at: int = Field(default_factory=_epoch)


class OrderItem(SQLModel, table=True):
    __tablename__ = "af_guestorder_items"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(index=True)
    product_id: int = Field(index=True)
    name: Optional[str] = Field(default=None, max_length=255)
    price: float
    quantity: int
    total: float
    tracking_id: str = Field(default="", max_length=100)
    item_status: int = Field(default=0)
    is_paid: int = Field(default=0)
    pay_vendor: int = Field(default=0)
    pay_vendor_status: int = Field(default=0)
    created_at: int = Field(default_factory=_epoch)

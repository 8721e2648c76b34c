"""Product catalogue routes, backed by the response cache."""

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from errors import NotFoundError
from models.payloads import ProductUpdateNotice
from routes.deps import envelope, get_cache, get_db, positive_id
from services import products
from services.cache import CacheKeys, TTLCache
from services.database import Database

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

LIST_TTL = 3 * 60
FEATURED_TTL = 5 * 60
CHECKOUT_PAGE_TTL = 10 * 60
PRODUCT_TTL = 5 * 60
MISSING_PRODUCT_TTL = 60
FILE_TTL = 60 * 60

PRODUCT_CHANGE_TYPES = {"product_updated", "product_created", "product_deleted"}


@router.get("/products")
async def list_products(
    page: int | None = Query(None),
    limit: int | None = Query(None),
    sort: str = Query("product_id"),
    order: str = Query("ASC"),
    category_id: int | None = Query(None),
    subcategory_id: int | None = Query(None),
    status: str = Query("active"),
    search: str | None = Query(None),
    min_price: float | None = Query(None),
    max_price: float | None = Query(None),
    lang: str = Query("en"),
    include_children: bool = Query(False),
    db: Database = Depends(get_db),
    cache: TTLCache = Depends(get_cache),
) -> dict:
    params = {
        "page": page,
        "limit": limit,
        "sort": sort,
        "order": order,
        "category_id": category_id,
        "subcategory_id": subcategory_id,
        "status": status,
        "search": search,
        "min_price": min_price,
        "max_price": max_price,
        "lang": lang,
        "include_children": include_children,
    }
    cache_key = CacheKeys.products_list(params)
    cached = cache.get(cache_key)
    if cached:
        return cached

    result = jsonable_encoder(envelope(products.list_products(db, **params)))
    cache.set(cache_key, result, LIST_TTL)
    return result


@router.get("/products/featured")
async def featured_products(
    limit: int = Query(10),
    lang: str = Query("en"),
    db: Database = Depends(get_db),
    cache: TTLCache = Depends(get_cache),
) -> dict:
    cache_key = CacheKeys.products_featured(limit, lang)
    cached = cache.get(cache_key)
    if cached:
        return cached

    result = jsonable_encoder(envelope(products.get_featured_products(db, limit, lang)))
    cache.set(cache_key, result, FEATURED_TTL)
    return result


@router.get("/products/checkout-page")
async def checkout_page_products(
    lang: str = Query("en"),
    db: Database = Depends(get_db),
    cache: TTLCache = Depends(get_cache),
) -> dict:
    cache_key = CacheKeys.products_checkout_page(lang)
    cached = cache.get(cache_key)
    if cached:
        return cached

    result = jsonable_encoder(envelope(products.get_checkout_page_products(db, lang)))
    cache.set(cache_key, result, CHECKOUT_PAGE_TTL)
    return result


@router.get("/products/top-sellers")
async def top_sellers(limit: int = Query(8), db: Database = Depends(get_db)) -> dict:
    sellers = products.get_top_sellers(db, limit)
    return envelope({"products": sellers, "total_items": len(sellers)})


@router.post("/products/updates")
async def product_updates(notice: ProductUpdateNotice, cache: TTLCache = Depends(get_cache)) -> dict:
    """Drop cached product responses after a catalogue change."""
    removed = 0
    if notice.type in PRODUCT_CHANGE_TYPES:
        data = notice.data or {}
        removed += cache.delete_prefix(CacheKeys.PRODUCTS_PREFIX)
        if data.get("product_id"):
            removed += int(cache.delete(CacheKeys.product_by_id(data["product_id"])))
        logger.info("Product change %s invalidated %d cache entries", notice.type, removed)

    return envelope(message="Product update processed", type=notice.type, invalidated=removed)


@router.get("/products/category/{category_id}")
async def products_by_category(
    category_id: int,
    page: int = Query(1),
    limit: int = Query(10),
    sort: str = Query("product_id"),
    order: str = Query("ASC"),
    lang: str = Query("en"),
    db: Database = Depends(get_db),
    cache: TTLCache = Depends(get_cache),
) -> dict:
    positive_id(category_id, "category")
    params = {"page": page, "limit": limit, "sort": sort, "order": order, "lang": lang}
    cache_key = CacheKeys.products_by_category(category_id, params)
    cached = cache.get(cache_key)
    if cached:
        return cached

    result = jsonable_encoder(envelope(products.get_products_by_category(db, category_id, **params)))
    cache.set(cache_key, result, LIST_TTL)
    return result


@router.get("/products/{product_id}")
async def get_product(
    product_id: int,
    db: Database = Depends(get_db),
    cache: TTLCache = Depends(get_cache),
):
    positive_id(product_id, "product")
    cache_key = CacheKeys.product_by_id(product_id)
    cached = cache.get(cache_key)
    if cached:
        if not cached.get("success"):
            return JSONResponse(cached, status_code=404)
        return cached

    try:
        product = products.get_product(db, product_id)
    except NotFoundError as e:
        missing = {"success": False, "error": e.message}
        # Remember misses briefly so repeated lookups skip the database
        cache.set(cache_key, missing, MISSING_PRODUCT_TTL)
        return JSONResponse(missing, status_code=404)

    result = jsonable_encoder(envelope(product))
    cache.set(cache_key, result, PRODUCT_TTL)
    return result


@router.get("/products/{product_id}/children")
async def child_products(product_id: int, db: Database = Depends(get_db)) -> dict:
    positive_id(product_id, "product")
    children = products.get_child_products(db, product_id)
    return envelope(children=children, count=len(children))


@router.get("/files/{file_id}")
async def get_file(
    file_id: int,
    db: Database = Depends(get_db),
    cache: TTLCache = Depends(get_cache),
) -> dict:
    cache_key = CacheKeys.image(file_id)
    cached = cache.get(cache_key)
    if cached:
        return cached

    result = envelope(products.get_file(db, file_id))
    cache.set(cache_key, result, FILE_TTL)
    return result

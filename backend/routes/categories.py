"""Category and subcategory routes."""

from fastapi import APIRouter, Depends, Query

from routes.deps import envelope, get_db, positive_id
from services import categories
from services.database import Database

router = APIRouter(prefix="/api")


@router.get("/category")
async def list_categories(
    page: int | None = Query(None),
    limit: int | None = Query(None),
    sort: str = Query("cat_priority"),
    order: str = Query("ASC"),
    status: str | None = Query(None),
    include_subcategories: bool = Query(False),
    parent_id: int | None = Query(None),
    db: Database = Depends(get_db),
) -> dict:
    result = categories.list_categories(
        db,
        page=page,
        limit=limit,
        sort=sort,
        order=order,
        status=status,
        include_subcategories=include_subcategories,
        parent_id=parent_id,
    )
    return envelope(result["categories"], pagination=result["pagination"])


@router.get("/category/hierarchy")
async def category_hierarchy(db: Database = Depends(get_db)) -> dict:
    return envelope(categories.get_category_hierarchy(db))


@router.get("/category/with-product-count")
async def categories_with_product_count(db: Database = Depends(get_db)) -> dict:
    return envelope(categories.get_categories_with_product_count(db))


@router.get("/category/{category_id}/subcategories")
async def subcategories_of_category(
    category_id: int,
    page: int = Query(1),
    limit: int = Query(10),
    sort: str = Query("cat_priority"),
    order: str = Query("ASC"),
    db: Database = Depends(get_db),
) -> dict:
    positive_id(category_id, "category")
    result = categories.get_subcategories_by_category(db, category_id, page, limit, sort, order)
    return envelope(result["subcategories"], pagination=result["pagination"])


@router.get("/category/{category_url}")
async def category_by_url(
    category_url: str,
    include_subcategories: bool = Query(False),
    db: Database = Depends(get_db),
) -> dict:
    return envelope(categories.get_category_by_url(db, category_url, include_subcategories))


@router.get("/subcategory/{subcategory_id}")
async def get_subcategory(subcategory_id: int, db: Database = Depends(get_db)) -> dict:
    return envelope(categories.get_subcategory(db, subcategory_id))

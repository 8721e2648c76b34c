"""Blog routes."""

from fastapi import APIRouter, Depends, Query

from routes.deps import envelope, get_db
from services import blogs
from services.database import Database

router = APIRouter(prefix="/api")


@router.get("/blogs")
async def list_blogs(
    page: int = Query(1),
    limit: int = Query(10),
    sort: str = Query("created_at"),
    order: str = Query("DESC"),
    status: str = Query("published"),
    category_id: int | None = Query(None),
    search: str | None = Query(None),
    db: Database = Depends(get_db),
) -> dict:
    result = blogs.list_blogs(db, page, limit, sort, order, status, category_id, search)
    return envelope(result, message="Blogs retrieved successfully")


@router.get("/blogs/featured")
async def featured_blogs(limit: int = Query(5), db: Database = Depends(get_db)) -> dict:
    return envelope(blogs.get_featured_blogs(db, limit), message="Featured blogs retrieved successfully")


@router.get("/blogs/recent")
async def recent_blogs(limit: int = Query(10), db: Database = Depends(get_db)) -> dict:
    return envelope(blogs.get_recent_blogs(db, limit), message="Recent blogs retrieved successfully")


@router.get("/blogs/slug/{slug}")
async def blog_by_slug(slug: str, db: Database = Depends(get_db)) -> dict:
    return envelope(blogs.get_blog_by_slug(db, slug), message="Blog retrieved successfully")


@router.get("/blogs/{blog_id}")
async def get_blog(blog_id: int, db: Database = Depends(get_db)) -> dict:
    return envelope(blogs.get_blog(db, blog_id), message="Blog retrieved successfully")


@router.get("/blogs/{blog_id}/related")
async def related_blogs(blog_id: int, limit: int = Query(5), db: Database = Depends(get_db)) -> dict:
    return envelope(blogs.get_related_blogs(db, blog_id, limit), message="Related blogs retrieved successfully")

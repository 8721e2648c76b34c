"""Blog article queries with reading-time estimates."""

import logging
import math
import re

from sqlmodel import col, or_, select

from errors import NotFoundError
from models.store import Blog
from services.database import Database
from services.pagination import count, normalize_order, order_by, page_info, paginate, pick_sort

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 200
BLOG_SORT_FIELDS = ("id", "blog_title", "created_at", "updated_at", "status")
STATUS_VALUES = {"published": 1, "draft": 0, "archived": 2}

_TAG_RE = re.compile(r"<[^>]*>")


def reading_time(text: str | None) -> int:
    """Minutes to read at 200 words per minute, never less than one."""
    words = _TAG_RE.sub("", text or "").split()
    return max(1, math.ceil(len(words) / WORDS_PER_MINUTE))


def _present(blog: Blog) -> dict:
    data = blog.model_dump()
    data["estimated_reading_time"] = reading_time(blog.description)
    data["title"] = blog.blog_title
    data["content"] = blog.description
    data["image"] = blog.images
    return data


def list_blogs(
    db: Database,
    page: int = 1,
    limit: int = 10,
    sort: str = "created_at",
    order: str = "DESC",
    status: str = "published",
    category_id: int | None = None,
    search: str | None = None,
) -> dict:
    page = max(page, 1)
    limit = max(limit, 1)
    sort = pick_sort(sort, BLOG_SORT_FIELDS, "created_at")
    order = normalize_order(order, "DESC")

    conditions = [Blog.status == STATUS_VALUES.get(status, 1)]
    if category_id:
        conditions.append(Blog.category_id == category_id)
    if search:
        pattern = f"%{search}%"
        conditions.append(or_(col(Blog.blog_title).like(pattern), col(Blog.description).like(pattern)))

    with db.session() as session:
        statement = select(Blog).where(*conditions)
        total = count(session, statement)
        statement = paginate(statement.order_by(order_by(getattr(Blog, sort), order)), page, limit)
        blogs = [_present(blog) for blog in session.exec(statement).all()]

    return {"blogs": blogs, "pagination": page_info(page, limit, total)}


def _published(db: Database, condition) -> dict:
    with db.session() as session:
        blog = session.exec(select(Blog).where(condition, Blog.status == 1)).first()
        if blog is None:
            raise NotFoundError("Blog not found")
        return _present(blog)


def get_blog(db: Database, blog_id: int) -> dict:
    return _published(db, Blog.id == blog_id)


def get_blog_by_slug(db: Database, slug: str) -> dict:
    return _published(db, Blog.blog_url == slug)


def _newest(db: Database, limit: int, *conditions) -> list[dict]:
    with db.session() as session:
        statement = (
            select(Blog)
            .where(Blog.status == 1, *conditions)
            .order_by(col(Blog.created_at).desc())
            .limit(max(limit, 1))
        )
        return [_present(blog) for blog in session.exec(statement).all()]


def get_featured_blogs(db: Database, limit: int = 5) -> list[dict]:
    return _newest(db, limit)


def get_recent_blogs(db: Database, limit: int = 10) -> list[dict]:
    return _newest(db, limit)


def get_related_blogs(db: Database, blog_id: int, limit: int = 5) -> list[dict]:
    """Most recent published blogs other than the given one."""
    get_blog(db, blog_id)
    return _newest(db, limit, Blog.id != blog_id)

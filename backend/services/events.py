"""Promotional event queries."""

from sqlmodel import col, select

from errors import NotFoundError
from models.store import Event
from services.database import Database
from services.pagination import check_page, count, normalize_order, order_by, page_info, paginate, pick_sort

EVENT_SORT_FIELDS = ("id", "name", "event_url", "status", "created_at")


def list_events(
    db: Database,
    page: int = 1,
    limit: int = 10,
    sort: str = "created_at",
    order: str = "DESC",
    status: int | None = 1,
) -> dict:
    check_page(page, limit)
    sort = pick_sort(sort, EVENT_SORT_FIELDS, "created_at")
    order = normalize_order(order, "DESC")

    conditions = [] if status is None else [Event.status == status]
    with db.session() as session:
        statement = select(Event).where(*conditions)
        total = count(session, statement)
        statement = paginate(statement.order_by(order_by(getattr(Event, sort), order)), page, limit)
        events = [event.model_dump() for event in session.exec(statement).all()]
    return {"events": events, "pagination": page_info(page, limit, total)}


def get_event(db: Database, event_id: int) -> dict:
    with db.session() as session:
        event = session.exec(select(Event).where(Event.id == event_id, Event.status == 1)).first()
        if event is None:
            raise NotFoundError("Event not found")
        return event.model_dump()


def get_featured_events(db: Database, limit: int = 5) -> list[dict]:
    with db.session() as session:
        statement = select(Event).where(Event.status == 1).order_by(col(Event.created_at).desc()).limit(max(limit, 1))
        return [event.model_dump() for event in session.exec(statement).all()]


def get_upcoming_events(db: Database, page: int = 1, limit: int = 10) -> dict:
    """Active events, oldest first."""
    return list_events(db, page=page, limit=limit, sort="created_at", order="ASC", status=1)

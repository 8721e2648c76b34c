"""Promotional event routes."""

from fastapi import APIRouter, Depends, Query

from routes.deps import envelope, get_db, positive_id
from services import events
from services.database import Database

router = APIRouter(prefix="/api")


@router.get("/events")
async def list_events(
    page: int = Query(1),
    limit: int = Query(10),
    sort: str = Query("created_at"),
    order: str = Query("DESC"),
    status: int = Query(1),
    db: Database = Depends(get_db),
) -> dict:
    result = events.list_events(db, page, limit, sort, order, status)
    return envelope(result["events"], pagination=result["pagination"])


@router.get("/events/featured")
async def featured_events(limit: int = Query(5), db: Database = Depends(get_db)) -> dict:
    return envelope(events.get_featured_events(db, limit))


@router.get("/events/upcoming")
async def upcoming_events(page: int = Query(1), limit: int = Query(10), db: Database = Depends(get_db)) -> dict:
    result = events.get_upcoming_events(db, page, limit)
    return envelope(result["events"], pagination=result["pagination"])


@router.get("/events/{event_id}")
async def get_event(event_id: int, db: Database = Depends(get_db)) -> dict:
    positive_id(event_id, "event")
    return envelope(events.get_event(db, event_id))

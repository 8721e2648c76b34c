"""Health and readiness check routes."""

import logging

from fastapi import APIRouter, Depends, Request

from routes.deps import get_db
from services.database import Database

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/ready")
async def ready(request: Request) -> dict:
    """Lightweight readiness check; no database call."""
    settings = request.app.state.settings
    return {"status": "ok", "service": "spice-store-api", "commit": settings.git_sha}


@router.get("/health")
async def health(request: Request, db: Database = Depends(get_db)) -> dict:
    """Deep health check that verifies database connectivity."""
    settings = request.app.state.settings
    result = {"status": "ok", "service": "spice-store-api", "commit": settings.git_sha, "database": "not_tested"}

    try:
        db.ping()
        result["database"] = "connected"
    except Exception as e:
        logger.exception("Database health check failed")
        result["status"] = "degraded"
        result["database"] = "error"
        result["database_error"] = str(e)

    return result

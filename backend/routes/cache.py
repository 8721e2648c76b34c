"""Response cache management routes."""

import logging

from fastapi import APIRouter, Depends, Query

from routes.deps import envelope, get_cache
from services.cache import TTLCache

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.get("/cache")
async def cache_stats(cache: TTLCache = Depends(get_cache)) -> dict:
    stats = cache.stats()
    return envelope(
        {
            "cacheSize": stats["size"],
            "cachedKeys": stats["keys"],
            "message": f"Cache contains {stats['size']} items",
        }
    )


@router.delete("/cache")
async def clear_cache(key: str | None = Query(None), cache: TTLCache = Depends(get_cache)) -> dict:
    """Delete one key when given, otherwise everything."""
    if key:
        deleted = cache.delete(key)
        return envelope(message=f"Cache key '{key}' deleted" if deleted else f"Cache key '{key}' not found")

    cache.clear()
    logger.info("Response cache cleared")
    return envelope(message="All cache cleared successfully")


@router.post("/cache")
async def sweep_cache(cache: TTLCache = Depends(get_cache)) -> dict:
    """Remove expired entries now instead of waiting for the periodic sweep."""
    before = cache.stats()["size"]
    cache.cleanup()
    after = cache.stats()["size"]
    removed = before - after
    return envelope(
        {
            "itemsBefore": before,
            "itemsAfter": after,
            "itemsRemoved": removed,
            "message": f"Cleanup completed. Removed {removed} expired items",
        }
    )

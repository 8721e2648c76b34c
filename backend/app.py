"""FastAPI application entry point for the spice store API."""

import asyncio
import contextlib
import logging
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import Settings, settings as default_settings
from errors import register_error_handlers
from middleware.gatekeeper import GatekeeperMiddleware, RateLimiter
from security import cors_middleware_options, load_security_config
from services.cache import TTLCache
from services.database import Database

# Structured logging: JSON for production, human-readable for local
if default_settings.is_production:
    logging.basicConfig(
        level=logging.INFO,
        format='{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}',
        stream=sys.stdout,
    )
else:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

logger = logging.getLogger(__name__)


def sweep_expired(app: FastAPI) -> int:
    """Drop expired entries from the response cache and the rate-limit store."""
    removed = app.state.cache.cleanup() + app.state.rate_limit_store.cleanup()
    if removed:
        logger.info("Cache sweep removed %d expired entries", removed)
    return removed


async def _sweep_periodically(app: FastAPI, interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        sweep_expired(app)


def create_app(
    settings: Settings | None = None,
    cache: TTLCache | None = None,
    rate_limit_store: TTLCache | None = None,
) -> FastAPI:
    settings = settings or default_settings
    app = FastAPI(title="Spice Store API", version="1.0.0")

    app.state.settings = settings
    app.state.cache = cache or TTLCache(default_ttl=settings.cache_default_ttl)
    app.state.db = Database(settings)

    security = load_security_config(settings)
    app.state.security = security
    app.state.rate_limit_store = rate_limit_store or TTLCache()
    limiter = RateLimiter(app.state.rate_limit_store, enforce=security.enable_rate_limit)
    app.add_middleware(GatekeeperMiddleware, config=security, limiter=limiter)
    # Outermost, so preflight requests are answered before the gatekeeper runs
    app.add_middleware(CORSMiddleware, **cors_middleware_options(security))

    # Centralized error handlers
    register_error_handlers(app)

    from routes.blogs import router as blogs_router
    from routes.cache import router as cache_router
    from routes.categories import router as categories_router
    from routes.coupons import router as coupons_router
    from routes.events import router as events_router
    from routes.health import router as health_router
    from routes.loyalty import router as loyalty_router
    from routes.orders import router as orders_router
    from routes.products import router as products_router

    app.include_router(health_router)
    app.include_router(products_router)
    app.include_router(categories_router)
    app.include_router(blogs_router)
    app.include_router(events_router)
    app.include_router(coupons_router)
    app.include_router(orders_router)
    app.include_router(loyalty_router)
    app.include_router(cache_router)

    @app.on_event("startup")
    async def _startup() -> None:
        for problem in settings.validate():
            logger.warning("Configuration: %s", problem)
        if security.enable_rate_limit:
            logger.info("Rate limiting enforced")
        else:
            logger.info("Rate limiting disabled; requests are counted as allowed")

        app.state.db.startup()
        app.state.sweeper = None
        if settings.cache_cleanup_interval > 0:
            app.state.sweeper = asyncio.create_task(
                _sweep_periodically(app, settings.cache_cleanup_interval)
            )

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        sweeper = getattr(app.state, "sweeper", None)
        if sweeper is not None:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper
        app.state.db.shutdown()

    return app


app = create_app()

"""Database service built on SQLModel and SQLAlchemy 2.0."""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import models.store  # noqa: F401  registers the tables on SQLModel.metadata
from config import Settings

logger = logging.getLogger(__name__)


class Database:
    """Owns the engine; hands out one session per unit of work."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.engine: Engine | None = None

    def _create_engine(self) -> Engine:
        url = self.settings.database_url
        kwargs: dict = {"echo": self.settings.database_echo}
        if url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            # In-memory SQLite lives and dies with its connection, so share one.
            if url in ("sqlite://", "sqlite:///:memory:"):
                kwargs["poolclass"] = StaticPool
        else:
            kwargs["pool_pre_ping"] = True
        return create_engine(url, **kwargs)

    def startup(self) -> None:
        """Create the engine and any missing tables."""
        if self.engine is not None:
            return
        for name in ("sqlalchemy.engine", "sqlalchemy.pool", "sqlalchemy.dialects"):
            logging.getLogger(name).setLevel(logging.WARNING)

        try:
            self.engine = self._create_engine()
            SQLModel.metadata.create_all(self.engine)
        except Exception:
            logger.exception("Database startup failed")
            raise
        logger.info("Database initialized")

    def shutdown(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None
            logger.info("Database connections closed")

    @contextmanager
    def session(self) -> Iterator[Session]:
        if self.engine is None:
            raise RuntimeError("Database not initialized")
        with Session(self.engine, expire_on_commit=False) as session:
            try:
                yield session
            except Exception:
                session.rollback()
                raise

    def ping(self) -> bool:
        with self.session() as session:
            session.execute(text("SELECT 1"))
        return True

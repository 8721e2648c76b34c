import pytest
from fastapi.testclient import TestClient

from app import create_app
from helpers import FakeClock, make_settings
from services.cache import TTLCache


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return TTLCache(clock=clock)


@pytest.fixture
def api(cache):
    app = create_app(settings=make_settings(), cache=cache)
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client


@pytest.fixture
def db(api):
    return api.app.state.db


@pytest.fixture
def seed(db):
    """Insert model instances and return them refreshed with their ids."""

    def _seed(*rows):
        with db.session() as session:
            session.add_all(rows)
            session.commit()
            for row in rows:
                session.refresh(row)
        return rows if len(rows) > 1 else rows[0]

    return _seed

"""
Pytest configuration and fixtures
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from layout_service import handlers
from layout_service.google_helpers import create_session_factory
from layout_service.layout_store import LayoutStore


def make_part(part_id="p1", **overrides):
    part = {
        "id": part_id,
        "type": "panel",
        "position": [0, 0],
        "origin": [0.5, 0.5],
        "anchor": [0, 1],
        "dimensions": [120, 80.5],
        "name": f"Part {part_id}",
    }
    part.update(overrides)
    return part


def make_layout(parts=None, **overrides):
    layout = {
        "panelDimensions": [1000, 600],
        "units": "mm",
        "name": "Sub layout",
        "parts": parts if parts is not None else [],
    }
    layout.update(overrides)
    return layout


@pytest.fixture
def nested_document():
    """Two levels: a door whose layout holds a handle."""
    return [
        make_part("door", partId="catalog-door-01", layout=make_layout([make_part("handle", type="hardware")])),
        make_part("window"),
    ]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    """A LayoutStore on an in-memory database, also used by the handlers"""
    store = LayoutStore(create_session_factory(engine))
    store.create_tables()
    handlers.set_layout_store(store)
    yield store
    handlers.set_layout_store(None)


@pytest.fixture
def broken_store(engine):
    """A LayoutStore whose tables were never created: every query fails"""
    store = LayoutStore(create_session_factory(engine))
    handlers.set_layout_store(store)
    yield store
    handlers.set_layout_store(None)


@pytest.fixture
def client(store):
    from server import app
    return TestClient(app)

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("SCHEDULER_ENABLED", "false")

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.db import Base
from app.core.security import create_access_token
from app.deps import get_db, get_emitter
from app.main import app
from app.models.user import User
from app.schemas.item import ItemCreateIn
from app.services import item_service


class RecordingEmitter:
    def __init__(self):
        self.events = []

    def emit(self, target, event, payload):
        self.events.append((target, event, payload))

    def named(self, event):
        return [e for e in self.events if e[1] == event]


class BrokenEmitter:
    def emit(self, target, event, payload):
        raise ConnectionError("push transport down")


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_fks(dbapi_conn, _):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    # SQLite has no "market" schema; tables live in the main database
    engine = engine.execution_options(schema_translate_map={"market": None})
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db(engine):
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    session = TestingSession()
    yield session
    session.close()


@pytest.fixture()
def emitter():
    return RecordingEmitter()


@pytest.fixture()
def client(db, emitter):
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_emitter] = lambda: emitter
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth(user_id):
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.fixture()
def make_user(db):
    def _make(user_id, display_name=None):
        user = User(id=user_id, email=f"{user_id}@surplus.app", display_name=display_name)
        db.add(user)
        db.commit()
        return user
    return _make


@pytest.fixture()
def alice(make_user):
    return make_user("alice", "Alice")


@pytest.fixture()
def bob(make_user):
    return make_user("bob", "Bob")


def item_payload(**overrides):
    data = {
        "title": "Day-old bread",
        "quantity": 10,
        "unit": "pcs",
        "expiry_date": (datetime.now(timezone.utc) + timedelta(days=2)).isoformat(),
        "category": "Bakery",
        "location": {"latitude": 27.7, "longitude": 85.3, "address": "Main street 1"},
    }
    data.update(overrides)
    return data


@pytest.fixture()
def make_item(db):
    def _make(owner, **overrides):
        return item_service.create_item(db, owner.id, ItemCreateIn(**item_payload(**overrides)))
    return _make


@pytest.fixture()
def headers():
    return auth


@pytest.fixture()
def new_item():
    return item_payload


@pytest.fixture()
def broken_emitter():
    return BrokenEmitter()

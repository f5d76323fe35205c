import pytest
from fastapi.testclient import TestClient

from taskflow.database import create_db_engine, create_session_factory, create_tables
from taskflow.main import create_app
from taskflow.models import User
from taskflow.notifications import NotificationQueue
from taskflow.services.hierarchy import HierarchyManager


class ManualHandle:
    def __init__(self, when, callback):
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Timer double: callbacks fire only when the test advances time."""

    def __init__(self):
        self.now = 0.0
        self.pending = []

    def call_later(self, delay, callback):
        handle = ManualHandle(self.now + delay, callback)
        self.pending.append(handle)
        return handle

    def advance(self, seconds):
        self.now += seconds
        due = sorted(
            (h for h in self.pending if not h.cancelled and h.when <= self.now),
            key=lambda h: h.when,
        )
        for handle in due:
            self.pending.remove(handle)
            handle.callback()


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://")
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = create_session_factory(engine)()
    yield session
    session.close()


@pytest.fixture
def hierarchy(db):
    return HierarchyManager(db)


@pytest.fixture
def user(db):
    user = User(email="owner@example.com", hashed_password="x")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def app(engine):
    return create_app(engine)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def queue(scheduler):
    return NotificationQueue(limit=3, scheduler=scheduler, clock=lambda: scheduler.now)

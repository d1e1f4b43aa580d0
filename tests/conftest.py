from datetime import date, datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from weekplanner.api.routes import get_cache
from weekplanner.main import app
from weekplanner.models.entities import FixedEvent, ScheduledBlock, Task, TaskSource, WorkingHours
from weekplanner.storage.database import Base, get_db


MONDAY = date(2024, 1, 1)


@pytest.fixture
def week_start():
    """Monday of the target week."""
    return MONDAY


@pytest.fixture
def working_hours():
    """09:00-17:30."""
    return WorkingHours(start_minutes=540, end_minutes=1050)


@pytest.fixture
def before_week():
    """An instant on the Sunday before the target week, so every day is in the future."""
    return datetime(2023, 12, 31, 8, 0)


@pytest.fixture
def monday_afternoon():
    """Monday 13:10 of the target week."""
    return datetime(2024, 1, 1, 13, 10)


@pytest.fixture
def standup():
    """Fixed event Monday 10:00-11:00."""
    return FixedEvent(
        id="standup",
        title="Standup",
        date=MONDAY,
        start_minutes=600,
        end_minutes=660,
    )


@pytest.fixture
def report_task():
    """90-minute non-splittable task due Monday."""
    return Task(
        id="report",
        title="Write report",
        duration_minutes=90,
        due_date=MONDAY,
        priority=3,
    )


@pytest.fixture
def existing_block():
    """Already scheduled task block Tuesday 09:00-10:00."""
    return ScheduledBlock(
        id="old:2024-01-02:540",
        source=TaskSource(task_id="old"),
        title="Old task",
        date=date(2024, 1, 2),
        start_minutes=540,
        end_minutes=600,
        color="#3b82f6",
    )


def make_task(task_id, duration, due, priority=2, can_split=False, completed=False):
    return Task(
        id=task_id,
        title=task_id.title(),
        duration_minutes=duration,
        due_date=due,
        priority=priority,
        can_split=can_split,
        completed=completed,
    )


@pytest.fixture
def task_factory():
    """Build tasks with only the fields a test cares about."""
    return make_task


class InMemoryCache:
    """Stand-in for the Redis-backed ScheduleCache."""

    def __init__(self):
        self.store = {}

    def get(self, request_hash):
        return self.store.get(request_hash)

    def set(self, request_hash, result):
        self.store[request_hash] = result

    def health_check(self):
        return True


@pytest.fixture
def client():
    """TestClient bound to an in-memory SQLite database and an in-memory cache."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    test_cache = InMemoryCache()

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache] = lambda: test_cache
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        Base.metadata.drop_all(bind=engine)

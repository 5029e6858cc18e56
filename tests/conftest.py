"""Pytest fixtures and configuration for taskplanner tests."""

import os

# Keep the app's module-level engine off the developer's database file.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from datetime import datetime
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from taskplanner.database.database import Base, get_db
from taskplanner.database import models  # noqa: F401  (registers tables)
from taskplanner.database.label_repository import LabelRepository
from taskplanner.database.list_repository import ListRepository
from taskplanner.database.repository import TaskRepository
from taskplanner.models.catalog import LabelCreate
from taskplanner.models.task import TaskCreate


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db_session():
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test.
    """
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragmas(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def now():
    """Fixed reference time: Wednesday 2025-01-15 09:30."""
    return datetime(2025, 1, 15, 9, 30, 0)


@pytest.fixture
def list_repository(db_session: Session):
    return ListRepository(db_session)


@pytest.fixture
def label_repository(db_session: Session):
    return LabelRepository(db_session)


@pytest.fixture
def task_repository(db_session: Session):
    """Create a TaskRepository instance for testing."""
    return TaskRepository(db_session)


@pytest.fixture
def inbox(list_repository):
    """The default inbox list."""
    return list_repository.ensure_default()


@pytest.fixture
def health_label(label_repository):
    return label_repository.create(LabelCreate(name="Health"))


@pytest.fixture
def work_label(label_repository):
    return label_repository.create(LabelCreate(name="work"))


@pytest.fixture
def sample_task(task_repository, inbox):
    """A persisted task in the inbox with two subtasks."""
    return task_repository.create(
        TaskCreate(
            list_id=inbox.id,
            title="Test Task",
            description="Test notes",
            estimated_minutes=30,
            subtask_titles=["first", "second"],
        )
    )


@pytest.fixture
def test_client(db_session: Session):
    """Create a FastAPI test client with overridden database dependency."""
    from taskplanner.api.app import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()

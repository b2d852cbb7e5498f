"""Pytest fixtures and configuration for studygrid tests."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from studygrid.database.database import Base
from studygrid.database import models  # noqa: F401
from studygrid.database.schedule_block_repository import ScheduleBlockRepository
from studygrid.models.schedule_block import BlockInput, ScheduleBlock
from studygrid.store.block_store import BlockStore


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture
def test_user_id():
    """Test user ID for multi-user testing."""
    return "test-user-123"


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
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def block_repository(db_session: Session):
    """Create a ScheduleBlockRepository instance for testing."""
    return ScheduleBlockRepository(db_session)


@pytest.fixture
def block_store(block_repository, test_user_id):
    """Empty BlockStore backed by the in-memory database."""
    store = BlockStore(test_user_id, block_repository)
    store.load()
    return store


class FlakyStorage:
    """Storage wrapper that fails selected operations on demand.

    ``fail`` holds operation names ("select", "insert", "update", "delete")
    that raise OperationalError. ``fail_update_ids`` makes update fail only
    for specific block ids.
    """

    def __init__(self, inner):
        self.inner = inner
        self.fail = set()
        self.fail_update_ids = set()
        self.calls = []

    def _check(self, operation):
        self.calls.append(operation)
        if operation in self.fail:
            raise OperationalError(operation, {}, Exception("database is unreachable"))

    def select(self, user_id):
        self._check("select")
        return self.inner.select(user_id)

    def insert(self, block):
        self._check("insert")
        return self.inner.insert(block)

    def update(self, user_id, block_id, fields):
        self._check("update")
        if block_id in self.fail_update_ids:
            raise OperationalError("update", {}, Exception("connection reset"))
        return self.inner.update(user_id, block_id, fields)

    def delete(self, user_id, block_id):
        self._check("delete")
        return self.inner.delete(user_id, block_id)


@pytest.fixture
def flaky_storage(block_repository):
    return FlakyStorage(block_repository)


@pytest.fixture
def flaky_store(flaky_storage, test_user_id):
    """BlockStore whose storage can be made to fail."""
    store = BlockStore(test_user_id, flaky_storage)
    store.load()
    return store


@pytest.fixture
def block_input():
    """Factory for BlockInput with overridable defaults."""
    def _make(**overrides) -> BlockInput:
        data = {
            "topic_name": "Arrays & Hashing",
            "day_of_week": 1,
            "start_hour": 9,
            "end_hour": 10,
        }
        data.update(overrides)
        return BlockInput(**data)
    return _make


@pytest.fixture
def make_block(test_user_id):
    """Factory for standalone ScheduleBlock objects (not stored)."""
    def _make(**overrides) -> ScheduleBlock:
        data = {
            "user_id": test_user_id,
            "topic_name": "Trees",
            "day_of_week": 1,
            "start_hour": 9,
            "end_hour": 10,
        }
        data.update(overrides)
        return ScheduleBlock(**data)
    return _make


@pytest.fixture
def populated_store(block_store, block_input):
    """Store with four blocks across two days."""
    block_store.add_block(block_input(topic_name="Arrays & Hashing", day_of_week=1, start_hour=9, end_hour=11))
    block_store.add_block(block_input(topic_name="Trees", day_of_week=1, start_hour=14, end_hour=16))
    block_store.add_block(block_input(topic_name="Binary Search", day_of_week=2, start_hour=9, end_hour=10))
    block_store.add_block(block_input(topic_name="Linked List", day_of_week=2, start_hour=10, end_hour=12))
    return block_store


@pytest.fixture
def topic_registry():
    """Restore the module-level topic tables after a test registers topics."""
    from studygrid.models import topic

    names = dict(topic._TOPIC_NAMES)
    registered = list(topic._REGISTERED_TOPICS)
    yield
    topic._TOPIC_NAMES.clear()
    topic._TOPIC_NAMES.update(names)
    topic._REGISTERED_TOPICS[:] = registered


@pytest.fixture
def test_client(db_session: Session):
    """Create a FastAPI test client with overridden database dependency."""
    from studygrid.api.app import app
    from studygrid.database.database import get_db

    # Override the get_db dependency to use our test database session
    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as client:
        yield client

    # Clean up dependency overrides
    app.dependency_overrides.clear()

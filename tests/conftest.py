"""
Shared test fixtures.

Sets up an isolated test database so tests never touch
the real database. Tables are created before each test and
dropped after it — no test data persists.
"""

import pytest

from finance_tracker.models import Base
from finance_tracker.models.base import build_engine, build_session_factory
from finance_tracker.store.sqlalchemy_store import SqlAlchemyStore


# Use SQLite for tests — no external database needed.
TEST_DATABASE_URL = "sqlite:///./test.db"

engine = build_engine(TEST_DATABASE_URL)

TestSessionLocal = build_session_factory(engine)

TEST_USER_ID = "user-1"


@pytest.fixture(autouse=True)
def setup_database():
    """
    Create all tables before each test, drop them after.

    autouse=True means every test gets this automatically.
    """
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Provide a database session for direct store testing."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def store(db_session):
    """A store scoped to the default test user."""
    return SqlAlchemyStore(db_session, TEST_USER_ID)


@pytest.fixture
def make_store(db_session):
    """Build a store of any LedgerStore subclass on the test session."""
    def _make(store_class=SqlAlchemyStore, user_id=TEST_USER_ID):
        return store_class(db_session, user_id)
    return _make

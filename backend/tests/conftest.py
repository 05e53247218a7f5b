"""
Central pytest configuration for the clinic schedules tests.

This file provides common fixtures, test markers, and setup
for both unit and integration tests.
"""

import os
from datetime import date, datetime, timezone

# Test environment (set early so import-time config and engines use it)
TEST_DATABASE_URL = "sqlite:///:memory:"  # In-memory SQLite for fast tests
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["TESTING"] = "true"
os.environ["TZ"] = "UTC"
os.environ["LOG_TO_FILE"] = "false"
os.environ.setdefault("LOG_LEVEL", "DEBUG")

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from clinic_schedules.db import base as _models  # noqa: E402,F401
from clinic_schedules.db.session import Base  # noqa: E402
from tests.config.markers import (  # noqa: E402,F401
    pytest_collection_modifyitems,
    pytest_configure,
)
from tests.factories.repository_factories import (  # noqa: E402
    BookingSourceFactory,
    ScheduleRepositoryFactory,
)
from tests.fixtures.domain_fixtures import *  # noqa: E402,F401,F403

# Monday. Weekday index 1 with 0 = Sunday.
TODAY = date(2025, 1, 6)
NOW = datetime(2025, 1, 6, 9, 30, tzinfo=timezone.utc)


# =====================================================
# CLOCK FIXTURES
# =====================================================


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def clock():
    """Injected ``today`` callable pinned to TODAY."""
    return lambda: TODAY


@pytest.fixture
def now_fn():
    """Injected ``now`` callable pinned to NOW."""
    return lambda: NOW


# =====================================================
# MOCK COLLABORATORS
# =====================================================


@pytest.fixture
def mock_schedule_repo():
    """Full IScheduleRepository mock with no schedules."""
    return ScheduleRepositoryFactory.create_mock_full()


@pytest.fixture
def mock_booking_source():
    """IBookingSource mock with both feeds empty."""
    return BookingSourceFactory.create_mock()


# =====================================================
# DATABASE FIXTURES
# =====================================================


@pytest.fixture
def db_session():
    """Provide a session on a fresh in-memory SQLite database."""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)
        test_engine.dispose()


# =====================================================
# FLASK APPLICATION FIXTURES
# =====================================================


@pytest.fixture
def app():
    """Application wired to the process-wide in-memory database."""
    from clinic_schedules.db.session import get_engine
    from clinic_schedules.main import create_app

    app = create_app(testing=True)
    try:
        yield app
    finally:
        engine = get_engine()
        Base.metadata.drop_all(bind=engine)
        Base.metadata.create_all(bind=engine)


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client

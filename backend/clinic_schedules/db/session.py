import logging

from sqlalchemy import create_engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from clinic_schedules.core import config

logger = logging.getLogger(__name__)

# Create Base class for models
Base = declarative_base()

# Internal lazy globals
_engine = None
_SessionLocal = None
_database_url = None


def get_engine():
    """Return a cached SQLAlchemy engine, creating it from DATABASE_URL on
    first call. This allows tests to set DATABASE_URL before the engine is
    constructed."""
    global _engine
    global _database_url
    global _SessionLocal

    database_url = config.get_database_url()
    # If engine not created yet or DATABASE_URL changed, (re)create engine
    if _engine is None or _database_url != database_url:
        if _engine is not None:
            _engine.dispose()
            _SessionLocal = None

        url = make_url(database_url)
        if url.drivername.startswith("sqlite"):
            if url.database in (None, "", ":memory:"):
                # Use a single shared in-memory database across the process
                # so DDL persists across connections.
                _engine = create_engine(
                    database_url,
                    connect_args={"check_same_thread": False},
                    poolclass=StaticPool,
                )
            else:
                _engine = create_engine(
                    database_url, connect_args={"check_same_thread": False}
                )
        else:
            _engine = create_engine(
                database_url,
                pool_pre_ping=True,  # Detects and refreshes stale connections
                pool_recycle=3600,
            )

        logger.info(
            "SQLAlchemy engine created",
            extra={
                "context": {
                    "dialect": _engine.dialect.name,
                    "url": url.render_as_string(hide_password=True),
                }
            },
        )
        _database_url = database_url
    return _engine


def get_sessionmaker():
    """Return a cached sessionmaker bound to the lazy engine."""
    global _SessionLocal
    engine = get_engine()
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return _SessionLocal


def SessionLocal():
    """Calling SessionLocal() returns a new Session instance."""
    return get_sessionmaker()()


def get_db():
    """Dependency to get database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables():
    """Create all tables in database using the lazy engine."""
    # Models must be imported so Base.metadata is populated
    from clinic_schedules.db import base  # noqa: F401

    Base.metadata.create_all(bind=get_engine())

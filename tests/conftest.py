"""
Soft Delete Test Configuration

Provides pytest fixtures for in-memory SQLite database, session and
persistence context management.
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from softdelete.context import PersistenceContext
from softdelete.database import build_filters, enable_sqlite_foreign_keys
from softdelete.models import Base


def make_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture(scope="session")
def db_engine():
    """Create an in-memory SQLite database for testing"""
    engine = make_engine()
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine):
    """
    Create a new database session for each test function.
    Rolls back all changes after the test completes.
    """
    connection = db_engine.connect()
    transaction = connection.begin()

    SessionLocal = sessionmaker(bind=connection)
    session = SessionLocal()

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def filters():
    return build_filters()


@pytest.fixture
def ctx(db_session: Session, filters):
    """Persistence context over the rolled-back test session"""
    return PersistenceContext(db_session, filters)


@pytest.fixture
def isolated_engine():
    """Private database for tests that let a commit fail"""
    engine = make_engine()
    yield engine
    engine.dispose()

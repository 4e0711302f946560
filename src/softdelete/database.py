"""
Database Setup

Engine, session factory and the soft delete configuration shared by every
unit of work.
"""

import logging

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from softdelete.config import DATABASE_URL, SQL_ECHO
from softdelete.context import ContextFactory
from softdelete.interceptor import SoftDeleteInterceptor
from softdelete.models import Base
from softdelete.read_filter import ReadFilterRegistry

logger = logging.getLogger(__name__)


def enable_sqlite_foreign_keys(engine) -> None:
    """SQLite ignores foreign keys unless enabled per connection"""

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_filters(base=Base) -> ReadFilterRegistry:
    filters = ReadFilterRegistry()
    registered = filters.register_soft_deletable(base)
    logger.info(f"Read filters registered for: {', '.join(t.__name__ for t in registered) or 'none'}")
    return filters


engine = create_engine(
    DATABASE_URL,
    echo=SQL_ECHO,
    connect_args={"check_same_thread": False} if "sqlite" in DATABASE_URL else {},
)
if engine.dialect.name == "sqlite":
    enable_sqlite_foreign_keys(engine)

SessionLocal = sessionmaker(autoflush=False, bind=engine)
ContextLocal = ContextFactory(SessionLocal, build_filters(), SoftDeleteInterceptor())


def init_db() -> None:
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Failed to create database tables: {e}")
        raise

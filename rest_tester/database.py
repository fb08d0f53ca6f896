"""
Database configuration and initialization for REST Tester.

Uses SQLite as the default storage backend with SQLAlchemy ORM. The
connection URL comes from ``Settings.database_url``.
"""

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from .config import get_settings


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine, applying SQLite-specific connect args when needed."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False  # Required for SQLite with FastAPI
    return create_engine(database_url, connect_args=connect_args, echo=echo)


_settings = get_settings()
engine = build_engine(_settings.database_url, echo=_settings.sql_echo)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


def init_db():
    """
    Initialize the database by creating all tables.

    Called at application startup; existing tables are left untouched.
    """
    # Register models on Base.metadata
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db():
    """
    Dependency function for FastAPI to get database sessions.

    Yields a database session and ensures it's closed after use.

    Usage:
        @router.get("/items")
        def get_items(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

"""
Database session management.
"""
import logging
from typing import Iterator
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from app.core.config import settings
from app.db.base import Base

logger = logging.getLogger(__name__)


def create_db_engine(url: str = None, **kwargs) -> Engine:
    """
    Build an engine for the given URL, DATABASE_URL by default.

    SQLite connections may be used from the worker thread serving a request;
    server databases get pre-ping and recycling instead.
    """
    url = url or settings.DATABASE_URL
    options = {"echo": settings.DB_ECHO, **kwargs}
    if url.startswith("sqlite"):
        options.setdefault("connect_args", {"check_same_thread": False})
    else:
        options.setdefault("pool_pre_ping", True)
        options.setdefault("pool_recycle", 3600)
    return create_engine(url, **options)


engine = create_db_engine()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Iterator[Session]:
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine = None):
    """Create every table that does not exist yet."""
    # Models register their tables on Base.metadata when imported
    import app.models  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables ready")

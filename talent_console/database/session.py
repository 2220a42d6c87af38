"""
Talent Console - Database Session Management
Engine creation, session factories and the transaction helper.
"""

import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from talent_console.core.config import Settings, get_settings
from .models import Base

logger = logging.getLogger(__name__)


def create_db_engine(settings: Optional[Settings] = None, url: Optional[str] = None) -> Engine:
    """
    Create the SQLAlchemy engine.

    Args:
        settings: Settings providing DATABASE_URL and DATABASE_ECHO
        url: Explicit database URL overriding the settings

    Returns:
        Configured engine
    """
    settings = settings or get_settings()
    url = url or settings.DATABASE_URL
    kwargs = {"echo": settings.DATABASE_ECHO}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url or url in ("sqlite://", "sqlite+pysqlite://"):
            # Share one connection so every session sees the same database
            kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create a session factory bound to the engine."""
    return sessionmaker(bind=engine, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables initialized")


@contextmanager
def transaction(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Context manager for a database transaction; rolls back on error."""
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception as e:
        logger.error(f"Transaction failed, rolling back: {e}")
        session.rollback()
        raise
    finally:
        session.close()

"""
db/session.py

Lazily created engine and session factory for the crawler store.
"""

from __future__ import annotations

from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from db.config import get_database_settings

_engine: Engine | None = None
_session_factory: sessionmaker | None = None


def get_engine() -> Engine:
    """Return the shared engine, creating it on first call."""
    global _engine
    if _engine is None:
        settings = get_database_settings()
        _engine = create_engine(
            settings.url,
            echo=settings.echo,
            pool_pre_ping=True,
            pool_recycle=settings.pool_recycle_seconds,
            pool_size=settings.pool_size,
            max_overflow=settings.max_overflow,
        )
    return _engine


def SessionLocal() -> Session:
    """New session bound to the shared engine. Nothing connects at import time."""
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(
            bind=get_engine(),
            class_=Session,
            autoflush=False,
            expire_on_commit=False,
        )
    return _session_factory()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

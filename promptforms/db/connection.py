"""
Engine and session plumbing.

One engine per process, built from ``Settings.database_url``.  Request
handlers get a session through ``get_db_session``, which commits when the
handler returns normally and rolls back if it raises.
"""

from functools import lru_cache
from typing import Iterator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from promptforms.config import get_settings


def build_engine(url: str) -> Engine:
    """Create an engine for *url*; SQLite gets no pool sizing."""
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
        pool_timeout=10,
    )


@lru_cache()
def get_engine() -> Engine:
    return build_engine(get_settings().database_url)


@lru_cache()
def get_session_factory() -> sessionmaker[Session]:
    return sessionmaker(bind=get_engine(), expire_on_commit=False)


def get_db_session() -> Iterator[Session]:
    """FastAPI dependency: one transaction per request."""
    session = get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

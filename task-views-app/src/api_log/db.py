"""Engine and session handling for the API call log."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional, Tuple

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .config import get_config

# (url, engine, session factory) for the last URL used
_bound: Optional[Tuple[str, Engine, sessionmaker]] = None


def _resolve_url(database_url: Optional[str]) -> str:
    return database_url or get_config().database_url


def _bind(database_url: Optional[str]) -> Tuple[Engine, sessionmaker]:
    """Engine and session factory for ``database_url`` (config URL by default).

    One engine is kept at a time; switching URLs disposes the previous one.
    """
    global _bound

    url = _resolve_url(database_url)
    if _bound is not None:
        bound_url, engine, factory = _bound
        if bound_url == url:
            return engine, factory
        engine.dispose()

    # Streamlit reruns scripts on worker threads
    connect_args = {"check_same_thread": False} if url.startswith("sqlite:") else {}
    engine = create_engine(url, connect_args=connect_args, pool_pre_ping=True)
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    _bound = (url, engine, factory)
    return engine, factory


def get_engine(database_url: Optional[str] = None) -> Engine:
    return _bind(database_url)[0]


def get_session(database_url: Optional[str] = None) -> Session:
    return _bind(database_url)[1]()


@contextmanager
def session_scope(database_url: Optional[str] = None) -> Iterator[Session]:
    """Session that commits on success, rolls back on error and always closes."""
    session = get_session(database_url)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_backend_name(database_url: Optional[str] = None) -> str:
    """Database backend name (sqlite, postgresql, ...)."""
    return get_engine(database_url).url.get_backend_name()

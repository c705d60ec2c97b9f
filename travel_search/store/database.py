from __future__ import annotations

import logging
from typing import Any, Iterator, Optional

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from travel_search.config import get_settings


logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def _unicode_lower(value: Optional[str]) -> Optional[str]:
    return value.lower() if value is not None else None


def make_engine(database_url: Optional[str] = None, **engine_kwargs: Any) -> Engine:
    """Create an engine for the configured database (DATABASE_URL).

    On SQLite the built-in ``lower()`` only folds ASCII, so it is replaced per
    connection with Python's ``str.lower`` to keep search case-insensitive for
    accented text.
    """
    url = database_url or get_settings().database_url
    is_sqlite = url.startswith("sqlite")
    connect_args = {"check_same_thread": False} if is_sqlite else {}
    engine = create_engine(url, connect_args=connect_args, **engine_kwargs)

    if is_sqlite:
        @event.listens_for(engine, "connect")
        def _register_lower(dbapi_conn, connection_record):
            dbapi_conn.create_function("lower", 1, _unicode_lower, deterministic=True)

    return engine


def make_session_factory(bind: Engine) -> sessionmaker[Session]:
    return sessionmaker(autocommit=False, autoflush=False, bind=bind)


engine = make_engine()
SessionLocal = make_session_factory(engine)


def init_db(bind: Optional[Engine] = None) -> None:
    """Create tables if they don't exist. Called once on startup."""
    # Register models on Base.metadata before create_all.
    from travel_search.store import models  # noqa: F401

    target = bind or engine
    logger.info("Ensuring tables exist on %s", target.url.render_as_string(hide_password=True))
    Base.metadata.create_all(bind=target)


def get_db(request: Request) -> Iterator[Session]:
    """Session from the application's own factory, or the module default."""
    factory = getattr(request.app.state, "session_factory", SessionLocal)
    db = factory()
    try:
        yield db
    finally:
        db.close()

"""SQLAlchemy engine and session factory helpers.

The repositories are synchronous, so a plain :class:`~sqlalchemy.Engine`
and :class:`~sqlalchemy.orm.sessionmaker` are used.  In-memory SQLite URLs
get a single shared connection so the schema survives across sessions.
"""

from __future__ import annotations

import logging

from sqlalchemy import Engine
from sqlalchemy import create_engine as sa_create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base

logger = logging.getLogger(__name__)


def _is_sqlite_memory(url: str) -> bool:
    return url.startswith("sqlite") and (":memory:" in url or url.rstrip("/") in ("sqlite:", "sqlite+pysqlite:"))


def create_engine(url: str, *, echo: bool = False) -> Engine:
    """Create and return a new SQLAlchemy :class:`Engine`.

    Args:
        url: Database connection URL, e.g. ``sqlite:///teamflow.db`` or
            ``postgresql+psycopg://...``.
        echo: If ``True``, log all emitted SQL statements.
    """
    kwargs: dict = {}
    if _is_sqlite_memory(url):
        kwargs.update(
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    engine = sa_create_engine(url, echo=echo, **kwargs)
    logger.info("Created engine for %s", url.split("@")[-1])
    return engine


def create_all(engine: Engine) -> None:
    """Create all tables defined in the ORM metadata."""
    Base.metadata.create_all(engine)
    logger.info("Database tables created / verified.")


def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)

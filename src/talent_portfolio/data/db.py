"""Engine and session handling for the reference portfolio API.

The API stores two tables, ``profiles`` and ``portfolio_media``. The engine
is created lazily from ``DB_URL`` (a SQLite file at the project root when
unset) and creates both tables on first use. ``get_session()`` wraps one
request's work in a single transaction, which is what lets a bulk portfolio
sync be applied all or nothing.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""


_engine = None
_SessionLocal: sessionmaker[Session] | None = None


def get_database_url() -> str:
    """Return the database URL, allowing overrides via environment variable."""
    env_url = os.getenv("DB_URL")
    if env_url:
        return env_url

    project_root = Path(__file__).resolve().parents[3]
    db_path = project_root / "database.db"
    return URL.create("sqlite", database=str(db_path)).render_as_string(hide_password=False)


def _get_engine() -> Engine:
    global _engine
    if _engine is None:
        database_url = get_database_url()
        _engine = create_engine(database_url, echo=False, future=True)
        # Tables for profiles and portfolio media are created on first use.
        _ensure_tables_created()
    return _engine


def _ensure_tables_created() -> None:
    """Create the profiles and portfolio_media tables if they are missing."""
    # Both models must be imported so their tables are on Base.metadata.
    from talent_portfolio.data.models import portfolio_media, profile  # noqa: F401

    Base.metadata.create_all(bind=_engine)


def _get_session_factory() -> sessionmaker[Session]:
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(
            bind=_get_engine(),
            autoflush=False,
            expire_on_commit=False,
        )
    return _SessionLocal


def init_db() -> None:
    """Create all tables defined on the Base metadata.

    Tables are also created on first database access; this exists for
    explicit initialization in the API lifespan and in tests.
    """
    _get_engine()


@contextmanager
def get_session() -> Iterator[Session]:
    """Provide a transactional scope around a series of operations."""
    session = _get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

"""Pooled engine and session factory for authorization storage."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

__all__ = ["make_session_factory", "make_storage_engine"]


def make_storage_engine(
    url: str,
    *,
    pool_size: int = 5,
    max_overflow: int = 10,
    pool_timeout: float = 30.0,
    **kwargs: Any,
) -> Engine:
    """Create a pooled engine whose checkout fails fast when exhausted.

    When every pooled connection is in use, a check waits at most
    *pool_timeout* seconds before SQLAlchemy raises ``TimeoutError``, which
    the engine reports as ``StorageUnavailable``.

    Args:
        url: Database URL.
        pool_size: Connections kept open in the pool.
        max_overflow: Extra connections allowed beyond *pool_size*.
        pool_timeout: Seconds to wait for a free connection.
        **kwargs: Passed through to :func:`sqlalchemy.create_engine`.

    Example::

        engine = make_storage_engine("postgresql+psycopg://...", pool_timeout=2)
    """
    return create_engine(
        url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_timeout=pool_timeout,
        pool_pre_ping=True,
        **kwargs,
    )


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Return the session factory the authorization engine acquires from."""
    return sessionmaker(bind=engine, expire_on_commit=False)

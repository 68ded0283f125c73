"""Database engine and session management."""

from __future__ import annotations

from pathlib import Path
from typing import Any, AsyncIterator

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from holiday_promo.config.settings import get_settings


def build_engine(database_url: str, **engine_options: Any) -> AsyncEngine:
    """Create an async engine, making room for a file-backed SQLite database."""

    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database not in (None, "", ":memory:"):
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    return create_async_engine(url, future=True, **engine_options)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Job rows are read back after commit by the API and the worker.
    return async_sessionmaker(bind, expire_on_commit=False, class_=AsyncSession)


engine = build_engine(get_settings().database_url)
AsyncSessionFactory = build_session_factory(engine)


async def get_session() -> AsyncIterator[AsyncSession]:
    """Yield a managed asynchronous SQLAlchemy session."""

    async with AsyncSessionFactory() as session:
        yield session


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create the theme, product and generation tables if they do not exist."""

    from holiday_promo.db import models  # noqa: WPS433

    async with (bind or engine).begin() as conn:
        await conn.run_sync(models.Base.metadata.create_all)


async def ping_database(bind: AsyncEngine | None = None) -> bool:
    """Return ``True`` when the database answers a trivial query."""

    async with (bind or engine).connect() as conn:
        result = await conn.execute(text("SELECT 1"))
        return result.scalar_one() == 1

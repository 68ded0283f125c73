"""Shared fixtures: in-memory database, local storage and seeded data."""

from __future__ import annotations

import os
from pathlib import Path

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from holiday_promo.db import models
from holiday_promo.db.session import build_engine, build_session_factory, init_db
from holiday_promo.services.products import ProductService
from holiday_promo.services.themes import ThemeCatalog
from holiday_promo.storage.backend import LocalStorage

BASE_URL = "http://testserver"


@pytest_asyncio.fixture
async def session_factory() -> async_sessionmaker[AsyncSession]:
    engine = build_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(engine)
    yield build_session_factory(engine)
    await engine.dispose()


@pytest_asyncio.fixture
async def session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncSession:
    async with session_factory() as session:
        yield session


@pytest.fixture
def storage(tmp_path: Path) -> LocalStorage:
    return LocalStorage(tmp_path / "media", BASE_URL)


@pytest_asyncio.fixture
async def seeded_themes(session: AsyncSession) -> None:
    await ThemeCatalog().seed_if_empty(session)


@pytest.fixture
def make_product(session: AsyncSession, storage: LocalStorage):
    """Store an image blob and create a product row for ``user_id``."""

    async def _make(user_id: str = "user-1", *, with_image: bool = True, name: str | None = None) -> models.Product:
        if with_image:
            image_id = await storage.save(b"\xff\xd8product-photo", "image/jpeg")
        else:
            image_id = "never-uploaded.jpg"
        return await ProductService().create(session, user_id=user_id, image_id=image_id, name=name)

    return _make

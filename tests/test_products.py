"""Tests for the product store and its ownership checks."""

from __future__ import annotations

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from holiday_promo.db import models
from holiday_promo.errors import NotFoundOrUnauthorized
from holiday_promo.services.generations import GenerationService
from holiday_promo.services.products import ProductService
from holiday_promo.storage.backend import LocalStorage


@pytest.mark.asyncio
async def test_list_for_owner_resolves_image_urls(
    session: AsyncSession,
    storage: LocalStorage,
    make_product,
) -> None:
    mine = await make_product("user-1", name="candle")
    await make_product("user-2")
    orphan = await make_product("user-1", with_image=False)

    views = await ProductService().list_for_owner(session, storage, user_id="user-1")

    assert [view.product.id for view in views] == [mine.id, orphan.id]
    assert views[0].image_url == f"http://testserver/storage/files/{mine.image_id}"
    assert views[1].image_url is None


@pytest.mark.asyncio
async def test_delete_requires_ownership(session: AsyncSession, make_product) -> None:
    product = await make_product("user-1")
    service = ProductService()

    with pytest.raises(NotFoundOrUnauthorized):
        await service.delete(session, user_id="intruder", product_id=product.id)
    with pytest.raises(NotFoundOrUnauthorized):
        await service.delete(session, user_id="user-1", product_id=product.id + 100)

    await service.delete(session, user_id="user-1", product_id=product.id)
    assert await session.get(models.Product, product.id) is None


@pytest.mark.asyncio
async def test_delete_leaves_generations_untouched(
    session: AsyncSession,
    seeded_themes: None,
    make_product,
) -> None:
    product = await make_product("user-1")
    generation = await GenerationService().create(
        session,
        user_id="user-1",
        product_ids=[product.id],
        theme="Holiday Sale",
        style="promotion-only",
        scheduler=lambda generation_id: None,
    )

    product_id, generation_id = product.id, generation.id
    await ProductService().delete(session, user_id="user-1", product_id=product_id)
    reloaded = await session.get(models.Generation, generation_id, populate_existing=True)

    assert await session.get(models.Product, product_id) is None
    assert reloaded.product_ids == [product_id]
    assert reloaded.status == "pending"

"""Tests for generation creation, status transitions and owner queries."""

from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from holiday_promo.db import models
from holiday_promo.errors import (
    GenerationNotFound,
    InvalidStatusTransition,
    NotFoundOrUnauthorized,
    ThemeNotFound,
    Unauthenticated,
)
from holiday_promo.services.generations import GenerationService
from holiday_promo.services.status import GenerationStatus
from holiday_promo.services.themes import BUILTIN_THEMES
from holiday_promo.storage.backend import LocalStorage

CHRISTMAS_PROMPT = next(theme["prompt"] for theme in BUILTIN_THEMES if theme["name"] == "Christmas Bundle")


async def _generation_count(session: AsyncSession) -> int:
    return await session.scalar(select(func.count()).select_from(models.Generation))


async def _create(session: AsyncSession, product_ids: list[int], scheduled: list[int], **overrides):
    params = {
        "user_id": "user-1",
        "product_ids": product_ids,
        "theme": "Christmas Bundle",
        "style": "holiday-theme",
        "scheduler": scheduled.append,
    }
    params.update(overrides)
    return await GenerationService().create(session, **params)


@pytest.mark.asyncio
async def test_create_inserts_pending_job_and_schedules_once(
    session: AsyncSession,
    seeded_themes: None,
    make_product,
) -> None:
    first = await make_product()
    second = await make_product()
    scheduled: list[int] = []

    generation = await _create(session, [second.id, first.id], scheduled)

    assert scheduled == [generation.id]
    assert generation.status == GenerationStatus.PENDING.value
    assert generation.product_ids == [second.id, first.id]
    assert generation.prompt == CHRISTMAS_PROMPT + " Emphasize the holiday atmosphere and seasonal elements."
    assert generation.result_image_id is None
    assert generation.error_message is None


@pytest.mark.asyncio
async def test_create_keeps_unknown_style_without_suffix(
    session: AsyncSession,
    seeded_themes: None,
    make_product,
) -> None:
    product = await make_product()

    generation = await _create(session, [product.id], [], style="vintage")

    assert generation.style == "vintage"
    assert generation.prompt == CHRISTMAS_PROMPT


@pytest.mark.asyncio
async def test_create_requires_identity(session: AsyncSession, seeded_themes: None, make_product) -> None:
    product = await make_product()
    scheduled: list[int] = []

    with pytest.raises(Unauthenticated):
        await _create(session, [product.id], scheduled, user_id=None)

    assert scheduled == []
    assert await _generation_count(session) == 0


@pytest.mark.asyncio
async def test_create_rejects_foreign_product(session: AsyncSession, seeded_themes: None, make_product) -> None:
    mine = await make_product("user-1")
    theirs = await make_product("user-2")
    scheduled: list[int] = []

    with pytest.raises(NotFoundOrUnauthorized):
        await _create(session, [mine.id, theirs.id], scheduled)
    with pytest.raises(NotFoundOrUnauthorized):
        await _create(session, [theirs.id + 100], scheduled)

    assert scheduled == []
    assert await _generation_count(session) == 0


@pytest.mark.asyncio
async def test_create_rejects_unknown_theme(session: AsyncSession, seeded_themes: None, make_product) -> None:
    product = await make_product()
    scheduled: list[int] = []

    with pytest.raises(ThemeNotFound):
        await _create(session, [product.id], scheduled, theme="Summer Beach")

    assert scheduled == []
    assert await _generation_count(session) == 0


@pytest.mark.asyncio
async def test_status_only_moves_forward(session: AsyncSession, seeded_themes: None, make_product) -> None:
    product = await make_product()
    generation = await _create(session, [product.id], [])
    service = GenerationService()

    with pytest.raises(InvalidStatusTransition):
        await service.update_status(session, generation_id=generation.id, status=GenerationStatus.COMPLETED, result_image_id="r.jpg")

    await service.update_status(session, generation_id=generation.id, status=GenerationStatus.PROCESSING)
    failed = await service.update_status(session, generation_id=generation.id, status=GenerationStatus.FAILED)

    assert failed.error_message == "Unknown error"
    assert failed.result_image_id is None
    for target in GenerationStatus:
        with pytest.raises(InvalidStatusTransition):
            await service.update_status(
                session,
                generation_id=generation.id,
                status=target,
                result_image_id="r.jpg",
                error_message="again",
            )


@pytest.mark.asyncio
async def test_completed_keeps_result_and_drops_error(
    session: AsyncSession,
    seeded_themes: None,
    make_product,
) -> None:
    product = await make_product()
    generation = await _create(session, [product.id], [])
    service = GenerationService()
    await service.update_status(session, generation_id=generation.id, status=GenerationStatus.PROCESSING)

    with pytest.raises(ValueError):
        await service.update_status(session, generation_id=generation.id, status=GenerationStatus.COMPLETED)
    completed = await service.update_status(
        session,
        generation_id=generation.id,
        status=GenerationStatus.COMPLETED,
        result_image_id="result.jpg",
        error_message="ignored",
    )

    assert completed.status == "completed"
    assert completed.result_image_id == "result.jpg"
    assert completed.error_message is None


@pytest.mark.asyncio
async def test_update_status_of_missing_generation(session: AsyncSession) -> None:
    with pytest.raises(GenerationNotFound):
        await GenerationService().update_status(session, generation_id=404, status=GenerationStatus.PROCESSING)


@pytest.mark.asyncio
async def test_list_for_owner_newest_first(
    session: AsyncSession,
    storage: LocalStorage,
    seeded_themes: None,
    make_product,
) -> None:
    product = await make_product("user-1")
    other = await make_product("user-2")
    older = await _create(session, [product.id], [])
    newer = await _create(session, [product.id], [], theme="Holiday Sale")
    await _create(session, [other.id], [], user_id="user-2")

    service = GenerationService()
    result_id = await storage.save(b"result", "image/jpeg")
    await service.update_status(session, generation_id=older.id, status=GenerationStatus.PROCESSING)
    await service.update_status(
        session, generation_id=older.id, status=GenerationStatus.COMPLETED, result_image_id=result_id
    )

    views = await service.list_for_owner(session, storage, user_id="user-1")

    assert [view.generation.id for view in views] == [newer.id, older.id]
    assert views[0].result_image_url is None
    assert views[1].result_image_url == f"http://testserver/storage/files/{result_id}"


@pytest.mark.asyncio
async def test_list_for_anonymous_is_empty(session: AsyncSession, storage: LocalStorage) -> None:
    assert await GenerationService().list_for_owner(session, storage, user_id=None) == []


@pytest.mark.asyncio
async def test_get_for_owner_hides_other_users_jobs(
    session: AsyncSession,
    storage: LocalStorage,
    seeded_themes: None,
    make_product,
) -> None:
    product = await make_product("user-1")
    generation = await _create(session, [product.id], [])
    service = GenerationService()

    view = await service.get_for_owner(session, storage, user_id="user-1", generation_id=generation.id)

    assert view.generation.id == generation.id
    with pytest.raises(GenerationNotFound):
        await service.get_for_owner(session, storage, user_id="user-2", generation_id=generation.id)

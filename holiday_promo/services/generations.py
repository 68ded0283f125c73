"""Generation job records: creation, status updates and owner queries."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from holiday_promo.db import models
from holiday_promo.errors import GenerationNotFound, InvalidStatusTransition, Unauthenticated
from holiday_promo.imggen.prompt_builder import PromptBuilder
from holiday_promo.metrics.prometheus_exporter import generation_requests_total
from holiday_promo.services.products import ProductService
from holiday_promo.services.status import GenerationStatus
from holiday_promo.services.themes import ThemeCatalog
from holiday_promo.storage.backend import StorageBackend

logger = logging.getLogger(__name__)

UNKNOWN_ERROR = "Unknown error"

Scheduler = Callable[[int], None]


@dataclass(slots=True)
class GenerationView:
    """Generation row together with its resolved result URL."""

    generation: models.Generation
    result_image_url: str | None


class GenerationService:
    """Owns the generation table; only the worker advances a job after creation."""

    def __init__(
        self,
        product_service: ProductService | None = None,
        theme_catalog: ThemeCatalog | None = None,
        prompt_builder: PromptBuilder | None = None,
    ) -> None:
        self._products = product_service or ProductService()
        self._themes = theme_catalog or ThemeCatalog()
        self._prompt_builder = prompt_builder or PromptBuilder()

    async def create(
        self,
        session: AsyncSession,
        *,
        user_id: str | None,
        product_ids: Sequence[int],
        theme: str,
        style: str,
        scheduler: Scheduler,
    ) -> models.Generation:
        """Validate the request, insert a pending job and hand it to the worker.

        Validation failures raise before anything is written. The scheduler is
        called once, after the commit, and is not awaited for completion.
        """

        if not user_id:
            raise Unauthenticated()

        for product_id in product_ids:
            await self._products.get_owned(session, user_id=user_id, product_id=product_id)

        theme_row = await self._themes.get_active_by_name(session, theme)
        prompt = self._prompt_builder.build(theme_row.prompt, style)

        generation = models.Generation(
            user_id=user_id,
            product_ids=list(product_ids),
            theme=theme,
            style=style,
            prompt=prompt,
            status=GenerationStatus.PENDING.value,
        )
        session.add(generation)
        await session.commit()
        await session.refresh(generation)

        generation_requests_total.inc()
        logger.info(
            "Created generation %s for user %s (theme=%s, style=%s, products=%d)",
            generation.id,
            user_id,
            theme,
            style,
            len(product_ids),
        )
        scheduler(generation.id)
        return generation

    async def get(self, session: AsyncSession, generation_id: int) -> models.Generation:
        """Return a generation by id regardless of owner."""

        generation = await session.get(models.Generation, generation_id)
        if generation is None:
            raise GenerationNotFound()
        return generation

    async def update_status(
        self,
        session: AsyncSession,
        *,
        generation_id: int,
        status: GenerationStatus,
        result_image_id: str | None = None,
        error_message: str | None = None,
    ) -> models.Generation:
        """Move a generation forward and keep the result/error fields consistent."""

        if status is GenerationStatus.COMPLETED and not result_image_id:
            raise ValueError("A completed generation needs a result image id.")

        generation = await self.get(session, generation_id)
        current = GenerationStatus(generation.status)
        if not current.can_move_to(status):
            raise InvalidStatusTransition(
                f"Cannot move generation {generation_id} from {current.value} to {status.value}"
            )

        generation.status = status.value
        generation.result_image_id = result_image_id if status is GenerationStatus.COMPLETED else None
        generation.error_message = (error_message or UNKNOWN_ERROR) if status is GenerationStatus.FAILED else None

        session.add(generation)
        await session.commit()
        return generation

    async def list_for_owner(
        self,
        session: AsyncSession,
        storage: StorageBackend,
        *,
        user_id: str | None,
    ) -> list[GenerationView]:
        """Return the user's generations, newest first; empty when anonymous."""

        if not user_id:
            return []

        stmt = (
            select(models.Generation)
            .where(models.Generation.user_id == user_id)
            .order_by(models.Generation.created_at.desc(), models.Generation.id.desc())
        )
        result = await session.execute(stmt)
        return [await self._view(storage, generation) for generation in result.scalars().all()]

    async def get_for_owner(
        self,
        session: AsyncSession,
        storage: StorageBackend,
        *,
        user_id: str,
        generation_id: int,
    ) -> GenerationView:
        generation = await session.get(models.Generation, generation_id)
        if generation is None or generation.user_id != user_id:
            raise GenerationNotFound()
        return await self._view(storage, generation)

    @staticmethod
    async def _view(storage: StorageBackend, generation: models.Generation) -> GenerationView:
        result_url = None
        if generation.result_image_id:
            result_url = await storage.resolve_url(generation.result_image_id)
        return GenerationView(generation=generation, result_image_url=result_url)

"""Worker-side pipeline that turns a pending generation into a result image."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol, Sequence

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from holiday_promo.db import models
from holiday_promo.errors import (
    DomainError,
    DownloadFailed,
    NoProductImages,
    UploadFailed,
)
from holiday_promo.metrics.prometheus_exporter import generation_outcomes_total
from holiday_promo.services.generations import UNKNOWN_ERROR, GenerationService
from holiday_promo.services.status import GenerationStatus
from holiday_promo.storage.backend import StorageBackend

logger = logging.getLogger(__name__)

RESULT_CONTENT_TYPE = "image/jpeg"


class ImageGenerator(Protocol):
    async def generate(self, prompt: str, image_urls: Sequence[str]) -> str: ...


@dataclass(frozen=True, slots=True)
class GenerationOutcome:
    """Terminal result of one pipeline run."""

    status: GenerationStatus
    result_image_id: str | None = None
    error_message: str | None = None

    @classmethod
    def completed(cls, result_image_id: str) -> "GenerationOutcome":
        return cls(status=GenerationStatus.COMPLETED, result_image_id=result_image_id)

    @classmethod
    def failed(cls, exc: BaseException) -> "GenerationOutcome":
        return cls(status=GenerationStatus.FAILED, error_message=str(exc) or UNKNOWN_ERROR)


class GenerationPipeline:
    """Runs one generation job end to end; every step failure becomes ``failed``."""

    def __init__(
        self,
        *,
        session_factory: async_sessionmaker[AsyncSession],
        storage: StorageBackend,
        generator: ImageGenerator,
        http_client: httpx.AsyncClient,
        generation_service: GenerationService | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._storage = storage
        self._generator = generator
        self._http = http_client
        self._generations = generation_service or GenerationService()

    async def run(self, generation_id: int) -> GenerationOutcome | None:
        """Process the job and persist its terminal status.

        Returns ``None`` when the job could not be claimed (missing row or a
        status that cannot move to ``processing``).
        """

        async with self._session_factory() as session:
            try:
                await self._generations.update_status(
                    session,
                    generation_id=generation_id,
                    status=GenerationStatus.PROCESSING,
                )
            except DomainError as exc:
                logger.warning("Skipping generation %s: %s", generation_id, exc)
                return None

            logger.info("Processing generation %s", generation_id)
            outcome = await self._execute(session, generation_id)
            await self._finalise(session, generation_id, outcome)
            return outcome

    async def _execute(self, session: AsyncSession, generation_id: int) -> GenerationOutcome:
        try:
            generation = await self._generations.get(session, generation_id)
            image_urls = await self._resolve_product_images(session, generation)
            if not image_urls:
                raise NoProductImages()

            result_url = await self._generator.generate(generation.prompt, image_urls)
            image_bytes = await self._download(result_url)
            storage_id = await self._upload(image_bytes)
        except Exception as exc:
            logger.exception("Generation %s failed", generation_id)
            await session.rollback()
            return GenerationOutcome.failed(exc)
        return GenerationOutcome.completed(storage_id)

    async def _finalise(
        self,
        session: AsyncSession,
        generation_id: int,
        outcome: GenerationOutcome,
    ) -> None:
        await self._generations.update_status(
            session,
            generation_id=generation_id,
            status=outcome.status,
            result_image_id=outcome.result_image_id,
            error_message=outcome.error_message,
        )
        generation_outcomes_total.labels(status=outcome.status.value).inc()
        logger.info("Generation %s finished as %s", generation_id, outcome.status.value)

    async def _resolve_product_images(
        self,
        session: AsyncSession,
        generation: models.Generation,
    ) -> list[str]:
        """Return display URLs in product order, skipping anything unresolvable."""

        urls: list[str] = []
        for product_id in generation.product_ids:
            product = await session.get(models.Product, product_id)
            if product is None:
                logger.warning("Product %s of generation %s no longer exists; skipping.", product_id, generation.id)
                continue
            url = await self._storage.resolve_url(product.image_id)
            if url is None:
                logger.warning("Image %s of product %s is missing; skipping.", product.image_id, product_id)
                continue
            urls.append(url)
        return urls

    async def _download(self, url: str) -> bytes:
        try:
            response = await self._http.get(url)
        except httpx.HTTPError as exc:
            raise DownloadFailed() from exc
        if not response.is_success:
            raise DownloadFailed()
        return response.content

    async def _upload(self, data: bytes) -> str:
        upload_url = await self._storage.issue_upload_url()
        try:
            response = await self._http.post(
                upload_url,
                content=data,
                headers={"Content-Type": RESULT_CONTENT_TYPE},
            )
            # raise_for_status rejects every non-2xx answer, redirects included.
            response.raise_for_status()
            return str(response.json()["storageId"])
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as exc:
            await self._storage.discard_upload(upload_url)
            raise UploadFailed() from exc

"""Celery worker responsible for image generation tasks."""

from __future__ import annotations

import asyncio
import logging

import httpx
from celery import Celery

from holiday_promo.config.settings import get_settings
from holiday_promo.db.session import AsyncSessionFactory, engine
from holiday_promo.imggen.generator_client import ImageGeneratorClient
from holiday_promo.monitoring.logging import configure_logging
from holiday_promo.services.generation_pipeline import GenerationPipeline
from holiday_promo.storage.backend import LocalStorage

settings = get_settings()
configure_logging()
logger = logging.getLogger(__name__)

celery_app = Celery(
    "generation_worker",
    broker=settings.redis_url,
    backend=settings.redis_url,
)


async def _process(generation_id: int) -> str | None:
    try:
        async with httpx.AsyncClient(timeout=settings.request_timeout, follow_redirects=True) as http_client:
            pipeline = GenerationPipeline(
                session_factory=AsyncSessionFactory,
                storage=LocalStorage.from_settings(settings),
                generator=ImageGeneratorClient(settings),
                http_client=http_client,
            )
            outcome = await pipeline.run(generation_id)
    finally:
        # Pooled connections are bound to this task's event loop.
        await engine.dispose()
    return outcome.status.value if outcome else None


@celery_app.task(name="generations.process")
def process_generation(generation_id: int) -> str | None:
    """Run the generation pipeline once; failures are recorded, never retried."""

    return asyncio.run(_process(generation_id))


def schedule_generation(generation_id: int) -> None:
    """Enqueue the worker for ``generation_id`` without waiting for it."""

    process_generation.delay(generation_id)
    logger.debug("Scheduled generation %s", generation_id)

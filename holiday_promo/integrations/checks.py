"""Connectivity checks for the database and the image model provider."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable

from holiday_promo.config.settings import get_settings
from holiday_promo.db.session import ping_database
from holiday_promo.imggen.generator_client import ImageGeneratorClient


@dataclass(slots=True)
class IntegrationCheckResult:
    """Structured result describing the integration check outcome."""

    name: str
    success: bool
    message: str


async def _run_check(
    name: str,
    factory: Callable[[], Awaitable[bool]],
    success_message: str,
) -> IntegrationCheckResult:
    try:
        result = await factory()
    except Exception as exc:
        return IntegrationCheckResult(name=name, success=False, message=str(exc) or type(exc).__name__)

    if result:
        return IntegrationCheckResult(name=name, success=True, message=success_message)
    return IntegrationCheckResult(
        name=name,
        success=False,
        message="Service responded with non-success status.",
    )


async def check_database() -> IntegrationCheckResult:
    """Run ``SELECT 1`` against the configured database."""

    return await _run_check(
        name="Database",
        factory=ping_database,
        success_message="Database accepts connections.",
    )


async def check_image_generator() -> IntegrationCheckResult:
    """Look up the configured Replicate model."""

    model = get_settings().replicate_model
    return await _run_check(
        name="Replicate",
        factory=ImageGeneratorClient().ping,
        success_message=f"Model {model} is reachable.",
    )


async def run_all_checks() -> list[IntegrationCheckResult]:
    """Execute all integration checks concurrently."""

    return list(await asyncio.gather(check_database(), check_image_generator()))

"""Async client for the Replicate-hosted image generation model."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

import replicate

from holiday_promo.config.settings import Settings, get_settings
from holiday_promo.errors import GeneratorNotConfigured, UnexpectedResponseFormat

logger = logging.getLogger(__name__)


def extract_output_url(output: Any) -> str:
    """Normalise a model output into the URL of the produced image.

    Accepted shapes are a bare string, an object whose ``url`` is callable,
    and an object or mapping whose ``url`` is a string.
    """

    if isinstance(output, str):
        return output

    url = output.get("url") if isinstance(output, Mapping) else getattr(output, "url", None)
    if callable(url):
        url = url()
    if isinstance(url, str):
        return url

    raise UnexpectedResponseFormat()


class ImageGeneratorClient:
    """Runs the composite image model and returns the output URL."""

    def __init__(self, settings: Settings | None = None, client: Any | None = None) -> None:
        self._settings = settings or get_settings()
        self._client = client

    def _replicate(self) -> Any:
        if self._client is None:
            if not self._settings.replicate_api_token:
                raise GeneratorNotConfigured()
            self._client = replicate.Client(
                api_token=self._settings.replicate_api_token,
                timeout=self._settings.request_timeout,
            )
        return self._client

    async def generate(self, prompt: str, image_urls: Sequence[str]) -> str:
        """Send the prompt and product photos to the model and return the result URL."""

        model = self._settings.replicate_model
        logger.info("Running %s with %d input image(s)", model, len(image_urls))
        output = await self._replicate().async_run(
            model,
            input={"prompt": prompt, "image_input": list(image_urls)},
        )
        return extract_output_url(output)

    async def ping(self) -> bool:
        """Return ``True`` when the configured model can be looked up."""

        model = await self._replicate().models.async_get(self._settings.replicate_model)
        return model is not None

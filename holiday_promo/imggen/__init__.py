"""Prompt building and image generation utilities."""

from .generator_client import ImageGeneratorClient, extract_output_url
from .prompt_builder import STYLES, PromptBuilder, StyleOption

__all__ = ["ImageGeneratorClient", "PromptBuilder", "STYLES", "StyleOption", "extract_output_url"]

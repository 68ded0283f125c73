"""Prompt builder for the image generation service."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class StyleOption:
    """Compositional style offered next to the theme."""

    id: str
    name: str
    description: str
    suffix: str


STYLES: tuple[StyleOption, ...] = (
    StyleOption(
        id="product-bundle",
        name="Product Bundle",
        description="Focus on attractive product arrangement",
        suffix=" Focus on creating an attractive product bundle arrangement.",
    ),
    StyleOption(
        id="holiday-theme",
        name="Holiday Theme",
        description="Emphasize seasonal atmosphere",
        suffix=" Emphasize the holiday atmosphere and seasonal elements.",
    ),
    StyleOption(
        id="promotion-only",
        name="Promotion Only",
        description="Highlight discounts and offers",
        suffix=" Highlight promotional elements, discounts, and special offers prominently.",
    ),
    StyleOption(
        id="all-merged",
        name="All Styles Merged",
        description="Combine all elements together",
        suffix=(
            " Combine product bundling, holiday theming, and promotional elements"
            " into one cohesive design."
        ),
    ),
)

STYLE_SUFFIXES: dict[str, str] = {style.id: style.suffix for style in STYLES}


class PromptBuilder:
    """Compose the generator prompt from a theme template and a style."""

    def build(self, theme_prompt: str, style: str) -> str:
        """Return the theme prompt with the style suffix appended.

        Unknown styles are accepted and leave the theme prompt unchanged.
        """

        return theme_prompt + STYLE_SUFFIXES.get(style, "")

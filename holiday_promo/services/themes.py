"""Theme catalog: built-in holiday prompt templates."""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from holiday_promo.db import models
from holiday_promo.errors import ThemeNotFound

logger = logging.getLogger(__name__)

BUILTIN_THEMES: tuple[dict[str, str], ...] = (
    {
        "name": "Christmas Bundle",
        "description": "Festive Christmas theme with snow, lights, and holiday decorations",
        "prompt": (
            "Transform this product into a beautiful Christmas gift bundle with festive wrapping, "
            "snow, twinkling lights, and holiday decorations. Make it look like a premium gift set "
            "under a Christmas tree."
        ),
    },
    {
        "name": "Winter Wonderland",
        "description": "Elegant winter theme with ice crystals and cool tones",
        "prompt": (
            "Create an elegant winter wonderland scene featuring this product with ice crystals, "
            "snow, cool blue and white tones, and a magical frozen atmosphere."
        ),
    },
    {
        "name": "New Year Celebration",
        "description": "Glamorous New Year theme with gold, sparkles, and champagne",
        "prompt": (
            "Design a glamorous New Year celebration scene with this product featuring gold "
            "accents, sparkles, champagne bubbles, and midnight celebration elements."
        ),
    },
    {
        "name": "Holiday Sale",
        "description": "Eye-catching promotional theme with sale banners and offers",
        "prompt": (
            "Create an eye-catching holiday sale promotion featuring this product with bold sale "
            "banners, discount tags, special offer text, and attention-grabbing promotional elements."
        ),
    },
    {
        "name": "Gift Bundle Set",
        "description": "Multiple products arranged as an attractive gift bundle",
        "prompt": (
            "Arrange these products as an attractive gift bundle set with elegant packaging, "
            "ribbons, and premium presentation that makes them look like the perfect holiday "
            "gift collection."
        ),
    },
)


class ThemeCatalog:
    """Read access to themes plus one-time seeding of the built-in set."""

    async def list_active(self, session: AsyncSession) -> list[models.Theme]:
        """Return every theme flagged as active."""

        stmt = select(models.Theme).where(models.Theme.is_active.is_(True))
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def get_active_by_name(self, session: AsyncSession, name: str) -> models.Theme:
        """Return the first active theme called ``name``."""

        stmt = (
            select(models.Theme)
            .where(models.Theme.name == name, models.Theme.is_active.is_(True))
            .order_by(models.Theme.id)
            .limit(1)
        )
        result = await session.execute(stmt)
        theme = result.scalar_one_or_none()
        if theme is None:
            raise ThemeNotFound()
        return theme

    async def seed_if_empty(self, session: AsyncSession) -> str:
        """Insert the built-in themes unless the table already has rows.

        Two concurrent first calls can both see an empty table; the seed data
        is harmless enough that this is tolerated.
        """

        existing = await session.scalar(select(func.count()).select_from(models.Theme))
        if existing:
            return "Themes already exist"

        session.add_all(models.Theme(is_active=True, **theme) for theme in BUILTIN_THEMES)
        await session.commit()
        logger.info("Seeded %d built-in themes", len(BUILTIN_THEMES))
        return "Themes seeded successfully"

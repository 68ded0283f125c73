"""Create tables and insert the built-in themes into an empty catalog."""

from __future__ import annotations

import asyncio

from holiday_promo.db.session import AsyncSessionFactory, engine, init_db
from holiday_promo.services.themes import ThemeCatalog


async def main() -> None:
    await init_db()
    try:
        async with AsyncSessionFactory() as session:
            print(await ThemeCatalog().seed_if_empty(session))
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())

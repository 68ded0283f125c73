"""Check that the database and the image model are reachable.

Exits with status 1 when any check fails, so deploy scripts can gate on it.
"""

from __future__ import annotations

import asyncio
import sys

from holiday_promo.db.session import engine
from holiday_promo.integrations import IntegrationCheckResult, run_all_checks


def describe(result: IntegrationCheckResult) -> str:
    mark = "✅" if result.success else "❌"
    return f"{mark} {result.name}: {result.message}"


async def _collect() -> list[IntegrationCheckResult]:
    try:
        return await run_all_checks()
    finally:
        await engine.dispose()


def main() -> int:
    results = asyncio.run(_collect())
    for result in results:
        print(describe(result))
    return 0 if all(result.success for result in results) else 1


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""Create the BreakBook schema and insert sample employees.

Usage:
    python scripts/seed.py              # create tables + seed employees
    python scripts/seed.py --schema-only
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import date
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from sqlalchemy import select  # noqa: E402

from breakbook.config import settings  # noqa: E402
from breakbook.database import async_session_factory, engine, init_db  # noqa: E402
from breakbook.employees.models import Employee  # noqa: E402
from breakbook.logging_config import setup_logging  # noqa: E402

logger = logging.getLogger("seed")

SAMPLE_EMPLOYEES = [
    {
        "name": "John Doe",
        "email": "john@example.com",
        "department": "Engineering",
        "joining_date": date(2025, 4, 10),
    },
    {
        "name": "Jane Smith",
        "email": "jane@example.com",
        "department": "HR",
        "joining_date": date(2025, 5, 15),
    },
]


async def seed(schema_only: bool) -> int:
    await init_db()
    logger.info("Schema ready on %s", engine.url.render_as_string(hide_password=True))
    if schema_only:
        return 0

    inserted = 0
    async with async_session_factory() as session:
        for row in SAMPLE_EMPLOYEES:
            existing = await session.execute(
                select(Employee.id).where(Employee.email == row["email"])
            )
            if existing.scalar() is not None:
                logger.info("Skipping %s (already present)", row["email"])
                continue
            session.add(Employee(**row))
            inserted += 1
        await session.commit()

    logger.info("Seeded %d employee(s)", inserted)
    return inserted


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--schema-only", action="store_true", help="Create tables without sample rows",
    )
    args = parser.parse_args()

    setup_logging(settings.LOG_LEVEL)

    async def _run() -> None:
        try:
            await seed(args.schema_only)
        finally:
            await engine.dispose()

    asyncio.run(_run())


if __name__ == "__main__":
    main()

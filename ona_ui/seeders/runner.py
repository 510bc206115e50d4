"""Run every seeder in dependency order inside one transaction."""

import time
from typing import Any, Dict, List, Type

from sqlalchemy.ext.asyncio import AsyncSession

from ona_ui.core.logging_config import get_logger

from .base import BaseSeeder
from .catalog import CategorySeeder, ProductSeeder, SubcategorySeeder
from .components import ComponentSeeder, ComponentVersionSeeder
from .users import LicenseSeeder, UserSeeder

logger = get_logger(__name__)

SEEDERS: List[Type[BaseSeeder]] = [
    ProductSeeder,
    UserSeeder,
    LicenseSeeder,
    CategorySeeder,
    SubcategorySeeder,
    ComponentSeeder,
    ComponentVersionSeeder,
]


async def run_seeders(session: AsyncSession) -> Dict[str, int]:
    """
    Seed the database and return the number of rows written per seeder.

    Everything is committed at the end; a failing seeder rolls the whole run
    back.
    """
    context: Dict[str, Any] = {}
    counts: Dict[str, int] = {}
    started = time.perf_counter()
    try:
        for seeder_class in SEEDERS:
            seeder = seeder_class(session, context)
            counts[seeder.name] = await seeder.run()
            logger.info(f"Seeded {counts[seeder.name]} {seeder.name}")
        await session.commit()
    except Exception:
        await session.rollback()
        logger.error("Seeding failed, rolled back", exc_info=True)
        raise
    logger.info(f"Seeding finished in {(time.perf_counter() - started):.2f}s")
    return counts

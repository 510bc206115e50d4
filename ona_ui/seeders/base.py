"""Shared seeder plumbing."""

import random
import uuid
from datetime import datetime, timedelta
from typing import Any, Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from ona_ui.core.logging_config import get_logger

SEED_NAMESPACE = uuid.UUID("6f1c2b7e-3d4a-4f5b-9c8d-0e1f2a3b4c5d")
SEED_EPOCH = datetime(2025, 1, 1)
RANDOM_SEED = 42


def seed_id(*parts: Any) -> str:
    """Stable UUID for a fixture row, e.g. ``seed_id("category", "forms")``."""
    return str(uuid.uuid5(SEED_NAMESPACE, "/".join(str(part) for part in parts)))


class BaseSeeder:
    """
    One step of the seeding run.

    Seeders share a ``context`` dict: earlier seeders publish the ids later
    ones need (``product_ids``, ``categories``, ``subcategories`` ...).
    """

    name = "base"

    def __init__(self, session: AsyncSession, context: Dict[str, Any]):
        self.session = session
        self.context = context
        self.random = random.Random(f"{RANDOM_SEED}-{self.name}")
        self.logger = get_logger(f"{__name__}.{self.name}")

    def days_after_epoch(self, low: int, high: int) -> datetime:
        return SEED_EPOCH + timedelta(days=self.random.randint(low, high))

    def require(self, key: str) -> Any:
        if key not in self.context:
            raise RuntimeError(f"Seeder '{self.name}' needs '{key}'; run the seeders in order")
        return self.context[key]

    async def upsert(self, rows: List[Any]) -> int:
        for row in rows:
            await self.session.merge(row)
        await self.session.flush()
        return len(rows)

    async def run(self) -> int:
        raise NotImplementedError

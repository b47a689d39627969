"""
ID allocation service - contiguous human-facing numbers per entity kind.

Design notes:
- optimistic concurrency, no row locks: read current_value, then
  UPDATE ... SET current_value = read + n WHERE current_value = read
- a zero rowcount means another allocator won the race; roll back, sleep a
  random backoff and retry, up to max_retries attempts
- the counter row is created lazily; a concurrent create is absorbed by the
  unique constraint on entity_name
- allocation commits on its own, before the caller's inserts; a failed insert
  afterwards leaves a gap, never a duplicate
"""

from __future__ import annotations

import asyncio
import logging
import random

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from issue_tracker.core.config import IdAllocationSettings, get_settings
from issue_tracker.models.base import utc_now
from issue_tracker.models.counter import Counter
from issue_tracker.services.exceptions import AllocationExhaustedError

logger = logging.getLogger(__name__)


class IdAllocationService:
    """Allocates consecutive ids from named counters."""

    def __init__(self, db: AsyncSession, settings: IdAllocationSettings | None = None):
        self.db = db
        self.settings = settings or get_settings().id_allocation

    async def get_current_value(self, entity_name: str) -> int | None:
        """Last allocated id for entity_name, or None if nothing was ever allocated."""
        stmt = select(Counter.current_value).where(Counter.entity_name == entity_name)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def ensure_counter(self, entity_name: str, description: str | None = None) -> None:
        """Create the counter row if missing. Safe under concurrent callers."""
        if await self.get_current_value(entity_name) is not None:
            return
        self.db.add(Counter(entity_name=entity_name, current_value=0, description=description))
        try:
            await self.db.commit()
            logger.info(f"Created counter '{entity_name}'")
        except IntegrityError:
            # Another request created it first
            await self.db.rollback()

    async def allocate_ids(
        self,
        entity_name: str,
        count: int,
        max_retries: int | None = None,
    ) -> list[int]:
        """
        Reserve `count` consecutive ids.

        Returns:
            [current_value + 1, ..., current_value + count], or [] when count <= 0

        Raises:
            AllocationExhaustedError: every attempt lost the race
        """
        if count <= 0:
            return []

        attempts = max_retries if max_retries is not None else self.settings.max_retries
        await self.ensure_counter(entity_name)

        for attempt in range(1, attempts + 1):
            current = await self.get_current_value(entity_name)
            if current is None:
                # Row vanished between ensure and read; recreate and retry
                await self.db.rollback()
                await self.ensure_counter(entity_name)
                continue

            stmt = (
                update(Counter)
                .where(
                    Counter.entity_name == entity_name,
                    Counter.current_value == current,
                )
                .values(current_value=current + count, updated_at=utc_now())
                .execution_options(synchronize_session=False)
            )
            result = await self.db.execute(stmt)

            if result.rowcount == 1:
                await self.db.commit()
                return list(range(current + 1, current + count + 1))

            await self.db.rollback()
            if attempt < attempts:
                delay = self._backoff_seconds()
                logger.warning(
                    f"Counter '{entity_name}' changed concurrently "
                    f"(attempt {attempt}/{attempts}), retrying in {delay * 1000:.0f} ms"
                )
                await asyncio.sleep(delay)

        logger.error(f"Giving up allocating {count} ids for '{entity_name}' after {attempts} attempts")
        raise AllocationExhaustedError(entity_name, attempts)

    def _backoff_seconds(self) -> float:
        low = self.settings.backoff_min_ms
        high = max(low, self.settings.backoff_max_ms)
        return random.uniform(low, high) / 1000

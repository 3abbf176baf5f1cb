"""
Fire-and-forget persistence of produced contacts.

Handlers hand their results to the persister and return immediately; the
blocking repository save runs in a worker thread. Failures are logged and
kept on the persister, never raised into the request that produced the data.
"""

import asyncio
import logging
from typing import List, Optional, Set

from leadgen.common.repositories import ContactRepositoryInterface, SaveResult, get_contact_repository
from leadgen.common.types import ContactRecord

logger = logging.getLogger(__name__)


class BackgroundPersister:
    """Schedules repository saves as background tasks."""

    def __init__(self, repository: Optional[ContactRepositoryInterface] = None):
        self._repository = repository
        self._tasks: Set[asyncio.Task] = set()
        self.errors: List[BaseException] = []

    @property
    def repository(self) -> ContactRepositoryInterface:
        if self._repository is None:
            self._repository = get_contact_repository()
        return self._repository

    def persist(self, records: List[ContactRecord]) -> Optional[asyncio.Task]:
        """Schedule `records` for saving; returns the task (None when empty)."""
        if not records:
            return None
        task = asyncio.create_task(self._save(list(records)))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _save(self, records: List[ContactRecord]) -> Optional[SaveResult]:
        try:
            result = await asyncio.to_thread(self.repository.save, records)
        except Exception as e:
            self.errors.append(e)
            logger.error(f"Background save of {len(records)} contact(s) failed: {e}")
            return None
        logger.info(
            f"Background save complete: {result.inserted_count} new of {len(records)}"
        )
        return result

    async def drain(self) -> None:
        """Wait for every scheduled save to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

"""In-process queue for library auto-sync jobs."""

import asyncio
import logging
import re
import time
from typing import List

from pydantic import BaseModel, ConfigDict

from alignment.collaborators import SyncQueue
from exceptions import SyncQueueError, ValidationError

logger = logging.getLogger(__name__)

AUTO_SYNC_PRIORITY = 20


class SyncJob(BaseModel):
    """A request to pull more images for a keyword set into the library."""

    model_config = ConfigDict(frozen=True)

    job_id: str  # "autosync-misty-forest-1718000000000"
    keywords: str
    priority: int = AUTO_SYNC_PRIORITY
    created_at_ms: int


def make_job_id(keywords: str, created_at_ms: int) -> str:
    slug = re.sub(r"\s+", "-", keywords.strip())
    return f"autosync-{slug}-{created_at_ms}"


class InMemorySyncQueue(SyncQueue):
    """
    asyncio.Queue of SyncJob records.

    A sync worker consumes jobs with next_job(); every enqueued job is also
    kept in history for inspection. maxsize=0 means unbounded.
    """

    def __init__(self, maxsize: int = 0):
        self._queue: "asyncio.Queue[SyncJob]" = asyncio.Queue(maxsize=maxsize)
        self.history: List[SyncJob] = []

    async def enqueue_auto_sync(self, keywords: str) -> str:
        if not keywords or not keywords.strip():
            raise ValidationError("Auto-sync keywords cannot be empty")

        created_at_ms = int(time.time() * 1000)
        job = SyncJob(
            job_id=make_job_id(keywords, created_at_ms),
            keywords=keywords.strip(),
            created_at_ms=created_at_ms,
        )
        try:
            self._queue.put_nowait(job)
        except asyncio.QueueFull as e:
            raise SyncQueueError(f"Auto-sync queue is full, dropping job {job.job_id}") from e
        self.history.append(job)
        logger.debug(f"Queued auto-sync job: {job.job_id}")
        return job.job_id

    async def next_job(self) -> SyncJob:
        """Wait for and return the next queued job."""
        job = await self._queue.get()
        self._queue.task_done()
        return job

    def pending(self) -> int:
        return self._queue.qsize()

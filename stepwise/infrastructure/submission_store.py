"""In-Memory Submission Store — keyed CacheEntry storage with optional lazy TTL.

Invariants:
    - get() never returns an expired entry; expiry is checked on read
    - put() overwrites; invalidate() is idempotent
    - The store does no locking: per-id single-writer discipline is the controller's

Design Decisions:
    - Plain dict owned by an instance and injected into the controller, so
      tests and workers never share a module-level cache
    - Monotonic clock for TTL: wall-clock jumps never resurrect or kill entries
"""

import logging
import time
from collections.abc import Callable

from stepwise.core.domain_types import SubmissionId
from stepwise.core.progression import CacheEntry

logger = logging.getLogger(__name__)


class InMemorySubmissionStore:
    """Process-local SubmissionStore. State is lost on restart."""

    def __init__(
        self,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._entries: dict[SubmissionId, tuple[float, CacheEntry]] = {}
        self._ttl = ttl_seconds
        self._clock = clock

    async def get(self, submission_id: SubmissionId) -> CacheEntry | None:
        item = self._entries.get(submission_id)
        if item is None:
            return None
        written_at, entry = item
        if self._ttl is not None and self._clock() - written_at > self._ttl:
            self._entries.pop(submission_id, None)
            logger.info(
                "Submission expired", extra={"submission_id": submission_id},
            )
            return None
        return entry

    async def put(self, submission_id: SubmissionId, entry: CacheEntry) -> None:
        # TTL counts from the first write: advancing does not extend a session
        existing = self._entries.get(submission_id)
        written_at = existing[0] if existing else self._clock()
        self._entries[submission_id] = (written_at, entry)

    async def invalidate(self, submission_id: SubmissionId) -> None:
        self._entries.pop(submission_id, None)

    def __len__(self) -> int:
        return len(self._entries)

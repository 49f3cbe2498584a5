"""In-memory outbox for audit entries whose write failed. Replayed periodically, oldest first."""

import asyncio
import logging
from collections import deque

from hrguard.audit.audit_models import AuditEntry
from hrguard.audit.audit_repository import AuditStore

logger = logging.getLogger(__name__)


class AuditOutbox:
    """
    Bounded FIFO of failed entries. When full, the oldest entry is dropped (and logged)
    to make room. Async-safe. Replays are idempotent because stores dedupe on
    AuditEntry.dedupe_key.
    """

    def __init__(self, capacity: int = 1000) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._entries: deque[AuditEntry] = deque()
        self._capacity = capacity
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def pending(self) -> list[AuditEntry]:
        return list(self._entries)

    async def put(self, entry: AuditEntry) -> None:
        async with self._lock:
            if len(self._entries) >= self._capacity:
                dropped = self._entries.popleft()
                logger.error(
                    "audit_outbox_overflow",
                    extra={
                        "resource": dropped.resource,
                        "record_id": dropped.record_id,
                        "action": dropped.action,
                    },
                )
            self._entries.append(entry)

    async def replay(self, store: AuditStore) -> int:
        """Try each pending entry once. Failures stay queued. Returns how many were written."""
        async with self._lock:
            batch = list(self._entries)
            self._entries.clear()
        if not batch:
            return 0

        written = 0
        failed: list[AuditEntry] = []
        for entry in batch:
            try:
                await store.append(entry)
                written += 1
            except Exception as e:
                failed.append(entry)
                logger.warning(
                    "audit_replay_failed",
                    extra={"resource": entry.resource, "record_id": entry.record_id, "error": str(e)},
                )

        if failed:
            async with self._lock:
                # Put failures back ahead of anything queued meanwhile, within capacity.
                room = self._capacity - len(self._entries)
                self._entries.extendleft(reversed(failed[-room:] if room > 0 else []))
                if len(failed) > max(room, 0):
                    logger.error("audit_outbox_overflow", extra={"dropped": len(failed) - max(room, 0)})
        logger.info("audit_replayed", extra={"written": written, "pending": len(self._entries)})
        return written

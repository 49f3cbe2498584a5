"""
Audit recorder: turns a permitted operation's outcome into one immutable AuditEntry.

Runs after the handler has returned (off the response path). Best-effort: nothing
raised here reaches the caller. Each write is bounded by a timeout and retried with
exponential backoff; entries that still cannot be written go to the outbox.
"""

import asyncio
import logging
import time
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from hrguard.audit.audit_models import AuditEntry
from hrguard.audit.audit_repository import AuditStore
from hrguard.audit.exceptions import AuditExtractionError, AuditStoreError
from hrguard.audit.extractors import as_record_id, entity_key_guesses, fallback_record_id
from hrguard.audit.outbox import AuditOutbox
from hrguard.observability.metrics import (
    AUDIT_ENTRIES_SKIPPED,
    AUDIT_ENTRIES_WRITTEN,
    AUDIT_WRITE_FAILURES,
    AUDIT_WRITE_LATENCY_MS,
    MetricsCollector,
)
from hrguard.security.descriptors import AuditDescriptor, OperationDescriptor
from hrguard.security.principal import Principal, RequestParams

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditRecorder:
    """
    Writes audit entries via the store.
    Entry requires an actor and a record id; without either, recording is skipped
    with a warning. Store failures are logged and queued in the outbox, never raised.
    """

    def __init__(
        self,
        store: AuditStore,
        *,
        outbox: Optional[AuditOutbox] = None,
        metrics: Optional[MetricsCollector] = None,
        timeout_seconds: float = 5.0,
        max_attempts: int = 3,
        backoff_initial_seconds: float = 0.5,
        backoff_max_seconds: float = 5.0,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._outbox = outbox
        self._metrics = metrics
        self._timeout = timeout_seconds
        self._max_attempts = max_attempts
        self._backoff_initial = backoff_initial_seconds
        self._backoff_max = backoff_max_seconds
        self._clock = clock

    def build_entry(
        self,
        audit: AuditDescriptor,
        principal: Optional[Principal],
        request: RequestParams,
        outcome: Any,
    ) -> AuditEntry:
        """Derive the entry. Raises AuditExtractionError when actor or record id is missing."""
        actor_id = principal.id if principal is not None else None
        if not actor_id:
            raise AuditExtractionError("No actor id found in request")

        if audit.extract_record_id is not None:
            record_id = as_record_id(audit.extract_record_id(outcome))
        elif audit.record_id_param is None:
            record_id = fallback_record_id(outcome, entity_key_guesses(audit.resource))
        else:
            record_id = None
        if record_id is None and audit.record_id_param is not None:
            record_id = as_record_id(request.get(audit.record_id_param))
        if record_id is None:
            raise AuditExtractionError("No record id found in outcome")

        details: Any = {}
        if audit.extract_details is not None:
            details = audit.extract_details(outcome, request) or {}
        if not isinstance(details, Mapping):
            raise AuditExtractionError(
                f"Details extractor returned {type(details).__name__}, expected a mapping"
            )

        return AuditEntry(
            resource=audit.resource,
            record_id=record_id,
            action=audit.action,
            actor_id=actor_id,
            details=details,
            created_at=self._clock(),
        )

    async def record(
        self,
        descriptor: OperationDescriptor,
        principal: Optional[Principal],
        request: RequestParams,
        outcome: Any,
    ) -> Optional[AuditEntry]:
        """Build and write the entry for a completed operation. Returns the entry if written."""
        audit = descriptor.audit
        if audit is None:
            return None

        log_extra = {
            "resource": audit.resource,
            "action": audit.action,
            "operation": descriptor.operation,
        }
        try:
            entry = self.build_entry(audit, principal, request, outcome)
        except AuditExtractionError as e:
            logger.warning("audit_skipped", extra={**log_extra, "reason": e.message})
            self._count(AUDIT_ENTRIES_SKIPPED, audit.resource)
            return None
        except Exception as e:
            # Extractors are user code; a bug there must not reach the caller.
            logger.error(
                "audit_extraction_failed",
                extra={**log_extra, "error": str(e)},
                exc_info=True,
            )
            self._count(AUDIT_ENTRIES_SKIPPED, audit.resource)
            return None

        log_extra.update(record_id=entry.record_id, actor_id=entry.actor_id)
        started = time.perf_counter()
        try:
            await self.write(entry)
        except AuditStoreError as e:
            logger.error("audit_write_failed", extra={**log_extra, "error": e.message})
            self._count(AUDIT_WRITE_FAILURES, audit.resource)
            if self._outbox is not None:
                await self._outbox.put(entry)
            return None

        if self._metrics is not None:
            self._metrics.observe_latency(
                AUDIT_WRITE_LATENCY_MS,
                (time.perf_counter() - started) * 1000,
                resource=audit.resource,
            )
        self._count(AUDIT_ENTRIES_WRITTEN, audit.resource)
        logger.info("audit_recorded", extra=log_extra)
        return entry

    async def write(self, entry: AuditEntry) -> None:
        """Append with timeout and retry. Raises AuditStoreError once attempts are exhausted."""
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential(multiplier=self._backoff_initial, max=self._backoff_max),
            retry=retry_if_exception_type(AuditStoreError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                await self._append_once(entry)

    async def _append_once(self, entry: AuditEntry) -> None:
        try:
            await asyncio.wait_for(self._store.append(entry), timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise AuditStoreError(f"Audit write timed out after {self._timeout}s") from e
        except AuditStoreError:
            raise
        except Exception as e:
            raise AuditStoreError(f"Audit write failed: {e}") from e

    def _count(self, name: str, resource: str) -> None:
        if self._metrics is not None:
            self._metrics.increment(name, resource=resource)

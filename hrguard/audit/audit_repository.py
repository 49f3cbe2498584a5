"""Audit store protocols. Audit layer depends on these; infrastructure implements them."""

from typing import Optional, Protocol

from hrguard.audit.audit_models import AuditEntry


class AuditStore(Protocol):
    """Append-only sink for audit entries."""

    async def append(self, entry: AuditEntry) -> None:
        """Persist one entry as a single atomic insert. A duplicate dedupe_key counts as written."""
        ...


class AuditReader(Protocol):
    """Read side of the trail, for the audit-log endpoints."""

    async def list_entries(
        self,
        *,
        resource: Optional[str] = None,
        record_id: Optional[str] = None,
        actor_id: Optional[str] = None,
        limit: int = 100,
    ) -> list[AuditEntry]:
        """Newest first."""
        ...

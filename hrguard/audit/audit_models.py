"""Immutable audit entry model. Domain-level immutability."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Dict, Mapping


@dataclass(frozen=True)
class AuditEntry:
    """
    One row of the audit trail: who (actor_id) did what (action) to which record
    (resource, record_id), when (created_at, UTC). Never updated or deleted.
    """

    resource: str
    record_id: str
    action: str
    actor_id: str
    details: Mapping[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        # Freeze the details view so a caller holding the source dict cannot rewrite history.
        object.__setattr__(self, "details", MappingProxyType(dict(self.details)))

    @property
    def dedupe_key(self) -> str:
        """Idempotency key for replays: (resource, record_id, action, created_at)."""
        return "|".join(
            (self.resource, self.record_id, self.action, self.created_at.isoformat())
        )

    def to_dict(self) -> Dict[str, Any]:
        """Persisted shape."""
        return {
            "resource": self.resource,
            "record_id": self.record_id,
            "action": self.action,
            "actor_id": self.actor_id,
            "details": dict(self.details),
            "created_at": self.created_at.isoformat(),
        }

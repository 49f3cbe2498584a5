"""Audit trail: immutable entries, recorder, outbox, store protocols. No FastAPI."""

from hrguard.audit.audit_models import AuditEntry
from hrguard.audit.audit_recorder import AuditRecorder
from hrguard.audit.audit_repository import AuditReader, AuditStore
from hrguard.audit.outbox import AuditOutbox

__all__ = [
    "AuditEntry",
    "AuditOutbox",
    "AuditReader",
    "AuditRecorder",
    "AuditStore",
]

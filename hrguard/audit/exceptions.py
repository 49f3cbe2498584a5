"""Audit-layer exceptions. Internal telemetry only; never surfaced to callers."""


class AuditError(Exception):
    """Base for all audit-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class AuditExtractionError(AuditError):
    """Raised when the actor or record id cannot be derived for a permitted operation."""


class AuditStoreError(AuditError):
    """Raised when writing to the audit store fails (I/O error, constraint violation, timeout)."""

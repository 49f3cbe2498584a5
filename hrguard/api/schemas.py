"""Pydantic response schemas for the audit-log endpoints."""

from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator

from hrguard.audit.audit_models import AuditEntry


class AuditEntryResponse(BaseModel):
    """Persisted audit entry shape. record_id and actor_id are never null."""

    resource: str
    record_id: str = Field(..., min_length=1)
    action: str
    actor_id: str = Field(..., min_length=1)
    details: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("details", mode="before")
    @classmethod
    def details_as_dict(cls, v: Any) -> Dict[str, Any]:
        return dict(v or {})

    @classmethod
    def from_entry(cls, entry: AuditEntry) -> "AuditEntryResponse":
        return cls.model_validate(entry)


class ErrorResponse(BaseModel):
    detail: str
    error: str

"""Audit-log API router: GET /audit-logs, GET /audit-logs/{resource}/{record_id}. Read only."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from hrguard.api.dependencies import get_audit_reader
from hrguard.api.pipeline import OperationContext, operation
from hrguard.api.schemas import AuditEntryResponse
from hrguard.audit.audit_repository import AuditReader

router = APIRouter()


@router.get("/", response_model=list[AuditEntryResponse])
async def list_audit_logs(
    ctx: Annotated[OperationContext, Depends(operation("audit_logs", "list"))],
    reader: Annotated[AuditReader, Depends(get_audit_reader)],
    resource: Optional[str] = None,
    record_id: Optional[str] = None,
    actor_id: Optional[str] = None,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
):
    """List audit entries, newest first, optionally filtered."""
    entries = await reader.list_entries(
        resource=resource,
        record_id=record_id,
        actor_id=actor_id,
        limit=limit,
    )
    return [AuditEntryResponse.from_entry(e) for e in entries]


@router.get("/{resource}/{record_id}", response_model=list[AuditEntryResponse])
async def record_history(
    resource: str,
    record_id: str,
    ctx: Annotated[OperationContext, Depends(operation("audit_logs", "history"))],
    reader: Annotated[AuditReader, Depends(get_audit_reader)],
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
):
    """Full trail of one record, newest first."""
    entries = await reader.list_entries(resource=resource, record_id=record_id, limit=limit)
    return [AuditEntryResponse.from_entry(e) for e in entries]

"""DB-backed audit store. Appends entries to PostgreSQL (audit_logs table)."""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hrguard.audit.audit_models import AuditEntry
from hrguard.infrastructure.database.models import AuditLog

logger = logging.getLogger(__name__)


def _orm_to_entry(orm: AuditLog) -> AuditEntry:
    created_at = orm.created_at
    if created_at is not None and created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return AuditEntry(
        resource=orm.resource,
        record_id=orm.record_id,
        action=orm.action,
        actor_id=orm.actor_id,
        details=orm.details or {},
        created_at=created_at or datetime.now(timezone.utc),
    )


class SqlAlchemyAuditStore:
    """
    Implements AuditStore and AuditReader. One session per call, single-row insert,
    no update or delete path. A duplicate dedupe_key is treated as already written.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def append(self, entry: AuditEntry) -> None:
        orm = AuditLog(
            resource=entry.resource,
            record_id=entry.record_id,
            action=entry.action,
            actor_id=entry.actor_id,
            details=dict(entry.details),
            created_at=entry.created_at,
            dedupe_key=entry.dedupe_key,
        )
        async with self._session_factory() as session:
            session.add(orm)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                if "dedupe_key" not in str(e):
                    raise
                logger.info(
                    "audit_duplicate_ignored",
                    extra={"resource": entry.resource, "record_id": entry.record_id, "action": entry.action},
                )

    async def list_entries(
        self,
        *,
        resource: Optional[str] = None,
        record_id: Optional[str] = None,
        actor_id: Optional[str] = None,
        limit: int = 100,
    ) -> list[AuditEntry]:
        stmt = select(AuditLog)
        if resource is not None:
            stmt = stmt.where(AuditLog.resource == resource)
        if record_id is not None:
            stmt = stmt.where(AuditLog.record_id == record_id)
        if actor_id is not None:
            stmt = stmt.where(AuditLog.actor_id == actor_id)
        stmt = stmt.order_by(AuditLog.created_at.desc()).limit(limit)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [_orm_to_entry(orm) for orm in result.scalars().all()]

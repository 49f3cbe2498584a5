# hrguard/infrastructure/database/models.py

import uuid

from sqlalchemy import JSON, Column, DateTime, String
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.sql import func

from hrguard.infrastructure.database.session import Base


class AuditLog(Base):
    """ORM model for the append-only audit trail. Rows are inserted once, never updated."""

    __tablename__ = "audit_logs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    resource = Column(String, nullable=False, index=True)
    record_id = Column(String, nullable=False, index=True)
    action = Column(String, nullable=False)
    actor_id = Column(String, nullable=False, index=True)
    details = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # (resource, record_id, action, created_at); lets outbox replays be idempotent.
    dedupe_key = Column(String, nullable=False, unique=True)

# scripts/check_audit_store.py

import sys
from pathlib import Path

# Ensure project root is on the path when running this script directly
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import asyncio
import uuid

from hrguard.audit.audit_models import AuditEntry
from hrguard.infrastructure.database.audit_store_db import SqlAlchemyAuditStore
from hrguard.infrastructure.database.session import get_engine, get_session_factory


async def check_store():
    store = SqlAlchemyAuditStore(get_session_factory())
    entry = AuditEntry(
        resource="healthcheck",
        record_id=str(uuid.uuid4()),
        action="CHECK",
        actor_id="scripts.check_audit_store",
        details={"source": "check_audit_store"},
    )

    await store.append(entry)
    # Appending the same entry again must be a no-op (dedupe_key).
    await store.append(entry)

    rows = await store.list_entries(resource=entry.resource, record_id=entry.record_id)
    print("Entries found:", len(rows))
    for row in rows:
        print(row.to_dict())

    await get_engine().dispose()


asyncio.run(check_store())

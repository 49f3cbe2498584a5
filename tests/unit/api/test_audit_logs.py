"""Tests for GET /audit-logs: admin only, filters, per-record history."""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from hrguard.audit.audit_models import AuditEntry

T0 = datetime(2024, 5, 6, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def seeded_store(fake_audit_store):
    fake_audit_store.entries.extend(
        [
            AuditEntry("timesheets", "t1", "CREATE", "u1", {}, T0),
            AuditEntry("timesheets", "t1", "RESPONSE", "pm1", {"new_status": "APPROVED"}, T0 + timedelta(hours=1)),
            AuditEntry("users", "u2", "UPDATE", "admin1", {"updated_fields": ["email"]}, T0 + timedelta(hours=2)),
        ]
    )
    return fake_audit_store


@pytest.mark.asyncio
async def test_list_requires_admin(async_client: AsyncClient, auth_headers, seeded_store):
    r = await async_client.get("/audit-logs/", headers=auth_headers("hr1", "HR"))
    assert r.status_code == 403
    assert r.json()["detail"] == "Access denied: audit trail is restricted to administrators"


@pytest.mark.asyncio
async def test_list_requires_authentication(async_client: AsyncClient, seeded_store):
    r = await async_client.get("/audit-logs/")
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_list_newest_first(async_client: AsyncClient, auth_headers, seeded_store):
    r = await async_client.get("/audit-logs/", headers=auth_headers("admin1", "ADMIN"))
    assert r.status_code == 200
    actions = [row["action"] for row in r.json()]
    assert actions == ["UPDATE", "RESPONSE", "CREATE"]


@pytest.mark.asyncio
async def test_list_filters_by_actor(async_client: AsyncClient, auth_headers, seeded_store):
    r = await async_client.get(
        "/audit-logs/", params={"actor_id": "pm1"}, headers=auth_headers("admin1", "ADMIN")
    )
    [row] = r.json()
    assert row["record_id"] == "t1"
    assert row["details"] == {"new_status": "APPROVED"}


@pytest.mark.asyncio
async def test_list_limit_validated(async_client: AsyncClient, auth_headers, seeded_store):
    r = await async_client.get("/audit-logs/", params={"limit": 0}, headers=auth_headers("admin1", "ADMIN"))
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_record_history(async_client: AsyncClient, auth_headers, seeded_store):
    r = await async_client.get("/audit-logs/timesheets/t1", headers=auth_headers("admin1", "ADMIN"))
    assert r.status_code == 200
    body = r.json()
    assert [row["action"] for row in body] == ["RESPONSE", "CREATE"]
    assert all(row["resource"] == "timesheets" for row in body)

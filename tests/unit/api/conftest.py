"""Fixtures for API unit tests: in-memory audit store, bearer tokens, AsyncClient over a gated test router."""

from datetime import datetime, timedelta, timezone
from typing import Annotated, Optional

import jwt
import pytest
from fastapi import APIRouter, Depends
from httpx import ASGITransport, AsyncClient

from hrguard.api import dependencies
from hrguard.api.pipeline import OperationContext, operation
from hrguard.audit.audit_models import AuditEntry
from hrguard.audit.outbox import AuditOutbox
from hrguard.config.settings import AppSettings, get_settings
from hrguard.main import create_app
from hrguard.observability.metrics import MetricsCollector


class FakeAuditStore:
    """In-memory audit store for unit tests. Set fail=True to simulate an unavailable database."""

    def __init__(self):
        self.entries: list[AuditEntry] = []
        self.fail = False

    async def append(self, entry: AuditEntry) -> None:
        if self.fail:
            raise ConnectionError("audit database unavailable")
        self.entries.append(entry)

    async def list_entries(
        self,
        *,
        resource: Optional[str] = None,
        record_id: Optional[str] = None,
        actor_id: Optional[str] = None,
        limit: int = 100,
    ) -> list[AuditEntry]:
        matches = [
            e
            for e in self.entries
            if (resource is None or e.resource == resource)
            and (record_id is None or e.record_id == record_id)
            and (actor_id is None or e.actor_id == actor_id)
        ]
        matches.sort(key=lambda e: e.created_at, reverse=True)
        return matches[:limit]


def _gated_router() -> APIRouter:
    """Minimal HR handlers wired through the operation gate, as business routers use it."""
    router = APIRouter()

    @router.get("/users/{id}")
    async def get_user(
        id: str,
        ctx: Annotated[OperationContext, Depends(operation("users", "get"))],
    ):
        return {"id": id, "viewer": ctx.principal.id}

    @router.put("/users/{id}/role/{role_id}")
    async def update_user_role(
        id: str,
        role_id: str,
        ctx: Annotated[OperationContext, Depends(operation("users", "update_role"))],
    ):
        outcome = {"user": {"id": id, "role_id": role_id}}
        ctx.record(outcome)
        return outcome

    @router.post("/timesheets")
    async def create_timesheet(
        ctx: Annotated[OperationContext, Depends(operation("timesheets", "create"))],
    ):
        outcome = {"timesheet": {"id": "t1", "status": "PENDING", "user": {"id": ctx.principal.id}}}
        ctx.record(outcome)
        return outcome

    @router.put("/timesheets/{id}/respond")
    async def respond_timesheet(
        id: str,
        ctx: Annotated[OperationContext, Depends(operation("timesheets", "respond"))],
    ):
        outcome = {"data": {"timesheet": {"id": id}}}
        ctx.record(outcome)
        return outcome

    @router.delete("/branches/{id}")
    async def delete_branch(
        id: str,
        ctx: Annotated[OperationContext, Depends(operation("branches", "delete"))],
    ):
        outcome = {"message": "Branch deleted successfully"}
        ctx.record(outcome)
        return outcome

    @router.get("/permissions")
    async def list_permissions(
        ctx: Annotated[OperationContext, Depends(operation("permissions", "list"))],
    ):
        return []

    @router.get("/undeclared")
    async def undeclared(
        ctx: Annotated[OperationContext, Depends(operation("users", "export"))],
    ):
        return {}

    return router


@pytest.fixture
def fake_audit_store():
    return FakeAuditStore()


@pytest.fixture
def audit_outbox():
    return AuditOutbox(capacity=10)


@pytest.fixture
def metrics():
    return MetricsCollector()


@pytest.fixture
def test_settings():
    """Settings with zero audit backoff so failed writes do not slow tests down."""
    return AppSettings(audit_backoff_initial_seconds=0, audit_backoff_max_seconds=0)


@pytest.fixture
def app_with_overrides(fake_audit_store, audit_outbox, metrics, test_settings):
    """App with audit store, outbox, metrics and settings overridden for testing."""
    app = create_app()
    app.include_router(_gated_router())
    app.dependency_overrides[dependencies.get_audit_store] = lambda: fake_audit_store
    app.dependency_overrides[dependencies.get_audit_outbox] = lambda: audit_outbox
    app.dependency_overrides[dependencies.get_metrics] = lambda: metrics
    app.dependency_overrides[dependencies.get_app_settings] = lambda: test_settings
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client(app_with_overrides):
    """Async HTTP client for testing; uses overridden app."""
    transport = ASGITransport(app=app_with_overrides)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def _make_token(
    sub: str,
    role: Optional[object] = None,
    *,
    expires_in: timedelta = timedelta(minutes=15),
    **claims,
) -> str:
    payload = {"sub": sub, "exp": datetime.now(timezone.utc) + expires_in, **claims}
    if role is not None:
        payload["role"] = role
    settings = get_settings()
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


@pytest.fixture
def auth_headers():
    """Build Authorization headers for a caller: auth_headers("u1", "USER")."""

    def build(sub: str, role: Optional[object] = None, **claims) -> dict[str, str]:
        return {"Authorization": f"Bearer {_make_token(sub, role, **claims)}"}

    return build

"""FastAPI dependency injection: settings, registry, engine, audit store/recorder, principal, request params."""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends, Request

from hrguard.audit.audit_recorder import AuditRecorder
from hrguard.audit.audit_repository import AuditReader, AuditStore
from hrguard.audit.outbox import AuditOutbox
from hrguard.config.settings import AppSettings, get_settings
from hrguard.observability.metrics import MetricsCollector
from hrguard.policies import build_registry
from hrguard.security.decision import DecisionEngine
from hrguard.security.permissions import PermissionChecker
from hrguard.security.principal import Principal, RequestParams, normalize_principal
from hrguard.security.registry import DescriptorRegistry

_metrics: MetricsCollector | None = None
_outbox: AuditOutbox | None = None
_audit_store: AuditStore | None = None

_BODY_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


def get_app_settings() -> AppSettings:
    return get_settings()


@lru_cache
def get_registry() -> DescriptorRegistry:
    """Frozen registry built once from the policy catalogue."""
    return build_registry(get_settings())


def get_decision_engine(
    settings: Annotated[AppSettings, Depends(get_app_settings)],
) -> DecisionEngine:
    return DecisionEngine(bypass_role=settings.admin_bypass_role)


def get_permission_checker() -> PermissionChecker:
    return PermissionChecker()


def get_metrics() -> MetricsCollector:
    """Return singleton metrics collector."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics


def get_audit_outbox() -> AuditOutbox:
    """Return singleton outbox of failed audit writes."""
    global _outbox
    if _outbox is None:
        _outbox = AuditOutbox(capacity=get_settings().audit_outbox_capacity)
    return _outbox


def get_audit_store() -> AuditStore:
    """Return singleton DB-backed audit store."""
    global _audit_store
    if _audit_store is None:
        # Deferred so the DB driver is only loaded when the store is actually used.
        from hrguard.infrastructure.database.audit_store_db import SqlAlchemyAuditStore
        from hrguard.infrastructure.database.session import get_session_factory

        _audit_store = SqlAlchemyAuditStore(get_session_factory())
    return _audit_store


def get_audit_reader(
    store: Annotated[AuditStore, Depends(get_audit_store)],
) -> AuditReader:
    return store


def get_audit_recorder(
    store: Annotated[AuditStore, Depends(get_audit_store)],
    outbox: Annotated[AuditOutbox, Depends(get_audit_outbox)],
    metrics: Annotated[MetricsCollector, Depends(get_metrics)],
    settings: Annotated[AppSettings, Depends(get_app_settings)],
) -> AuditRecorder:
    return AuditRecorder(
        store,
        outbox=outbox,
        metrics=metrics if settings.enable_metrics else None,
        timeout_seconds=settings.audit_write_timeout_seconds,
        max_attempts=settings.audit_max_attempts,
        backoff_initial_seconds=settings.audit_backoff_initial_seconds,
        backoff_max_seconds=settings.audit_backoff_max_seconds,
    )


def get_principal(request: Request) -> Optional[Principal]:
    """Principal resolved by PrincipalMiddleware. Anything malformed counts as no principal."""
    return normalize_principal(getattr(request.state, "principal", None))


async def get_request_params(request: Request) -> RequestParams:
    """Snapshot path, query and JSON body fields for policy and audit extractors."""
    body: dict = {}
    content_type = request.headers.get("content-type", "")
    if request.method in _BODY_METHODS and content_type.startswith("application/json"):
        try:
            payload = await request.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            body = payload
    return RequestParams(
        path=dict(request.path_params),
        body=body,
        query=dict(request.query_params),
        client_host=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )

"""
Access gate and audit hook for route handlers.

    @router.post("/timesheets")
    async def create_timesheet(
        body: TimesheetIn,
        ctx: Annotated[OperationContext, Depends(operation("timesheets", "create"))],
    ):
        outcome = await service.create(ctx.principal.id, body)
        ctx.record(outcome)
        return outcome

The dependency denies before the handler runs. record() schedules the audit write
as a background task, so it runs after the response has been sent.
"""

import logging
from dataclasses import dataclass, field
from typing import Annotated, Any, Optional

from fastapi import BackgroundTasks, Depends, Request

from hrguard.api.dependencies import (
    get_app_settings,
    get_audit_recorder,
    get_decision_engine,
    get_metrics,
    get_permission_checker,
    get_principal,
    get_registry,
    get_request_params,
)
from hrguard.audit.audit_recorder import AuditRecorder
from hrguard.config.settings import AppSettings
from hrguard.observability.metrics import ACCESS_DECISIONS_TOTAL, MetricsCollector
from hrguard.security.decision import Decision, DecisionEngine
from hrguard.security.descriptors import OperationDescriptor
from hrguard.security.exceptions import AuthenticationRequiredError
from hrguard.security.permissions import PermissionChecker
from hrguard.security.principal import Principal, RequestParams
from hrguard.security.registry import DescriptorRegistry

logger = logging.getLogger(__name__)


@dataclass
class OperationContext:
    """What a handler gets once the gate has allowed the call."""

    descriptor: OperationDescriptor
    principal: Optional[Principal]
    params: RequestParams
    decision: Decision
    recorder: AuditRecorder = field(repr=False)
    background_tasks: BackgroundTasks = field(repr=False)

    def record(self, outcome: Any) -> None:
        """Queue the audit write for this outcome. No-op for operations without audit metadata."""
        if self.descriptor.audit is None:
            return
        self.background_tasks.add_task(
            self.recorder.record,
            self.descriptor,
            self.principal,
            self.params,
            outcome,
        )


def operation(resource: str, name: str):
    """Dependency factory: resolve the descriptor, gate the call, hand back an OperationContext."""

    async def dependency(
        request: Request,
        background_tasks: BackgroundTasks,
        registry: Annotated[DescriptorRegistry, Depends(get_registry)],
        engine: Annotated[DecisionEngine, Depends(get_decision_engine)],
        checker: Annotated[PermissionChecker, Depends(get_permission_checker)],
        recorder: Annotated[AuditRecorder, Depends(get_audit_recorder)],
        metrics: Annotated[MetricsCollector, Depends(get_metrics)],
        settings: Annotated[AppSettings, Depends(get_app_settings)],
    ) -> OperationContext:
        descriptor = registry.get(resource, name)
        principal = get_principal(request)
        params = await get_request_params(request)

        if descriptor.authenticated and principal is None:
            if settings.enable_metrics:
                metrics.increment(ACCESS_DECISIONS_TOTAL, outcome="unauthenticated", resource=resource)
            logger.info(
                "access_unauthenticated",
                extra={"resource": resource, "operation": name, "path": request.url.path},
            )
            raise AuthenticationRequiredError("Authentication required")

        decision = engine.decide(principal, descriptor, params)
        if decision.allowed:
            decision = checker.check(principal, descriptor.permissions)

        if settings.enable_metrics:
            metrics.increment(
                ACCESS_DECISIONS_TOTAL,
                outcome="allow" if decision.allowed else "deny",
                resource=resource,
            )
        if not decision.allowed:
            logger.info(
                "access_denied",
                extra={
                    "resource": resource,
                    "operation": name,
                    "principal_id": principal.id if principal else None,
                    "deny_kind": decision.kind.value if decision.kind else None,
                },
            )
        decision.raise_for_denial()

        return OperationContext(
            descriptor=descriptor,
            principal=principal,
            params=params,
            decision=decision,
            recorder=recorder,
            background_tasks=background_tasks,
        )

    dependency.__name__ = f"operation_{resource}_{name}"
    return dependency

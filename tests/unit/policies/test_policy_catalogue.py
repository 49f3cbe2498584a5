"""Policy catalogue: declared operations decide and audit the way HR handlers expect."""

import pytest

from hrguard.audit.audit_recorder import AuditRecorder
from hrguard.config.settings import AppSettings
from hrguard.policies import build_registry
from hrguard.policies.timesheets import timesheet_id
from hrguard.security.decision import DecisionEngine
from hrguard.security.principal import Principal, RequestParams, Role


@pytest.fixture(scope="module")
def registry():
    return build_registry(AppSettings())


@pytest.fixture
def engine():
    return DecisionEngine()


def _as(role: str, principal_id: str = "u1") -> Principal:
    return Principal(id=principal_id, role=Role(role))


def test_registry_is_frozen_and_complete(registry):
    assert registry.frozen is True
    operations = set(registry.operations())
    for key in [
        ("timesheets", "create"),
        ("timesheets", "respond"),
        ("users", "get"),
        ("users", "delete"),
        ("branches", "delete"),
        ("roles", "assign_permission"),
        ("permissions", "search"),
        ("audit_logs", "list"),
    ]:
        assert key in operations


def test_user_reads_own_profile_but_not_others(registry, engine):
    descriptor = registry.get("users", "get")
    assert engine.decide(_as("USER", "u1"), descriptor, {"id": "u1"}).allowed is True
    denied = engine.decide(_as("USER", "u1"), descriptor, {"id": "u2"})
    assert denied.allowed is False
    assert denied.message == "You do not have permission to view this user profile"
    assert engine.decide(_as("HR"), descriptor, {"id": "u2"}).allowed is True


def test_only_admin_changes_roles(registry, engine):
    descriptor = registry.get("users", "update_role")
    assert engine.decide(_as("ADMIN"), descriptor, {}).allowed is True
    assert engine.decide(_as("HR"), descriptor, {}).allowed is False


def test_timesheet_respond_roles(registry, engine):
    descriptor = registry.get("timesheets", "respond")
    assert descriptor.required_roles == ("ADMIN", "HR", "PM")
    assert engine.decide(_as("USER"), descriptor, {}).message == "Access denied: Required roles: ADMIN, HR, PM"


def test_timesheet_create_open_to_any_authenticated_user(registry, engine):
    descriptor = registry.get("timesheets", "create")
    assert descriptor.authenticated is True
    assert descriptor.is_public is True
    assert engine.decide(_as("USER"), descriptor, {}).allowed is True


def test_self_service_operations_need_no_role(registry, engine):
    descriptor = registry.get("users", "change_password")
    assert descriptor.is_public is True
    assert descriptor.authenticated is True
    assert descriptor.audit.action == "CHANGE_PASSWORD"


def test_audit_logs_restricted_to_admin(registry, engine):
    descriptor = registry.get("audit_logs", "history")
    denied = engine.decide(_as("HR"), descriptor, {})
    assert denied.message == "Access denied: audit trail is restricted to administrators"


def test_permission_catalogue_uses_permission_requirements(registry):
    search = registry.get("permissions", "search")
    assert search.permissions.require_any is True
    assert registry.get("permissions", "list").permissions.require_any is False


def test_role_permission_assignment_audits_separate_resource(registry):
    assert registry.get("roles", "assign_permission").audit.resource == "role_permissions"


@pytest.mark.parametrize(
    "outcome",
    [{"timesheet": {"id": "t1"}}, {"data": {"id": "t1"}}, {"data": {"timesheet": {"id": "t1"}}}],
)
def test_timesheet_id_handles_every_handler_shape(outcome):
    assert timesheet_id(outcome) == "t1"


def test_timesheet_response_details(registry):
    audit = registry.get("timesheets", "respond").audit
    entry = AuditRecorder(store=None).build_entry(
        audit,
        _as("PM", "pm1"),
        RequestParams(path={"id": "t1"}, body={"action": "APPROVE"}),
        {"timesheet": {"id": "t1"}},
    )
    assert entry.action == "RESPONSE"
    assert dict(entry.details) == {"action": "APPROVE", "old_status": "PENDING", "new_status": "APPROVED"}


def test_timesheet_list_audits_collection(registry):
    audit = registry.get("timesheets", "list").audit
    entry = AuditRecorder(store=None).build_entry(
        audit,
        _as("USER"),
        RequestParams(query={"status": "PENDING"}),
        {"data": [], "pagination": {"total": 4}},
    )
    assert entry.record_id == "multiple"
    assert dict(entry.details) == {"filters": {"status": "PENDING"}, "total_results": 4}


def test_branch_delete_takes_id_from_path(registry):
    audit = registry.get("branches", "delete").audit
    entry = AuditRecorder(store=None).build_entry(
        audit, _as("ADMIN"), RequestParams(path={"id": "b7"}), {"message": "Branch deleted"}
    )
    assert entry.record_id == "b7"
    assert dict(entry.details) == {"deleted_id": "b7"}


def test_guard_logging_setting_enables_tracing():
    registry = build_registry(AppSettings(guard_logging=True))
    assert registry.get("users", "list").options.enable_logging is True


def test_guard_logging_traces_decisions(caplog):
    registry = build_registry(AppSettings(guard_logging=True))
    with caplog.at_level("DEBUG", logger="hrguard.security.decision"):
        DecisionEngine().decide(_as("USER", "u1"), registry.get("users", "get"), {"id": "u1"})
    [record] = [r for r in caplog.records if r.getMessage() == "access_decision"]
    assert record.self_match is True
    assert record.allowed is True


def test_decisions_are_silent_without_guard_logging(registry, caplog):
    with caplog.at_level("DEBUG", logger="hrguard.security.decision"):
        DecisionEngine().decide(_as("USER", "u1"), registry.get("users", "get"), {"id": "u1"})
    assert not [r for r in caplog.records if r.getMessage() == "access_decision"]

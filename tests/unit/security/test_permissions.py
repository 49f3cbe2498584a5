"""Permission requirement checks (all-of and any-of)."""

import pytest

from hrguard.security.decision import DenyKind
from hrguard.security.descriptors import require_permissions
from hrguard.security.permissions import PermissionChecker
from hrguard.security.principal import Principal, Role


@pytest.fixture
def checker():
    return PermissionChecker()


def _principal(*permissions: str) -> Principal:
    return Principal(id="u1", role=Role("HR", frozenset(permissions)))


def test_no_requirement_allows(checker):
    assert checker.check(None, None).allowed is True
    assert checker.check(None, require_permissions()).allowed is True


def test_all_required(checker):
    requirement = require_permissions("users:read", "users:write")
    assert checker.check(_principal("users:read", "users:write"), requirement).allowed is True
    decision = checker.check(_principal("users:read"), requirement)
    assert decision.allowed is False
    assert decision.kind == DenyKind.PERMISSION_DENIED
    assert decision.message == "Access denied: Missing required permissions: users:read, users:write"


def test_any_required(checker):
    requirement = require_permissions("users:read", "users:write", require_any=True)
    assert checker.check(_principal("users:write"), requirement).allowed is True
    assert checker.check(_principal("branches:read"), requirement).allowed is False


def test_missing_principal_or_role(checker):
    requirement = require_permissions("users:read")
    assert checker.check(None, requirement).message == "Access denied: Insufficient permissions"
    assert checker.check(Principal(id="u1"), requirement).allowed is False


def test_custom_message(checker):
    requirement = require_permissions("users:read", message="Need read access")
    assert checker.check(_principal(), requirement).message == "Need read access"

"""Security: principals, operation descriptors, decision engine, permission checks. No FastAPI."""

from hrguard.security.decision import Decision, DecisionEngine, DenyKind
from hrguard.security.descriptors import (
    AccessOptions,
    AuditDescriptor,
    OperationDescriptor,
    OwnerResolver,
    ParamOwnerResolver,
    access_options,
    audit_as,
    public,
    require_authentication,
    require_permissions,
    require_roles,
)
from hrguard.security.jwt_resolver import JwtPrincipalResolver
from hrguard.security.permissions import PermissionChecker
from hrguard.security.principal import Principal, RequestParams, Role, normalize_principal
from hrguard.security.registry import DescriptorRegistry

__all__ = [
    "AccessOptions",
    "AuditDescriptor",
    "Decision",
    "DecisionEngine",
    "DenyKind",
    "DescriptorRegistry",
    "JwtPrincipalResolver",
    "OperationDescriptor",
    "OwnerResolver",
    "ParamOwnerResolver",
    "PermissionChecker",
    "Principal",
    "RequestParams",
    "Role",
    "access_options",
    "audit_as",
    "normalize_principal",
    "public",
    "require_authentication",
    "require_permissions",
    "require_roles",
]

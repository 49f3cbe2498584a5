"""
Operation descriptors and the declaration surface business modules use to attach them.

Declarations are plain immutable values. A module declares an operation by handing
facets to the registry:

    registry.declare(
        "users", "get",
        require_roles("ADMIN", "HR"),
        access_options(allow_self_access=True, param_name="id"),
    )
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Protocol, Union

from hrguard.security.principal import Principal, RequestParams

RecordIdExtractor = Callable[[Any], Optional[str]]
DetailsExtractor = Callable[[Any, RequestParams], Optional[Mapping[str, Any]]]


class OwnerResolver(Protocol):
    """Decides whether the principal owns the record targeted by the request."""

    def is_owner(self, principal: Principal, params: RequestParams) -> bool:
        ...


@dataclass(frozen=True)
class ParamOwnerResolver:
    """Default self-access rule: one named request parameter must equal the principal id."""

    param_name: str

    def is_owner(self, principal: Principal, params: RequestParams) -> bool:
        target = params.get(self.param_name)
        if target is None:
            return False
        return str(target) == principal.id


@dataclass(frozen=True)
class RoleRequirement:
    roles: tuple[str, ...]


@dataclass(frozen=True)
class AccessOptions:
    message: Optional[str] = None
    enable_logging: bool = False
    allow_self_access: bool = False
    param_name: Optional[str] = None
    owner_resolver: Optional[OwnerResolver] = None

    def resolve_owner(self) -> Optional[OwnerResolver]:
        """Owner resolver in effect, or None when self-access is off or not identifiable."""
        if not self.allow_self_access:
            return None
        if self.owner_resolver is not None:
            return self.owner_resolver
        if self.param_name:
            return ParamOwnerResolver(self.param_name)
        return None


@dataclass(frozen=True)
class PermissionRequirement:
    permissions: tuple[str, ...]
    require_any: bool = False
    message: Optional[str] = None


@dataclass(frozen=True)
class AuthenticationRequirement:
    required: bool = True


@dataclass(frozen=True)
class AuditDescriptor:
    """What to write to the audit trail after the operation succeeds."""

    resource: str
    action: str
    extract_record_id: Optional[RecordIdExtractor] = None
    extract_details: Optional[DetailsExtractor] = None
    # Request parameter holding the record id when the outcome carries none (deletes).
    record_id_param: Optional[str] = None


Facet = Union[
    RoleRequirement,
    AccessOptions,
    PermissionRequirement,
    AuthenticationRequirement,
    AuditDescriptor,
]


@dataclass(frozen=True)
class OperationDescriptor:
    """Resolved, immutable policy and audit metadata for one operation."""

    resource: str
    operation: str
    required_roles: tuple[str, ...] = ()
    options: AccessOptions = field(default_factory=AccessOptions)
    audit: Optional[AuditDescriptor] = None
    permissions: Optional[PermissionRequirement] = None
    authenticated: bool = False

    @property
    def is_public(self) -> bool:
        return not self.required_roles


# ---------------------------------------------------------------------------
# Declaration surface
# ---------------------------------------------------------------------------

def require_roles(*roles: str) -> RoleRequirement:
    """Roles allowed to call the operation. Order is kept for deny messages; duplicates dropped."""
    return RoleRequirement(roles=tuple(dict.fromkeys(roles)))


def access_options(
    *,
    message: Optional[str] = None,
    enable_logging: bool = False,
    allow_self_access: bool = False,
    param_name: Optional[str] = None,
    owner_resolver: Optional[OwnerResolver] = None,
) -> AccessOptions:
    return AccessOptions(
        message=message,
        enable_logging=enable_logging,
        allow_self_access=allow_self_access,
        param_name=param_name,
        owner_resolver=owner_resolver,
    )


def require_permissions(
    *permissions: str,
    require_any: bool = False,
    message: Optional[str] = None,
) -> PermissionRequirement:
    return PermissionRequirement(
        permissions=tuple(dict.fromkeys(permissions)),
        require_any=require_any,
        message=message,
    )


def require_authentication() -> AuthenticationRequirement:
    return AuthenticationRequirement(required=True)


def public() -> AuthenticationRequirement:
    """Opt an operation out of a resource-level authentication requirement."""
    return AuthenticationRequirement(required=False)


def audit_as(
    *,
    resource: str,
    action: str,
    extract_record_id: Optional[RecordIdExtractor] = None,
    extract_details: Optional[DetailsExtractor] = None,
    record_id_param: Optional[str] = None,
) -> AuditDescriptor:
    return AuditDescriptor(
        resource=resource,
        action=action,
        extract_record_id=extract_record_id,
        extract_details=extract_details,
        record_id_param=record_id_param,
    )

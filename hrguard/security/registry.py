"""Operation descriptor registry. Written at bootstrap, frozen, then read-only per request."""

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from hrguard.security.descriptors import (
    AccessOptions,
    AuditDescriptor,
    AuthenticationRequirement,
    Facet,
    OperationDescriptor,
    PermissionRequirement,
    RoleRequirement,
)
from hrguard.security.exceptions import (
    DescriptorNotFoundError,
    DescriptorRegistrationError,
    RegistryFrozenError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Declaration:
    roles: Optional[RoleRequirement] = None
    options: Optional[AccessOptions] = None
    permissions: Optional[PermissionRequirement] = None
    authentication: Optional[AuthenticationRequirement] = None
    audit: Optional[AuditDescriptor] = None


def _collect(resource: str, operation: Optional[str], facets: tuple[Facet, ...]) -> _Declaration:
    slots: dict[str, Facet] = {}
    for facet in facets:
        if isinstance(facet, RoleRequirement):
            slot = "roles"
        elif isinstance(facet, AccessOptions):
            slot = "options"
        elif isinstance(facet, PermissionRequirement):
            slot = "permissions"
        elif isinstance(facet, AuthenticationRequirement):
            slot = "authentication"
        elif isinstance(facet, AuditDescriptor):
            slot = "audit"
        else:
            raise DescriptorRegistrationError(
                f"Unsupported declaration {facet!r} for {resource}.{operation or '*'}"
            )
        if slot in slots:
            raise DescriptorRegistrationError(
                f"Duplicate {slot} declaration for {resource}.{operation or '*'}"
            )
        slots[slot] = facet
    return _Declaration(**slots)


class DescriptorRegistry:
    """
    Keyed by (resource, operation). A resource-level default may be declared once per
    resource; each facet declared on the operation overrides the same facet of the
    default. Audit metadata is operation-level only.
    """

    def __init__(self, *, require_audit_extractors: bool = True) -> None:
        self._require_audit_extractors = require_audit_extractors
        self._defaults: dict[str, _Declaration] = {}
        self._operations: dict[tuple[str, str], _Declaration] = {}
        self._resolved: dict[tuple[str, str], OperationDescriptor] = {}
        self._frozen = False
        self._lock = threading.Lock()

    @property
    def frozen(self) -> bool:
        return self._frozen

    def declare_resource(self, resource: str, *facets: Facet) -> None:
        """Declare defaults shared by every operation of the resource."""
        declaration = _collect(resource, None, facets)
        if declaration.audit is not None:
            raise DescriptorRegistrationError(
                f"Audit metadata must be declared per operation, not on resource '{resource}'"
            )
        with self._lock:
            self._check_writable()
            if resource in self._defaults:
                raise DescriptorRegistrationError(f"Resource '{resource}' already declared")
            self._defaults[resource] = declaration

    def declare(self, resource: str, operation: str, *facets: Facet) -> None:
        declaration = _collect(resource, operation, facets)
        audit = declaration.audit
        if (
            audit is not None
            and self._require_audit_extractors
            and audit.extract_record_id is None
            and audit.record_id_param is None
        ):
            raise DescriptorRegistrationError(
                f"Audit metadata for {resource}.{operation} has no record id extractor"
            )
        key = (resource, operation)
        with self._lock:
            self._check_writable()
            if key in self._operations:
                raise DescriptorRegistrationError(f"Operation {resource}.{operation} already declared")
            self._operations[key] = declaration

    def freeze(self) -> "DescriptorRegistry":
        """Resolve every declared operation and reject further declarations."""
        with self._lock:
            if not self._frozen:
                self._resolved = {key: self._resolve(*key) for key in self._operations}
                self._frozen = True
                logger.info("descriptor_registry_frozen", extra={"operations": len(self._resolved)})
        return self

    def get(self, resource: str, operation: str) -> OperationDescriptor:
        """Nearest applicable descriptor. Raises DescriptorNotFoundError for undeclared operations."""
        key = (resource, operation)
        if self._frozen:
            descriptor = self._resolved.get(key)
            if descriptor is None:
                raise DescriptorNotFoundError(f"No descriptor declared for {resource}.{operation}")
            return descriptor
        with self._lock:
            if key not in self._operations:
                raise DescriptorNotFoundError(f"No descriptor declared for {resource}.{operation}")
            return self._resolve(resource, operation)

    def operations(self) -> list[tuple[str, str]]:
        return sorted(self._operations)

    def _check_writable(self) -> None:
        if self._frozen:
            raise RegistryFrozenError("Descriptor registry is frozen; declare operations at startup")

    def _resolve(self, resource: str, operation: str) -> OperationDescriptor:
        own = self._operations[(resource, operation)]
        default = self._defaults.get(resource, _Declaration())

        roles = own.roles or default.roles
        options = own.options or default.options or AccessOptions()
        permissions = own.permissions or default.permissions
        authentication = own.authentication or default.authentication
        return OperationDescriptor(
            resource=resource,
            operation=operation,
            required_roles=roles.roles if roles else (),
            options=options,
            audit=own.audit,
            permissions=permissions,
            authenticated=authentication.required if authentication else False,
        )

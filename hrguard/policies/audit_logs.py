"""Reading the audit trail. Admin only; the trail itself has no write or delete operations here."""

from hrguard.policies.constants import ADMIN
from hrguard.security.descriptors import access_options, require_authentication, require_roles
from hrguard.security.registry import DescriptorRegistry

RESOURCE = "audit_logs"


def declare(registry: DescriptorRegistry, *, enable_logging: bool = False) -> None:
    registry.declare_resource(
        RESOURCE,
        require_authentication(),
        require_roles(ADMIN),
        access_options(
            message="Access denied: audit trail is restricted to administrators",
            enable_logging=enable_logging,
        ),
    )
    registry.declare(RESOURCE, "list")
    registry.declare(RESOURCE, "history")

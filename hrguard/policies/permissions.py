"""Permission catalogue operations. Gated on the caller's role permissions rather than role names."""

from hrguard.policies.constants import MANAGE_ROLES, VIEW_ADMIN_ROLES
from hrguard.security.descriptors import access_options, require_authentication, require_permissions
from hrguard.security.registry import DescriptorRegistry

RESOURCE = "permissions"


def declare(registry: DescriptorRegistry, *, enable_logging: bool = False) -> None:
    registry.declare_resource(
        RESOURCE,
        require_authentication(),
        access_options(enable_logging=enable_logging),
        require_permissions(VIEW_ADMIN_ROLES, MANAGE_ROLES),
    )
    registry.declare(RESOURCE, "list")
    registry.declare(RESOURCE, "get", require_permissions(VIEW_ADMIN_ROLES))
    registry.declare(RESOURCE, "create", require_permissions(MANAGE_ROLES))
    registry.declare(
        RESOURCE,
        "search",
        require_permissions(VIEW_ADMIN_ROLES, MANAGE_ROLES, require_any=True),
    )

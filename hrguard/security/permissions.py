"""Permission requirement check (ALL or ANY of the named permissions). Evaluated after the role gate."""

import logging
from typing import Optional

from hrguard.security.decision import Decision, DenyKind
from hrguard.security.descriptors import PermissionRequirement
from hrguard.security.principal import Principal

logger = logging.getLogger(__name__)


class PermissionChecker:
    """Check a role's permission set against a requirement. Pure."""

    def check(
        self,
        principal: Optional[Principal],
        requirement: Optional[PermissionRequirement],
    ) -> Decision:
        if requirement is None or not requirement.permissions:
            return Decision.allow()

        if principal is None or principal.role is None:
            return Decision.deny(
                DenyKind.PERMISSION_DENIED,
                requirement.message or "Access denied: Insufficient permissions",
            )

        granted = principal.role.permissions
        if requirement.require_any:
            has_access = any(p in granted for p in requirement.permissions)
        else:
            has_access = all(p in granted for p in requirement.permissions)

        if not has_access:
            logger.info(
                "permission_denied",
                extra={
                    "principal_id": principal.id,
                    "role": principal.role.name,
                    "required_permissions": list(requirement.permissions),
                    "require_any": requirement.require_any,
                },
            )
            return Decision.deny(
                DenyKind.PERMISSION_DENIED,
                requirement.message
                or f"Access denied: Missing required permissions: {', '.join(requirement.permissions)}",
            )
        return Decision.allow(role_match=True)

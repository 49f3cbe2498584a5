"""Authorization decision engine: role membership OR self-access. Pure; no FastAPI."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Union

from hrguard.security.descriptors import OperationDescriptor
from hrguard.security.exceptions import (
    AuthenticationMissingError,
    AuthorizationDeniedError,
    PermissionDeniedError,
)
from hrguard.security.principal import Principal, RequestParams

logger = logging.getLogger(__name__)

DEFAULT_AUTHENTICATION_MESSAGE = "Access denied: Authentication required"


class DenyKind(str, Enum):
    AUTHENTICATION_MISSING = "authentication_missing"
    AUTHORIZATION_DENIED = "authorization_denied"
    PERMISSION_DENIED = "permission_denied"


_DENY_ERRORS = {
    DenyKind.AUTHENTICATION_MISSING: AuthenticationMissingError,
    DenyKind.AUTHORIZATION_DENIED: AuthorizationDeniedError,
    DenyKind.PERMISSION_DENIED: PermissionDeniedError,
}


@dataclass(frozen=True)
class Decision:
    """Allow, or Deny with a human-readable message."""

    allowed: bool
    message: Optional[str] = None
    kind: Optional[DenyKind] = None
    role_match: bool = False
    self_match: bool = False

    @classmethod
    def allow(cls, *, role_match: bool = False, self_match: bool = False) -> "Decision":
        return cls(allowed=True, role_match=role_match, self_match=self_match)

    @classmethod
    def deny(cls, kind: DenyKind, message: str) -> "Decision":
        return cls(allowed=False, message=message, kind=kind)

    def raise_for_denial(self) -> None:
        """Raise the typed access error for a Deny; no-op for Allow."""
        if self.allowed:
            return
        raise _DENY_ERRORS[self.kind](self.message or "Access denied")


def _default_deny_message(descriptor: OperationDescriptor) -> str:
    message = f"Access denied: Required roles: {', '.join(descriptor.required_roles)}"
    if descriptor.options.resolve_owner() is not None:
        message += " or self-access"
    return message


class DecisionEngine:
    """
    decide(principal, descriptor, params) -> Decision, in fixed precedence:
    public -> authentication -> role match OR self match.

    Role comparison is exact and case-sensitive; there is no hierarchy. The only
    blanket rule is the optional bypass_role, which must be configured explicitly.
    """

    def __init__(self, *, bypass_role: Optional[str] = None) -> None:
        self._bypass_role = bypass_role

    def decide(
        self,
        principal: Optional[Principal],
        descriptor: OperationDescriptor,
        params: Union[RequestParams, Mapping[str, Any], None] = None,
    ) -> Decision:
        options = descriptor.options
        trace = options.enable_logging
        if not isinstance(params, RequestParams):
            params = RequestParams.from_mapping(params)

        if not descriptor.required_roles:
            if trace:
                logger.debug(
                    "access_unrestricted",
                    extra={"resource": descriptor.resource, "operation": descriptor.operation},
                )
            return Decision.allow()

        if principal is None or principal.role is None:
            if trace:
                logger.debug(
                    "access_denied_no_role",
                    extra={
                        "resource": descriptor.resource,
                        "operation": descriptor.operation,
                        "principal_id": principal.id if principal else None,
                    },
                )
            return Decision.deny(
                DenyKind.AUTHENTICATION_MISSING,
                options.message or DEFAULT_AUTHENTICATION_MESSAGE,
            )

        role_name = principal.role.name
        role_match = role_name in descriptor.required_roles or (
            self._bypass_role is not None and role_name == self._bypass_role
        )

        self_match = False
        owner = options.resolve_owner()
        if owner is not None:
            self_match = owner.is_owner(principal, params)

        allowed = role_match or self_match
        if trace:
            logger.debug(
                "access_decision",
                extra={
                    "resource": descriptor.resource,
                    "operation": descriptor.operation,
                    "principal_id": principal.id,
                    "username": principal.username,
                    "role": role_name,
                    "required_roles": list(descriptor.required_roles),
                    "role_match": role_match,
                    "self_match": self_match,
                    "allowed": allowed,
                },
            )

        if not allowed:
            return Decision.deny(
                DenyKind.AUTHORIZATION_DENIED,
                options.message or _default_deny_message(descriptor),
            )
        return Decision.allow(role_match=role_match, self_match=self_match)

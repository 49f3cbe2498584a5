"""Security-layer exceptions. Typed, no HTTP."""


class SecurityError(Exception):
    """Base for all security-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class AuthenticationRequiredError(SecurityError):
    """Raised when an operation requires an authenticated caller and none was resolved."""


class AccessDeniedError(SecurityError):
    """Terminal deny. Classification surfaced to the transport layer is always 'forbidden'."""

    classification = "forbidden"


class AuthenticationMissingError(AccessDeniedError):
    """Raised when a role-gated operation is called without a Principal or Role."""


class AuthorizationDeniedError(AccessDeniedError):
    """Raised when the Principal fails both the role check and the self-access check."""


class PermissionDeniedError(AccessDeniedError):
    """Raised when the caller's role lacks the permissions an operation requires."""


class InvalidTokenError(SecurityError):
    """Raised when a bearer token cannot be decoded into a Principal."""


class RegistryError(SecurityError):
    """Base for operation descriptor registry errors (configuration faults)."""


class DescriptorNotFoundError(RegistryError):
    """Raised when no descriptor was declared for a resource/operation pair."""


class DescriptorRegistrationError(RegistryError):
    """Raised when a declaration is invalid (e.g. audit metadata without a record id extractor)."""


class RegistryFrozenError(RegistryError):
    """Raised when declaring into a registry after bootstrap has frozen it."""

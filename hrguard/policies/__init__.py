"""Policy catalogue: role, self-access and audit declarations for every HR operation."""

from typing import Optional

from hrguard.config.settings import AppSettings, get_settings
from hrguard.policies import audit_logs, branches, permissions, role_management, timesheets, users
from hrguard.security.registry import DescriptorRegistry

_MODULES = (timesheets, users, branches, role_management, permissions, audit_logs)


def build_registry(settings: Optional[AppSettings] = None) -> DescriptorRegistry:
    """Declare every operation and return the frozen registry."""
    settings = settings or get_settings()
    registry = DescriptorRegistry(require_audit_extractors=settings.require_audit_extractors)
    for module in _MODULES:
        module.declare(registry, enable_logging=settings.guard_logging)
    return registry.freeze()


__all__ = ["build_registry"]

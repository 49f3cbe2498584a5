"""Principal and request-parameter adapters. Normalize whatever the resolver and transport hand us."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Role:
    """Role name is the sole comparison key. Permissions are advisory, not used by the role engine."""

    name: str
    permissions: frozenset[str] = frozenset()


@dataclass(frozen=True)
class Principal:
    """Authenticated caller: identity and role."""

    id: str
    username: Optional[str] = None
    role: Optional[Role] = None


def _normalize_permissions(raw: Any) -> frozenset[str]:
    if raw is None:
        return frozenset()
    if isinstance(raw, str) or not isinstance(raw, Iterable):
        raise ValueError("permissions must be a list of names")
    names: set[str] = set()
    for item in raw:
        # Accept both bare names and {"permission": {"name": ...}} join rows.
        if isinstance(item, str):
            names.add(item)
        elif isinstance(item, Mapping):
            inner = item.get("permission", item)
            name = inner.get("name") if isinstance(inner, Mapping) else None
            if not isinstance(name, str):
                raise ValueError("permission entry has no name")
            names.add(name)
        else:
            raise ValueError("unsupported permission entry")
    return frozenset(names)


def _normalize_role(raw: Any) -> Optional[Role]:
    if raw is None:
        return None
    if isinstance(raw, Role):
        return raw
    if isinstance(raw, str):
        if not raw:
            raise ValueError("role name must not be empty")
        return Role(name=raw)
    if isinstance(raw, Mapping):
        name = raw.get("name", raw.get("role_name"))
        if not isinstance(name, str) or not name:
            raise ValueError("role has no name")
        return Role(name=name, permissions=_normalize_permissions(raw.get("permissions")))
    raise ValueError(f"unsupported role type {type(raw).__name__}")


def normalize_principal(raw: Any) -> Optional[Principal]:
    """
    Coerce resolver output into a Principal. Accepts a Principal, a mapping of the
    shape {id, username?, role: {name} | {role_name} | str | None, permissions?}, or None.
    Malformed input returns None, which callers treat exactly like "no Principal".
    """
    if raw is None:
        return None
    if isinstance(raw, Principal):
        return raw if raw.id else None
    if not isinstance(raw, Mapping):
        logger.warning("principal_malformed", extra={"reason": f"type {type(raw).__name__}"})
        return None
    try:
        principal_id = raw.get("id")
        if principal_id is None or principal_id == "":
            raise ValueError("principal has no id")
        if not isinstance(principal_id, (str, int)):
            raise ValueError("principal id must be a string")
        username = raw.get("username")
        if username is not None and not isinstance(username, str):
            raise ValueError("username must be a string")
        role = _normalize_role(raw.get("role"))
        top_level_permissions = raw.get("permissions")
        if role is not None and top_level_permissions is not None and not role.permissions:
            role = Role(name=role.name, permissions=_normalize_permissions(top_level_permissions))
    except ValueError as e:
        logger.warning("principal_malformed", extra={"reason": str(e)})
        return None
    return Principal(id=str(principal_id), username=username, role=role)


@dataclass(frozen=True)
class RequestParams:
    """
    Transport-neutral view of request inputs. get() reads path params, then body
    fields. Query params are kept for details extractors only and never identify
    a record or its owner.
    """

    path: Mapping[str, Any] = field(default_factory=dict)
    body: Mapping[str, Any] = field(default_factory=dict)
    query: Mapping[str, Any] = field(default_factory=dict)
    client_host: Optional[str] = None
    user_agent: Optional[str] = None

    def get(self, name: str, default: Any = None) -> Any:
        for source in (self.path, self.body):
            if name in source:
                return source[name]
        return default

    @classmethod
    def from_mapping(cls, params: Optional[Mapping[str, Any]]) -> "RequestParams":
        """Wrap a plain mapping as path params."""
        return cls(path=dict(params or {}))

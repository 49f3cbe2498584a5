"""Role administration operations (the "roles" resource) and role-permission assignment."""

from typing import Any

from hrguard.audit.extractors import first_of, path
from hrguard.policies.constants import ADMIN, HR
from hrguard.security.descriptors import access_options, audit_as, require_authentication, require_roles
from hrguard.security.principal import RequestParams
from hrguard.security.registry import DescriptorRegistry

RESOURCE = "roles"

role_id = first_of(path("role", "id"), path("data", "id"), path("id"))


def _create_details(outcome: Any, request: RequestParams) -> dict[str, Any]:
    return {
        "role_name": request.body.get("role_name"),
        "description": request.body.get("description"),
        "created_by_ip": request.client_host,
        "user_agent": request.user_agent,
    }


def _update_details(outcome: Any, request: RequestParams) -> dict[str, Any]:
    return {
        "updated_fields": sorted(request.body),
        "role_name": request.body.get("role_name"),
        "description": request.body.get("description"),
        "updated_by_ip": request.client_host,
    }


def _delete_details(outcome: Any, request: RequestParams) -> dict[str, Any]:
    return {
        "deleted_role_id": request.path.get("id"),
        "deleted_by_ip": request.client_host,
        "force_delete": request.query.get("force") == "true",
    }


def _assign_permission_details(outcome: Any, request: RequestParams) -> dict[str, Any]:
    return {
        "role_id": request.path.get("id"),
        "permission_id": request.body.get("permission_id"),
        "assigned_by_ip": request.client_host,
    }


def declare(registry: DescriptorRegistry, *, enable_logging: bool = False) -> None:
    registry.declare_resource(
        RESOURCE,
        require_authentication(),
        require_roles(ADMIN),
        access_options(enable_logging=enable_logging),
    )
    registry.declare(RESOURCE, "list", require_roles(ADMIN, HR))
    registry.declare(RESOURCE, "get", require_roles(ADMIN, HR))
    registry.declare(
        RESOURCE,
        "create",
        audit_as(
            resource=RESOURCE,
            action="CREATE",
            extract_record_id=role_id,
            extract_details=_create_details,
        ),
    )
    registry.declare(
        RESOURCE,
        "update",
        audit_as(
            resource=RESOURCE,
            action="UPDATE",
            extract_record_id=role_id,
            extract_details=_update_details,
        ),
    )
    registry.declare(
        RESOURCE,
        "delete",
        audit_as(
            resource=RESOURCE,
            action="DELETE",
            extract_record_id=first_of(path("deletedRoleId"), path("id")),
            extract_details=_delete_details,
            record_id_param="id",
        ),
    )
    registry.declare(
        RESOURCE,
        "assign_permission",
        audit_as(
            resource="role_permissions",
            action="ASSIGN_PERMISSION",
            extract_record_id=first_of(path("rolePermission", "id"), path("id")),
            extract_details=_assign_permission_details,
        ),
    )

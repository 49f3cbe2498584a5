"""User administration operations, including self-service profile reads and password change."""

from typing import Any

from hrguard.audit.extractors import first_of, path
from hrguard.policies.constants import ADMIN, HR
from hrguard.security.descriptors import access_options, audit_as, require_authentication, require_roles
from hrguard.security.principal import RequestParams
from hrguard.security.registry import DescriptorRegistry

RESOURCE = "users"

user_id = first_of(path("user", "id"), path("data", "id"), path("id"))


def _create_details(outcome: Any, request: RequestParams) -> dict[str, Any]:
    return {
        "username": request.body.get("username"),
        "email": request.body.get("email"),
        "role_id": request.body.get("role_id"),
        "employee_type": request.body.get("employee_type"),
        "created_by_ip": request.client_host,
    }


def _update_details(outcome: Any, request: RequestParams) -> dict[str, Any]:
    return {
        "updated_fields": sorted(request.body),
        "target_user_id": request.path.get("id"),
        "updated_by_ip": request.client_host,
    }


def _update_role_details(outcome: Any, request: RequestParams) -> dict[str, Any]:
    return {
        "target_user_id": request.path.get("id"),
        "new_role_id": request.path.get("role_id"),
        "updated_by_ip": request.client_host,
    }


def _delete_details(outcome: Any, request: RequestParams) -> dict[str, Any]:
    return {
        "deleted_user_id": request.path.get("id"),
        "deleted_by_ip": request.client_host,
    }


def _change_password_details(outcome: Any, request: RequestParams) -> dict[str, Any]:
    return {"password_changed_by_ip": request.client_host}


def declare(registry: DescriptorRegistry, *, enable_logging: bool = False) -> None:
    registry.declare_resource(
        RESOURCE,
        require_authentication(),
        require_roles(ADMIN, HR),
        access_options(enable_logging=enable_logging),
    )
    registry.declare(RESOURCE, "list")
    registry.declare(
        RESOURCE,
        "create",
        audit_as(
            resource=RESOURCE,
            action="CREATE",
            extract_record_id=user_id,
            extract_details=_create_details,
        ),
    )
    registry.declare(
        RESOURCE,
        "get",
        access_options(
            allow_self_access=True,
            param_name="id",
            message="You do not have permission to view this user profile",
            enable_logging=enable_logging,
        ),
    )
    registry.declare(
        RESOURCE,
        "update",
        audit_as(
            resource=RESOURCE,
            action="UPDATE",
            extract_record_id=user_id,
            extract_details=_update_details,
        ),
    )
    registry.declare(
        RESOURCE,
        "update_role",
        require_roles(ADMIN),
        audit_as(
            resource=RESOURCE,
            action="UPDATE_ROLE",
            extract_record_id=user_id,
            extract_details=_update_role_details,
        ),
    )
    registry.declare(
        RESOURCE,
        "delete",
        require_roles(ADMIN),
        audit_as(
            resource=RESOURCE,
            action="DELETE",
            extract_record_id=first_of(path("deletedUserId"), path("id")),
            extract_details=_delete_details,
            record_id_param="id",
        ),
    )
    # Self-service endpoints: any authenticated user, acting on themselves.
    registry.declare(RESOURCE, "get_me", require_roles())
    registry.declare(
        RESOURCE,
        "change_password",
        require_roles(),
        audit_as(
            resource=RESOURCE,
            action="CHANGE_PASSWORD",
            extract_record_id=first_of(path("userId"), path("user", "id")),
            extract_details=_change_password_details,
        ),
    )

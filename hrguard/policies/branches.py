"""Branch (office location) operations."""

from typing import Any

from hrguard.audit.extractors import body_fields, first_of, path
from hrguard.policies.constants import ADMIN, HR
from hrguard.security.descriptors import access_options, audit_as, require_authentication, require_roles
from hrguard.security.principal import RequestParams
from hrguard.security.registry import DescriptorRegistry

RESOURCE = "branches"

branch_id = first_of(path("data", "id"), path("id"))
_branch_details = body_fields("branch_name", "location")


def _delete_details(outcome: Any, request: RequestParams) -> dict[str, Any]:
    return {"deleted_id": request.path.get("id")}


def declare(registry: DescriptorRegistry, *, enable_logging: bool = False) -> None:
    registry.declare_resource(
        RESOURCE,
        require_authentication(),
        require_roles(ADMIN, HR),
        access_options(enable_logging=enable_logging),
    )
    registry.declare(RESOURCE, "list")
    registry.declare(RESOURCE, "get")
    registry.declare(
        RESOURCE,
        "create",
        audit_as(
            resource=RESOURCE,
            action="CREATE",
            extract_record_id=branch_id,
            extract_details=_branch_details,
        ),
    )
    registry.declare(
        RESOURCE,
        "update",
        audit_as(
            resource=RESOURCE,
            action="UPDATE",
            extract_record_id=branch_id,
            extract_details=_branch_details,
        ),
    )
    # Delete handlers return only a message; the id comes from the path.
    registry.declare(
        RESOURCE,
        "delete",
        audit_as(
            resource=RESOURCE,
            action="DELETE",
            record_id_param="id",
            extract_details=_delete_details,
        ),
    )

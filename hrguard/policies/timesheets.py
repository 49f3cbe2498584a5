"""Timesheet operations. Handlers return {timesheet}, {data} or {data: {timesheet}} depending on path."""

from typing import Any

from hrguard.audit.extractors import constant, dig, first_of, path
from hrguard.policies.constants import ADMIN, HR, PM
from hrguard.security.descriptors import access_options, audit_as, require_authentication, require_roles
from hrguard.security.principal import RequestParams
from hrguard.security.registry import DescriptorRegistry

RESOURCE = "timesheets"

timesheet_id = first_of(
    path("timesheet", "id"),
    path("data", "id"),
    path("data", "timesheet", "id"),
)

_NEW_STATUS = {"APPROVE": "APPROVED", "REJECT": "REJECTED"}


def _response_details(outcome: Any, request: RequestParams) -> dict[str, Any]:
    action = request.body.get("action")
    return {
        "action": action,
        "old_status": "PENDING",
        "new_status": _NEW_STATUS.get(action, "REJECTED"),
    }


def _list_details(outcome: Any, request: RequestParams) -> dict[str, Any]:
    return {
        "filters": dict(request.query),
        "total_results": dig(outcome, "pagination", "total") or 0,
    }


def _get_details(outcome: Any, request: RequestParams) -> dict[str, Any]:
    return {
        "timesheet_date": dig(outcome, "date"),
        "timesheet_user": dig(outcome, "user", "id"),
    }


def _delete_details(outcome: Any, request: RequestParams) -> dict[str, Any]:
    return {
        "deleted_date": dig(outcome, "deleted_timesheet", "date"),
        "deleted_user": dig(outcome, "deleted_timesheet", "user", "id"),
    }


def declare(registry: DescriptorRegistry, *, enable_logging: bool = False) -> None:
    registry.declare_resource(
        RESOURCE,
        require_authentication(),
        access_options(enable_logging=enable_logging),
    )
    registry.declare(
        RESOURCE,
        "create",
        audit_as(resource=RESOURCE, action="CREATE", extract_record_id=timesheet_id),
    )
    registry.declare(
        RESOURCE,
        "respond",
        require_roles(ADMIN, HR, PM),
        audit_as(
            resource=RESOURCE,
            action="RESPONSE",
            extract_record_id=timesheet_id,
            extract_details=_response_details,
        ),
    )
    registry.declare(
        RESOURCE,
        "list",
        audit_as(
            resource=RESOURCE,
            action="GET_ALL",
            extract_record_id=constant("multiple"),
            extract_details=_list_details,
        ),
    )
    # Ownership of a single timesheet is checked by the business handler.
    registry.declare(
        RESOURCE,
        "get",
        audit_as(
            resource=RESOURCE,
            action="GET_ONE",
            extract_record_id=first_of(path("id"), path("data", "id")),
            extract_details=_get_details,
        ),
    )
    registry.declare(
        RESOURCE,
        "delete",
        audit_as(
            resource=RESOURCE,
            action="DELETE",
            extract_record_id=path("deleted_timesheet", "id"),
            extract_details=_delete_details,
        ),
    )

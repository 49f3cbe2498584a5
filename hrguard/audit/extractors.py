"""
Record-id and details extractors for heterogeneous handler outcomes.

Outcomes may be dicts, pydantic models or plain objects, and handlers nest the
affected entity under different keys ({"timesheet": ...}, {"data": ...},
{"data": {"timesheet": ...}}). Per-operation extractors are built from these
helpers; fallback_record_id is used only when an operation declares none.
"""

from collections.abc import Mapping
from typing import Any, Callable, Iterable, Optional

from hrguard.security.principal import RequestParams


def get_field(obj: Any, name: str) -> Any:
    """Read name from a mapping or an attribute; None when absent."""
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def dig(obj: Any, *path: str) -> Any:
    for name in path:
        obj = get_field(obj, name)
        if obj is None:
            return None
    return obj


def as_record_id(value: Any) -> Optional[str]:
    """Normalize an identifier to a non-empty string, or None."""
    if value is None or isinstance(value, (bool, Mapping)):
        return None
    text = str(value)
    return text or None


def path(*keys: str) -> Callable[[Any], Optional[str]]:
    """Extractor reading a nested id, e.g. path("timesheet", "id")."""

    def extract(outcome: Any) -> Optional[str]:
        return as_record_id(dig(outcome, *keys))

    return extract


def first_of(*extractors: Callable[[Any], Optional[str]]) -> Callable[[Any], Optional[str]]:
    """Extractor returning the first non-empty id any of the given extractors yields."""

    def extract(outcome: Any) -> Optional[str]:
        for extractor in extractors:
            record_id = extractor(outcome)
            if record_id:
                return record_id
        return None

    return extract


def constant(value: str) -> Callable[[Any], Optional[str]]:
    """Extractor for collection-level actions (e.g. GET_ALL -> "multiple")."""
    return lambda outcome: value


def _singular(resource: str) -> str:
    if resource.endswith("ies"):
        return resource[:-3] + "y"
    if resource.endswith(("ches", "shes", "sses", "xes")):
        return resource[:-2]
    if resource.endswith("s") and not resource.endswith("ss"):
        return resource[:-1]
    return resource


def entity_key_guesses(resource: str) -> tuple[str, ...]:
    """Keys a handler plausibly nests its entity under, e.g. 'timesheets' -> ('timesheet', 'request')."""
    return tuple(dict.fromkeys((_singular(resource), "request")))


def fallback_record_id(outcome: Any, entity_keys: Iterable[str] = ()) -> Optional[str]:
    """Generic chain: outcome.id, then outcome.data.id, then outcome.<entity>.id."""
    candidates = [("id",), ("data", "id")] + [(key, "id") for key in entity_keys]
    for keys in candidates:
        record_id = as_record_id(dig(outcome, *keys))
        if record_id:
            return record_id
    return None


# ---------------------------------------------------------------------------
# Details helpers
# ---------------------------------------------------------------------------

def body_fields(*names: str) -> Callable[[Any, RequestParams], dict[str, Any]]:
    """Details extractor copying the named body fields (missing fields become None)."""

    def extract(outcome: Any, request: RequestParams) -> dict[str, Any]:
        return {name: request.body.get(name) for name in names}

    return extract


"""Record-id and details extractors over dict, model and object outcomes."""

from types import SimpleNamespace

from pydantic import BaseModel

from hrguard.audit.extractors import (
    as_record_id,
    body_fields,
    constant,
    dig,
    entity_key_guesses,
    fallback_record_id,
    first_of,
    path,
)
from hrguard.security.principal import RequestParams


class _Timesheet(BaseModel):
    id: str
    status: str = "PENDING"


def test_dig_through_dicts_models_and_objects():
    outcome = {"data": SimpleNamespace(timesheet=_Timesheet(id="t1"))}
    assert dig(outcome, "data", "timesheet", "id") == "t1"
    assert dig(outcome, "data", "missing", "id") is None


def test_as_record_id_normalizes():
    assert as_record_id(5) == "5"
    assert as_record_id("abc") == "abc"
    assert as_record_id("") is None
    assert as_record_id(None) is None
    assert as_record_id(True) is None
    assert as_record_id({"id": 1}) is None


def test_path_extractor():
    extract = path("timesheet", "id")
    assert extract({"timesheet": {"id": 12}}) == "12"
    assert extract({"data": {"id": 12}}) is None


def test_first_of_picks_first_hit():
    extract = first_of(path("timesheet", "id"), path("data", "id"), path("data", "timesheet", "id"))
    assert extract({"timesheet": {"id": "a"}, "data": {"id": "b"}}) == "a"
    assert extract({"data": {"id": "b"}}) == "b"
    assert extract({"data": {"timesheet": {"id": "c"}}}) == "c"
    assert extract({}) is None


def test_constant_extractor():
    assert constant("multiple")(None) == "multiple"


def test_entity_key_guesses():
    assert entity_key_guesses("timesheets") == ("timesheet", "request")
    assert entity_key_guesses("branches") == ("branch", "request")
    assert entity_key_guesses("addresses") == ("address", "request")
    assert entity_key_guesses("policies") == ("policy", "request")
    assert entity_key_guesses("request") == ("request",)


def test_fallback_record_id_chain():
    keys = entity_key_guesses("timesheets")
    assert fallback_record_id({"id": "top", "data": {"id": "d"}}, keys) == "top"
    assert fallback_record_id({"data": {"id": "d"}}, keys) == "d"
    assert fallback_record_id({"timesheet": {"id": "t"}}, keys) == "t"
    assert fallback_record_id({"request": {"id": "r"}}, keys) == "r"
    assert fallback_record_id({"message": "ok"}, keys) is None
    assert fallback_record_id(None, keys) is None


def test_body_fields_details():
    request = RequestParams(body={"name": "HQ", "location": "Pune", "ignored": 1})
    assert body_fields("name", "location", "phone")(None, request) == {
        "name": "HQ",
        "location": "Pune",
        "phone": None,
    }

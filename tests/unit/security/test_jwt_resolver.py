"""Bearer token resolution to Principal."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from hrguard.security.exceptions import InvalidTokenError
from hrguard.security.jwt_resolver import JwtPrincipalResolver, claims_to_principal
from hrguard.security.principal import Principal, Role

SECRET = "unit-test-secret-that-is-long-enough-for-hs256"


@pytest.fixture
def resolver():
    return JwtPrincipalResolver(SECRET)


def _token(expires_in: timedelta = timedelta(minutes=5), secret: str = SECRET, **claims) -> str:
    payload = {"sub": "u1", "exp": datetime.now(timezone.utc) + expires_in, **claims}
    return jwt.encode(payload, secret, algorithm="HS256")


def test_resolves_valid_token(resolver):
    principal = resolver.resolve(f"Bearer {_token(username='alice', role='HR')}")
    assert principal == Principal(id="u1", username="alice", role=Role("HR"))


def test_resolves_role_object_claim(resolver):
    token = _token(role={"name": "PM", "permissions": ["timesheets:respond"]})
    principal = resolver.resolve(f"Bearer {token}")
    assert principal.role.name == "PM"
    assert "timesheets:respond" in principal.role.permissions


def test_missing_header_resolves_to_none(resolver):
    assert resolver.resolve(None) is None
    assert resolver.resolve("") is None


@pytest.mark.parametrize("header", ["Token abc", "Bearer", "Bearer a b", "bearer abc"])
def test_malformed_header_resolves_to_none(resolver, header):
    assert resolver.resolve(header) is None


def test_expired_token_resolves_to_none(resolver):
    assert resolver.resolve(f"Bearer {_token(expires_in=timedelta(minutes=-5))}") is None


def test_wrong_signature_resolves_to_none(resolver):
    token = _token(secret="another-secret-that-is-also-long-enough-here")
    assert resolver.resolve(f"Bearer {token}") is None


def test_decode_reports_expiry(resolver):
    with pytest.raises(InvalidTokenError) as exc_info:
        resolver.decode(_token(expires_in=timedelta(minutes=-5)))
    assert exc_info.value.message == "Authentication token has expired"


def test_decode_requires_exp(resolver):
    token = jwt.encode({"sub": "u1"}, SECRET, algorithm="HS256")
    with pytest.raises(InvalidTokenError):
        resolver.decode(token)


def test_claims_without_role_give_roleless_principal():
    principal = claims_to_principal({"sub": "u1"})
    assert principal == Principal(id="u1")

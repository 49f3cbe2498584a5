"""Bearer-token principal resolver. Verifies tokens issued elsewhere; never issues them."""

import logging
from typing import Any, Mapping, Optional

import jwt

from hrguard.security.exceptions import InvalidTokenError
from hrguard.security.principal import Principal, normalize_principal

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer"


def _split_bearer(authorization: str) -> str:
    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != BEARER_PREFIX or not parts[1]:
        raise InvalidTokenError('Authorization header malformed: expected "Bearer <token>"')
    return parts[1]


def claims_to_principal(claims: Mapping[str, Any]) -> Optional[Principal]:
    """Map standard claims (sub, username, role, permissions) onto the principal input contract."""
    return normalize_principal(
        {
            "id": claims.get("sub"),
            "username": claims.get("username"),
            "role": claims.get("role"),
            "permissions": claims.get("permissions"),
        }
    )


class JwtPrincipalResolver:
    """
    Resolve an Authorization header to a Principal. Missing, malformed, expired or
    otherwise invalid tokens resolve to None; the decision engine then denies any
    role-gated operation.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", leeway: int = 0) -> None:
        self._secret = secret
        self._algorithms = [algorithm]
        self._leeway = leeway

    def decode(self, token: str) -> dict[str, Any]:
        """Decode and verify a token. Raises InvalidTokenError."""
        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=self._algorithms,
                leeway=self._leeway,
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise InvalidTokenError("Authentication token has expired") from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"Invalid token: {e}") from e

    def resolve(self, authorization: Optional[str]) -> Optional[Principal]:
        if not authorization:
            return None
        try:
            claims = self.decode(_split_bearer(authorization.strip()))
        except InvalidTokenError as e:
            logger.info("principal_unresolved", extra={"reason": e.message})
            return None
        return claims_to_principal(claims)

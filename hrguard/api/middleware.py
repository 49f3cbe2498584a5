"""API middleware: correlation ID, principal resolution, request access log."""

import logging
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from hrguard.core.context import actor_id_ctx, correlation_id_ctx
from hrguard.security.jwt_resolver import JwtPrincipalResolver

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
AUTHORIZATION_HEADER = "Authorization"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Generate or preserve correlation ID; attach to request.state, response header, and logging context."""

    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id
        correlation_id_ctx.set(correlation_id)

        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response


class PrincipalMiddleware(BaseHTTPMiddleware):
    """
    Resolve the bearer token to a Principal and attach it to request.state.principal.
    Never rejects: unauthenticated requests carry principal=None and the operation
    gate decides what that means.
    """

    def __init__(self, app: ASGIApp, resolver: JwtPrincipalResolver) -> None:
        super().__init__(app)
        self._resolver = resolver

    async def dispatch(self, request: Request, call_next) -> Response:
        principal = self._resolver.resolve(request.headers.get(AUTHORIZATION_HEADER))
        request.state.principal = principal
        actor_id_ctx.set(principal.id if principal else None)
        return await call_next(request)


class AccessLogMiddleware(BaseHTTPMiddleware):
    """After response: log structured access event (correlation_id, actor_id, path, method, status_code)."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        principal = getattr(request.state, "principal", None)
        logger.info(
            "request_completed",
            extra={
                "correlation_id": getattr(request.state, "correlation_id", None),
                "actor_id": getattr(principal, "id", None),
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
            },
        )
        return response

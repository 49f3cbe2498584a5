# hrguard/main.py

import asyncio
import logging
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from hrguard.api import dependencies
from hrguard.api.middleware import (
    AccessLogMiddleware,
    CorrelationIdMiddleware,
    PrincipalMiddleware,
)
from hrguard.api.routers import audit_logs, health
from hrguard.api.schemas import ErrorResponse
from hrguard.config.logging import configure_logging
from hrguard.config.settings import AppSettings, get_settings
from hrguard.security.exceptions import (
    AccessDeniedError,
    AuthenticationRequiredError,
    RegistryError,
)
from hrguard.security.jwt_resolver import JwtPrincipalResolver

logger = logging.getLogger(__name__)


async def _replay_audit_outbox(app: FastAPI, interval_seconds: float) -> None:
    """Periodically retry audit entries whose write failed."""
    overrides = app.dependency_overrides
    while True:
        await asyncio.sleep(interval_seconds)
        outbox = overrides.get(dependencies.get_audit_outbox, dependencies.get_audit_outbox)()
        if not len(outbox):
            continue
        store_factory = overrides.get(dependencies.get_audit_store, dependencies.get_audit_store)
        try:
            await outbox.replay(store_factory())
        except Exception as e:
            logger.error("audit_replay_loop_failed", extra={"error": str(e)})


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    # Fail fast on bad declarations before serving traffic.
    app.dependency_overrides.get(dependencies.get_registry, dependencies.get_registry)()
    replay_task = asyncio.create_task(
        _replay_audit_outbox(app, settings.audit_replay_interval_seconds)
    )
    try:
        yield
    finally:
        replay_task.cancel()
        with suppress(asyncio.CancelledError):
            await replay_task


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AuthenticationRequiredError)
    async def authentication_required_handler(request, exc: AuthenticationRequiredError):
        return JSONResponse(
            status_code=401,
            content=ErrorResponse(detail=exc.message, error="unauthorized").model_dump(),
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(AccessDeniedError)
    async def access_denied_handler(request, exc: AccessDeniedError):
        return JSONResponse(
            status_code=403,
            content=ErrorResponse(detail=exc.message, error=exc.classification).model_dump(),
        )

    @app.exception_handler(RegistryError)
    async def registry_error_handler(request, exc: RegistryError):
        logger.error("registry_error", extra={"error": exc.message, "path": request.url.path})
        return JSONResponse(status_code=500, content={"detail": "Operation is not configured"})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request, exc: Exception):
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )


def create_app(settings: AppSettings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        debug=settings.debug,
        lifespan=lifespan,
    )

    # Middleware order: last added runs first (outermost). Request flow: CorrelationId -> Principal -> AccessLog.
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(
        PrincipalMiddleware,
        resolver=JwtPrincipalResolver(settings.jwt_secret, settings.jwt_algorithm),
    )
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    # Routers: /health, /audit-logs
    app.include_router(health.router)
    app.include_router(audit_logs.router, prefix="/audit-logs")
    return app


app = create_app()

# hrguard/api/routers/health.py

from fastapi import APIRouter, Request

from hrguard.config.settings import get_settings

router = APIRouter()


@router.get("/health")
async def health(request: Request):
    """Health check with correlation ID and resolved caller from request state."""
    settings = get_settings()
    principal = getattr(request.state, "principal", None)
    return {
        "status": "ok",
        "correlation_id": request.state.correlation_id,
        "actor_id": principal.id if principal else None,
        "environment": settings.environment,
        "version": settings.version,
    }

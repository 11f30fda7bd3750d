"""Health check endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter()


@router.get(
    "/health",
    summary="Health check",
    description="Basic health check endpoint.",
)
async def health():
    """Basic health check."""
    return {"status": "healthy", "service": "clustermeta"}


@router.get(
    "/ready",
    summary="Readiness check",
    description="Check if service is ready to receive traffic.",
)
async def ready(request: Request):
    """Readiness check.

    Verifies the stores are loaded and, when Redis is the storage backend,
    that Redis answers.
    """
    checks = {
        "cluster_store": hasattr(request.app.state, "cluster_metadata_service"),
        "cred_resolvers": hasattr(request.app.state, "cred_resolver_service"),
    }

    redis = getattr(request.app.state, "redis", None)
    if redis is not None:
        try:
            health_result = await redis.health_check()
            checks["redis"] = health_result.get("status") == "healthy"
        except Exception:
            checks["redis"] = False

    all_ready = all(checks.values())

    return {
        "status": "ready" if all_ready else "not_ready",
        "checks": checks,
    }

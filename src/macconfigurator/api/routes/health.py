"""Health check endpoints."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from macconfigurator.dependencies import Registry
from macconfigurator.errors.exceptions import BackendUnavailableError

router = APIRouter(tags=["Health"])


@router.get("/")
async def banner():
    return {"service": "macconfigurator", "message": "This is the config manager service"}


@router.get("/health")
async def health_check():
    """Liveness: the process is up."""
    return {"status": "ok", "service": "macconfigurator"}


@router.get("/health/ready")
async def readiness(registry: Registry):
    """Readiness: the storage backend answers."""
    backend = registry.backend
    try:
        await backend.ping()
    except BackendUnavailableError as exc:
        return JSONResponse(
            status_code=503,
            content={
                "status": "not_ready",
                "checks": {"storage": f"error ({exc.kind}): {exc.message}"},
                "backend": backend.name,
            },
        )
    return {"status": "ready", "checks": {"storage": "ok"}, "backend": backend.name}

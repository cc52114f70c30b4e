"""Master router, mounted under ``settings.mount_path``."""

from fastapi import APIRouter

from macconfigurator.api.routes import applications, config, health


def build_router(prefix: str = "") -> APIRouter:
    router = APIRouter(prefix=prefix.rstrip("/"))
    router.include_router(health.router)
    router.include_router(config.router)
    router.include_router(applications.router)
    return router

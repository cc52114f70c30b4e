"""FastAPI application factory and lifespan management."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from macconfigurator.config import Settings, settings
from macconfigurator.logging_config import configure_logging
from macconfigurator.services.registry import ApplicationRegistry, CachePolicy
from macconfigurator.storage.database import DatabaseStorageBackend
from macconfigurator.storage.factory import create_backend

logger = logging.getLogger(__name__)


async def build_registry(config: Settings) -> ApplicationRegistry:
    """Construct the storage backend and the registry that owns it."""
    backend = create_backend(config)
    if isinstance(backend, DatabaseStorageBackend) and config.db_create_tables:
        await backend.create_tables()
    return ApplicationRegistry(backend, cache_policy=CachePolicy.from_settings(config))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the registry at startup and close its backend at shutdown."""
    config: Settings = app.state.settings
    registry = await build_registry(config)
    app.state.registry = registry
    logger.info(
        "Config manager started (backend=%s, mount=%s)", registry.backend.name, config.mount_path
    )
    yield

    await registry.close()
    logger.info("Config manager shutdown complete")


def create_app(config: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or settings
    app = FastAPI(
        title="macconfigurator",
        version="1.0.6",
        description="Versioned application configuration manager.",
        lifespan=lifespan,
    )
    app.state.settings = config

    from macconfigurator.api.middleware.trace_id import TraceIdMiddleware
    app.add_middleware(TraceIdMiddleware)

    from macconfigurator.errors.handlers import register_exception_handlers
    register_exception_handlers(app)

    from macconfigurator.api.router import build_router
    app.include_router(build_router(config.mount_path))

    return app


def create_default_app() -> FastAPI:
    """uvicorn factory entry point; configures logging from settings first."""
    configure_logging(log_level=settings.log_level, json_output=settings.json_logs)
    return create_app(settings)

"""FastAPI dependency injection providers."""

from typing import Annotated

from fastapi import Depends, Request

from macconfigurator.services.registry import ApplicationRegistry


def get_registry(request: Request) -> ApplicationRegistry:
    """Return the registry built during application startup."""
    return request.app.state.registry


def get_trace_id(request: Request) -> str:
    """Extract trace_id from request state (set by middleware)."""
    return getattr(request.state, "trace_id", "unknown")


Registry = Annotated[ApplicationRegistry, Depends(get_registry)]
TraceId = Annotated[str, Depends(get_trace_id)]

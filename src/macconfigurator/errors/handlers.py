"""FastAPI exception handlers producing ErrorResponse bodies."""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from macconfigurator.errors.exceptions import (
    BackendUnavailableError,
    ConfigValidationError,
    ConfiguratorError,
)
from macconfigurator.models.common import ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)


def error_response(request: Request, exc: ConfiguratorError) -> JSONResponse:
    trace_id = getattr(request.state, "trace_id", "unknown")
    body = ErrorResponse(
        error=ErrorDetail(
            code=exc.code,
            message=exc.message,
            details=exc.details,
            trace_id=trace_id,
            timestamp=datetime.now(timezone.utc),
        ),
    )
    headers = {"Retry-After": "5"} if isinstance(exc, BackendUnavailableError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(mode="json", exclude_none=True),
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register the handler translating every ConfiguratorError subclass."""

    @app.exception_handler(ConfiguratorError)
    async def configurator_error_handler(request: Request, exc: ConfiguratorError):
        if isinstance(exc, ConfigValidationError):
            logger.info(
                "Rejected %s %s: %s (%d issue(s))",
                request.method,
                request.url.path,
                exc.message,
                len(exc.issues),
            )
        else:
            logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
        return error_response(request, exc)

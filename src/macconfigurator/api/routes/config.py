"""Public configuration lookup."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from macconfigurator.dependencies import Registry
from macconfigurator.errors.exceptions import ConfiguratorError
from macconfigurator.errors.handlers import error_response
from macconfigurator.services.versioning import is_valid_version

router = APIRouter(tags=["Config"])


@router.get("/config/{application_id}/{version}")
async def get_config(application_id: str, version: str, request: Request, registry: Registry):
    """Return the payload that applies to ``version`` of ``application_id``.

    Named configurations get a short max-age, the default a long one.
    """
    if not is_valid_version(version):
        return error_response(
            request,
            ConfiguratorError(
                "INVALID_VERSION",
                f"Invalid semver version: {version}",
                details={"version": version},
                status_code=400,
            ),
        )

    result = await registry.get_config(application_id, version)
    if result is None:
        return error_response(
            request,
            ConfiguratorError(
                "CONFIG_NOT_FOUND",
                "Application not found or archived",
                details={"application_id": application_id},
                status_code=404,
            ),
        )

    return JSONResponse(
        content=result.data,
        headers={"Cache-Control": result.cache_control, "X-Config-Source": result.config_source},
    )

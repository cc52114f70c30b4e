"""Admin CRUD routes over applications and their named configurations."""

import logging

from fastapi import APIRouter, Response

from macconfigurator.dependencies import Registry, TraceId
from macconfigurator.errors.exceptions import ApplicationNotFoundError
from macconfigurator.models.application import (
    Application,
    ApplicationUpdate,
    NamedConfig,
    NamedConfigInput,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"])


@router.get("/applications")
async def list_applications(registry: Registry) -> list[dict]:
    return [app.to_wire() for app in await registry.list_applications()]


@router.get("/applications/{application_id}")
async def get_application(application_id: str, registry: Registry) -> dict:
    application = await registry.get_application(application_id)
    if application is None:
        raise ApplicationNotFoundError(application_id)
    return application.to_wire()


@router.post("/applications", status_code=201)
async def create_application(
    application: Application, registry: Registry, trace_id: TraceId
) -> dict:
    logger.info("POST /applications id=%s trace=%s", application.application_id, trace_id)
    created = await registry.create_application(application)
    return created.to_wire()


@router.put("/applications/{application_id}")
async def update_application(
    application_id: str, update: ApplicationUpdate, registry: Registry, trace_id: TraceId
) -> dict:
    logger.info(
        "PUT /applications/%s fields=%s trace=%s",
        application_id,
        sorted(update.model_fields_set),
        trace_id,
    )
    updated = await registry.update_application(application_id, update)
    return updated.to_wire()


@router.post("/applications/{application_id}/archive", status_code=204)
async def archive_application(application_id: str, registry: Registry) -> Response:
    await registry.archive_application(application_id)
    return Response(status_code=204)


@router.post("/applications/{application_id}/unarchive", status_code=204)
async def unarchive_application(application_id: str, registry: Registry) -> Response:
    await registry.unarchive_application(application_id)
    return Response(status_code=204)


@router.post("/applications/{application_id}/configs", status_code=201)
async def create_named_config(
    application_id: str, named_config: NamedConfigInput, registry: Registry
) -> dict:
    updated = await registry.create_named_config(
        application_id, named_config.name, named_config.data, named_config.versions
    )
    return updated.to_wire()


@router.put("/applications/{application_id}/configs/{name}")
async def update_named_config(
    application_id: str, name: str, named_config: NamedConfig, registry: Registry
) -> dict:
    updated = await registry.update_named_config(
        application_id, name, named_config.data, named_config.versions
    )
    return updated.to_wire()


@router.delete("/applications/{application_id}/configs/{name}", status_code=204)
async def delete_named_config(application_id: str, name: str, registry: Registry) -> Response:
    await registry.delete_named_config(application_id, name)
    return Response(status_code=204)

"""Volatile, process-local storage backend."""

import logging

from macconfigurator.models.application import Application
from macconfigurator.storage.base import StorageBackend

logger = logging.getLogger(__name__)


class MemoryStorageBackend(StorageBackend):
    """Dict-backed store owned by the instance; contents vanish on shutdown."""

    name = "memory"

    def __init__(self) -> None:
        super().__init__()
        self._applications: dict[str, Application] = {}

    async def get(self, application_id: str) -> Application | None:
        stored = self._applications.get(application_id)
        return stored.model_copy(deep=True) if stored is not None else None

    async def put(self, application: Application) -> Application:
        self._applications[application.application_id] = application.model_copy(deep=True)
        return application.model_copy(deep=True)

    async def list_all(self) -> list[Application]:
        ordered = sorted(self._applications.values(), key=lambda app: app.application_id)
        return [app.model_copy(deep=True) for app in ordered]

    async def close(self) -> None:
        logger.info("Discarding %d in-memory application(s)", len(self._applications))
        self._applications.clear()

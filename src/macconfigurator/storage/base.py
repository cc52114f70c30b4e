"""Storage backend contract for Application aggregates."""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from macconfigurator.models.application import Application


class StorageBackend(ABC):
    """Whole-aggregate persistence keyed by ``application_id``.

    Implementations must give read-your-writes consistency for one instance
    and hand out isolated copies, never live references into the store.
    Callers serialize read-modify-write sequences on one id with
    :meth:`lock`; different ids never wait on each other.
    """

    name: str = "abstract"

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    @asynccontextmanager
    async def lock(self, application_id: str) -> AsyncIterator[None]:
        """Hold the per-application mutex for the duration of the block."""
        key_lock = self._locks.setdefault(application_id, asyncio.Lock())
        self._lock_users[application_id] = self._lock_users.get(application_id, 0) + 1
        try:
            async with key_lock:
                yield
        finally:
            self._lock_users[application_id] -= 1
            if not self._lock_users[application_id]:
                del self._lock_users[application_id]
                self._locks.pop(application_id, None)

    @abstractmethod
    async def get(self, application_id: str) -> Application | None:
        """Return a copy of the stored aggregate, or None."""

    @abstractmethod
    async def put(self, application: Application) -> Application:
        """Insert or replace the whole aggregate and return what was stored."""

    @abstractmethod
    async def list_all(self) -> list[Application]:
        """Return every stored aggregate, archived ones included."""

    async def ping(self) -> bool:
        """Readiness check; raises BackendUnavailableError when unreachable."""
        return True

    async def close(self) -> None:
        """Release resources held by the backend."""

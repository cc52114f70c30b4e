"""Build the storage backend selected in settings."""

import logging

from macconfigurator.config import Settings
from macconfigurator.storage.base import StorageBackend
from macconfigurator.storage.database import DatabaseStorageBackend
from macconfigurator.storage.memory import MemoryStorageBackend

logger = logging.getLogger(__name__)

_ALIASES = {
    "memory": "memory",
    "in-memory": "memory",
    "database": "database",
    "db": "database",
    "sql": "database",
}


def create_backend(config: Settings) -> StorageBackend:
    """Return a fresh backend instance for ``config.storage_backend``.

    Raises:
        ValueError: If the backend name is unknown.
    """
    kind = _ALIASES.get(config.storage_backend.strip().lower())
    if kind is None:
        raise ValueError(
            f"Unknown storage backend '{config.storage_backend}' "
            f"(expected one of: {', '.join(sorted(set(_ALIASES.values())))})"
        )
    if kind == "memory":
        logger.info("Using volatile in-memory storage backend")
        return MemoryStorageBackend()

    logger.info("Using database storage backend")
    return DatabaseStorageBackend.from_settings(config)

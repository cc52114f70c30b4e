"""Durable storage backend over SQLAlchemy async (PostgreSQL via asyncpg, or SQLite)."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import TypeVar

from sqlalchemy import exc as sa_exc
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from macconfigurator.config import Settings
from macconfigurator.db.base import Base
from macconfigurator.db.engine import create_db_engine, create_session_factory
from macconfigurator.db.models.application import ApplicationRow
from macconfigurator.errors.exceptions import BackendUnavailableError, WriteConflictError
from macconfigurator.models.application import Application
from macconfigurator.repositories.application_repo import ApplicationRepository
from macconfigurator.storage.base import StorageBackend

logger = logging.getLogger(__name__)

R = TypeVar("R")

_AUTH_MARKERS = ("authentication", "password", "permission denied", "access denied")


def _classify(exc: BaseException) -> str:
    summary = f"{type(exc).__name__} {exc}".lower()
    if any(marker in summary for marker in _AUTH_MARKERS):
        return "auth"
    return "network"


def _to_application(row: ApplicationRow) -> Application:
    document = dict(row.document)
    document["archived"] = row.archived
    document["lastUpdated"] = row.last_updated
    return Application.model_validate(document)


class DatabaseStorageBackend(StorageBackend):
    """One ``applications`` row per aggregate; the document column holds the wire shape.

    Every operation runs in its own session and transaction and is bounded by
    ``operation_timeout``. Driver failures surface as BackendUnavailableError
    (network/auth/timeout/pool_exhausted) or WriteConflictError, never as raw
    SQLAlchemy exceptions.
    """

    name = "database"

    def __init__(self, engine: AsyncEngine, operation_timeout: float = 10.0) -> None:
        super().__init__()
        self._engine = engine
        self._session_factory = create_session_factory(engine)
        self._operation_timeout = operation_timeout

    @classmethod
    def from_settings(cls, config: Settings) -> "DatabaseStorageBackend":
        return cls(create_db_engine(config), operation_timeout=config.db_operation_timeout)

    async def _guard(self, description: str, awaitable: Awaitable[R]) -> R:
        try:
            return await asyncio.wait_for(awaitable, timeout=self._operation_timeout)
        except asyncio.TimeoutError as exc:
            logger.warning("Database %s timed out after %.1fs", description, self._operation_timeout)
            raise BackendUnavailableError(
                "timeout", f"Database {description} timed out after {self._operation_timeout}s"
            ) from exc
        except sa_exc.TimeoutError as exc:
            logger.warning("Database connection pool exhausted during %s", description)
            raise BackendUnavailableError(
                "pool_exhausted", f"Database connection pool exhausted: {exc}"
            ) from exc
        except sa_exc.IntegrityError as exc:
            logger.warning("Write conflict during %s: %s", description, exc)
            raise WriteConflictError(f"Write conflict during {description}: {exc.orig}") from exc
        except (sa_exc.OperationalError, sa_exc.InterfaceError, OSError) as exc:
            kind = _classify(exc)
            logger.warning("Database unavailable during %s (%s): %s", description, kind, exc)
            raise BackendUnavailableError(kind, f"Database {description} failed: {exc}") from exc

    async def _in_session(self, operation: Callable[[ApplicationRepository], Awaitable[R]]) -> R:
        async with self._session_factory() as session:
            result = await operation(ApplicationRepository(session))
            await session.commit()
            return result

    async def create_tables(self) -> None:
        """Create missing tables (SQLite/local use; PostgreSQL goes through Alembic)."""
        import macconfigurator.db.models  # noqa: F401 - register ORM models

        async def _create() -> None:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

        await self._guard("table creation", _create())

    async def get(self, application_id: str) -> Application | None:
        async def _get(repo: ApplicationRepository) -> Application | None:
            row = await repo.get(application_id)
            return _to_application(row) if row is not None else None

        return await self._guard("read", self._in_session(_get))

    async def put(self, application: Application) -> Application:
        document = application.to_wire()

        async def _put(repo: ApplicationRepository) -> Application:
            row = await repo.upsert(
                application.application_id,
                archived=application.archived,
                document=document,
                last_updated=application.last_updated or datetime.now(timezone.utc),
            )
            return _to_application(row)

        return await self._guard("write", self._in_session(_put))

    async def list_all(self) -> list[Application]:
        async def _list(repo: ApplicationRepository) -> list[Application]:
            return [_to_application(row) for row in await repo.list_all()]

        return await self._guard("list", self._in_session(_list))

    async def ping(self) -> bool:
        async def _ping() -> bool:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True

        return await self._guard("ping", _ping())

    async def close(self) -> None:
        await self._engine.dispose()
        logger.info("Database engine disposed")

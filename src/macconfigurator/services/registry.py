"""Application registry: CRUD over Application aggregates plus config lookup.

Every mutation is a whole-aggregate read-modify-write held under the
backend's per-application lock. Anything that can invalidate data is
re-validated in full before it is persisted, so a failed call leaves the
stored aggregate untouched.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from macconfigurator.config import Settings
from macconfigurator.errors.exceptions import (
    ApplicationAlreadyExistsError,
    ApplicationNotFoundError,
    BackendUnavailableError,
    NamedConfigAlreadyExistsError,
    NamedConfigNotFoundError,
)
from macconfigurator.models.application import (
    Application,
    ApplicationUpdate,
    ConfigResponse,
    NamedConfig,
    ResolvedConfig,
)
from macconfigurator.services.resolver import resolve
from macconfigurator.services.validation import ApplicationValidator
from macconfigurator.storage.base import StorageBackend

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CachePolicy:
    """Cache-Control max-age per resolution outcome; 0 means ``no-cache``."""

    named_max_age: int = 600
    default_max_age: int = 604800

    @classmethod
    def from_settings(cls, config: Settings) -> "CachePolicy":
        return cls(
            named_max_age=config.named_config_max_age,
            default_max_age=config.default_config_max_age,
        )

    def header_for(self, resolved: ResolvedConfig) -> str:
        max_age = self.default_max_age if resolved.is_default else self.named_max_age
        return f"max-age={max_age}" if max_age > 0 else "no-cache"


class ApplicationRegistry:
    """The operations the HTTP layer exposes, independent of transport and storage."""

    def __init__(
        self,
        backend: StorageBackend,
        validator: ApplicationValidator | None = None,
        cache_policy: CachePolicy | None = None,
    ) -> None:
        self.backend = backend
        self.validator = validator or ApplicationValidator()
        self.cache_policy = cache_policy or CachePolicy()

    async def close(self) -> None:
        await self.backend.close()

    # -- reads: backend outages degrade to empty results ---------------------

    async def list_applications(self) -> list[Application]:
        try:
            return await self.backend.list_all()
        except BackendUnavailableError as exc:
            logger.warning("Listing applications failed, serving empty list: %s", exc.message)
            return []

    async def get_application(self, application_id: str) -> Application | None:
        try:
            return await self.backend.get(application_id)
        except BackendUnavailableError as exc:
            logger.warning("Reading application %s failed, serving none: %s", application_id, exc.message)
            return None

    async def get_config(self, application_id: str, version: str) -> ConfigResponse | None:
        """Resolve the payload for ``version``; None for unknown or archived apps."""
        resolved = resolve(await self.get_application(application_id), version)
        if resolved is None:
            logger.debug("No config for %s@%s", application_id, version)
            return None
        logger.debug("Resolved %s@%s to %s", application_id, version, resolved.config_source)
        return ConfigResponse(
            data=resolved.data,
            config_source=resolved.config_source,
            cache_control=self.cache_policy.header_for(resolved),
        )

    # -- writes ---------------------------------------------------------------

    async def create_application(self, application: Application) -> Application:
        """Validate and insert a new application.

        A taken id always fails with ApplicationAlreadyExistsError, whatever
        the payload; only then is the aggregate validated.
        """
        application_id = application.application_id
        self.validator.validate_application_id(application_id)

        async with self.backend.lock(application_id):
            if await self.backend.get(application_id) is not None:
                logger.error("Application already exists: %s", application_id)
                raise ApplicationAlreadyExistsError(application_id)

            self.validator.validate_application(application)
            stored = await self._persist(application.model_copy(deep=True))

        logger.info("Created application %s", application_id)
        return stored

    async def update_application(
        self, application_id: str, update: ApplicationUpdate | dict[str, Any]
    ) -> Application:
        """Merge ``update`` onto the stored aggregate and persist the whole result."""
        if not isinstance(update, ApplicationUpdate):
            update = self.validator.parse_update(update)

        async with self.backend.lock(application_id):
            existing = await self._require(application_id, "update")
            updated = await self._apply_update(existing, update)

        logger.info("Updated application %s", application_id)
        return updated

    async def archive_application(self, application_id: str) -> Application:
        return await self._set_archived(application_id, True)

    async def unarchive_application(self, application_id: str) -> Application:
        return await self._set_archived(application_id, False)

    async def create_named_config(
        self, application_id: str, name: str, data: Any, versions: list[str]
    ) -> Application:
        async with self.backend.lock(application_id):
            existing = await self._require(application_id, "named config creation")
            if name in existing.named_configs:
                logger.error("Named config %s already exists in %s", name, application_id)
                raise NamedConfigAlreadyExistsError(application_id, name)

            updated = await self._put_named_config(existing, name, data, versions)

        logger.info("Created named config %s in %s", name, application_id)
        return updated

    async def update_named_config(
        self, application_id: str, name: str, data: Any, versions: list[str]
    ) -> Application:
        async with self.backend.lock(application_id):
            existing = await self._require(application_id, "named config update")
            if name not in existing.named_configs:
                logger.error("Named config %s not found in %s", name, application_id)
                raise NamedConfigNotFoundError(application_id, name)

            updated = await self._put_named_config(existing, name, data, versions)

        logger.info("Updated named config %s in %s", name, application_id)
        return updated

    async def delete_named_config(self, application_id: str, name: str) -> Application:
        """Remove a named configuration; removal cannot invalidate data, so no re-validation."""
        async with self.backend.lock(application_id):
            existing = await self._require(application_id, "named config deletion")
            if name not in existing.named_configs:
                logger.error("Named config %s not found in %s for deletion", name, application_id)
                raise NamedConfigNotFoundError(application_id, name)

            del existing.named_configs[name]
            updated = await self._persist(existing)

        logger.info("Deleted named config %s from %s", name, application_id)
        return updated

    # -- helpers (callers hold the application lock) --------------------------

    async def _require(self, application_id: str, action: str) -> Application:
        existing = await self.backend.get(application_id)
        if existing is None:
            logger.error("Application not found for %s: %s", action, application_id)
            raise ApplicationNotFoundError(application_id)
        return existing

    async def _persist(self, application: Application) -> Application:
        application.last_updated = _now()
        return await self.backend.put(application)

    async def _apply_update(self, existing: Application, update: ApplicationUpdate) -> Application:
        merged = update.apply_to(existing)
        if update.requires_validation():
            self.validator.validate_application(merged)
        return await self._persist(merged)

    async def _put_named_config(
        self, existing: Application, name: str, data: Any, versions: list[str]
    ) -> Application:
        self.validator.validate_config_name(name)
        self.validator.validate_versions(versions)

        named_configs = dict(existing.named_configs)
        named_configs[name] = NamedConfig(data=data, versions=list(versions))
        return await self._apply_update(existing, ApplicationUpdate(named_configs=named_configs))

    async def _set_archived(self, application_id: str, archived: bool) -> Application:
        """Flag-only mutation: schema and data are not re-validated."""
        action = "archive" if archived else "unarchive"
        async with self.backend.lock(application_id):
            existing = await self._require(application_id, action)
            existing.archived = archived
            updated = await self._persist(existing)

        logger.info("%sd application %s", action.capitalize(), application_id)
        return updated

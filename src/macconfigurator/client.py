"""HTTP client for services consuming resolved configurations."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx


class ConfigClientError(Exception):
    """The config endpoint was unreachable or answered with a non-200 status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class ConfigClient:
    """Async client for ``GET {base_url}/config/{applicationId}/{version}``."""

    def __init__(
        self,
        base_url: str,
        application_id: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.application_id = application_id
        self.timeout = timeout
        self._transport = transport

    def config_url(self, version: str) -> str:
        return f"{self.base_url}/config/{quote(self.application_id, safe='')}/{quote(version, safe='')}"

    async def get_config(self, version: str) -> Any:
        """Fetch the configuration payload that applies to ``version``.

        Raises:
            ConfigClientError: On transport failure or any non-200 response.
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(self.config_url(version))
        except httpx.HTTPError as exc:
            raise ConfigClientError(f"Failed to fetch config: {exc}") from exc

        if response.status_code != 200:
            raise ConfigClientError(
                f"Failed to fetch config: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )
        return response.json()

    async def check_version(self, version: str) -> bool:
        """True when the service resolves some configuration for ``version``."""
        try:
            await self.get_config(version)
        except ConfigClientError:
            return False
        return True


def create_config_client(base_url: str, application_id: str, **kwargs: Any) -> ConfigClient:
    return ConfigClient(base_url, application_id, **kwargs)

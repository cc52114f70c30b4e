"""Error kinds raised by the registry, the validator and the storage backends."""

from typing import Any


class ConfiguratorError(Exception):
    """Base exception for the configuration service."""

    def __init__(self, code: str, message: str, details: Any = None, status_code: int = 500):
        self.code = code
        self.message = message
        self.details = details
        self.status_code = status_code
        super().__init__(message)


class ConfigValidationError(ConfiguratorError):
    """Schema, data or version-syntax validation failure.

    Carries every issue found, not only the first one.
    """

    def __init__(self, issues: list, context: str | None = None):
        self.issues = list(issues)
        self.context = context
        where = f" in {context}" if context else ""
        super().__init__(
            "VALIDATION_FAILED",
            f"Validation failed{where}",
            details={
                "context": context,
                "errors": [issue.model_dump(mode="json", exclude_none=True) for issue in self.issues],
            },
            status_code=400,
        )


class VersionConflictError(ConfiguratorError):
    """Two named configurations list the identical version token."""

    def __init__(self, version: str, existing_config_name: str, new_config_name: str):
        self.version = version
        self.existing_config_name = existing_config_name
        self.new_config_name = new_config_name
        super().__init__(
            "VERSION_CONFLICT",
            f"Version '{version}' already used by config '{existing_config_name}' "
            f"(attempted to use in '{new_config_name}')",
            details={
                "version": version,
                "existing_config_name": existing_config_name,
                "new_config_name": new_config_name,
            },
            status_code=409,
        )


class ApplicationNotFoundError(ConfiguratorError):
    def __init__(self, application_id: str):
        self.application_id = application_id
        super().__init__(
            "APPLICATION_NOT_FOUND",
            f"Application '{application_id}' not found",
            details={"application_id": application_id},
            status_code=404,
        )


class ApplicationAlreadyExistsError(ConfiguratorError):
    def __init__(self, application_id: str):
        self.application_id = application_id
        super().__init__(
            "APPLICATION_ALREADY_EXISTS",
            f"Application '{application_id}' already exists",
            details={"application_id": application_id},
            status_code=409,
        )


class NamedConfigNotFoundError(ConfiguratorError):
    def __init__(self, application_id: str, config_name: str):
        self.application_id = application_id
        self.config_name = config_name
        super().__init__(
            "NAMED_CONFIG_NOT_FOUND",
            f"Named config '{config_name}' not found in application '{application_id}'",
            details={"application_id": application_id, "config_name": config_name},
            status_code=404,
        )


class NamedConfigAlreadyExistsError(ConfiguratorError):
    def __init__(self, application_id: str, config_name: str):
        self.application_id = application_id
        self.config_name = config_name
        super().__init__(
            "NAMED_CONFIG_ALREADY_EXISTS",
            f"Named config '{config_name}' already exists in application '{application_id}'",
            details={"application_id": application_id, "config_name": config_name},
            status_code=409,
        )


class BackendUnavailableError(ConfiguratorError):
    """Durable store unreachable, rejecting credentials, timing out or out of connections.

    Retryable. Read paths mask it; write paths propagate it.
    """

    KINDS = ("network", "auth", "timeout", "pool_exhausted")

    def __init__(self, kind: str, message: str):
        self.kind = kind if kind in self.KINDS else "network"
        super().__init__(
            "BACKEND_UNAVAILABLE",
            message,
            details={"kind": self.kind, "retryable": True},
            status_code=503,
        )


class WriteConflictError(ConfiguratorError):
    """The durable store rejected a write because of a concurrent conflicting write."""

    def __init__(self, message: str):
        super().__init__("WRITE_CONFLICT", message, details={"retryable": True}, status_code=409)

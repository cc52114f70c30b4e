"""Whole-aggregate validation for Application documents."""

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from macconfigurator.errors.exceptions import ConfigValidationError, VersionConflictError
from macconfigurator.models.application import Application, ApplicationUpdate, NamedConfig
from macconfigurator.models.common import ValidationIssue
from macconfigurator.schemas import validator as engine

logger = logging.getLogger(__name__)


class ApplicationValidator:
    """Raises the first failing check with every issue that check found.

    Checks run in order: application id, schema against the meta-schema,
    default data, named configuration names, named configuration data,
    version syntax, literal version uniqueness.
    """

    def validate_application_id(self, application_id: str) -> None:
        if not isinstance(application_id, str) or not application_id.strip():
            logger.error("Application ID validation failed: %r", application_id)
            raise ConfigValidationError(
                [
                    ValidationIssue(
                        field="applicationId",
                        message="Application ID cannot be empty or whitespace only",
                        value=application_id,
                    )
                ],
                context="applicationId validation",
            )

    def validate_config_name(self, name: str) -> None:
        if not isinstance(name, str) or not name.strip():
            raise ConfigValidationError(
                [
                    ValidationIssue(
                        field="name",
                        message="Named config name cannot be empty or whitespace only",
                        value=name,
                    )
                ],
                context="named configuration name",
            )

    def validate_schema(self, schema) -> None:
        issues = engine.validate_schema(schema)
        if issues:
            logger.error("Schema validation failed with %d issue(s)", len(issues))
            raise ConfigValidationError(issues, context="schema validation")

    def validate_data(self, data, schema, context: str) -> None:
        issues = engine.validate_data(data, schema)
        if issues:
            logger.error("Data validation failed for %s with %d issue(s)", context, len(issues))
            raise ConfigValidationError(issues, context=context)

    def validate_versions(self, versions, context: str = "versions") -> None:
        issues = engine.validate_versions(versions)
        if issues:
            logger.error("Semver validation failed for %s: %s", context, [i.value for i in issues])
            raise ConfigValidationError(issues, context=context)

    def parse_update(self, payload: dict[str, Any]) -> ApplicationUpdate:
        """Build an ApplicationUpdate, reporting badly typed fields as validation issues."""
        try:
            return ApplicationUpdate.model_validate(payload)
        except PydanticValidationError as exc:
            issues = [
                ValidationIssue(
                    field="/".join(str(part) for part in error["loc"]) or engine.ROOT_FIELD,
                    message=error["msg"],
                    value=error.get("input"),
                )
                for error in exc.errors()
            ]
            logger.error("Update payload rejected with %d issue(s)", len(issues))
            raise ConfigValidationError(issues, context="update payload") from exc

    def check_version_uniqueness(self, named_configs: dict[str, NamedConfig]) -> None:
        """No literal version token may appear in two named configurations."""
        owners: dict[str, str] = {}
        for name, config in named_configs.items():
            for version in config.versions:
                existing = owners.get(version)
                if existing is not None and existing != name:
                    logger.error(
                        "Version conflict: %s claimed by %s and %s", version, existing, name
                    )
                    raise VersionConflictError(version, existing, name)
                owners[version] = name

    def validate_named_configs(self, named_configs: dict[str, NamedConfig], schema) -> None:
        for name in named_configs:
            self.validate_config_name(name)
        for name, config in named_configs.items():
            self.validate_data(config.data, schema, f"named configuration '{name}'")
        for name, config in named_configs.items():
            self.validate_versions(config.versions, f"versions of named configuration '{name}'")
        self.check_version_uniqueness(named_configs)

    def validate_application(self, application: Application) -> None:
        logger.debug("Validating application %s", application.application_id)
        self.validate_application_id(application.application_id)
        self.validate_schema(application.json_schema)
        self.validate_data(
            application.default_config.data, application.json_schema, "default configuration"
        )
        self.validate_named_configs(application.named_configs, application.json_schema)

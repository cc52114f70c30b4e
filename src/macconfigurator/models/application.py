"""Pydantic models for the Application aggregate and its named configurations.

Python attributes are snake_case; the wire format keeps the camelCase names
(``applicationId``, ``defaultConfig``, ``namedConfigs``, ``lastUpdated``,
``schema``). Both spellings are accepted on input.
"""

import copy
from datetime import datetime
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_CONFIG_SOURCE = "default"


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ConfigData(WireModel):
    data: Any = None


class NamedConfig(WireModel):
    """An override of the default configuration, active for matching versions."""

    data: Any = None
    versions: list[str] = Field(default_factory=list)


class NamedConfigInput(NamedConfig):
    """Request body for creating a named configuration."""

    name: str


class Application(WireModel):
    """Root aggregate: schema, default configuration and named overrides."""

    application_id: str
    archived: bool = False
    json_schema: Any = Field(default_factory=dict, alias="schema")
    default_config: ConfigData = Field(default_factory=ConfigData)
    named_configs: dict[str, NamedConfig] = Field(default_factory=dict)
    last_updated: datetime | None = None


class ApplicationUpdate(WireModel):
    """Partial update; only fields explicitly present take part in the merge.

    There is no ``applicationId`` field: the id never changes after creation.
    An explicit ``null`` for anything but ``schema`` leaves the field as is.
    """

    archived: bool | None = None
    json_schema: Any = Field(default=None, alias="schema")
    default_config: ConfigData | None = None
    named_configs: dict[str, NamedConfig] | None = None

    # Fields whose change requires re-validating the whole aggregate.
    VALIDATED_FIELDS: ClassVar[frozenset[str]] = frozenset(
        {"json_schema", "default_config", "named_configs"}
    )

    def changes(self) -> dict[str, Any]:
        return {
            name: copy.deepcopy(getattr(self, name))
            for name in self.model_fields_set
            if name == "json_schema" or getattr(self, name) is not None
        }

    def requires_validation(self) -> bool:
        return bool(self.changes().keys() & self.VALIDATED_FIELDS)

    def apply_to(self, application: Application) -> Application:
        """Return a merged copy of ``application``; the original is untouched."""
        return application.model_copy(update=self.changes(), deep=True)


class ResolvedConfig(BaseModel):
    """Outcome of version resolution before a cache policy is applied."""

    data: Any = None
    config_source: str = DEFAULT_CONFIG_SOURCE
    is_default: bool = True


class ConfigResponse(WireModel):
    data: Any = None
    config_source: str
    cache_control: str

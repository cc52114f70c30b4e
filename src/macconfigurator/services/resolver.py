"""Version resolution: pick the configuration payload that answers a request."""

from macconfigurator.models.application import (
    DEFAULT_CONFIG_SOURCE,
    Application,
    ResolvedConfig,
)
from macconfigurator.services.versioning import satisfies


def resolve(application: Application | None, requested_version: str) -> ResolvedConfig | None:
    """Resolve ``requested_version`` against an application's named configurations.

    Archived and missing applications both resolve to None so callers cannot
    tell them apart. Named configurations are tried in stored order and the
    first one with a satisfied range wins; otherwise the default applies.
    """
    if application is None or application.archived:
        return None

    for name, config in application.named_configs.items():
        if any(satisfies(requested_version, expression) for expression in config.versions):
            return ResolvedConfig(data=config.data, config_source=name, is_default=False)

    return ResolvedConfig(data=application.default_config.data, config_source=DEFAULT_CONFIG_SOURCE)

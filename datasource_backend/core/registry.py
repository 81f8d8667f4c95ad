from dataclasses import dataclass, field
from typing import Any

from .models import DEFAULT_DATASOURCE


@dataclass(frozen=True)
class DatasourceRegistry:
    """Snapshot of the configured datasources: the default name and name -> settings."""

    default_datasource: str
    datasources: dict[str, dict[str, Any]] = field(default_factory=dict)

    def resolve_name(self, name: str | None) -> str:
        if name and name != DEFAULT_DATASOURCE:
            return name
        return self.default_datasource

    def get(self, name: str) -> dict[str, Any] | None:
        return self.datasources.get(name)

    @classmethod
    def from_config(cls, config) -> "DatasourceRegistry":
        return cls(
            default_datasource=config.DEFAULT_DATASOURCE,
            datasources={name: dict(settings) for name, settings in config.DATASOURCES.items()},
        )

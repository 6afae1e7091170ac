"""Configuration loader with defaults, settings file and call-time overrides."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from .defaults import (
    ChartParams,
    DefaultConfig,
    HeatmapParams,
    JournalParams,
    LoggingParams,
    ReferenceDataParams,
    WatchlistParams,
    get_default_config,
)

SETTINGS_FILENAME = "settings.yaml"

_SECTIONS = {
    "heatmap": HeatmapParams,
    "watchlist": WatchlistParams,
    "chart": ChartParams,
    "journal": JournalParams,
    "reference": ReferenceDataParams,
    "logging": LoggingParams,
}


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_dir: Path
    defaults: DefaultConfig

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
        )

    def load_settings(self) -> dict[str, Any]:
        """Load the optional settings file from the config directory."""
        settings_file = self.config_dir / SETTINGS_FILENAME

        if not settings_file.exists():
            return {}

        with open(settings_file) as f:
            settings = yaml.safe_load(f)

        return settings or {}

    def merge_config(self, overrides: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Call-time overrides (highest priority)
        2. settings.yaml in the config directory
        3. Built-in defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)

        config = self._deep_merge(config, self.load_settings())

        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    def load(self, overrides: Optional[dict[str, Any]] = None) -> DefaultConfig:
        """Merge configuration and rebuild the typed parameter groups."""
        return self.to_default_config(self.merge_config(overrides))

    @staticmethod
    def to_default_config(config: dict[str, Any]) -> DefaultConfig:
        """Build a DefaultConfig from a merged dictionary, ignoring unknown keys."""
        sections = {}
        for name, params_cls in _SECTIONS.items():
            values = config.get(name) or {}
            known = {k: v for k, v in values.items() if k in params_cls.__dataclass_fields__}
            sections[name] = params_cls(**known)
        return DefaultConfig(**sections)

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name in obj.__dataclass_fields__:
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

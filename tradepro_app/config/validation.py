"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any

VALID_SORT_KEYS = ("timestamp", "date")
VALID_CHART_PERIODS = ("intraday", "1M", "6M")
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_heatmap_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate heatmap parameters."""
        errors = []

        if "intensity_scale" in params:
            value = params["intensity_scale"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(
                    field="intensity_scale",
                    message="Must be a positive number",
                    value=value
                ))

        for name in ("base_opacity", "opacity_span", "neutral_opacity"):
            if name in params:
                value = params[name]
                if not _is_number(value) or value < 0 or value > 1:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a number between 0 and 1",
                        value=value
                    ))

        base = params.get("base_opacity")
        span = params.get("opacity_span")
        if _is_number(base) and _is_number(span) and base + span > 1:
            errors.append(ValidationError(
                field="opacity_span",
                message="base_opacity + opacity_span must not exceed 1",
                value=span
            ))

        for name in ("gain_color", "loss_color", "neutral_color"):
            if name in params:
                value = params[name]
                if not isinstance(value, str) or not value:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a non-empty string",
                        value=value
                    ))

        return errors

    @staticmethod
    def validate_watchlist_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate watchlist extraction parameters."""
        errors = []

        if "min_columns" in params:
            value = params["min_columns"]
            if not isinstance(value, int) or isinstance(value, bool) or value < 7:
                errors.append(ValidationError(
                    field="min_columns",
                    message="Must be an integer of at least 7",
                    value=value
                ))

        for name in ("row_selector", "cell_selector"):
            if name in params:
                value = params[name]
                if not isinstance(value, str) or not value.strip():
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a non-empty CSS selector",
                        value=value
                    ))

        return errors

    @staticmethod
    def validate_journal_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate journal store parameters."""
        errors = []

        if "db_path" in params:
            value = params["db_path"]
            if not isinstance(value, str) or not value:
                errors.append(ValidationError(
                    field="db_path",
                    message="Must be a non-empty path",
                    value=value
                ))

        if "default_sort" in params:
            value = params["default_sort"]
            if value not in VALID_SORT_KEYS:
                errors.append(ValidationError(
                    field="default_sort",
                    message=f"Must be one of {', '.join(VALID_SORT_KEYS)}",
                    value=value
                ))

        if "sort_descending" in params:
            value = params["sort_descending"]
            if not isinstance(value, bool):
                errors.append(ValidationError(
                    field="sort_descending",
                    message="Must be a boolean",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_chart_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate chart parameters."""
        errors = []

        if "default_period" in params:
            value = params["default_period"]
            if value not in VALID_CHART_PERIODS:
                errors.append(ValidationError(
                    field="default_period",
                    message=f"Must be one of {', '.join(VALID_CHART_PERIODS)}",
                    value=value
                ))

        if "change_decimals" in params:
            value = params["change_decimals"]
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                errors.append(ValidationError(
                    field="change_decimals",
                    message="Must be a non-negative integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_logging_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate logging parameters."""
        errors = []

        if "level" in params:
            value = params["level"]
            if not isinstance(value, str) or value.upper() not in VALID_LOG_LEVELS:
                errors.append(ValidationError(
                    field="level",
                    message=f"Must be one of {', '.join(VALID_LOG_LEVELS)}",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        if "heatmap" in config:
            errors.extend(ConfigValidator.validate_heatmap_params(config["heatmap"]))

        if "watchlist" in config:
            errors.extend(ConfigValidator.validate_watchlist_params(config["watchlist"]))

        if "journal" in config:
            errors.extend(ConfigValidator.validate_journal_params(config["journal"]))

        if "chart" in config:
            errors.extend(ConfigValidator.validate_chart_params(config["chart"]))

        if "logging" in config:
            errors.extend(ConfigValidator.validate_logging_params(config["logging"]))

        return errors

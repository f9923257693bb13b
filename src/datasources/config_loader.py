"""Load, validate, and hot-reload the data-sources configuration.

The config lives in ``datasources_config.yaml`` alongside this module.  At
startup it is loaded once and cached.  Call ``reload_datasources_config()``
to re-read from disk after an admin update, no restart required.

Usage::

    from src.datasources.config_loader import get_datasources_config

    config = get_datasources_config()
    config.lookback_days                                  # 30
    config.metrics_for(DataCategory.ACTIVITY)             # [STEPS, DISTANCE, ...]
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path

import yaml

from src.datasources.base import DataCategory, MetricType

logger = logging.getLogger("datasources.config")

# Path to the YAML file sitting next to this module
_CONFIG_PATH = Path(__file__).parent / "datasources_config.yaml"

DEFAULT_LOOKBACK_DAYS = 30


@dataclass
class DataSourcesConfig:
    """Complete, validated data-sources configuration.

    Attributes:
        version:         Config schema version string.
        lookback_days:   Size of the rolling window searched for priority data.
        summary_metrics: category → metric types summarised, in display order.
    """

    version: str
    lookback_days: int
    summary_metrics: dict[DataCategory, list[MetricType]]

    def metrics_for(self, category: DataCategory) -> list[MetricType]:
        """Return the summarised metrics of ``category``; empty if none are configured."""
        return list(self.summary_metrics.get(category, []))


class ConfigValidationError(ValueError):
    """Raised when datasources_config.yaml fails validation."""


def _load_yaml(path: Path) -> dict:
    """Read and parse a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the YAML is malformed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Data-sources config not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            return yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"YAML parse error in {path}: {exc}") from exc


def _validate_and_build(raw: dict) -> DataSourcesConfig:
    """Validate the raw YAML dict and construct a DataSourcesConfig.

    Every problem found is collected and reported in one error.

    Raises:
        ConfigValidationError: If any field is missing or invalid.
    """
    errors: list[str] = []

    version = str(raw.get("version", "1.0"))

    # ── Rolling window ──
    recent_raw = raw.get("recent_data", {}) or {}
    lookback_days = DEFAULT_LOOKBACK_DAYS
    try:
        lookback_days = int(recent_raw.get("lookback_days", DEFAULT_LOOKBACK_DAYS))
    except (TypeError, ValueError):
        errors.append(
            f"recent_data.lookback_days must be an integer, got {recent_raw.get('lookback_days')!r}"
        )
    if lookback_days < 1:
        errors.append(f"recent_data.lookback_days = {lookback_days} must be at least 1")

    # ── Summary metrics ──
    summaries_raw = raw.get("summaries", {})
    if not summaries_raw:
        errors.append("'summaries' section is missing or empty")

    summary_metrics: dict[DataCategory, list[MetricType]] = {}
    for category_key, metric_keys in (summaries_raw or {}).items():
        try:
            category = DataCategory(category_key)
        except ValueError:
            errors.append(f"summaries.{category_key} is not a known data category")
            continue
        if not isinstance(metric_keys, list):
            errors.append(f"summaries.{category_key} must be a list of metric types")
            continue

        metrics: list[MetricType] = []
        for key in metric_keys:
            try:
                metric = MetricType(key)
            except ValueError:
                errors.append(f"summaries.{category_key}: unknown metric type {key!r}")
                continue
            if metric.category is not category:
                errors.append(
                    f"summaries.{category_key}: {metric.value} belongs to "
                    f"category {metric.category.value!r}"
                )
                continue
            if metric in metrics:
                errors.append(f"summaries.{category_key}: {metric.value} listed twice")
                continue
            metrics.append(metric)
        summary_metrics[category] = metrics

    if errors:
        raise ConfigValidationError(
            f"datasources_config.yaml has {len(errors)} validation error(s):\n"
            + "\n".join(f"  • {e}" for e in errors)
        )

    return DataSourcesConfig(
        version=version,
        lookback_days=lookback_days,
        summary_metrics=summary_metrics,
    )


def load_datasources_config(path: Path | None = None) -> DataSourcesConfig:
    """Load and validate the config from disk.

    Args:
        path: Override path to YAML. Uses the bundled datasources_config.yaml by default.
    """
    target = path or _CONFIG_PATH
    raw = _load_yaml(target)
    config = _validate_and_build(raw)
    logger.info("Loaded data-sources config v%s from %s", config.version, target)
    return config


# ---------------------------------------------------------------------------
# Global singleton with hot-reload support
# ---------------------------------------------------------------------------

_config: DataSourcesConfig | None = None
_config_lock = threading.Lock()


def get_datasources_config() -> DataSourcesConfig:
    """Return the global DataSourcesConfig singleton, loading it on first call.

    Thread-safe.  Use ``reload_datasources_config()`` to refresh after YAML changes.
    """
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:  # double-checked locking
                _config = load_datasources_config()
    return _config


def reload_datasources_config(path: Path | None = None) -> DataSourcesConfig:
    """Reload the config from disk and replace the global singleton.

    If validation fails, the old config is retained and the error is re-raised.

    Raises:
        ConfigValidationError: If the new config is invalid.
        FileNotFoundError:     If the config file is missing.
    """
    global _config
    new_config = load_datasources_config(path)  # validate before acquiring lock
    with _config_lock:
        old_version = _config.version if _config else "none"
        _config = new_config
    logger.info(
        "Reloaded data-sources config: %s → %s",
        old_version,
        new_config.version,
    )
    return new_config

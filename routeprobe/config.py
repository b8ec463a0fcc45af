"""YAML run configuration loader for routeprobe."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigError
from .logging_config import get_logger
from .models import RunConfig

logger = get_logger("config")


def validate_run_config(c: RunConfig) -> None:
    """Validate RunConfig bounds. Raises ConfigError if invalid."""
    if c.timeout_seconds <= 0:
        raise ConfigError("timeout_seconds must be > 0")
    if not c.report_dir:
        raise ConfigError("report_dir must not be empty")


def load_config(path: str | Path) -> RunConfig:
    """Load run configuration from YAML file.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated RunConfig instance

    Raises:
        ConfigError: If file not found, invalid YAML, or validation fails
    """
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Config file not found: {path}", context={"path": str(path)})

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        logger.exception("Failed to parse YAML config file")
        raise ConfigError(
            f"Invalid YAML syntax in config file: {e}",
            context={"path": str(path)},
            original_error=e,
        ) from e
    except OSError as e:
        logger.exception("Failed to read config file")
        raise ConfigError(
            f"Cannot read config file: {e}",
            context={"path": str(path)},
            original_error=e,
        ) from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(
            "Config must be a YAML object/dictionary",
            context={"path": str(path), "actual_type": type(raw).__name__},
        )

    defaults = RunConfig()
    try:
        config = RunConfig(
            timeout_seconds=float(raw.get("timeout_seconds", defaults.timeout_seconds)),
            follow_redirects=_bool(raw, "follow_redirects", defaults.follow_redirects),
            verify_tls=_bool(raw, "verify_tls", defaults.verify_tls),
            http2=_bool(raw, "http2", defaults.http2),
            report_dir=str(raw.get("report_dir", defaults.report_dir)),
            html_report=_bool(raw, "html_report", defaults.html_report),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(
            f"Invalid config value: {e}",
            context={"path": str(path)},
            original_error=e,
        ) from e

    validate_run_config(config)
    logger.debug("Loaded config: timeout=%ss, http2=%s, report_dir=%s", config.timeout_seconds, config.http2, config.report_dir)
    return config


def _bool(data: dict[str, Any], key: str, default: bool) -> bool:
    v = data.get(key)
    if v is None:
        return default
    if isinstance(v, bool):
        return v
    raise ValueError(f"{key} must be true or false")

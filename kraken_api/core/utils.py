"""Utility helpers (config loading, environment overrides, logging setup)."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict

import yaml

from kraken_api.exchange.errors import ConfigurationError

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Environment variable -> key inside the ``kraken`` config section.
ENV_OVERRIDES = {
    "KRAKEN_API_KEY": "api_key",
    "KRAKEN_API_SECRET": "api_secret",
    "KRAKEN_BASE_URI": "base_uri",
    "KRAKEN_API_VERSION": "version",
}


def load_config(path: Path) -> Dict[str, Any]:
    """Load YAML configuration and validate required sections."""
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")
    with path.open("r", encoding="utf-8") as fh:
        try:
            config = yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(config, dict):
        raise ConfigurationError(f"Top-level config in {path} must be a mapping.")
    section = config.setdefault("kraken", {})
    if section is None:
        config["kraken"] = section = {}
    if not isinstance(section, dict):
        raise ConfigurationError("'kraken' config section must be a mapping.")
    return config


def resolve_environment_variables(config: Dict[str, Any]) -> Dict[str, Any]:
    """Merge environment variables (API keys, secrets) into the config.

    Returns a new dict; non-empty environment values win over file values.
    """
    resolved = dict(config or {})
    section = dict(resolved.get("kraken") or {})
    for env_var, key in ENV_OVERRIDES.items():
        value = str(os.getenv(env_var, "")).strip()
        if value:
            section[key] = value
    resolved["kraken"] = section
    return resolved


def setup_structured_logging(config: Dict[str, Any]) -> None:
    """Configure text logging based on the optional ``logging`` config section."""
    log_cfg = (config or {}).get("logging") or {}
    level_name = str(log_cfg.get("level", "INFO")).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        logging.warning("Unknown log level %r; falling back to INFO.", level_name)
        level = logging.INFO
    logging.basicConfig(level=level, format=str(log_cfg.get("format") or LOG_FORMAT))
    # httpx logs every request at INFO; keep it quieter unless debugging.
    if level > logging.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)

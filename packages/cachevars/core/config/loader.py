"""Configuration loading utilities with JSON and YAML support."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from cachevars.core.config.models import CacheConfig
from cachevars.core.utils.logging import configure_logging as _configure_logging

logger = logging.getLogger(__name__)

_cache_config_cache: CacheConfig | None = None


def detect_format(file_path: Path | str) -> str:
    """Detect config file format from extension.

    Args:
        file_path: Path to config file

    Returns:
        Format string: "json" or "yaml"

    Raises:
        ValueError: If format cannot be determined

    Example:
        >>> detect_format("cachevars.json")
        'json'
        >>> detect_format("cachevars.yml")
        'yaml'
    """
    suffix = Path(file_path).suffix.lower()

    if suffix == ".json":
        return "json"
    elif suffix in [".yaml", ".yml"]:
        return "yaml"
    else:
        raise ValueError(f"Unsupported config format: {suffix}")


def load_config(path: str | Path) -> dict[str, Any]:
    """Load and return raw configuration dictionary.

    Args:
        path: Path to config file (.json, .yaml, or .yml)

    Returns:
        Raw configuration dictionary

    Raises:
        FileNotFoundError: If config file does not exist
        ValueError: If format is not supported or file content is invalid
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Config file does not exist: {path}")

    fmt = detect_format(path)

    if fmt == "json":
        try:
            data: Any = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e
    else:
        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e
        # safe_load returns None for empty files
        if data is None:
            data = {}

    if not isinstance(data, dict):
        raise ValueError(f"Config root must be a mapping in {path}, got {type(data).__name__}")

    return data


def load_cache_config(path: str | Path | None = None) -> CacheConfig:
    """Load and validate cachevars configuration.

    Args:
        path: Path to config file (.json, .yaml, or .yml).
              Defaults to cachevars.json in the working directory.

    Returns:
        Validated CacheConfig (built-in defaults if the default file is absent)

    Raises:
        ValidationError: If config is invalid
        FileNotFoundError: If an explicit path does not exist
    """
    global _cache_config_cache

    if path is None:
        if _cache_config_cache is not None:
            return _cache_config_cache

        default_path = CacheConfig.default_path()
        if default_path.exists():
            config = CacheConfig.model_validate(load_config(default_path))
            logger.debug(f"Loaded cachevars config from {default_path}")
        else:
            config = CacheConfig()

        _cache_config_cache = config
        return config

    return CacheConfig.model_validate(load_config(path))


def clear_config_cache() -> None:
    """Forget the cached default configuration."""
    global _cache_config_cache
    _cache_config_cache = None


def configure_logging(config: CacheConfig | None = None) -> None:
    """Configure Python logging from cachevars config.

    Args:
        config: CacheConfig instance (loads default if None)
    """
    if config is None:
        config = load_cache_config()

    _configure_logging(
        level=config.logging.level,
        format_string=config.logging.format,
        filename=config.logging.filename,
        structured=config.logging.structured,
    )

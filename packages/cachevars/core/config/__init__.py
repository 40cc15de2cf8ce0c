"""Configuration management for cachevars."""

from cachevars.core.config.loader import (
    clear_config_cache,
    configure_logging,
    detect_format,
    load_cache_config,
    load_config,
)
from cachevars.core.config.models import CacheConfig, CodecConfig, LoggingConfig

__all__ = [
    # Loaders
    "detect_format",
    "load_config",
    "load_cache_config",
    "clear_config_cache",
    "configure_logging",
    # Models
    "CacheConfig",
    "CodecConfig",
    "LoggingConfig",
]

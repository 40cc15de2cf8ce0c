"""Configuration models for cachevars."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    structured: bool = Field(default=False, description="Emit JSON log lines instead of text")
    filename: str | None = Field(default=None, description="Log file path (stdout if None)")


class CodecConfig(BaseModel):
    """Tuning knobs for the built-in artifact codecs."""

    pickle_protocol: int | None = Field(
        default=None, ge=2, description="Pickle protocol for .pkl files (None = cloudpickle default)"
    )
    joblib_compress: int = Field(
        default=3, ge=0, le=9, description="zlib compression level for .joblib files (0 = off)"
    )
    hdf5_compression: str | None = Field(
        default="gzip",
        pattern="^(gzip|lzf)$",
        description="Dataset compression filter for array data in .h5 files",
    )


class CacheConfig(BaseModel):
    """Top-level cachevars configuration."""

    model_config = ConfigDict(extra="ignore")  # Forward compatibility

    verbose: bool = Field(default=True, description="Emit status events for cache()/cache_block()")
    codecs: CodecConfig = Field(default_factory=CodecConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def default_path(cls) -> Path:
        """Return the default config file location (working directory)."""
        return Path("cachevars.json")

"""Suffix-based codec registry.

The registry is the only place that knows which suffix selects which codec,
so new formats are added by registering a codec, not by touching the engine.
"""

from __future__ import annotations

import logging
from pathlib import Path

from cachevars.core.config.models import CodecConfig
from cachevars.core.errors import UnsupportedFormatError
from cachevars.core.io import format_tag

from .base import ArtifactCodec
from .hdf5_codec import Hdf5Codec
from .joblib_codec import JoblibCodec
from .pickle_codec import PickleCodec

logger = logging.getLogger(__name__)


def normalize_suffix(suffix: str) -> str:
    """Normalize a suffix to the ``.ext`` lower-case form.

    Example:
        >>> normalize_suffix("H5")
        '.h5'
    """
    suffix = suffix.strip().lower()
    return suffix if suffix.startswith(".") else f".{suffix}"


class CodecRegistry:
    """Maps location suffixes to codec strategies."""

    def __init__(self) -> None:
        self._codecs: dict[str, ArtifactCodec] = {}

    def register(self, codec: ArtifactCodec, *, replace: bool = False) -> None:
        """Register a codec under each of its suffixes.

        Args:
            codec: Codec instance
            replace: Allow replacing an existing suffix mapping

        Raises:
            ValueError: If a suffix is already registered and replace is False
        """
        suffixes = [normalize_suffix(s) for s in codec.suffixes]
        if not replace:
            taken = [s for s in suffixes if s in self._codecs]
            if taken:
                raise ValueError(f"Suffix already registered: {', '.join(taken)}")

        for suffix in suffixes:
            self._codecs[suffix] = codec
        logger.debug(f"Registered {codec!r} for {', '.join(suffixes)}")

    def for_location(self, location: Path) -> ArtifactCodec:
        """Select the codec for a location from its suffix (no I/O).

        Raises:
            UnsupportedFormatError: If the suffix is not registered
        """
        codec = self._codecs.get(format_tag(location))
        if codec is None:
            raise UnsupportedFormatError(location, self._codecs)
        return codec

    def suffixes(self) -> tuple[str, ...]:
        """Registered suffixes, sorted."""
        return tuple(sorted(self._codecs))

    def __contains__(self, suffix: object) -> bool:
        return isinstance(suffix, str) and normalize_suffix(suffix) in self._codecs


def default_registry(config: CodecConfig | None = None) -> CodecRegistry:
    """Build a registry with the built-in pickle, joblib and HDF5 codecs."""
    config = config or CodecConfig()

    registry = CodecRegistry()
    registry.register(PickleCodec(protocol=config.pickle_protocol))
    registry.register(JoblibCodec(compress=config.joblib_compress))
    registry.register(Hdf5Codec(compression=config.hdf5_compression))
    return registry

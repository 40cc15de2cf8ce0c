"""Tests for suffix-based codec selection."""

from __future__ import annotations

from pathlib import Path

import pytest

from cachevars.core.codecs import (
    ArtifactCodec,
    CodecRegistry,
    Hdf5Codec,
    JoblibCodec,
    PickleCodec,
    default_registry,
    normalize_suffix,
)
from cachevars.core.config import CodecConfig
from cachevars.core.errors import UnsupportedFormatError


class TestNormalizeSuffix:
    """Tests for suffix normalization."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [(".pkl", ".pkl"), ("pkl", ".pkl"), (".H5", ".h5"), ("  joblib ", ".joblib")],
    )
    def test_normalizes(self, raw, expected):
        """Test leading dot and lower case."""
        assert normalize_suffix(raw) == expected


class TestDefaultRegistry:
    """Tests for the built-in codec set."""

    def test_builtin_suffixes(self):
        """Test all built-in formats are registered."""
        registry = default_registry()

        assert registry.suffixes() == (".h5", ".hdf5", ".joblib", ".pickle", ".pkl")

    @pytest.mark.parametrize(
        ("name", "codec_cls"),
        [
            ("run.pkl", PickleCodec),
            ("run.pickle", PickleCodec),
            ("run.joblib", JoblibCodec),
            ("run.h5", Hdf5Codec),
            ("run.hdf5", Hdf5Codec),
            ("RUN.HDF5", Hdf5Codec),
        ],
    )
    def test_for_location(self, name, codec_cls):
        """Test each suffix selects its codec."""
        assert isinstance(default_registry().for_location(Path(name)), codec_cls)

    def test_codecs_satisfy_protocol(self):
        """Test built-in codecs implement ArtifactCodec."""
        registry = default_registry()

        for suffix in registry.suffixes():
            assert isinstance(registry.for_location(Path(f"x{suffix}")), ArtifactCodec)

    def test_hdf5_compression_from_config(self):
        """Test HDF5 compression follows codec config."""
        registry = default_registry(CodecConfig(hdf5_compression=None))

        assert registry.for_location(Path("x.h5")).compression is None

    def test_lookup_does_no_io(self, tmp_path: Path):
        """Test selecting a codec touches nothing on disk."""
        location = tmp_path / "deep" / "run.pkl"

        default_registry().for_location(location)

        assert not location.parent.exists()


class TestCodecRegistry:
    """Tests for registering codecs."""

    def test_unknown_suffix_raises(self):
        """Test UnsupportedFormatError lists registered suffixes."""
        registry = CodecRegistry()
        registry.register(PickleCodec())

        with pytest.raises(UnsupportedFormatError) as exc_info:
            registry.for_location(Path("run.csv"))

        assert exc_info.value.supported == (".pickle", ".pkl")
        assert exc_info.value.location == Path("run.csv")

    def test_duplicate_suffix_rejected(self):
        """Test registering a taken suffix fails without replace."""
        registry = CodecRegistry()
        registry.register(PickleCodec())

        with pytest.raises(ValueError, match=".pkl"):
            registry.register(PickleCodec(protocol=4))

    def test_replace_existing_suffix(self):
        """Test replace=True swaps the codec."""
        registry = CodecRegistry()
        registry.register(PickleCodec())
        replacement = PickleCodec(protocol=4)

        registry.register(replacement, replace=True)

        assert registry.for_location(Path("a.pkl")) is replacement

    def test_contains(self):
        """Test membership accepts suffixes with or without a dot."""
        registry = CodecRegistry()
        registry.register(JoblibCodec())

        assert ".joblib" in registry
        assert "JOBLIB" in registry
        assert ".pkl" not in registry
        assert 3 not in registry

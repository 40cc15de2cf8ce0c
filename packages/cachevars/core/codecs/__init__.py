"""Artifact codecs selected by location suffix.

Built-in formats:
- .pkl / .pickle: cloudpickle (schemaless binary)
- .joblib: joblib (schemaless binary, compressed)
- .h5 / .hdf5: h5py (typed datasets and groups)
"""

from cachevars.core.codecs.base import ArtifactCodec, BaseCodec, ContextUnpickler
from cachevars.core.codecs.hdf5_codec import Hdf5Codec
from cachevars.core.codecs.joblib_codec import JoblibCodec
from cachevars.core.codecs.pickle_codec import PickleCodec
from cachevars.core.codecs.registry import CodecRegistry, default_registry, normalize_suffix

__all__ = [
    # Protocol
    "ArtifactCodec",
    "BaseCodec",
    "ContextUnpickler",
    # Codecs
    "PickleCodec",
    "JoblibCodec",
    "Hdf5Codec",
    # Registry
    "CodecRegistry",
    "default_registry",
    "normalize_suffix",
]

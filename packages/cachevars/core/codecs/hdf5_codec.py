"""Typed codec backed by HDF5 via h5py (.h5, .hdf5).

Values map onto HDF5 nodes, each tagged with a ``kind`` attribute:

- None, bool, int (64-bit), float, complex, str (no NUL), bytes -> scalar datasets
- numeric/bool numpy arrays and numpy scalars -> typed datasets
- dict with valid string keys -> group (insertion order tracked)
- list / tuple -> group with children "0".."n-1"
- anything else -> opaque cloudpickle blob (uint8 dataset)

Built-in containers and scalars are matched by exact type; subclasses
(defaultdict, IntEnum, masked arrays, ...) take the blob path so they load
back as the same type.

Array data stays readable from any HDF5 tool; only the opaque blobs need
Python to decode.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Any

import cloudpickle
import h5py
import numpy as np

from cachevars.core.errors import DecodeError

from .base import CODEC_KEY, BaseCodec, ContextUnpickler

logger = logging.getLogger(__name__)

KIND_ATTR = "kind"
FORMAT_VERSION = 1

_INT64_MIN = np.iinfo(np.int64).min
_INT64_MAX = np.iinfo(np.int64).max
_NATIVE_DTYPE_KINDS = "biufc"


def _valid_key(key: Any) -> bool:
    return isinstance(key, str) and key not in ("", ".") and "/" not in key


class Hdf5Codec(BaseCodec):
    """Store artifacts as typed HDF5 trees."""

    format_tag = "hdf5"
    suffixes = (".h5", ".hdf5")

    def __init__(self, compression: str | None = "gzip") -> None:
        self.compression = compression

    def _write(self, path: Path, record: dict[str, Any]) -> None:
        with h5py.File(path, "w", track_order=True) as f:
            f.attrs[CODEC_KEY] = record[CODEC_KEY]
            f.attrs["format_version"] = FORMAT_VERSION
            for key, value in record.items():
                if key != CODEC_KEY:
                    self._write_node(f, key, value)

    def _read(self, path: Path, context: Any) -> Any:
        with h5py.File(path, "r") as f:
            tag = f.attrs.get(CODEC_KEY)
            if tag is None:
                raise DecodeError(path, "HDF5 file carries no cachevars codec tag")
            record: dict[str, Any] = {CODEC_KEY: _as_str(tag)}
            for key in f:
                record[key] = self._read_node(f[key], context, path)
            return record

    def _write_node(self, group: h5py.Group, key: str, obj: Any) -> None:
        if obj is None:
            node = group.create_dataset(key, data=h5py.Empty("f"))
            kind = "none"
        elif type(obj) is bool:
            node = group.create_dataset(key, data=np.bool_(obj))
            kind = "bool"
        elif type(obj) is int and _INT64_MIN <= obj <= _INT64_MAX:
            node = group.create_dataset(key, data=np.int64(obj))
            kind = "int"
        elif type(obj) is float:
            node = group.create_dataset(key, data=np.float64(obj))
            kind = "float"
        elif type(obj) is complex:
            node = group.create_dataset(key, data=np.complex128(obj))
            kind = "complex"
        elif type(obj) is str and "\x00" not in obj:
            node = group.create_dataset(key, data=obj, dtype=h5py.string_dtype())
            kind = "str"
        elif type(obj) is bytes:
            node = group.create_dataset(key, data=np.frombuffer(obj, dtype=np.uint8))
            kind = "bytes"
        elif type(obj) is np.ndarray and obj.dtype.kind in _NATIVE_DTYPE_KINDS:
            if obj.ndim > 0 and obj.size > 0 and self.compression:
                node = group.create_dataset(key, data=obj, compression=self.compression)
            else:
                node = group.create_dataset(key, data=obj)
            kind = "ndarray"
        elif isinstance(obj, np.generic) and obj.dtype.kind in _NATIVE_DTYPE_KINDS:
            node = group.create_dataset(key, data=obj)
            kind = "scalar"
        elif type(obj) is dict and all(_valid_key(k) for k in obj):
            node = group.create_group(key, track_order=True)
            for child_key, child in obj.items():
                self._write_node(node, child_key, child)
            kind = "dict"
        elif type(obj) in (list, tuple):
            node = group.create_group(key)
            for index, child in enumerate(obj):
                self._write_node(node, str(index), child)
            node.attrs["length"] = len(obj)
            kind = "list" if isinstance(obj, list) else "tuple"
        else:
            payload = cloudpickle.dumps(obj)
            node = group.create_dataset(key, data=np.frombuffer(payload, dtype=np.uint8))
            kind = "pickle"

        node.attrs[KIND_ATTR] = kind

    def _read_node(self, node: h5py.Dataset | h5py.Group, context: Any, path: Path) -> Any:
        kind = node.attrs.get(KIND_ATTR)
        if kind is None:
            raise DecodeError(path, f"node {node.name} has no kind attribute")
        kind = _as_str(kind)

        match kind:
            case "none":
                return None
            case "bool":
                return bool(node[()])
            case "int":
                return int(node[()])
            case "float":
                return float(node[()])
            case "complex":
                return complex(node[()])
            case "str":
                return node.asstr()[()]
            case "bytes":
                return node[()].tobytes()
            case "ndarray":
                return np.asarray(node[()])
            case "scalar":
                return node[()]
            case "dict":
                return {key: self._read_node(node[key], context, path) for key in node}
            case "list" | "tuple":
                items = [
                    self._read_node(node[str(index)], context, path)
                    for index in range(int(node.attrs["length"]))
                ]
                return items if kind == "list" else tuple(items)
            case "pickle":
                return ContextUnpickler(io.BytesIO(node[()].tobytes()), context).load()
            case _:
                raise DecodeError(path, f"node {node.name} has unknown kind {kind!r}")


def _as_str(value: Any) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else str(value)

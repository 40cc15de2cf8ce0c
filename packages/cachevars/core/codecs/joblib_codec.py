"""Schemaless binary codec backed by joblib (.joblib)."""

from __future__ import annotations

import zlib
from pathlib import Path
from typing import Any

import joblib

from .base import BaseCodec


class JoblibCodec(BaseCodec):
    """Persist artifacts with joblib.

    joblib stores large numpy arrays efficiently and compresses with zlib.
    The deserialization context is accepted but not used: joblib resolves
    classes through the regular import system.
    """

    format_tag = "joblib"
    suffixes = (".joblib",)
    decode_errors = BaseCodec.decode_errors + (zlib.error,)

    def __init__(self, compress: int = 3) -> None:
        self.compress = compress

    def _write(self, path: Path, record: dict[str, Any]) -> None:
        joblib.dump(record, path, compress=self.compress)

    def _read(self, path: Path, context: Any) -> Any:
        return joblib.load(path)

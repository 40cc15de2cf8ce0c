"""Schemaless binary codec backed by cloudpickle (.pkl, .pickle)."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import cloudpickle

from .base import BaseCodec, ContextUnpickler


class PickleCodec(BaseCodec):
    """Pickle artifacts with cloudpickle.

    cloudpickle serializes lambdas, closures and classes defined in
    ``__main__`` by value, which covers most notebook-defined objects.
    """

    format_tag = "pickle"
    suffixes = (".pkl", ".pickle")

    def __init__(self, protocol: int | None = None) -> None:
        self.protocol = protocol

    def _write(self, path: Path, record: dict[str, Any]) -> None:
        with path.open("wb") as fh:
            cloudpickle.dump(record, fh, protocol=self.protocol)

    def _read(self, path: Path, context: Any) -> Any:
        with path.open("rb") as fh:
            return ContextUnpickler(fh, context).load()

"""Codec protocol and shared save/load plumbing.

A codec turns an artifact record (a plain dict) into bytes at a location and
back. Codecs never decide *whether* to write; that is the engine's job.
"""

from __future__ import annotations

import logging
import os
import pickle
import uuid
from collections.abc import Mapping
from pathlib import Path
from typing import Any, ClassVar, Protocol, runtime_checkable

from cachevars.core.errors import DecodeError
from cachevars.core.io import ensure_parent_dirs

logger = logging.getLogger(__name__)

CODEC_KEY = "codec"


@runtime_checkable
class ArtifactCodec(Protocol):
    """Protocol for artifact codecs (one strategy per file format)."""

    format_tag: str
    suffixes: tuple[str, ...]

    def save(self, path: Path, record: Mapping[str, Any]) -> None:
        """Write record to path, creating parent directories.

        The record is written to a sibling temporary file and moved into
        place, so a failed encode leaves any previous artifact untouched.
        """
        ...

    def load(self, path: Path, context: Any = None) -> dict[str, Any]:
        """Read a record written by this codec.

        Args:
            path: Artifact location
            context: Optional deserialization context (module whose
                     attributes resolve pickled ``__main__`` references)

        Raises:
            DecodeError: If the file is absent, empty, unreadable or foreign
        """
        ...


class ContextUnpickler(pickle.Unpickler):
    """Unpickler that resolves ``__main__`` references against a context.

    Objects pickled from a notebook or script refer to ``__main__.Name``; a
    later reader in another process can pass the defining module as context.
    """

    def __init__(self, file: Any, context: Any = None) -> None:
        super().__init__(file)
        self._context = context

    def find_class(self, module: str, name: str) -> Any:
        if self._context is not None and module == "__main__" and hasattr(self._context, name):
            return getattr(self._context, name)
        return super().find_class(module, name)


class BaseCodec:
    """Shared plumbing: parent dirs, tagging, empty-file and shape checks.

    Subclasses implement ``_write`` and ``_read`` and list the exception
    types their backend raises on corrupt input in ``decode_errors``.
    """

    format_tag: ClassVar[str]
    suffixes: ClassVar[tuple[str, ...]]
    decode_errors: ClassVar[tuple[type[BaseException], ...]] = (
        OSError,
        EOFError,
        ValueError,
        KeyError,
        IndexError,
        AttributeError,
        ImportError,
        pickle.UnpicklingError,
    )

    def save(self, path: Path, record: Mapping[str, Any]) -> None:
        ensure_parent_dirs(path)
        tagged = {CODEC_KEY: self.format_tag, **record}

        tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
        try:
            self._write(tmp_path, tagged)
            os.replace(tmp_path, path)
        except Exception as e:
            e.add_note(f"cachevars: could not encode value for {path}; nothing was written")
            raise
        finally:
            # no-op after a successful replace
            tmp_path.unlink(missing_ok=True)
        logger.debug(f"Wrote {self.format_tag} artifact to {path}")

    def load(self, path: Path, context: Any = None) -> dict[str, Any]:
        if not path.is_file():
            raise DecodeError(path, "artifact file does not exist")
        if path.stat().st_size == 0:
            raise DecodeError(path, "artifact file is empty")

        try:
            record = self._read(path, context)
        except DecodeError:
            raise
        except self.decode_errors as e:
            raise DecodeError(path, f"{type(e).__name__}: {e}") from e

        if not isinstance(record, Mapping):
            raise DecodeError(path, f"expected a record mapping, got {type(record).__name__}")

        tag = record.get(CODEC_KEY)
        if tag != self.format_tag:
            raise DecodeError(path, f"written by codec {tag!r}, expected {self.format_tag!r}")

        return {key: value for key, value in record.items() if key != CODEC_KEY}

    def _write(self, path: Path, record: dict[str, Any]) -> None:
        raise NotImplementedError

    def _read(self, path: Path, context: Any) -> Any:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(suffixes={self.suffixes!r})"

"""Let-style scoped sub-blocks.

Inside ``with scope():`` assignments to names that already exist in the
enclosing namespace overwrite them, while names first created in the body
are removed again on exit::

    a = 1
    with scope():
        b = 2   # gone after the block
        a = 3   # sticks: a existed before
    assert a == 3 and "b" not in globals()

The binding analyzer still reports ``b`` for such a block. ``cache_block``
only captures names that are actually bound after the run, so ``b`` is
neither persisted nor restored.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import MutableMapping
from types import TracebackType
from typing import Any

from cachevars.core.errors import ArgumentError

logger = logging.getLogger(__name__)


class scope:
    """Context manager that discards names created inside its body.

    Args:
        namespace: Mapping to guard. Defaults to the calling frame's
            namespace, which must be module-level (a script, a notebook
            cell, or a block run by ``cache_block``); inside functions
            pass the mapping explicitly.
    """

    def __init__(self, namespace: MutableMapping[str, Any] | None = None) -> None:
        if namespace is None:
            namespace = _caller_namespace()
        self._namespace = namespace
        self._outer: frozenset[str] = frozenset()

    def __enter__(self) -> scope:
        self._outer = frozenset(self._namespace)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        created = [name for name in self._namespace if name not in self._outer]
        for name in created:
            del self._namespace[name]
        if created:
            logger.debug(f"scope() discarded {', '.join(created)}")
        return False


def _caller_namespace() -> MutableMapping[str, Any]:
    frame = inspect.currentframe()
    try:
        # frame -> scope.__init__ -> caller
        caller = frame.f_back.f_back if frame is not None and frame.f_back is not None else None
        if caller is None:
            raise ArgumentError("scope() could not locate the calling namespace; pass it explicitly")
        if caller.f_code.co_flags & inspect.CO_OPTIMIZED:
            raise ArgumentError("scope() inside a function needs an explicit namespace")
        return caller.f_locals
    finally:
        del frame

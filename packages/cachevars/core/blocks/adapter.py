"""Cache a block's assigned variables together with its final value.

The block runs in ``namespace`` (usually ``globals()``). Its assigned names
are captured into the artifact and, on every outcome (including a Hit, where
the block does not run at all), written back into ``namespace``.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict

from cachevars.core.caching import CacheOutcome, PersistenceEngine, Provenance, get_default_engine
from cachevars.core.errors import ArgumentError, DecodeError
from cachevars.core.io import Location
from cachevars.core.utils.logging import get_logger

from .analyzer import Block, BindingAnalyzer, BindingSet, describe_names, parse_block
from .executor import compile_block, execute_block

class BlockResult(BaseModel):
    """Everything ``run_block`` knows after one call.

    Attributes:
        bindings: Captured variables, restored into the namespace
        final: Value of the block's trailing expression (None if absent)
        names: Names reported by the analyzer (may include names that
            ended up unbound, which are absent from ``bindings``)
        outcome: Create, Overwrite, Hit or Bypass
        location: Artifact path (None for Bypass)
        provenance: Stored provenance (None for Bypass)
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    bindings: dict[str, Any]
    final: Any = None
    names: BindingSet = ()
    outcome: CacheOutcome
    location: Path | None = None
    provenance: Provenance | None = None


def run_block(
    location: Location,
    block: Block,
    namespace: dict[str, Any],
    *,
    overwrite: bool = False,
    verbose: bool | None = None,
    context: Any = None,
    engine: PersistenceEngine | None = None,
) -> BlockResult:
    """
    Run a block once per location, caching its variables and final value.

    Args:
        location: Artifact path (suffix selects format), or None to disable
        block: Python source text, ast.Module or list of ast.stmt
        namespace: Globals the block runs in and receives bindings into
        overwrite: Recompute and replace an existing artifact
        verbose: Log the assignments found and the cache status event
            (config default if None)
        context: Deserialization context passed to the codec on load
        engine: Engine to use (module default if None)

    Returns:
        BlockResult with captured bindings and final value

    Raises:
        ArgumentError: Invalid block or namespace (before any execution or I/O)
        TypeError: Unknown keyword option; ArgumentError is a TypeError too,
            so ``except TypeError`` catches both
        UnsupportedFormatError: Unknown location suffix
        DecodeError: Existing artifact cannot be decoded
    """
    if not isinstance(namespace, dict):
        raise ArgumentError(f"namespace must be a dict (e.g. globals()), got {type(namespace).__name__}")

    module = parse_block(block)
    report = BindingAnalyzer().analyze(module)
    compiled = compile_block(module)
    names = report.names

    engine = engine or get_default_engine()
    verbose = engine.config.verbose if verbose is None else verbose
    block_log = get_logger(__name__, cache_location=str(location))
    if verbose:
        block_log.info(describe_names(names))
    if report.scoped_only:
        block_log.debug(
            f"Assigned only inside scope() blocks, may stay unbound: {', '.join(report.scoped_only)}"
        )

    def thunk() -> dict[str, Any]:
        final = execute_block(compiled, namespace)
        bindings = {name: namespace[name] for name in names if name in namespace}
        return {"bindings": bindings, "final": final}

    result = engine.run(location, thunk, overwrite, context=context, verbose=verbose)

    bindings, final = _unpack(result.value, result.location)
    namespace.update(bindings)

    return BlockResult(
        bindings=bindings,
        final=final,
        names=names,
        outcome=result.outcome,
        location=result.location,
        provenance=result.provenance,
    )


def cache_block(
    location: Location,
    block: Block,
    namespace: dict[str, Any],
    *,
    overwrite: bool = False,
    verbose: bool | None = None,
    context: Any = None,
    engine: PersistenceEngine | None = None,
) -> Any:
    """
    Cache the variables assigned in a block and return its final value.

    Example:
        >>> out = cache_block("results/fit.h5", '''
        ...     x = [1, 2, 3]
        ...     y = 4
        ...     "final"
        ... ''', globals())
        >>> x, y, out
        ([1, 2, 3], 4, 'final')

    Raises:
        TypeError: Unknown keyword option
        ArgumentError: Invalid block or namespace (also a TypeError)
    """
    return run_block(
        location,
        block,
        namespace,
        overwrite=overwrite,
        verbose=verbose,
        context=context,
        engine=engine,
    ).final


def _unpack(value: Any, location: Path | None) -> tuple[dict[str, Any], Any]:
    where = location if location is not None else "<no location>"
    if not isinstance(value, Mapping) or "bindings" not in value or "final" not in value:
        raise DecodeError(where, "artifact value is not a block record (bindings + final)")

    bindings = value["bindings"]
    if not isinstance(bindings, Mapping) or not all(isinstance(k, str) for k in bindings):
        raise DecodeError(where, "block record bindings must map names to values")

    return dict(bindings), value["final"]

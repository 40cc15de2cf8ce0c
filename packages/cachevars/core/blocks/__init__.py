"""Block caching: capture a block's assigned variables and final value.

Example:
    >>> from cachevars.core.blocks import cache_block, scope
    >>> out = cache_block("results/run.pkl", '''
    ...     data = load_everything()
    ...     model = fit(data)
    ...     model.score(data)
    ... ''', globals())
"""

from cachevars.core.blocks.adapter import BlockResult, cache_block, run_block
from cachevars.core.blocks.analyzer import (
    BindingAnalyzer,
    BindingReport,
    BindingSet,
    analyze_block,
    assigned_names,
    describe_names,
    is_scoped_block,
    parse_block,
)
from cachevars.core.blocks.executor import CompiledBlock, compile_block, execute_block
from cachevars.core.blocks.scope import scope

__all__ = [
    # Adapter
    "cache_block",
    "run_block",
    "BlockResult",
    # Analyzer
    "BindingAnalyzer",
    "BindingReport",
    "BindingSet",
    "analyze_block",
    "assigned_names",
    "describe_names",
    "is_scoped_block",
    "parse_block",
    # Execution
    "CompiledBlock",
    "compile_block",
    "execute_block",
    "scope",
]

"""adverbs: higher-order helpers for functions and sequences.

Public API:
    - wrap_safely / safely: capture failures as InvocationResult data
    - wrap_with_default / possibly: substitute a default on failure
    - wrap_quiet / quietly: also capture printed output, warnings and log records
    - wrap_insistently / insistently: bounded retries
    - keep, take_while, take_while_from_end, any_match, all_match,
      find_first, find_first_index and friends: predicate filtering
    - map_each, pmap, map2, invoke, invoke_map, walk, map_concurrent: mapping
"""

from __future__ import annotations

import logging

from adverbs.config import FrozenConfig, Settings, resolve_config
from adverbs.errors import (
    AdverbsError,
    ConfigurationError,
    InternalError,
    InvocationError,
)
from adverbs.mapping import (
    imap,
    invoke,
    invoke_map,
    map2,
    map_concurrent,
    map_each,
    pmap,
    walk,
    walk2,
)
from adverbs.predicates import (
    all_match,
    any_match,
    compact,
    discard,
    find_first,
    find_first_index,
    find_last,
    find_last_index,
    keep,
    negate,
    none_match,
    take_while,
    take_while_from_end,
)
from adverbs.result import (
    FailureInfo,
    InvocationResult,
    QuietResult,
    is_invocation_result,
)
from adverbs.retry import RetryPolicy, insistently, retry_async, wrap_insistently
from adverbs.safe import (
    possibly,
    quietly,
    safely,
    wrap_quiet,
    wrap_safely,
    wrap_with_default,
)

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("adverbs")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("adverbs").addHandler(logging.NullHandler())

__all__ = [
    "AdverbsError",
    "ConfigurationError",
    "FailureInfo",
    "FrozenConfig",
    "InternalError",
    "InvocationError",
    "InvocationResult",
    "QuietResult",
    "RetryPolicy",
    "Settings",
    "all_match",
    "any_match",
    "compact",
    "discard",
    "find_first",
    "find_first_index",
    "find_last",
    "find_last_index",
    "imap",
    "insistently",
    "invoke",
    "invoke_map",
    "is_invocation_result",
    "keep",
    "map2",
    "map_concurrent",
    "map_each",
    "negate",
    "none_match",
    "pmap",
    "possibly",
    "quietly",
    "resolve_config",
    "retry_async",
    "safely",
    "take_while",
    "take_while_from_end",
    "walk",
    "walk2",
    "wrap_insistently",
    "wrap_quiet",
    "wrap_safely",
    "wrap_with_default",
]

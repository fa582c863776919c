"""Mapping, invocation and side-effecting iteration.

``map2`` and ``pmap`` walk several sequences in parallel (row by row). A
sequence of length 1 is recycled against longer ones; any other length
mismatch is an error. ``map_concurrent`` is the one asynchronous adverb: it
fans an async function out over a sequence with a bounded number of calls in
flight.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable, Mapping, Sequence

    from adverbs.config import FrozenConfig

T = TypeVar("T")
R = TypeVar("R")

log = logging.getLogger(__name__)


def map_each(seq: Iterable[T], f: Callable[[T], R]) -> list[R]:
    """Apply ``f`` to every element and collect the results."""
    return [f(item) for item in seq]


def imap(seq: Iterable[T], f: Callable[[T, int], R]) -> list[R]:
    """Like ``map_each`` but ``f`` also receives the element's index."""
    return [f(item, idx) for idx, item in enumerate(seq)]


def _common_length(sequences: Sequence[Sequence[Any]]) -> int:
    """Return the row count after recycling length-1 sequences."""
    lengths = [len(s) for s in sequences]
    if not lengths or any(n == 0 for n in lengths):
        return 0
    longest = max(lengths)
    bad = sorted({n for n in lengths if n not in (1, longest)})
    if bad:
        raise ValueError(
            f"Sequences must share a length or have length 1; got lengths {lengths}"
        )
    return longest


def _rows(sequences: Sequence[Sequence[Any]]) -> Iterable[tuple[Any, ...]]:
    n = _common_length(sequences)
    for i in range(n):
        yield tuple(s[0] if len(s) == 1 else s[i] for s in sequences)


def pmap(sequences: Sequence[Sequence[Any]], f: Callable[..., R]) -> list[R]:
    """Call ``f(*row)`` for each row across ``sequences``.

    Example:
        pmap([[1, 2, 3], [10, 20, 30]], operator.add)  # [11, 22, 33]
        pmap([[1, 2, 3], [10]], operator.add)          # [11, 12, 13]

    Raises:
        ValueError: When two sequences longer than 1 differ in length.
    """
    sequences = [list(s) for s in sequences]
    return [f(*row) for row in _rows(sequences)]


def map2(xs: Sequence[Any], ys: Sequence[Any], f: Callable[[Any, Any], R]) -> list[R]:
    """Two-sequence form of ``pmap``."""
    return pmap([xs, ys], f)


def invoke(
    f: Callable[..., R],
    args: Iterable[Any] = (),
    kwargs: Mapping[str, Any] | None = None,
) -> R:
    """Call ``f`` with a packed argument list and keyword mapping."""
    return f(*args, **dict(kwargs or {}))


def invoke_map(funcs: Iterable[Callable[..., R]], *args: Any, **kwargs: Any) -> list[R]:
    """Call each function in ``funcs`` with the same arguments."""
    return [f(*args, **kwargs) for f in funcs]


def walk(seq: Sequence[T], f: Callable[[T], Any]) -> Sequence[T]:
    """Call ``f`` on each element for its side effect; return ``seq`` itself."""
    for item in seq:
        f(item)
    return seq


def walk2(
    xs: Sequence[Any], ys: Sequence[Any], f: Callable[[Any, Any], Any]
) -> Sequence[Any]:
    """Two-sequence ``walk``; returns ``xs``."""
    pmap([xs, ys], f)
    return xs


def resolve_concurrency(
    *, n_items: int, requested: int | None, cfg: FrozenConfig | None
) -> int:
    """Resolve effective fan-out for ``map_concurrent``.

    Priority:
    1) Explicit ``requested`` when > 0.
    2) ``cfg.request_concurrency`` when > 0.
    3) Unbounded up to ``n_items``.
    The result is always at least 1.
    """
    if n_items <= 0:
        return 1
    if requested is not None and requested > 0:
        return requested
    default_cfg = cfg.request_concurrency if cfg is not None else 0
    return default_cfg if default_cfg > 0 else n_items


async def map_concurrent(
    f: Callable[[T], Awaitable[R]],
    seq: Iterable[T],
    *,
    concurrency: int | None = None,
    config: FrozenConfig | None = None,
) -> list[R]:
    """Await ``f`` over ``seq`` with bounded concurrency; keep input order.

    All calls run to completion before any failure is raised, and the failure
    raised is the one at the lowest index. Wrap ``f`` with ``wrap_safely`` to
    collect per-item failures instead.
    """
    items = list(seq)
    if config is None and not (concurrency is not None and concurrency > 0):
        from adverbs.config import resolve_config

        config = resolve_config()
    limit = resolve_concurrency(n_items=len(items), requested=concurrency, cfg=config)
    sem = asyncio.Semaphore(limit)
    log.debug("Mapping %d item(s) concurrency=%d", len(items), limit)

    async def _call(item: T) -> R:
        async with sem:
            return await f(item)

    tasks = [asyncio.create_task(_call(item)) for item in items]
    results = await asyncio.gather(*tasks, return_exceptions=True)
    for item in results:
        if isinstance(item, asyncio.CancelledError):
            raise item
        if isinstance(item, BaseException):
            # Deterministic: lowest index, not first to fail.
            raise item
    return results  # type: ignore[return-value]

"""Predicate-driven selection and testing over ordered sequences.

Every function preserves the input's relative order, never mutates it and lets
an exception raised by the predicate propagate unchanged. Scans that can stop
early do so.
"""

from __future__ import annotations

from collections.abc import Sized
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

T = TypeVar("T")
D = TypeVar("D")


def keep(seq: Iterable[T], pred: Callable[[T], bool]) -> list[T]:
    """Return the elements for which ``pred`` holds."""
    return [item for item in seq if pred(item)]


def discard(seq: Iterable[T], pred: Callable[[T], bool]) -> list[T]:
    """Return the elements for which ``pred`` does not hold."""
    return [item for item in seq if not pred(item)]


def compact(seq: Iterable[T]) -> list[T]:
    """Drop ``None`` and empty sized values (``""``, ``[]``, ``{}``...)."""
    return [
        item
        for item in seq
        if item is not None and not (isinstance(item, Sized) and len(item) == 0)
    ]


def take_while(seq: Iterable[T], pred: Callable[[T], bool]) -> list[T]:
    """Return the longest prefix whose elements all satisfy ``pred``."""
    prefix: list[T] = []
    for item in seq:
        if not pred(item):
            break
        prefix.append(item)
    return prefix


def take_while_from_end(seq: Sequence[T], pred: Callable[[T], bool]) -> list[T]:
    """Return the longest suffix whose elements all satisfy ``pred``.

    The scan runs from the last element backward; the result keeps the
    original order.
    """
    start = len(seq)
    while start > 0 and pred(seq[start - 1]):
        start -= 1
    return list(seq[start:])


def any_match(seq: Iterable[T], pred: Callable[[T], bool]) -> bool:
    for item in seq:
        if pred(item):
            return True
    return False


def all_match(seq: Iterable[T], pred: Callable[[T], bool]) -> bool:
    """True when every element satisfies ``pred``; vacuously true when empty."""
    for item in seq:
        if not pred(item):
            return False
    return True


def none_match(seq: Iterable[T], pred: Callable[[T], bool]) -> bool:
    return not any_match(seq, pred)


def find_first(
    seq: Iterable[T], pred: Callable[[T], bool], default: D | None = None
) -> T | D | None:
    """Return the first element satisfying ``pred``, else ``default``."""
    for item in seq:
        if pred(item):
            return item
    return default


def find_first_index(seq: Iterable[T], pred: Callable[[T], bool]) -> int | None:
    """Return the zero-based index of the first match, else ``None``."""
    for idx, item in enumerate(seq):
        if pred(item):
            return idx
    return None


def find_last(
    seq: Sequence[T], pred: Callable[[T], bool], default: D | None = None
) -> T | D | None:
    idx = find_last_index(seq, pred)
    return default if idx is None else seq[idx]


def find_last_index(seq: Sequence[T], pred: Callable[[T], bool]) -> int | None:
    """Return the index of the last match, scanning backward; else ``None``."""
    for idx in range(len(seq) - 1, -1, -1):
        if pred(seq[idx]):
            return idx
    return None


def negate(pred: Callable[..., Any]) -> Callable[..., bool]:
    """Return a predicate that holds exactly when ``pred`` does not."""

    def negated(*args: Any, **kwargs: Any) -> bool:
        return not pred(*args, **kwargs)

    negated.__name__ = f"not_{getattr(pred, '__name__', 'predicate')}"
    negated.__doc__ = pred.__doc__
    return negated

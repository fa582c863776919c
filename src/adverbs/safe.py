"""Error-safe function application: ``safely``, ``possibly`` and ``quietly``.

Each wrapper delegates to the wrapped function and packages the outcome. None
of them retry, cache, log or share state between calls. Only ordinary
exceptions count as failures; interpreter-level interrupts such as
``KeyboardInterrupt`` and task cancellation still propagate.
"""

from __future__ import annotations

import functools
import inspect
from typing import TYPE_CHECKING, Any, TypeVar

from adverbs.capture import capture_notices
from adverbs.result import InvocationResult, QuietResult

if TYPE_CHECKING:
    from collections.abc import Callable

    from adverbs.config import FrozenConfig

T = TypeVar("T")
D = TypeVar("D")


def wrap_safely(f: Callable[..., T]) -> Callable[..., InvocationResult[T]]:
    """Return a version of ``f`` that reports failures as data.

    The wrapped function returns ``InvocationResult(value=...)`` when ``f``
    returns normally and ``InvocationResult(failure=...)`` when it raises.
    Coroutine functions are wrapped into coroutine functions.

    Example:
        safe_log = wrap_safely(math.log10)
        safe_log(100).value      # 2.0
        safe_log("x").failure    # FailureInfo(message="must be real number, not str", ...)
    """
    if inspect.iscoroutinefunction(f):

        @functools.wraps(f)
        async def safe_async(*args: Any, **kwargs: Any) -> InvocationResult[T]:
            try:
                value = await f(*args, **kwargs)
            except Exception as exc:
                return InvocationResult.from_exception(exc)
            return InvocationResult.success(value)

        return safe_async

    @functools.wraps(f)
    def safe(*args: Any, **kwargs: Any) -> InvocationResult[T]:
        try:
            value = f(*args, **kwargs)
        except Exception as exc:
            return InvocationResult.from_exception(exc)
        return InvocationResult.success(value)

    return safe


def wrap_with_default(f: Callable[..., T], default: D) -> Callable[..., T | D]:
    """Return a version of ``f`` that yields ``default`` instead of raising.

    Success returns ``f``'s value unwrapped. The failure detail is discarded;
    use ``wrap_safely`` when it matters. ``default`` is not type-checked.
    """
    if inspect.iscoroutinefunction(f):

        @functools.wraps(f)
        async def possible_async(*args: Any, **kwargs: Any) -> T | D:
            try:
                return await f(*args, **kwargs)
            except Exception:
                return default

        return possible_async

    @functools.wraps(f)
    def possible(*args: Any, **kwargs: Any) -> T | D:
        try:
            return f(*args, **kwargs)
        except Exception:
            return default

    return possible


def wrap_quiet(
    f: Callable[..., T], *, config: FrozenConfig | None = None
) -> Callable[..., QuietResult[T]]:
    """Return a version of ``f`` that also captures its diagnostic output.

    Lines printed to stdout/stderr, displayed warnings and log records reaching
    the root logger become ``notices`` on the returned ``QuietResult``. A
    raised exception, including a warning escalated to an error, is a failure;
    notices emitted before it are kept. Nested quiet calls keep their own
    notices; an enclosing call does not see them.

    While captured, ``sys.stdout``/``sys.stderr`` are text-only streams that
    report ``encoding == "utf-8"`` and have no ``buffer`` or ``fileno()``.

    Raises:
        TypeError: If ``f`` is a coroutine function. Stream redirection is
            process-wide and cannot be scoped to a single task.
    """
    if inspect.iscoroutinefunction(f):
        raise TypeError(
            f"wrap_quiet cannot wrap coroutine function {f.__qualname__!r}"
        )
    if config is None:
        from adverbs.config import resolve_config

        config = resolve_config()
    cfg = config

    @functools.wraps(f)
    def quiet(*args: Any, **kwargs: Any) -> QuietResult[T]:
        with capture_notices(cfg) as notices:
            try:
                value = f(*args, **kwargs)
            except Exception as exc:
                outcome: InvocationResult[T] = InvocationResult.from_exception(exc)
            else:
                outcome = InvocationResult.success(value)
        return QuietResult.from_outcome(outcome, notices.snapshot())

    return quiet


# Adverb-style aliases.
safely = wrap_safely
possibly = wrap_with_default
quietly = wrap_quiet

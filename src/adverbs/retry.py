"""Bounded retries: the ``insistently`` adverb.

Design goals:
- Explicit policy object validated on construction
- Retry decisions made by a predicate over the raised exception
- The final exception propagates unchanged; compose with ``wrap_safely`` for
  a retrying call that never raises
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import functools
import logging
import random
import time
from typing import TYPE_CHECKING, Any, TypeVar

from adverbs.errors import _walk_exception_chain

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from adverbs.config import FrozenConfig

T = TypeVar("T")

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry policy with exponential backoff and optional jitter."""

    max_attempts: int = 3
    initial_delay_s: float = 0.5
    backoff_multiplier: float = 2.0
    max_delay_s: float = 5.0
    jitter: bool = True  # "full jitter" when enabled
    max_elapsed_s: float | None = 15.0

    def __post_init__(self) -> None:
        """Validate invariants to keep retry behavior predictable."""
        if self.max_attempts < 1:
            raise ValueError("RetryPolicy.max_attempts must be >= 1")
        if self.initial_delay_s < 0:
            raise ValueError("RetryPolicy.initial_delay_s must be >= 0")
        if self.backoff_multiplier <= 0:
            raise ValueError("RetryPolicy.backoff_multiplier must be > 0")
        if self.max_delay_s < 0:
            raise ValueError("RetryPolicy.max_delay_s must be >= 0")
        if self.max_elapsed_s is not None and self.max_elapsed_s < 0:
            raise ValueError("RetryPolicy.max_elapsed_s must be >= 0 or None")


def retry_on_exception(exc: BaseException) -> bool:
    """Retry every ordinary exception; never retry cancellation."""
    return isinstance(exc, Exception) and not isinstance(exc, asyncio.CancelledError)


def retry_on_transient(exc: BaseException) -> bool:
    """Retry only timeouts and connection failures anywhere in the chain."""
    if isinstance(exc, asyncio.CancelledError):
        return False
    return any(
        isinstance(e, (TimeoutError, ConnectionError))
        for e in _walk_exception_chain(exc)
    )


def _compute_backoff_delay(policy: RetryPolicy, *, retry_index: int) -> float:
    # retry_index starts at 1 for the first retry sleep.
    base = policy.initial_delay_s * (
        policy.backoff_multiplier ** max(0, retry_index - 1)
    )
    base = min(policy.max_delay_s, base)
    if base <= 0:
        return 0.0
    if not policy.jitter:
        return base
    # Full jitter: random in [0, base].
    return random.random() * base  # noqa: S311


def _next_delay(
    policy: RetryPolicy, *, attempt: int, start: float
) -> float | None:
    """Return the sleep before the next attempt, or None when the budget is spent."""
    delay = _compute_backoff_delay(policy, retry_index=attempt)
    if policy.max_elapsed_s is not None:
        remaining = policy.max_elapsed_s - (time.monotonic() - start)
        if remaining <= 0:
            return None
        delay = min(delay, remaining)
    return delay


def wrap_insistently(
    f: Callable[..., T],
    policy: RetryPolicy | None = None,
    *,
    should_retry: Callable[[BaseException], bool] = retry_on_exception,
    config: FrozenConfig | None = None,
) -> Callable[..., T]:
    """Return a version of ``f`` that retries failed calls.

    Args:
        f: Function to call.
        policy: Retry bounds. Defaults to the configured policy.
        should_retry: Decides whether an exception is worth another attempt.
        config: Configuration used when ``policy`` is omitted.

    Returns:
        A function with ``f``'s signature that makes at most
        ``policy.max_attempts`` calls and re-raises the last exception.
    """
    if policy is None:
        if config is None:
            from adverbs.config import resolve_config

            config = resolve_config()
        policy = config.retry_policy()

    @functools.wraps(f)
    def insistent(*args: Any, **kwargs: Any) -> T:
        start = time.monotonic()
        for attempt in range(1, policy.max_attempts + 1):
            try:
                return f(*args, **kwargs)
            except Exception as exc:
                if not should_retry(exc) or attempt >= policy.max_attempts:
                    raise
                delay = _next_delay(policy, attempt=attempt, start=start)
                if delay is None:
                    raise
                log.debug(
                    "Retrying %s after %s (attempt %d/%d, sleeping %.3fs)",
                    getattr(f, "__name__", repr(f)),
                    type(exc).__name__,
                    attempt,
                    policy.max_attempts,
                    delay,
                )
                if delay > 0:
                    time.sleep(delay)
        # Loop always returns or raises.
        raise RuntimeError("wrap_insistently exhausted without an exception")  # pragma: no cover

    return insistent


insistently = wrap_insistently


async def retry_async(
    factory: Callable[[], Awaitable[T]],
    *,
    policy: RetryPolicy,
    should_retry: Callable[[BaseException], bool] = retry_on_exception,
) -> T:
    """Run an async factory with bounded retries."""
    start = time.monotonic()
    last_exc: BaseException | None = None

    for attempt in range(1, policy.max_attempts + 1):
        try:
            return await factory()
        except Exception as exc:
            last_exc = exc
            if not should_retry(exc) or attempt >= policy.max_attempts:
                raise

            delay = _next_delay(policy, attempt=attempt, start=start)
            if delay is None:
                raise
            log.debug(
                "Retrying async call after %s (attempt %d/%d, sleeping %.3fs)",
                type(exc).__name__,
                attempt,
                policy.max_attempts,
                delay,
            )
            if delay > 0:
                await asyncio.sleep(delay)

    if last_exc is None:  # pragma: no cover
        raise RuntimeError("retry_async exhausted without an exception")
    raise last_exc

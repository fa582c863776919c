"""Exception hierarchy for adverbs."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from adverbs.result import FailureInfo


class AdverbsError(Exception):
    """Base exception for all adverbs errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(AdverbsError):
    """Configuration validation or resolution failed."""


class InternalError(AdverbsError):
    """An adverbs internal error (bug) or invariant violation."""


class InvocationError(AdverbsError):
    """A failed invocation result was unwrapped.

    Carries the ``FailureInfo`` recorded by the safe wrapper so callers that
    opt back into exceptions still see the original classification.
    """

    def __init__(
        self,
        message: str,
        *,
        failure: FailureInfo,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.failure = failure

    @property
    def tag(self) -> str:
        return self.failure.tag


def _walk_exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield *exc* and its ``__cause__``/``__context__`` chain, with cycle protection."""
    seen: set[int] = set()
    stack: list[BaseException] = [exc]
    while stack:
        cur = stack.pop()
        if id(cur) in seen:
            continue
        seen.add(id(cur))
        yield cur

        cause = cur.__cause__
        if isinstance(cause, BaseException):
            stack.append(cause)
        context = cur.__context__
        if isinstance(context, BaseException):
            stack.append(context)

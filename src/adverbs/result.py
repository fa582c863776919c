"""Result records returned by the safe wrappers.

A wrapped call produces exactly one outcome: a value or a failure. Success is
keyed on the absence of a failure rather than on the value, so a function that
legitimately returns ``None`` still produces a successful result.
"""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING, Any, Generic, Literal, TypeGuard, TypeVar

from adverbs.errors import InternalError, InvocationError

if TYPE_CHECKING:
    from collections.abc import Iterable

T = TypeVar("T")

FailureTag = Literal["error", "warning"]


@dataclasses.dataclass(frozen=True, slots=True)
class FailureInfo:
    """Why a wrapped call terminated abnormally."""

    message: str
    tag: FailureTag = "error"
    error_type: str = "Exception"
    # The caught exception is kept for debugging but is not part of identity.
    exception: BaseException | None = dataclasses.field(
        default=None, compare=False, repr=False
    )

    @classmethod
    def from_exception(cls, exc: BaseException) -> FailureInfo:
        """Build a record from a caught exception.

        Warnings raised as exceptions (for example under
        ``warnings.simplefilter("error")``) are tagged ``"warning"``.
        """
        tag: FailureTag = "warning" if isinstance(exc, Warning) else "error"
        message = str(exc) or type(exc).__name__
        return cls(
            message=message,
            tag=tag,
            error_type=type(exc).__name__,
            exception=exc,
        )

    def __str__(self) -> str:
        return f"{self.error_type}: {self.message}"


@dataclasses.dataclass(frozen=True, slots=True)
class InvocationResult(Generic[T]):
    """Outcome of a call made through ``wrap_safely``."""

    value: T | None = None
    failure: FailureInfo | None = None

    def __post_init__(self) -> None:
        if self.failure is not None and self.value is not None:
            raise InternalError(
                "InvocationResult cannot carry both a value and a failure",
                hint="Construct with either value=... or failure=..., not both.",
            )

    @classmethod
    def success(cls, value: T) -> InvocationResult[T]:
        return cls(value=value)

    @classmethod
    def from_exception(cls, exc: BaseException) -> InvocationResult[T]:
        return cls(failure=FailureInfo.from_exception(exc))

    @property
    def ok(self) -> bool:
        return self.failure is None

    def unwrap(self) -> T | None:
        """Return the value, raising ``InvocationError`` for a failed call."""
        if self.failure is None:
            return self.value
        raise InvocationError(
            str(self.failure), failure=self.failure
        ) from self.failure.exception

    def unwrap_or(self, default: Any) -> Any:
        return self.value if self.failure is None else default

    def to_dict(self) -> dict[str, Any]:
        """Plain mapping view, suitable for logging or JSON encoding."""
        failure = None
        if self.failure is not None:
            failure = {
                "message": self.failure.message,
                "tag": self.failure.tag,
                "error_type": self.failure.error_type,
            }
        return {"value": self.value, "failure": failure}


@dataclasses.dataclass(frozen=True, slots=True)
class QuietResult(InvocationResult[T]):
    """Outcome of a call made through ``wrap_quiet``.

    ``notices`` holds diagnostic text emitted during the call, in order.
    """

    notices: tuple[str, ...] = ()

    @classmethod
    def from_outcome(
        cls,
        outcome: InvocationResult[T],
        notices: Iterable[str] = (),
    ) -> QuietResult[T]:
        return cls(
            value=outcome.value, failure=outcome.failure, notices=tuple(notices)
        )

    def to_dict(self) -> dict[str, Any]:
        data = InvocationResult.to_dict(self)
        data["notices"] = list(self.notices)
        return data


def _validate_invocation_result_reason(obj: object) -> str | None:
    """Internal: return None when valid, else a concise reason string."""
    if not isinstance(obj, InvocationResult):
        return f"expected InvocationResult, got {type(obj).__name__}"
    if obj.failure is not None and not isinstance(obj.failure, FailureInfo):
        return f"'failure' must be FailureInfo, got {type(obj.failure).__name__}"
    if obj.failure is not None and obj.value is not None:
        return "'value' and 'failure' are mutually exclusive"
    if obj.failure is not None and obj.failure.tag not in ("error", "warning"):
        return "'failure.tag' must be one of {'error','warning'}"
    if isinstance(obj, QuietResult) and not all(
        isinstance(n, str) for n in obj.notices
    ):
        return "'notices' elements must be str"
    return None


def is_invocation_result(obj: object) -> TypeGuard[InvocationResult[Any]]:
    """Return True if ``obj`` is a well-formed ``InvocationResult``."""
    return _validate_invocation_result_reason(obj) is None


def explain_invalid_invocation_result(obj: object) -> str | None:
    """Return a concise reason when ``obj`` is not a valid result, else None."""
    return _validate_invocation_result_reason(obj)

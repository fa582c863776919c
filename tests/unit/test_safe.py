from __future__ import annotations

import asyncio
import logging
import math
import sys
import warnings

import pytest

from adverbs.config import resolve_config
from adverbs.errors import InvocationError
from adverbs.mapping import map_each
from adverbs.result import FailureInfo, InvocationResult, QuietResult
from adverbs.safe import (
    possibly,
    quietly,
    safely,
    wrap_quiet,
    wrap_safely,
    wrap_with_default,
)

pytestmark = pytest.mark.unit


def _boom(_: object) -> None:
    raise ValueError("boom")


# =============================================================================
# wrap_safely
# =============================================================================


@pytest.mark.parametrize(
    ("f", "x"),
    [
        (math.log10, 100),
        (math.log10, "hundred"),
        (_boom, 1),
        (lambda v: None, 1),
        (lambda v: 0, 1),
        (lambda v: v[5], [1, 2]),
    ],
)
def test_exactly_one_outcome_is_present(f, x) -> None:
    result = wrap_safely(f)(x)

    assert isinstance(result, InvocationResult)
    assert result.ok is (result.failure is None)
    if result.failure is not None:
        assert result.value is None


def test_success_value_matches_plain_call() -> None:
    assert wrap_safely(math.log10)(1000).value == math.log10(1000)


def test_failure_records_message_and_error_tag() -> None:
    result = wrap_safely(_boom)(1)

    assert not result.ok
    assert result.value is None
    assert result.failure == FailureInfo(
        message="boom", tag="error", error_type="ValueError"
    )
    assert isinstance(result.failure.exception, ValueError)


def test_none_return_is_a_success() -> None:
    result = wrap_safely(lambda _: None)(1)

    assert result.ok
    assert result.value is None
    assert result.failure is None


def test_exception_without_message_uses_type_name() -> None:
    def raises_bare(_: object) -> None:
        raise KeyError

    result = wrap_safely(raises_bare)(1)

    assert result.failure is not None
    assert result.failure.message == "KeyError"


def test_warning_raised_as_error_is_tagged_warning() -> None:
    def noisy(_: object) -> int:
        warnings.warn("deprecated path", DeprecationWarning, stacklevel=2)
        return 1

    with warnings.catch_warnings():
        warnings.simplefilter("error")
        result = wrap_safely(noisy)(1)

    assert result.failure is not None
    assert result.failure.tag == "warning"
    assert result.failure.error_type == "DeprecationWarning"


def test_keyboard_interrupt_propagates() -> None:
    def interrupted(_: object) -> None:
        raise KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
        wrap_safely(interrupted)(1)


def test_wrapper_preserves_metadata_and_kwargs() -> None:
    def scale(value: float, *, factor: float = 2.0) -> float:
        """Multiply by factor."""
        return value * factor

    safe_scale = safely(scale)

    assert safe_scale.__name__ == "scale"
    assert safe_scale.__doc__ == "Multiply by factor."
    assert safe_scale(3, factor=3).value == 9


def test_unwrap_raises_invocation_error_chained_to_original() -> None:
    result = wrap_safely(_boom)(1)

    with pytest.raises(InvocationError) as info:
        result.unwrap()

    assert info.value.tag == "error"
    assert isinstance(info.value.__cause__, ValueError)
    assert result.unwrap_or("fallback") == "fallback"


@pytest.mark.asyncio
async def test_safe_coroutine_function() -> None:
    async def fetch(x: int) -> int:
        await asyncio.sleep(0)
        if x < 0:
            raise ValueError("negative")
        return x * 2

    safe_fetch = wrap_safely(fetch)

    ok = await safe_fetch(2)
    bad = await safe_fetch(-1)

    assert ok.value == 4
    assert bad.failure is not None
    assert bad.failure.message == "negative"


# =============================================================================
# wrap_with_default
# =============================================================================


def test_default_returned_on_failure() -> None:
    sentinel = object()
    assert wrap_with_default(_boom, sentinel)(1) is sentinel


def test_success_is_returned_unwrapped() -> None:
    assert possibly(math.log10, -1.0)(100) == 2.0


def test_log10_over_mixed_inputs_substitutes_nan() -> None:
    safe_log = wrap_with_default(math.log10, math.nan)

    out = list(map(safe_log, [10, 100, "thousand"]))

    assert out[:2] == [1.0, 2.0]
    assert math.isnan(out[2])


@pytest.mark.asyncio
async def test_default_for_coroutine_function() -> None:
    async def fail(_: int) -> int:
        raise RuntimeError("down")

    assert await wrap_with_default(fail, -1)(3) == -1


# =============================================================================
# wrap_quiet
# =============================================================================


def test_quiet_captures_printed_lines_in_order(default_config) -> None:
    def chatty(x: int) -> int:
        print("starting")
        print("half", end="")
        print(" done")
        print("to stderr", file=sys.stderr)
        return x + 1

    result = wrap_quiet(chatty, config=default_config)(1)

    assert isinstance(result, QuietResult)
    assert result.value == 2
    assert result.failure is None
    assert result.notices == ("starting", "half done", "to stderr")


def test_quiet_captures_warnings(default_config) -> None:
    def warns(x: int) -> int:
        warnings.warn("rounding applied", UserWarning, stacklevel=2)
        return x

    result = quietly(warns, config=default_config)(5)

    assert result.value == 5
    assert result.notices == ("UserWarning: rounding applied",)


def test_quiet_captures_log_records(default_config, root_at_info) -> None:
    logger = logging.getLogger("tests.quiet")

    def logs(x: int) -> int:
        logger.debug("not captured")
        logger.info("loaded %d rows", x)
        return x

    result = wrap_quiet(logs, config=default_config)(3)

    assert result.notices == ("INFO: loaded 3 rows",)


def test_quiet_keeps_notices_emitted_before_failure(default_config) -> None:
    def fails_after_print(_: int) -> None:
        print("about to fail")
        raise RuntimeError("genuine failure")

    result = wrap_quiet(fails_after_print, config=default_config)(1)

    assert result.value is None
    assert result.failure is not None
    assert result.failure.message == "genuine failure"
    assert result.notices == ("about to fail",)


def test_quiet_restores_sinks_after_success_and_failure(default_config) -> None:
    stdout, stderr = sys.stdout, sys.stderr
    showwarning = warnings.showwarning
    handlers = list(logging.getLogger().handlers)

    wrap_quiet(lambda x: x, config=default_config)(1)
    wrap_quiet(_boom, config=default_config)(1)

    assert sys.stdout is stdout
    assert sys.stderr is stderr
    assert warnings.showwarning is showwarning
    assert logging.getLogger().handlers == handlers


def test_quiet_channels_follow_config() -> None:
    cfg = resolve_config(
        overrides={"capture_stdout": False, "capture_warnings": True},
        environ={},
    )

    def mixed(_: int) -> None:
        print("stdout line")
        warnings.warn("kept", UserWarning, stacklevel=2)

    result = wrap_quiet(mixed, config=cfg)(1)

    assert result.notices == ("UserWarning: kept",)


def test_quiet_rejects_coroutine_functions(default_config) -> None:
    async def coro(_: int) -> int:
        return 1

    with pytest.raises(TypeError, match="coroutine"):
        wrap_quiet(coro, config=default_config)


def test_quiet_result_to_dict(default_config) -> None:
    def hello(_: int) -> str:
        print("hi")
        return "ok"

    data = wrap_quiet(hello, config=default_config)(1).to_dict()

    assert data == {"value": "ok", "failure": None, "notices": ["hi"]}


def test_nested_quiet_calls_keep_their_own_notices(
    default_config, root_at_info
) -> None:
    logger = logging.getLogger("tests.quiet.nested")

    def inner(x: int) -> int:
        print(f"p{x}")
        logger.info("l%d", x)
        return x

    def outer(xs: list[int]) -> list[int]:
        results = map_each(xs, wrap_quiet(inner, config=default_config))
        logger.info("outer done")
        return [r.value for r in results]

    quiet_inner = wrap_quiet(inner, config=default_config)
    result = wrap_quiet(outer, config=default_config)([1, 2])

    assert result.value == [1, 2]
    assert result.notices == ("INFO: outer done",)
    assert quiet_inner(3).notices == ("p3", "INFO: l3")


def test_flush_does_not_split_a_line(default_config) -> None:
    def progress(_: int) -> None:
        print("progress: 50%", end="", flush=True)
        print(" ... done")
        print("tail without newline", end="", flush=True)

    result = wrap_quiet(progress, config=default_config)(1)

    assert result.notices == ("progress: 50% ... done", "tail without newline")


def test_captured_streams_report_an_encoding(default_config) -> None:
    def needs_encoding(_: int) -> str:
        return sys.stdout.encoding

    result = wrap_quiet(needs_encoding, config=default_config)(1)

    assert result.ok
    assert result.value == "utf-8"

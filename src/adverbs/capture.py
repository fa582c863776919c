"""Scoped capture of diagnostic output.

``capture_notices`` redirects stdout and stderr, hooks warning display and
attaches a root logging handler for the duration of a ``with`` block. Every
captured line lands in a single ``NoticeLog`` in emission order. All sinks are
restored on exit, including when the block raises.

Scopes nest: only the innermost active scope receives a notice, whatever the
channel it was emitted on.
"""

from __future__ import annotations

from contextlib import ExitStack, contextmanager, redirect_stderr, redirect_stdout
from contextvars import ContextVar
import io
import logging
from typing import TYPE_CHECKING, Any
import warnings

if TYPE_CHECKING:
    from collections.abc import Iterator

    from adverbs.config import FrozenConfig


class NoticeLog:
    """Ordered collection of notices gathered during a capture scope."""

    __slots__ = ("_notices",)

    def __init__(self) -> None:
        self._notices: list[str] = []

    def add(self, notice: str) -> None:
        self._notices.append(notice)

    def snapshot(self) -> tuple[str, ...]:
        return tuple(self._notices)


# Innermost active capture scope; log records are routed only here.
_active_log: ContextVar[NoticeLog | None] = ContextVar("active_notice_log", default=None)


class _LineSink(io.TextIOBase):
    """Text stream that turns written text into one notice per line.

    ``flush()`` does not end a line: a partial line is emitted only when the
    scope closes. There is no underlying ``buffer`` or file descriptor.
    """

    def __init__(self, notices: NoticeLog) -> None:
        super().__init__()
        self._notices = notices
        self._pending = ""

    @property
    def encoding(self) -> str:
        return "utf-8"

    @property
    def errors(self) -> str:
        return "strict"

    def writable(self) -> bool:
        return True

    def write(self, s: str) -> int:
        text = self._pending + s
        *lines, self._pending = text.split("\n")
        for line in lines:
            self._notices.add(line)
        return len(s)

    def flush(self) -> None:
        pass

    def _finish(self) -> None:
        if self._pending:
            self._notices.add(self._pending)
            self._pending = ""


class _NoticeHandler(logging.Handler):
    def __init__(self, notices: NoticeLog, level: int) -> None:
        super().__init__(level)
        self._notices = notices
        self.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        # Outer scopes stay silent while a nested scope is active.
        if _active_log.get() is not self._notices:
            return
        try:
            self._notices.add(self.format(record))
        except Exception:
            self.handleError(record)


def _format_warning(message: Warning | str, category: type[Warning]) -> str:
    return f"{category.__name__}: {message}"


@contextmanager
def capture_notices(config: FrozenConfig) -> Iterator[NoticeLog]:
    """Capture diagnostic output into a ``NoticeLog``.

    Which channels are captured follows ``config.capture_*``. Warnings are
    captured by replacing ``warnings.showwarning``, so the active warning
    filters still decide what is shown and what is raised.
    """
    notices = NoticeLog()
    sinks: list[_LineSink] = []

    with ExitStack() as stack:
        token = _active_log.set(notices)
        stack.callback(_active_log.reset, token)
        if config.capture_stdout:
            out = _LineSink(notices)
            sinks.append(out)
            stack.enter_context(redirect_stdout(out))
        if config.capture_stderr:
            err = _LineSink(notices)
            sinks.append(err)
            stack.enter_context(redirect_stderr(err))
        if config.capture_warnings:
            stack.enter_context(warnings.catch_warnings())

            def _show(
                message: Warning | str,
                category: type[Warning],
                filename: str,
                lineno: int,
                file: Any = None,
                line: str | None = None,
            ) -> None:
                del filename, lineno, file, line
                notices.add(_format_warning(message, category))

            warnings.showwarning = _show
        if config.capture_logging:
            handler = _NoticeHandler(notices, config.log_level_no)
            root = logging.getLogger()
            root.addHandler(handler)
            stack.callback(root.removeHandler, handler)

        try:
            yield notices
        finally:
            for sink in sinks:
                sink._finish()

"""Console logging and capture of standard output into the log."""

from __future__ import annotations

import contextlib
import io
import sys
from datetime import datetime
from typing import Any, Callable, TextIO

from hauler import consts

_LEVELS = {
    "trace": -1,
    "debug": 0,
    "info": 1,
    "warn": 2,
    "error": 3,
    "fatal": 4,
    "panic": 5,
    "disabled": 7,
}
_DEBUG, _INFO, _WARN, _ERROR = 0, 1, 2, 3
_LABELS = {_DEBUG: "DBG", _INFO: "INF", _WARN: "WRN", _ERROR: "ERR"}

_global_level = _LEVELS["info"]


class Logger:
    """A console logger with attached fields and a global level."""

    def __init__(self, out: TextIO | None = None, fields: dict[str, str] | None = None) -> None:
        self._out = out if out is not None else sys.stdout
        self._fields = dict(fields or {})

    def set_level(self, level: str) -> None:
        """Set the global level; unknown names fall back to info."""
        global _global_level
        _global_level = _LEVELS.get(level.lower(), _LEVELS["info"])

    def with_fields(self, fields: dict[str, str]) -> Logger:
        return Logger(self._out, {**self._fields, **fields})

    def _emit(self, level: int, message: str, args: tuple[Any, ...]) -> None:
        if level < _global_level:
            return
        text = message % args if args else message
        stamp = datetime.now().strftime(consts.CUSTOM_TIME_FORMAT)
        parts = [stamp, _LABELS[level], text]
        parts.extend(f"{k}={v}" for k, v in self._fields.items())
        self._out.write(" ".join(parts) + "\n")
        self._out.flush()

    def error(self, message: str, *args: Any) -> None:
        self._emit(_ERROR, message, args)

    def info(self, message: str, *args: Any) -> None:
        self._emit(_INFO, message, args)

    def warning(self, message: str, *args: Any) -> None:
        self._emit(_WARN, message, args)

    def debug(self, message: str, *args: Any) -> None:
        self._emit(_DEBUG, message, args)


def new_logger(out: TextIO | None = None) -> Logger:
    """Create a logger writing to ``out`` (standard output by default)."""
    return Logger(out)


class CustomWriter:
    """Forwards written text to a logger at a fixed level."""

    def __init__(self, logger: Logger, level: str) -> None:
        self.logger = logger
        self.level = level

    def write(self, data: bytes | str) -> int:
        text = data.decode(errors="replace") if isinstance(data, bytes) else data
        message = text.strip()
        if message:
            if self.level == "error":
                self.logger.error("%s", message)
            elif self.level == "info":
                self.logger.info("%s", message)
            else:
                self.logger.debug("%s", message)
        return len(data)


class FunctionExecutionError(RuntimeError):
    """Raised when a function run under capture_output fails."""


class _LineSink(io.TextIOBase):
    def __init__(self, writer: CustomWriter) -> None:
        self._writer = writer
        self._buffer = ""

    def writable(self) -> bool:
        return True

    def write(self, s: str) -> int:
        self._buffer += s
        *lines, self._buffer = self._buffer.split("\n")
        for line in lines:
            self._writer.write(line)
        return len(s)

    def drain(self) -> None:
        if self._buffer:
            self._writer.write(self._buffer)
            self._buffer = ""


def capture_output(logger: Logger, debug: bool, fn: Callable[[], Any]) -> None:
    """Run ``fn`` with stdout and stderr sent line by line to ``logger``."""
    out_level, err_level = ("debug", "debug") if debug else ("info", "error")
    out_sink = _LineSink(CustomWriter(logger, out_level))
    err_sink = _LineSink(CustomWriter(logger, err_level))
    try:
        with contextlib.redirect_stdout(out_sink), contextlib.redirect_stderr(err_sink):
            fn()
    except Exception as exc:
        raise FunctionExecutionError(f"function execution failed: {exc}") from exc
    finally:
        out_sink.drain()
        err_sink.drain()
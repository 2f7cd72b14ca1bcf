"""A small prefixed logger with level checks."""

from __future__ import annotations

import enum
import sys
from typing import Any, TextIO


class Level(enum.IntEnum):
    DEBUG = 0
    DEFAULT = 1
    INFO = 2
    WARN = 3
    ERROR = 4


class Logger:
    """Writes prefixed lines when the configured level allows them.

    Plain, debug, info and warn messages go to ``out`` (standard output by
    default); error messages go to ``err`` (standard error by default).
    """

    def __init__(
        self,
        prefix: str | None = None,
        level: Level = Level.DEFAULT,
        out: TextIO | None = None,
        err: TextIO | None = None,
    ) -> None:
        self.prefix = prefix
        self.level = Level(level)
        self._out = out
        self._err = err

    def set_level(self, level: Level) -> Logger:
        self.level = Level(level)
        return self

    def is_default(self) -> bool:
        return self.level <= Level.DEFAULT

    def is_debug(self) -> bool:
        return self.level <= Level.DEBUG

    def is_info(self) -> bool:
        return self.level <= Level.INFO

    def is_warn(self) -> bool:
        return self.level <= Level.WARN

    def is_error(self) -> bool:
        return self.level <= Level.ERROR

    def _write(self, stream: TextIO, tag: str, message: Any) -> None:
        head = f"{self.prefix} " if self.prefix else ""
        stream.write(f"{head}{tag}{message}\n")

    def _stdout(self) -> TextIO:
        return self._out if self._out is not None else sys.stdout

    def _stderr(self) -> TextIO:
        return self._err if self._err is not None else sys.stderr

    def log(self, message: Any) -> None:
        if self.is_default():
            self._write(self._stdout(), "", message)

    def debug(self, message: Any) -> None:
        if self.is_debug():
            self._write(self._stdout(), "DEBUG: ", message)

    def info(self, message: Any) -> None:
        if self.is_info():
            self._write(self._stdout(), "INFO: ", message)

    def warn(self, message: Any) -> None:
        if self.is_warn():
            self._write(self._stdout(), "WARN: ", message)

    def error(self, message: Any) -> None:
        if self.is_error():
            self._write(self._stderr(), "ERROR: ", message)


def format_exception(exc: Any) -> str:
    """The message of an exception, or ``unknown`` for anything else."""
    if isinstance(exc, BaseException):
        return str(exc)
    return "unknown"
"""Colour-coded operator output."""

from __future__ import annotations

import os
from typing import TextIO

_GREEN = "\x1b[32m"
_RED = "\x1b[31m"
_RESET = "\x1b[39m"


def color_enabled(mode: str, stream: TextIO) -> bool:
    """Resolve an ``auto``/``always``/``never`` colour mode for a stream."""
    if mode == "always":
        return True
    if mode == "never":
        return False
    if os.getenv("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty is not None and isatty())


class ConsoleReporter:
    """Writes [Wrote]/[Error] lines; silent mode only hides successes."""

    def __init__(
        self,
        out: TextIO,
        err: TextIO,
        *,
        silent: bool = False,
        color: str = "auto",
    ) -> None:
        self._out = out
        self._err = err
        self._silent = silent
        self._out_color = color_enabled(color, out)
        self._err_color = color_enabled(color, err)

    @property
    def silent(self) -> bool:
        return self._silent

    def wrote(self, display: str) -> None:
        """Report a written artifact."""
        if self._silent:
            return
        self._emit(self._out, f"[Wrote] {display}", _GREEN, self._out_color)

    def error(self, reason: str) -> None:
        """Report a failure; never suppressed."""
        self._emit(self._err, f"[Error] {reason}", _RED, self._err_color)

    def warn(self, message: str) -> None:
        """Report an advisory line on stderr in red."""
        self._emit(self._err, message, _RED, self._err_color)

    def info(self, message: str) -> None:
        """Report a plain informational line, hidden in silent mode."""
        if self._silent:
            return
        self._out.write(f"{message}\n")
        self._out.flush()

    @staticmethod
    def _emit(stream: TextIO, message: str, code: str, colored: bool) -> None:
        if colored:
            message = f"{code}{message}{_RESET}"
        stream.write(f"{message}\n")
        stream.flush()

"""Coloured status lines for warnings and successes."""

from __future__ import annotations

import os

from rich.console import Console
from rich.text import Text

_WARN_SYMBOL = "⚠️ "
_WARN_PLAIN = "!"
_SUCCESS_SYMBOL = "✅"
_SUCCESS_PLAIN = "✓"


def no_emoji() -> bool:
    """Return True when the NO_EMOJI environment variable is set."""
    return "NO_EMOJI" in os.environ


def _report(symbol: str, plain: str, message: str, colour: str) -> None:
    console = Console(highlight=False, soft_wrap=True)
    line = Text()
    line.append(plain if no_emoji() else symbol, style=colour)
    line.append(" ")
    line.append(message, style=colour)
    console.print(line)


def warn(message: str) -> None:
    """Print a red warning line to standard output."""
    _report(_WARN_SYMBOL, _WARN_PLAIN, message, "red")


def success(message: str) -> None:
    """Print a green success line to standard output."""
    _report(_SUCCESS_SYMBOL, _SUCCESS_PLAIN, message, "green")
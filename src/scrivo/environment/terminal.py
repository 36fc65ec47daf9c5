"""ANSI styling for error messages.

Colour is decided per call so hosts (and tests) can toggle it through the
environment:

- ``FORCE_COLOR`` set: always colour
- ``NO_COLOR`` set: never colour (https://no-color.org/)
- otherwise: colour only when stdout is a TTY
"""

from __future__ import annotations

import os
import re
import sys
from typing import Literal

_CODES = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "red": "\033[31m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "cyan": "\033[36m",
    "bright_red": "\033[91m",
}

Style = Literal["reset", "bold", "dim", "red", "green", "yellow", "cyan", "bright_red"]

_ANSI_RE = re.compile(r"\x1B\[[0-?]*[ -/]*[@-~]")


def supports_color() -> bool:
    """Return True if styled output should be produced."""
    if os.environ.get("FORCE_COLOR"):
        return True
    if os.environ.get("NO_COLOR"):
        return False
    return sys.stdout.isatty()


def style(text: str, *styles: Style) -> str:
    """Wrap ``text`` in the given ANSI styles when colour is enabled.

    Example:
        >>> style("Error", "red", "bold")  # with FORCE_COLOR=1
        '\\x1b[31m\\x1b[1mError\\x1b[0m'
    """
    if not styles or not supports_color():
        return text
    prefix = "".join(_CODES[s] for s in styles)
    return f"{prefix}{text}{_CODES['reset']}"


def strip_styles(text: str) -> str:
    """Remove ANSI escape sequences from ``text``."""
    return _ANSI_RE.sub("", text)


def error_code(text: str) -> str:
    return style(text, "bright_red", "bold")


def location(text: str) -> str:
    return style(text, "cyan")


def hint(text: str) -> str:
    return style(text, "green")


def dim_text(text: str) -> str:
    return style(text, "dim")


def diagnostic(text: str) -> str:
    return style(text, "yellow")

"""Value conversion helpers used by compiled templates and functions.

Thread-Safety:
All functions are stateless and safe for concurrent use.
"""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from typing import Any


def to_text(value: Any) -> str:
    """Convert a value to the text written to the output.

    ``null`` writes nothing, booleans use template spelling and sequences
    render as ``[a, b]``.

    Example:
        >>> to_text(None), to_text(True), to_text([1, "a"])
        ('', 'true', '[1, a]')
    """
    if value is None:
        return ""
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(to_text(item) for item in value) + "]"
    return str(value)


def to_string(value: Any) -> str | None:
    """Strictly coerce a scalar to text, keeping ``None`` as ``None``.

    Used where a value must *be* text (template names), not merely be
    printable: containers, callables and arbitrary objects are rejected.

    Raises:
        TypeError: If the value has no text form.
    """
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (bool, int, float)):
        return to_text(value)
    if isinstance(value, os.PathLike):
        return os.fspath(value)
    raise TypeError(f"cannot convert a value of type '{type(value).__name__}' to text")


def get_item(target: Any, key: Any) -> Any:
    """Subscript with template semantics.

    Out-of-range sequence indexes and missing mapping keys yield ``None``.
    Negative indexes count from the end.

    Raises:
        TypeError: If ``target`` is not subscriptable by ``key``.
    """
    if target is None:
        return None
    if isinstance(target, Mapping):
        return target.get(key)
    if isinstance(target, Sequence) and not isinstance(target, str):
        if not isinstance(key, int) or isinstance(key, bool):
            raise TypeError(f"list index must be an integer, not '{type(key).__name__}'")
        if -len(target) <= key < len(target):
            return target[key]
        return None
    if isinstance(target, str):
        if not isinstance(key, int) or isinstance(key, bool):
            raise TypeError(f"string index must be an integer, not '{type(key).__name__}'")
        return target[key] if -len(target) <= key < len(target) else None
    raise TypeError(f"'{type(target).__name__}' object is not subscriptable")

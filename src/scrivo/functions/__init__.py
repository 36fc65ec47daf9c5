"""Builtin functions available to every template."""

from __future__ import annotations

from scrivo.context import ScriptObject
from scrivo.functions import include
from scrivo.functions.include import IncludeFunction


def register_builtins(builtins: ScriptObject) -> ScriptObject:
    """Register every builtin function into ``builtins`` and return it."""
    include.register(builtins)
    return builtins


__all__ = ["IncludeFunction", "register_builtins"]

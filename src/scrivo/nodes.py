"""Immutable AST for scrivo templates.

Nodes are frozen for thread-safety: a parsed Template can be rendered by
many sessions at once.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from scrivo._types import SourceSpan


@dataclass(frozen=True, slots=True)
class Node:
    """Base class for all AST nodes."""

    span: SourceSpan


# Expressions


@dataclass(frozen=True, slots=True)
class Expr(Node):
    pass


@dataclass(frozen=True, slots=True)
class Const(Expr):
    """Literal: string, number, true/false or null."""

    value: Any


@dataclass(frozen=True, slots=True)
class Name(Expr):
    name: str


@dataclass(frozen=True, slots=True)
class Index(Expr):
    """Subscript: ``target[index]``"""

    target: Expr
    index: Expr


@dataclass(frozen=True, slots=True)
class Call(Expr):
    """Positional call: ``func(arg, ...)``"""

    func: Expr
    args: Sequence[Expr]


# Statements


@dataclass(frozen=True, slots=True)
class Data(Node):
    """Raw text between code blocks."""

    value: str


@dataclass(frozen=True, slots=True)
class Output(Node):
    """Expression statement; its value is written to the output."""

    expr: Expr


@dataclass(frozen=True, slots=True)
class Assign(Node):
    """``name = expr`` (writes nothing)."""

    name: str
    expr: Expr


@dataclass(frozen=True, slots=True)
class Page(Node):
    """Root node: the template body and its optional front matter."""

    body: Sequence[Node]
    front_matter: Sequence[Node] | None = None

"""Tokens, source spans and the custom function protocol."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from scrivo.context import TemplateContext


@dataclass(frozen=True, slots=True)
class SourceSpan:
    """Location of a construct in template source.

    Attached to every token, node, diagnostic and runtime error so that
    failures can be reported against the call site that triggered them.

    Attributes:
        filename: Template file path or synthesized name (``<string>`` for
            inline sources).
        line: 1-based line number.
        column: 1-based column number.
    """

    filename: str = "<string>"
    line: int = 1
    column: int = 1

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"


class TokenType(Enum):
    """Token categories produced by the lexer."""

    RAW = auto()
    CODE_ENTER = auto()
    CODE_EXIT = auto()
    FRONT_MATTER_MARKER = auto()

    NAME = auto()
    STRING = auto()
    INTEGER = auto()
    FLOAT = auto()

    LPAREN = auto()
    RPAREN = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    COMMA = auto()
    ASSIGN = auto()
    EOS = auto()

    INVALID = auto()
    EOF = auto()


@dataclass(frozen=True, slots=True)
class Token:
    """A lexical token.

    ``value`` holds the raw text for RAW/NAME/number tokens, the decoded
    text for STRING tokens and the error description for INVALID tokens.
    """

    type: TokenType
    value: str
    span: SourceSpan

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.span})"


@runtime_checkable
class CustomFunction(Protocol):
    """A function that receives the rendering session and its call site.

    Plain Python callables bound in a context are called with the positional
    arguments only; objects implementing this protocol are handed the
    context, the span of the call expression and the argument list.
    """

    def evaluate(
        self,
        context: TemplateContext,
        call_site: SourceSpan,
        arguments: list[Any],
    ) -> Any: ...

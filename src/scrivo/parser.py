"""Parser for scrivo templates.

Builds an immutable ``Page`` from the lexer's token stream. Syntax problems
do not raise: each one is recorded as an ERROR ``LogMessage`` and parsing
resumes at the next statement boundary, so a single pass reports every
problem in the source. A Template built from a page with errors is flagged
``has_errors`` and refuses to render.

Grammar (code sections):
    statement  := NAME '=' expr | expr
    expr       := primary ( '(' [expr (',' expr)*] ')' | '[' expr ']' )*
    primary    := STRING | INTEGER | FLOAT | 'true' | 'false' | 'null'
                | NAME | '(' expr ')'

Statements are separated by ';', newlines, or code block boundaries.
"""

from __future__ import annotations

from scrivo._types import SourceSpan, Token, TokenType
from scrivo.environment.exceptions import LogMessage, LogMessageType
from scrivo.nodes import Assign, Call, Const, Data, Expr, Index, Name, Node, Output, Page

_KEYWORD_CONSTANTS = {"true": True, "false": False, "null": None}

_STATEMENT_END = frozenset(
    {
        TokenType.EOS,
        TokenType.CODE_EXIT,
        TokenType.EOF,
        TokenType.FRONT_MATTER_MARKER,
    }
)


class _SyntaxProblem(Exception):
    """Aborts the current statement; converted to a diagnostic."""

    def __init__(self, message: str, span: SourceSpan):
        self.message = message
        self.span = span
        super().__init__(message)


class Parser:
    """Recursive-descent parser over a token list.

    Example:
        >>> from scrivo.lexer import tokenize
        >>> page, messages = Parser(tokenize("Hi {{ name }}")).parse()
        >>> messages
        []
    """

    __slots__ = ("_messages", "_pos", "_tokens")

    def __init__(self, tokens: list[Token]):
        self._tokens = tokens
        self._pos = 0
        self._messages: list[LogMessage] = []

    @property
    def _current(self) -> Token:
        return self._tokens[self._pos]

    def _peek(self, offset: int = 1) -> Token:
        index = min(self._pos + offset, len(self._tokens) - 1)
        return self._tokens[index]

    def _advance(self) -> Token:
        token = self._tokens[self._pos]
        if token.type is not TokenType.EOF:
            self._pos += 1
        return token

    def _expect(self, type_: TokenType, what: str) -> Token:
        if self._current.type is not type_:
            raise _SyntaxProblem(
                f"Expected {what} instead of {_describe(self._current)}", self._current.span
            )
        return self._advance()

    def _error(self, message: str, span: SourceSpan) -> None:
        self._messages.append(LogMessage(LogMessageType.ERROR, span, message))

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def parse(self) -> tuple[Page, list[LogMessage]]:
        """Parse the whole token stream."""
        start = self._current.span
        front_matter = None

        if self._current.type is TokenType.FRONT_MATTER_MARKER:
            self._advance()
            front_matter = tuple(self._parse_body(stop=TokenType.FRONT_MATTER_MARKER))
            if self._current.type is TokenType.FRONT_MATTER_MARKER:
                self._advance()

        body = tuple(self._parse_body(stop=TokenType.EOF))
        return Page(span=start, body=body, front_matter=front_matter), self._messages

    def _parse_body(self, stop: TokenType) -> list[Node]:
        body: list[Node] = []
        while self._current.type is not stop and self._current.type is not TokenType.EOF:
            token = self._current
            match token.type:
                case TokenType.RAW:
                    body.append(Data(span=token.span, value=token.value))
                    self._advance()
                case TokenType.CODE_ENTER | TokenType.CODE_EXIT | TokenType.EOS:
                    self._advance()
                case TokenType.INVALID:
                    self._error(token.value, token.span)
                    self._advance()
                case TokenType.FRONT_MATTER_MARKER:
                    self._error("Unexpected front matter marker '+++'", token.span)
                    self._advance()
                case _:
                    try:
                        body.append(self._parse_statement())
                    except _SyntaxProblem as problem:
                        self._error(problem.message, problem.span)
                        self._synchronize()
        return body

    def _synchronize(self) -> None:
        """Skip to the next statement boundary after an error."""
        while self._current.type not in _STATEMENT_END:
            if self._current.type is TokenType.INVALID:
                self._error(self._current.value, self._current.span)
            self._advance()

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _parse_statement(self) -> Node:
        start = self._current
        if start.type is TokenType.NAME and self._peek().type is TokenType.ASSIGN:
            if start.value in _KEYWORD_CONSTANTS:
                raise _SyntaxProblem(f"Cannot assign to '{start.value}'", start.span)
            self._advance()
            self._advance()
            statement: Node = Assign(span=start.span, name=start.value, expr=self._parse_expression())
        else:
            statement = Output(span=start.span, expr=self._parse_expression())

        end = self._current.type
        if end not in _STATEMENT_END and end is not TokenType.INVALID:
            raise _SyntaxProblem(
                f"Unexpected {_describe(self._current)} after statement", self._current.span
            )
        return statement

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _parse_expression(self) -> Expr:
        expr = self._parse_primary()
        while True:
            token = self._current
            if token.type is TokenType.LPAREN:
                self._advance()
                expr = Call(span=expr.span, func=expr, args=tuple(self._parse_arguments()))
            elif token.type is TokenType.LBRACKET:
                self._advance()
                index = self._parse_expression()
                self._expect(TokenType.RBRACKET, "']'")
                expr = Index(span=expr.span, target=expr, index=index)
            else:
                return expr

    def _parse_arguments(self) -> list[Expr]:
        args: list[Expr] = []
        if self._current.type is TokenType.RPAREN:
            self._advance()
            return args
        while True:
            args.append(self._parse_expression())
            if self._current.type is TokenType.COMMA:
                self._advance()
                continue
            self._expect(TokenType.RPAREN, "',' or ')'")
            return args

    def _parse_primary(self) -> Expr:
        token = self._current
        match token.type:
            case TokenType.STRING:
                self._advance()
                return Const(span=token.span, value=token.value)
            case TokenType.INTEGER:
                self._advance()
                return Const(span=token.span, value=int(token.value))
            case TokenType.FLOAT:
                self._advance()
                return Const(span=token.span, value=float(token.value))
            case TokenType.NAME:
                self._advance()
                if token.value in _KEYWORD_CONSTANTS:
                    return Const(span=token.span, value=_KEYWORD_CONSTANTS[token.value])
                return Name(span=token.span, name=token.value)
            case TokenType.LPAREN:
                self._advance()
                expr = self._parse_expression()
                self._expect(TokenType.RPAREN, "')'")
                return expr
            case TokenType.INVALID:
                self._advance()
                raise _SyntaxProblem(token.value, token.span)
        raise _SyntaxProblem(f"Expected an expression instead of {_describe(token)}", token.span)


def _describe(token: Token) -> str:
    if token.type is TokenType.EOF:
        return "end of template"
    if token.type in (TokenType.EOS, TokenType.CODE_EXIT, TokenType.CODE_ENTER):
        return "end of statement" if token.type is TokenType.EOS else f"'{token.value}'"
    return f"'{token.value}'"


def parse(tokens: list[Token]) -> tuple[Page, list[LogMessage]]:
    """Parse a token list into a Page and its diagnostics."""
    return Parser(tokens).parse()

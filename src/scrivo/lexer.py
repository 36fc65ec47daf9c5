"""Mode-aware lexer for scrivo templates.

Splits source into text and code according to the parsing mode:

- ``DEFAULT``: text with embedded ``{{ ... }}`` code blocks
- ``SCRIPT_ONLY``: the whole source is code
- ``FRONT_MATTER_AND_CONTENT``: a leading ``+++`` ... ``+++`` code section,
  then default content
- ``FRONT_MATTER_ONLY``: the leading code section only

The lexer never raises. Malformed input produces INVALID tokens whose value
is the problem description; the parser turns them into diagnostics.

Example:
    >>> [t.type.name for t in tokenize("Hi {{ name }}")]
    ['RAW', 'CODE_ENTER', 'NAME', 'CODE_EXIT', 'EOF']
"""

from __future__ import annotations

from scrivo._types import SourceSpan, Token, TokenType
from scrivo.options import ParsingMode

CODE_ENTER = "{{"
CODE_EXIT = "}}"
FRONT_MATTER_MARKER = "+++"

_PUNCTUATION = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    ",": TokenType.COMMA,
    "=": TokenType.ASSIGN,
    ";": TokenType.EOS,
    "\n": TokenType.EOS,
}

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\", '"': '"', "'": "'", "0": "\0"}


class Lexer:
    """Tokenizer for a single template source.

    Not reusable: create one Lexer per source.
    """

    __slots__ = ("_column", "_filename", "_line", "_mode", "_pos", "_source", "_tokens")

    def __init__(
        self,
        source: str,
        filename: str = "<string>",
        mode: ParsingMode = ParsingMode.DEFAULT,
    ):
        self._source = source
        self._filename = filename
        self._mode = mode
        self._pos = 0
        self._line = 1
        self._column = 1
        self._tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Produce the full token list, always terminated by EOF."""
        end = len(self._source)

        if self._mode is ParsingMode.SCRIPT_ONLY:
            self._lex_code(end, in_block=False)
        elif self._mode in (ParsingMode.FRONT_MATTER_AND_CONTENT, ParsingMode.FRONT_MATTER_ONLY):
            self._lex_front_matter()
            if self._mode is ParsingMode.FRONT_MATTER_AND_CONTENT:
                self._lex_text(end)
        else:
            self._lex_text(end)

        self._emit(TokenType.EOF, "", self._span())
        return self._tokens

    # ------------------------------------------------------------------
    # Position helpers
    # ------------------------------------------------------------------

    def _span(self) -> SourceSpan:
        return SourceSpan(self._filename, self._line, self._column)

    def _advance(self, count: int = 1) -> str:
        text = self._source[self._pos : self._pos + count]
        for ch in text:
            if ch == "\n":
                self._line += 1
                self._column = 1
            else:
                self._column += 1
        self._pos += len(text)
        return text

    def _emit(self, type_: TokenType, value: str, span: SourceSpan) -> None:
        self._tokens.append(Token(type_, value, span))

    # ------------------------------------------------------------------
    # Front matter
    # ------------------------------------------------------------------

    def _lex_front_matter(self) -> None:
        """Lex a leading ``+++`` section, if the source has one."""
        first_line, _, _ = self._source.partition("\n")
        if first_line.strip() != FRONT_MATTER_MARKER:
            return

        self._emit(TokenType.FRONT_MATTER_MARKER, FRONT_MATTER_MARKER, self._span())
        self._advance(len(first_line) + 1)

        # Find the closing marker line
        offset = self._pos
        close_start = -1
        close_end = -1
        while offset <= len(self._source):
            newline = self._source.find("\n", offset)
            line_end = len(self._source) if newline == -1 else newline
            if self._source[offset:line_end].strip() == FRONT_MATTER_MARKER:
                close_start = offset
                close_end = line_end if newline == -1 else newline + 1
                break
            if newline == -1:
                break
            offset = newline + 1

        if close_start == -1:
            start = self._span()
            self._lex_code(len(self._source), in_block=False)
            self._emit(
                TokenType.INVALID,
                "Unterminated front matter; expecting a closing '+++' line",
                start,
            )
            return

        self._lex_code(close_start, in_block=False)
        self._emit(TokenType.FRONT_MATTER_MARKER, FRONT_MATTER_MARKER, self._span())
        self._advance(close_end - self._pos)

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def _lex_text(self, end: int) -> None:
        while self._pos < end:
            start = self._span()
            enter = self._source.find(CODE_ENTER, self._pos, end)
            if enter == -1:
                self._emit(TokenType.RAW, self._advance(end - self._pos), start)
                return
            if enter > self._pos:
                self._emit(TokenType.RAW, self._advance(enter - self._pos), start)

            enter_span = self._span()
            self._emit(TokenType.CODE_ENTER, self._advance(len(CODE_ENTER)), enter_span)
            if not self._lex_code(end, in_block=True):
                self._emit(
                    TokenType.INVALID,
                    f"Unclosed code block; expecting '{CODE_EXIT}'",
                    enter_span,
                )
                return
            self._emit(TokenType.CODE_EXIT, self._advance(len(CODE_EXIT)), self._span())

    # ------------------------------------------------------------------
    # Code
    # ------------------------------------------------------------------

    def _lex_code(self, end: int, *, in_block: bool) -> bool:
        """Lex code up to ``end``, or up to ``}}`` when ``in_block``.

        Returns True if the block was closed (always True outside blocks).
        The closing ``}}`` is left for the caller to consume.
        """
        source = self._source
        while self._pos < end:
            ch = source[self._pos]

            if in_block and source.startswith(CODE_EXIT, self._pos):
                return True

            if ch in " \t\r":
                self._advance()
                continue

            if ch == "#":
                self._skip_comment(end, in_block=in_block)
                continue

            span = self._span()

            if ch in _PUNCTUATION:
                self._emit(_PUNCTUATION[ch], self._advance(), span)
            elif ch.isalpha() or ch == "_":
                self._emit(TokenType.NAME, self._read_while(end, _is_name_char), span)
            elif ch.isdigit():
                self._lex_number(end, span)
            elif ch in "\"'":
                self._lex_string(end, span)
            else:
                self._emit(TokenType.INVALID, f"Unexpected character '{ch}'", span)
                self._advance()

        return not in_block

    def _read_while(self, end: int, predicate) -> str:
        start = self._pos
        while self._pos < end and predicate(self._source[self._pos]):
            self._pos += 1
        text = self._source[start : self._pos]
        self._column += len(text)
        return text

    def _skip_comment(self, end: int, *, in_block: bool) -> None:
        while self._pos < end and self._source[self._pos] != "\n":
            if in_block and self._source.startswith(CODE_EXIT, self._pos):
                return
            self._advance()

    def _lex_number(self, end: int, span: SourceSpan) -> None:
        text = self._read_while(end, str.isdigit)
        if (
            self._pos + 1 < end
            and self._source[self._pos] == "."
            and self._source[self._pos + 1].isdigit()
        ):
            text += self._advance()
            text += self._read_while(end, str.isdigit)
            self._emit(TokenType.FLOAT, text, span)
        else:
            self._emit(TokenType.INTEGER, text, span)

    def _lex_string(self, end: int, span: SourceSpan) -> None:
        quote = self._advance()
        chars: list[str] = []
        while self._pos < end:
            ch = self._source[self._pos]
            if ch == quote:
                self._advance()
                self._emit(TokenType.STRING, "".join(chars), span)
                return
            if ch == "\n":
                break
            if ch == "\\" and self._pos + 1 < end:
                self._advance()
                escaped = self._advance()
                chars.append(_ESCAPES.get(escaped, "\\" + escaped))
                continue
            chars.append(self._advance())
        self._emit(TokenType.INVALID, "Unterminated string literal", span)


def _is_name_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def tokenize(
    source: str,
    filename: str = "<string>",
    mode: ParsingMode = ParsingMode.DEFAULT,
) -> list[Token]:
    """Tokenize ``source`` in the given parsing mode."""
    return Lexer(source, filename, mode).tokenize()

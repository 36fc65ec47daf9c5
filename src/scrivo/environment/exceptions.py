"""Exceptions for the scrivo template system.

Exception Hierarchy:
TemplateError (base)
├── TemplateNotFoundError         # Loader could not resolve a name
└── TemplateRuntimeError          # Raised at a call site, carries its span
    ├── UndefinedError            # Unknown variable
    ├── MissingArgumentError      # include() called without a name
    ├── InvalidArgumentTypeError  # Name argument not convertible to text
    ├── EmptyTemplateNameError    # Name blank after trimming
    ├── NoLoaderConfiguredError   # Cache miss with no loader configured
    ├── LoaderReturnedNullError   # Loader produced no text
    ├── TemplateLoadError         # Loader raised; wraps the cause
    ├── TemplateParseError        # Source has diagnostics
    └── RecursiveIncludeError     # Name already pending in this session

Error Messages:
Runtime errors render with the call-site location, the include chain that
led to it and, where one exists, a hint:

    ```
    Runtime Error: The include [loop] cannot be used recursively
      Location: loop:1:4

    Template stack:
      • page:3
      • loop:1
      Hint: Check for circular includes: A → B → A
    ```

"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from scrivo._types import SourceSpan
from scrivo.environment import terminal


class ErrorCode(Enum):
    """Searchable error codes.

    Format: S-{CATEGORY}-{NUMBER}
    Categories: PAR (parser), RUN (runtime), TPL (template loading)
    """

    # Parser errors (S-PAR-xxx)
    SYNTAX_ERROR = "S-PAR-001"

    # Runtime errors (S-RUN-xxx)
    UNDEFINED_VARIABLE = "S-RUN-001"
    RUNTIME_ERROR = "S-RUN-002"
    MISSING_ARGUMENT = "S-RUN-003"
    INVALID_ARGUMENT_TYPE = "S-RUN-004"
    EMPTY_TEMPLATE_NAME = "S-RUN-005"
    RECURSIVE_INCLUDE = "S-RUN-006"

    # Template loading errors (S-TPL-xxx)
    TEMPLATE_NOT_FOUND = "S-TPL-001"
    NO_LOADER = "S-TPL-002"
    LOADER_RETURNED_NULL = "S-TPL-003"
    LOAD_ERROR = "S-TPL-004"
    PARSE_ERROR = "S-TPL-005"

    @property
    def category(self) -> str:
        """Error category (``parser``, ``runtime`` or ``template``)."""
        prefix = self.value.split("-")[1]
        return {
            "PAR": "parser",
            "RUN": "runtime",
            "TPL": "template",
        }.get(prefix, "unknown")


class LogMessageType(Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True, slots=True)
class LogMessage:
    """A parser diagnostic attached to a Template Unit."""

    type: LogMessageType
    span: SourceSpan
    message: str

    def __str__(self) -> str:
        return f"{self.span}: {self.type.value}: {self.message}"


def format_template_stack(stack: list[tuple[str, int]] | None) -> str:
    """Format the include chain for error messages.

    Example:
        >>> print(format_template_stack([("page", 3), ("header", 1)]))
        Template stack:
          • page:3
          • header:1
    """
    if not stack:
        return ""

    lines = [terminal.dim_text("Template stack:")]
    for template_name, line_num in stack:
        lines.append(f"  • {terminal.location(f'{template_name}:{line_num}')}")
    return "\n".join(lines)


class TemplateError(Exception):
    """Base exception for all scrivo template errors.

    Attributes:
        code: Optional ErrorCode for searchable error identification.
    """

    code: ErrorCode | None = None

    def format_compact(self) -> str:
        """Format the error as a one-screen diagnostic prefixed by its code."""
        header = str(self)
        if self.code and self.code.value not in header:
            header = f"{terminal.error_code(self.code.value)}: {header}"
        return header


class TemplateNotFoundError(TemplateError):
    """Template not found by a loader.

    Loaders raise this; the include directive wraps it in a
    TemplateLoadError carrying the call site.
    """

    code: ErrorCode | None = ErrorCode.TEMPLATE_NOT_FOUND


class TemplateRuntimeError(TemplateError):
    """Error raised at a call site while rendering.

    Attributes:
        message: Error description
        span: Source location of the construct that failed
        template_stack: (template, line) pairs of the include chain
        suggestion: Actionable fix suggestion
    """

    code: ErrorCode | None = ErrorCode.RUNTIME_ERROR

    def __init__(
        self,
        message: str,
        *,
        span: SourceSpan | None = None,
        template_stack: list[tuple[str, int]] | None = None,
        suggestion: str | None = None,
    ):
        self.message = message
        self.span = span
        self.template_stack = list(template_stack or [])
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def _details(self) -> list[str]:
        """Extra lines appended after the location (overridden by subclasses)."""
        return []

    def _format_message(self) -> str:
        parts = [f"Runtime Error: {self.message}"]

        if self.span is not None:
            parts.append(f"  Location: {terminal.location(str(self.span))}")

        parts.extend(self._details())

        if self.template_stack:
            parts.append("")
            parts.append(format_template_stack(self.template_stack))

        if self.suggestion:
            parts.append(f"  {terminal.hint('Hint:')} {self.suggestion}")

        return "\n".join(parts)


class UndefinedError(TemplateRuntimeError):
    """Raised when a template reads a variable that is not bound."""

    code: ErrorCode | None = ErrorCode.UNDEFINED_VARIABLE

    def __init__(
        self,
        name: str,
        *,
        available_names: Iterable[str] = (),
        **kwargs,
    ):
        self.name = name
        message = f"Undefined variable '{name}'"

        from difflib import get_close_matches

        matches = get_close_matches(name, list(available_names), n=1, cutoff=0.6)
        if matches:
            message += f". Did you mean '{matches[0]}'?"
        super().__init__(message, **kwargs)


class MissingArgumentError(TemplateRuntimeError):
    code: ErrorCode | None = ErrorCode.MISSING_ARGUMENT


class InvalidArgumentTypeError(TemplateRuntimeError):
    code: ErrorCode | None = ErrorCode.INVALID_ARGUMENT_TYPE


class EmptyTemplateNameError(TemplateRuntimeError):
    code: ErrorCode | None = ErrorCode.EMPTY_TEMPLATE_NAME


class NoLoaderConfiguredError(TemplateRuntimeError):
    code: ErrorCode | None = ErrorCode.NO_LOADER


class LoaderReturnedNullError(TemplateRuntimeError):
    code: ErrorCode | None = ErrorCode.LOADER_RETURNED_NULL


class TemplateLoadError(TemplateRuntimeError):
    """The loader raised while resolving an included template.

    The original exception is chained as ``__cause__``.
    """

    code: ErrorCode | None = ErrorCode.LOAD_ERROR

    def __init__(self, template_name: str, cause: BaseException, **kwargs):
        self.template_name = template_name
        super().__init__(f"Unable to load template <{template_name}>: {cause}", **kwargs)


class TemplateParseError(TemplateRuntimeError):
    """Template source produced parser diagnostics.

    Attributes:
        messages: Every diagnostic reported for the source
        template_name: Name the template was requested under
        filename: Canonical path the source was loaded from
    """

    code: ErrorCode | None = ErrorCode.PARSE_ERROR

    def __init__(
        self,
        message: str,
        messages: Iterable[LogMessage],
        *,
        template_name: str | None = None,
        filename: str | None = None,
        **kwargs,
    ):
        self.messages = tuple(messages)
        self.template_name = template_name
        self.filename = filename
        super().__init__(message, **kwargs)

    def _details(self) -> list[str]:
        return [f"    {terminal.diagnostic(str(m))}" for m in self.messages]


class RecursiveIncludeError(TemplateRuntimeError):
    """A template name was included while already pending in the session."""

    code: ErrorCode | None = ErrorCode.RECURSIVE_INCLUDE

    def __init__(self, template_name: str, **kwargs):
        self.template_name = template_name
        kwargs.setdefault("suggestion", "Check for circular includes: A → B → A")
        super().__init__(
            f"The include [{template_name}] cannot be used recursively", **kwargs
        )

"""Tests for error codes and error message formatting."""

from __future__ import annotations

import pytest

from scrivo import (
    DictLoader,
    Environment,
    ErrorCode,
    LogMessage,
    LogMessageType,
    RecursiveIncludeError,
    SourceSpan,
    TemplateError,
    TemplateLoadError,
    TemplateNotFoundError,
    TemplateParseError,
    TemplateRuntimeError,
    UndefinedError,
)
from scrivo.environment.exceptions import format_template_stack


class TestErrorCode:
    @pytest.mark.parametrize(
        ("code", "category"),
        [
            (ErrorCode.SYNTAX_ERROR, "parser"),
            (ErrorCode.RECURSIVE_INCLUDE, "runtime"),
            (ErrorCode.LOAD_ERROR, "template"),
        ],
    )
    def test_category(self, code, category):
        assert code.category == category

    def test_codes_are_unique(self):
        values = [code.value for code in ErrorCode]
        assert len(values) == len(set(values))


class TestRuntimeErrorMessage:
    def test_message_parts(self):
        error = TemplateRuntimeError(
            "Something failed",
            span=SourceSpan("page", 3, 5),
            template_stack=[("base", 1), ("page", 3)],
            suggestion="Try again",
        )
        text = str(error)
        assert text.startswith("Runtime Error: Something failed")
        assert "  Location: page:3:5" in text
        assert "Template stack:\n  • base:1\n  • page:3" in text
        assert text.endswith("  Hint: Try again")

    def test_minimal_message(self):
        assert str(TemplateRuntimeError("plain")) == "Runtime Error: plain"

    def test_stack_is_copied(self):
        stack = [("a", 1)]
        error = TemplateRuntimeError("x", template_stack=stack)
        stack.append(("b", 2))
        assert error.template_stack == [("a", 1)]

    def test_format_compact_prefixes_code(self):
        error = RecursiveIncludeError("loop")
        assert error.format_compact().startswith("S-RUN-006: Runtime Error:")

    def test_all_errors_are_template_errors(self):
        assert issubclass(TemplateRuntimeError, TemplateError)
        assert issubclass(TemplateNotFoundError, TemplateError)


class TestSpecificErrors:
    def test_recursive_include(self):
        error = RecursiveIncludeError("loop", span=SourceSpan("loop", 1, 4))
        assert error.message == "The include [loop] cannot be used recursively"
        assert error.suggestion == "Check for circular includes: A → B → A"
        assert error.code is ErrorCode.RECURSIVE_INCLUDE

    def test_load_error(self):
        cause = TemplateNotFoundError("Template 'x' not found")
        error = TemplateLoadError("x", cause)
        assert error.message == "Unable to load template <x>: Template 'x' not found"

    def test_parse_error_lists_diagnostics(self):
        diagnostic = LogMessage(LogMessageType.ERROR, SourceSpan("bad", 1, 4), "Oops")
        error = TemplateParseError("Cannot parse", [diagnostic], filename="bad")
        assert "    bad:1:4: error: Oops" in str(error)
        assert error.messages == (diagnostic,)

    def test_undefined_without_suggestion(self):
        error = UndefinedError("zzz", available_names=["name"])
        assert error.message == "Undefined variable 'zzz'"


class TestFormatTemplateStack:
    def test_empty(self):
        assert format_template_stack([]) == ""
        assert format_template_stack(None) == ""

    def test_lines(self):
        assert format_template_stack([("page", 3)]) == "Template stack:\n  • page:3"


class TestErrorsFromRendering:
    """Errors raised during a render carry the include chain."""

    def test_undefined_inside_include(self):
        env = Environment(loader=DictLoader({"page": '\n{{ include("part") }}', "part": "{{ x }}"}))
        with pytest.raises(UndefinedError) as exc_info:
            env.render("page")
        error = exc_info.value
        assert error.span == SourceSpan("part", 1, 4)
        assert error.template_stack == [("page", 2)]

"""Tests for Template parsing, compilation and rendering."""

from __future__ import annotations

import pytest

from scrivo import (
    ParserOptions,
    ParsingMode,
    Template,
    TemplateContext,
    TemplateOptions,
    TemplateParseError,
    TemplateRuntimeError,
    UndefinedError,
)

FRONT_MATTER = TemplateOptions(parser=ParserOptions(mode=ParsingMode.FRONT_MATTER_AND_CONTENT))


class TestTemplateParse:
    def test_parse_and_render(self):
        t = Template.parse("Hello, {{ name }}!")
        assert t.render_to_string(name="World") == "Hello, World!"

    def test_render_to_string_accepts_dict(self):
        t = Template.parse("{{ a }}{{ b }}")
        assert t.render_to_string({"a": 1}, b=2) == "12"

    def test_render_to_string_rejects_extra_positionals(self):
        t = Template.parse("x")
        with pytest.raises(TypeError, match="at most 1 positional argument"):
            t.render_to_string({}, {})

    def test_filename_defaults(self):
        assert Template.parse("x").filename == "<string>"
        assert Template.parse("x", "page.txt").filename == "page.txt"

    def test_properties(self):
        options = TemplateOptions()
        t = Template.parse("x", "p", options)
        assert t.source == "x"
        assert t.options is options
        assert t.messages == ()
        assert not t.has_errors
        assert repr(t) == "<Template p>"

    def test_has_errors(self):
        t = Template.parse("{{ ) }}")
        assert t.has_errors
        assert len(t.messages) == 1

    def test_render_with_errors_raises(self):
        t = Template.parse("{{ ) }}", "broken.txt")
        with pytest.raises(TemplateParseError) as exc_info:
            t.render(TemplateContext())
        assert exc_info.value.filename == "broken.txt"
        assert exc_info.value.messages == t.messages

    def test_render_sets_current_template(self):
        context = TemplateContext()
        Template.parse("x", "page").render(context)
        assert context.current_template == "page"

    def test_render_keeps_existing_current_template(self):
        context = TemplateContext(current_template="outer")
        Template.parse("x", "page").render(context)
        assert context.current_template == "outer"


class TestRendering:
    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("{{ true }}/{{ false }}", "true/false"),
            ("[{{ null }}]", "[]"),
            ("{{ 3 }}{{ 2.5 }}", "32.5"),
            ('{{ "a" }}', "a"),
            ("{{ items }}", "[1, two, true]"),
            ("{{ items[1] }}", "two"),
            ("{{ items[-1] }}", "true"),
            ("[{{ items[9] }}]", "[]"),
            ('{{ user["name"] }}', "Ada"),
            ('[{{ user["missing"] }}]', "[]"),
            ("{{ text[0] }}", "h"),
        ],
    )
    def test_values(self, source, expected):
        variables = {"items": [1, "two", True], "user": {"name": "Ada"}, "text": "hi"}
        assert Template.parse(source).render_to_string(variables) == expected

    def test_assignment_writes_nothing(self):
        assert Template.parse("a{{ x = 1 }}b{{ x }}").render_to_string() == "ab1"

    def test_plain_callable(self):
        t = Template.parse("{{ add(1, 2) }}")
        assert t.render_to_string(add=lambda a, b: a + b) == "3"

    def test_callable_error_is_wrapped(self):
        def boom():
            raise ValueError("kaput")

        with pytest.raises(TemplateRuntimeError, match="Error calling 'boom': kaput") as exc_info:
            Template.parse("{{ boom() }}").render_to_string(boom=boom)
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_not_a_function(self):
        with pytest.raises(TemplateRuntimeError, match="'x' is not a function"):
            Template.parse("{{ x() }}").render_to_string(x=1)

    def test_index_non_subscriptable(self):
        with pytest.raises(TemplateRuntimeError, match="'int' object is not subscriptable"):
            Template.parse("{{ n[0] }}").render_to_string(n=5)

    def test_list_index_must_be_integer(self):
        with pytest.raises(TemplateRuntimeError, match="list index must be an integer"):
            Template.parse('{{ items["a"] }}').render_to_string(items=[1])

    def test_undefined_strict(self):
        with pytest.raises(UndefinedError) as exc_info:
            Template.parse("{{ nme }}").render_to_string(name="x")
        assert "Did you mean 'name'?" in str(exc_info.value)
        assert exc_info.value.name == "nme"

    def test_undefined_lenient(self):
        t = Template.parse("[{{ missing }}]", options=TemplateOptions(strict=False))
        assert t.render_to_string() == "[]"


class TestFrontMatter:
    SOURCE = '+++\ntitle = "T"\n"discarded"\n+++\n<h1>{{ title }}</h1>'

    def test_front_matter_not_run_by_render(self):
        t = Template.parse(self.SOURCE, options=FRONT_MATTER)
        with pytest.raises(UndefinedError):
            t.render(TemplateContext())

    def test_evaluate_front_matter(self):
        t = Template.parse(self.SOURCE, options=FRONT_MATTER)
        context = TemplateContext()

        t.evaluate_front_matter(context)
        assert context.output == ""
        assert context.output_depth == 1

        t.render(context)
        assert context.output == "<h1>T</h1>"

    def test_front_matter_property(self):
        t = Template.parse(self.SOURCE, options=FRONT_MATTER)
        assert len(t.front_matter) == 2

    def test_evaluate_without_front_matter(self):
        t = Template.parse("body", options=FRONT_MATTER)
        context = TemplateContext()
        t.evaluate_front_matter(context)
        assert t.front_matter is None
        assert context.output == ""

    def test_front_matter_only(self):
        options = TemplateOptions(parser=ParserOptions(mode=ParsingMode.FRONT_MATTER_ONLY))
        t = Template.parse(self.SOURCE, options=options)
        context = TemplateContext()
        t.evaluate_front_matter(context)
        t.render(context)
        assert context.output == ""
        assert context.get_value("title") == "T"

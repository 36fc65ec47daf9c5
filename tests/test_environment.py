"""Tests for the Environment entry point."""

from __future__ import annotations

import pytest

from scrivo import (
    DictLoader,
    Environment,
    FunctionLoader,
    ParsingMode,
    RecursiveIncludeError,
    TemplateNotFoundError,
    TemplateParseError,
)


class TestRender:
    def test_render_by_name(self, env):
        assert env.render("outer") == "outer[inner]"

    def test_render_string(self):
        assert Environment().render_string("Hello, {{ name }}!", name="World") == "Hello, World!"

    def test_globals(self):
        env = Environment(globals={"site": "Docs"})
        assert env.render_string("{{ site }}") == "Docs"

    def test_variables_override_globals(self):
        env = Environment(globals={"site": "Docs"})
        assert env.render_string("{{ site }}", site="Blog") == "Blog"

    def test_lenient_environment(self):
        assert Environment(strict=False).render_string("[{{ missing }}]") == "[]"

    def test_script_only_environment(self):
        env = Environment(mode=ParsingMode.SCRIPT_ONLY)
        assert env.render_string('x = "a"\nx\n"b"') == "ab"

    def test_render_seeds_trimmed_name(self):
        loader = FunctionLoader(lambda name: '{{ include("loop") }}')
        with pytest.raises(RecursiveIncludeError):
            Environment(loader=loader).render(" loop ")
        assert loader.loads == {" loop ": 1}

    def test_render_does_not_seed_across_parse_modes(self):
        """A front matter page included by name is reparsed in default mode."""
        loader = DictLoader({"page": '{{ include("page") }}'})
        env = Environment(loader=loader, mode=ParsingMode.FRONT_MATTER_AND_CONTENT)
        with pytest.raises(RecursiveIncludeError):
            env.render("page")
        assert loader.loads["page"] == 2

    def test_render_seeds_in_script_only_mode(self):
        loader = DictLoader({"page": 'include("page")'})
        env = Environment(loader=loader, mode=ParsingMode.SCRIPT_ONLY)
        with pytest.raises(RecursiveIncludeError):
            env.render("page")
        assert loader.loads["page"] == 1

    def test_sessions_are_isolated(self, env):
        env.render_string('{{ include("header") }}')
        context = env.new_context()
        assert context.cached_templates == {}
        assert context.pending_includes == set()


class TestGetTemplate:
    def test_get_template(self, env):
        assert env.get_template("inner").filename == "inner"

    def test_not_cached_across_calls(self, env, loader):
        assert env.get_template("inner") is not env.get_template("inner")
        assert loader.loads["inner"] == 2

    def test_no_loader(self):
        with pytest.raises(TemplateNotFoundError, match="no loader configured"):
            Environment().get_template("x")

    def test_missing(self, env):
        with pytest.raises(TemplateNotFoundError):
            env.get_template("missing")

    def test_parse_error(self):
        env = Environment(loader=DictLoader({"bad": "{{ ) }}"}))
        with pytest.raises(TemplateParseError) as exc_info:
            env.get_template("bad")
        assert exc_info.value.template_name == "bad"


class TestFromString:
    def test_from_string(self):
        template = Environment().from_string("{{ 1 }}", name="one")
        assert template.filename == "one"
        assert template.render_to_string() == "1"

    def test_from_string_parse_error(self):
        with pytest.raises(TemplateParseError) as exc_info:
            Environment().from_string("{{ a b }}")
        assert [m.message for m in exc_info.value.messages] == [
            "Unexpected 'b' after statement"
        ]

    def test_options_are_fresh(self):
        env = Environment()
        assert env.options is not env.options


class TestFrontMatterPages:
    def test_front_matter_then_content(self):
        env = Environment(
            loader=DictLoader({"post": '+++\ntitle = "Hi"\n+++\n<h1>{{ title }}</h1>'}),
            mode=ParsingMode.FRONT_MATTER_AND_CONTENT,
        )
        template = env.get_template("post")
        context = env.new_context()
        template.evaluate_front_matter(context)
        template.render(context)
        assert context.output == "<h1>Hi</h1>"


def test_repr():
    assert repr(Environment()) == "<Environment mode=default loader=None>"

"""Pytest configuration and fixtures for scrivo tests."""

import pytest

from scrivo import DictLoader, Environment, Template, TemplateContext, TemplateOptions


@pytest.fixture(autouse=True, scope="session")
def plain_terminal():
    """Keep error messages free of ANSI codes unless a test opts in."""
    with pytest.MonkeyPatch.context() as mp:
        mp.delenv("FORCE_COLOR", raising=False)
        mp.setenv("NO_COLOR", "1")
        yield


@pytest.fixture
def templates():
    """Template sources shared by the include tests."""
    return {
        "header": "<h1>HEAD</h1>",
        "page": '{{ include("header") }}|{{ include("header") }}',
        "show": "{{ arguments }}",
        "pair": "{{ arguments[0] }}-{{ arguments[1] }}",
        "empty": "",
        "loop": '{{ include("loop") }}',
        "a": '{{ include("b") }}',
        "b": '{{ include("a") }}',
        "outer": 'outer[{{ include("inner") }}]',
        "inner": "inner",
    }


@pytest.fixture
def loader(templates):
    return DictLoader(templates)


@pytest.fixture
def env(loader):
    """Environment whose loader serves ``templates``."""
    return Environment(loader=loader)


@pytest.fixture
def context(loader):
    """A fresh rendering session backed by ``loader``."""
    return TemplateContext(options=TemplateOptions(loader=loader))


@pytest.fixture
def render_in():
    """Render a source as the top-level template of an existing session.

    Returns only what that render wrote to the root output frame.
    """

    def _render(context: TemplateContext, source: str) -> str:
        before = len(context.output)
        Template.parse(source).render(context)
        return context.output[before:]

    return _render

"""Tests for parsing options and the nested mode policy."""

from __future__ import annotations

import pytest

from scrivo import DictLoader, ParserOptions, ParsingMode, TemplateOptions
from scrivo.options import include_options, nested_parsing_mode


@pytest.mark.parametrize(
    ("mode", "expected"),
    [
        (ParsingMode.SCRIPT_ONLY, ParsingMode.SCRIPT_ONLY),
        (ParsingMode.DEFAULT, ParsingMode.DEFAULT),
        (ParsingMode.FRONT_MATTER_AND_CONTENT, ParsingMode.DEFAULT),
        (ParsingMode.FRONT_MATTER_ONLY, ParsingMode.DEFAULT),
    ],
)
def test_nested_parsing_mode(mode, expected):
    assert nested_parsing_mode(mode) is expected


@pytest.mark.parametrize("mode", list(ParsingMode))
def test_include_options_never_mutates_caller(mode):
    options = TemplateOptions(parser=ParserOptions(mode=mode))
    nested = include_options(options)
    assert options.parser.mode is mode
    assert nested.parser.mode is nested_parsing_mode(mode)


class TestTemplateOptions:
    def test_defaults(self):
        options = TemplateOptions()
        assert options.parser.mode is ParsingMode.DEFAULT
        assert options.loader is None
        assert options.strict is True

    def test_clone_is_independent(self):
        options = TemplateOptions(strict=False)
        copy = options.clone()
        copy.parser.mode = ParsingMode.SCRIPT_ONLY
        copy.strict = True
        assert options.parser.mode is ParsingMode.DEFAULT
        assert options.strict is False

    def test_clone_shares_loader(self):
        loader = DictLoader({})
        options = TemplateOptions(loader=loader)
        assert options.clone().loader is loader
        assert include_options(options).loader is loader

    def test_include_options_keeps_strictness(self):
        assert include_options(TemplateOptions(strict=False)).strict is False

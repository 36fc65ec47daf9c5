"""Parsing and rendering configuration.

``TemplateOptions`` is the per-session configuration a ``TemplateContext``
renders with. Included templates are parsed with a derived copy produced by
``include_options()``, which never mutates the caller's options.

Nested mode policy:
    ================================  =================
    Caller mode                       Nested parse mode
    ================================  =================
    SCRIPT_ONLY                       SCRIPT_ONLY
    DEFAULT                           DEFAULT
    FRONT_MATTER_AND_CONTENT          DEFAULT
    FRONT_MATTER_ONLY                 DEFAULT
    ================================  =================

A page with front matter therefore never forces front-matter parsing onto
the fragments it includes, while script-only documents stay script-only all
the way down.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from scrivo.environment.loaders import TemplateLoader


class ParsingMode(Enum):
    """How template source is split into text and code."""

    DEFAULT = "default"
    SCRIPT_ONLY = "script_only"
    FRONT_MATTER_AND_CONTENT = "front_matter_and_content"
    FRONT_MATTER_ONLY = "front_matter_only"


NESTED_MODE_POLICY: dict[ParsingMode, ParsingMode] = {
    ParsingMode.SCRIPT_ONLY: ParsingMode.SCRIPT_ONLY,
}


def nested_parsing_mode(mode: ParsingMode) -> ParsingMode:
    """Return the mode an included template is parsed with."""
    return NESTED_MODE_POLICY.get(mode, ParsingMode.DEFAULT)


@dataclass(slots=True)
class ParserOptions:
    mode: ParsingMode = ParsingMode.DEFAULT


@dataclass(slots=True)
class TemplateOptions:
    """Configuration shared by a rendering session.

    Attributes:
        parser: Parser settings (mode)
        loader: Resolves include names to source; None disables include
        strict: Raise UndefinedError for unbound names (otherwise null)
    """

    parser: ParserOptions = field(default_factory=ParserOptions)
    loader: TemplateLoader | None = None
    strict: bool = True

    def clone(self) -> TemplateOptions:
        """Independent copy; the loader is shared by reference."""
        return dataclasses.replace(self, parser=dataclasses.replace(self.parser))


def include_options(options: TemplateOptions) -> TemplateOptions:
    """Derive the options an included template is parsed with."""
    nested = options.clone()
    nested.parser.mode = nested_parsing_mode(options.parser.mode)
    return nested

"""scrivo — a small text-templating engine with session-scoped includes.

Quickstart:
    >>> from scrivo import Environment
    >>> Environment().render_string("Hello, {{ name }}!", name="World")
    'Hello, World!'

Includes:
    >>> from scrivo import DictLoader, Environment
    >>> env = Environment(loader=DictLoader({
    ...     "header": "<h1>{{ arguments[0] }}</h1>",
    ...     "page": "{{ include('header', title) }}<p>Body</p>",
    ... }))
    >>> env.render("page", title="Home")
    '<h1>Home</h1><p>Body</p>'

Architecture:
Template Source → Lexer → Parser → AST → Compiler → closures → render(context)

Sessions:
Each top-level render runs in its own TemplateContext. The context owns the
state an include depends on, none of it shared between sessions:

- **Template Cache**: each name is loaded and parsed at most once
- **Pending-Include Guard**: a name cannot be included while it is already
  rendering, directly (A → A) or through a chain (A → B → A)
- **Output Capture Stack**: an include renders into its own frame and
  returns the text as a value
- **arguments**: an include's extra arguments, bound for the included
  template

Parsing Modes:
- ``DEFAULT``: text with ``{{ ... }}`` code blocks
- ``SCRIPT_ONLY``: the whole source is code
- ``FRONT_MATTER_AND_CONTENT``: ``+++``-delimited code header, then text
- ``FRONT_MATTER_ONLY``: the header alone

Included templates parse in ``DEFAULT`` mode unless the session is
``SCRIPT_ONLY``.

"""

from scrivo._types import CustomFunction, SourceSpan, Token, TokenType
from scrivo.context import IncludeCapture, ScriptObject, TemplateContext
from scrivo.environment import (
    BaseLoader,
    ChoiceLoader,
    DictLoader,
    EmptyTemplateNameError,
    ErrorCode,
    FileSystemLoader,
    FunctionLoader,
    InvalidArgumentTypeError,
    LoaderReturnedNullError,
    LogMessage,
    LogMessageType,
    MissingArgumentError,
    NoLoaderConfiguredError,
    RecursiveIncludeError,
    TemplateError,
    TemplateLoader,
    TemplateLoadError,
    TemplateNotFoundError,
    TemplateParseError,
    TemplateRuntimeError,
    UndefinedError,
)
from scrivo.environment.core import Environment
from scrivo.functions import IncludeFunction, register_builtins
from scrivo.options import (
    ParserOptions,
    ParsingMode,
    TemplateOptions,
    include_options,
    nested_parsing_mode,
)
from scrivo.template import Template

__version__ = "0.1.0"

__all__ = [
    "BaseLoader",
    "ChoiceLoader",
    "CustomFunction",
    "DictLoader",
    "EmptyTemplateNameError",
    "Environment",
    "ErrorCode",
    "FileSystemLoader",
    "FunctionLoader",
    "IncludeCapture",
    "IncludeFunction",
    "InvalidArgumentTypeError",
    "LoaderReturnedNullError",
    "LogMessage",
    "LogMessageType",
    "MissingArgumentError",
    "NoLoaderConfiguredError",
    "ParserOptions",
    "ParsingMode",
    "RecursiveIncludeError",
    "ScriptObject",
    "SourceSpan",
    "Template",
    "TemplateContext",
    "TemplateError",
    "TemplateLoadError",
    "TemplateLoader",
    "TemplateNotFoundError",
    "TemplateOptions",
    "TemplateParseError",
    "TemplateRuntimeError",
    "Token",
    "TokenType",
    "UndefinedError",
    "__version__",
    "include_options",
    "nested_parsing_mode",
    "register_builtins",
]

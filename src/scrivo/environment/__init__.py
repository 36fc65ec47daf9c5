"""Environment, loaders and exceptions.

``Environment`` is imported lazily: the runtime modules import the
exceptions from this package, and ``Environment`` imports the runtime.
"""

from scrivo.environment.exceptions import (
    EmptyTemplateNameError,
    ErrorCode,
    InvalidArgumentTypeError,
    LoaderReturnedNullError,
    LogMessage,
    LogMessageType,
    MissingArgumentError,
    NoLoaderConfiguredError,
    RecursiveIncludeError,
    TemplateError,
    TemplateLoadError,
    TemplateNotFoundError,
    TemplateParseError,
    TemplateRuntimeError,
    UndefinedError,
)
from scrivo.environment.loaders import (
    BaseLoader,
    ChoiceLoader,
    DictLoader,
    FileSystemLoader,
    FunctionLoader,
    TemplateLoader,
)

__all__ = [
    "BaseLoader",
    "ChoiceLoader",
    "DictLoader",
    "EmptyTemplateNameError",
    "Environment",
    "ErrorCode",
    "FileSystemLoader",
    "FunctionLoader",
    "InvalidArgumentTypeError",
    "LoaderReturnedNullError",
    "LogMessage",
    "LogMessageType",
    "MissingArgumentError",
    "NoLoaderConfiguredError",
    "RecursiveIncludeError",
    "TemplateError",
    "TemplateLoadError",
    "TemplateLoader",
    "TemplateNotFoundError",
    "TemplateParseError",
    "TemplateRuntimeError",
    "UndefinedError",
]


def __getattr__(name: str) -> object:
    if name == "Environment":
        from scrivo.environment.core import Environment

        globals()["Environment"] = Environment
        return Environment
    raise AttributeError(f"module 'scrivo.environment' has no attribute {name!r}")

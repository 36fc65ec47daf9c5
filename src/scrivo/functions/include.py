"""The ``include`` builtin: render another template and return its output.

Usage in templates:
    {{ include("header", page_title) }}
    {{ body = include("article") }}

The first argument names the template; the rest are forwarded to it as
``arguments`` (``arguments[0]`` is the second argument of the call).

The name must be text or a scalar: strings are used as is, numbers,
booleans and path-like values are converted. Lists, mappings, callables
and other objects are rejected with InvalidArgumentTypeError rather than
stringified, and ``null`` counts as an empty name.

Per session, each name is loaded and parsed at most once (Template Cache)
and may not be included while it is already rendering (Pending-Include
Guard), directly or through any chain of other includes. The included
template writes into its own output frame; that text is returned as the
call's value rather than written to the includer's output.
"""

from __future__ import annotations

import logging
from typing import Any

from scrivo._types import SourceSpan
from scrivo.context import ARGUMENTS, ScriptObject, TemplateContext
from scrivo.environment.exceptions import (
    EmptyTemplateNameError,
    InvalidArgumentTypeError,
    LoaderReturnedNullError,
    MissingArgumentError,
    NoLoaderConfiguredError,
    TemplateLoadError,
    TemplateParseError,
)
from scrivo.options import include_options
from scrivo.template import Template
from scrivo.utils.values import to_string

logger = logging.getLogger(__name__)


class IncludeFunction:
    """Callable bound to ``include`` in the builtins of every session.

    Stateless: all per-session state lives on the TemplateContext, so a
    single instance is safely shared by every session.
    """

    __slots__ = ()

    def evaluate(
        self,
        context: TemplateContext,
        call_site: SourceSpan,
        arguments: list[Any],
    ) -> str:
        """Include the template named by ``arguments[0]``.

        Returns:
            The included template's output.

        Raises:
            MissingArgumentError: No arguments
            InvalidArgumentTypeError: Name not convertible to text
            EmptyTemplateNameError: Name blank after trimming
            NoLoaderConfiguredError: Cache miss without a loader
            TemplateLoadError: The loader raised
            LoaderReturnedNullError: The loader returned no text
            TemplateParseError: The source has parse errors
            RecursiveIncludeError: The name is already being included
        """
        stack = context.template_stack
        if not arguments:
            raise MissingArgumentError(
                "Expecting at least the name of the template to include for the <include> function",
                span=call_site,
                template_stack=stack,
            )

        try:
            template_name = to_string(arguments[0])
        except TypeError as e:
            raise InvalidArgumentTypeError(
                "Unexpected value while converting the first argument of the <include> "
                f"function; expecting a string: {e}",
                span=call_site,
                template_stack=stack,
            ) from e

        if template_name is None or not (template_name := template_name.strip()):
            raise EmptyTemplateNameError(
                "Include template name cannot be null or empty",
                span=call_site,
                template_stack=stack,
            )

        context.set_value(ARGUMENTS, list(arguments[1:]), readonly=True, span=call_site)

        template = self._get_template(context, call_site, template_name)

        with context.include_scope(template_name, call_site) as capture:
            template.render(context)
        return capture.output

    def _get_template(
        self,
        context: TemplateContext,
        call_site: SourceSpan,
        template_name: str,
    ) -> Template:
        """Return the session's Template for ``template_name``, loading it on a miss."""
        template = context.cached_templates.get(template_name)
        if template is not None:
            logger.debug("include cache hit: %s", template_name)
            return template

        stack = context.template_stack
        loader = context.options.loader
        if loader is None:
            raise NoLoaderConfiguredError(
                f"Unable to include <{template_name}>. No loader configured in "
                "TemplateContext.options.loader",
                span=call_site,
                template_stack=stack,
            )

        try:
            source, path = loader.load(context, call_site, template_name)
        except Exception as e:
            raise TemplateLoadError(
                template_name, e, span=call_site, template_stack=stack
            ) from e

        if source is None:
            raise LoaderReturnedNullError(
                f"The result of including <{template_name}> cannot be null",
                span=call_site,
                template_stack=stack,
            )

        path = path or template_name
        logger.debug("include cache miss: %s loaded from %s", template_name, path)

        template = Template.parse(source, path, include_options(context.options))
        if template.has_errors:
            raise TemplateParseError(
                f"Error while parsing template <{template_name}> from [{path}]",
                template.messages,
                template_name=template_name,
                filename=path,
                span=call_site,
                template_stack=stack,
            )

        context.cached_templates[template_name] = template
        return template


def register(builtins: ScriptObject) -> None:
    """Bind ``include`` read-only in ``builtins``.

    Raises:
        TypeError: If ``builtins`` is None.
    """
    if builtins is None:
        raise TypeError("builtins cannot be None")
    builtins.set_value("include", IncludeFunction(), readonly=True)

"""Environment — configuration holder and rendering entry point.

An Environment owns the loader, the parsing mode and the global variables.
It holds no per-render state: every ``render()`` opens a new session (a
TemplateContext) with its own Template Cache, Pending-Include Guard and
Output Capture Stack, so sessions can run concurrently.

Example:
    >>> env = Environment(loader=DictLoader({
    ...     "header": "<h1>{{ arguments[0] }}</h1>",
    ...     "page": "{{ include('header', title) }}<p>{{ body }}</p>",
    ... }))
    >>> env.render("page", title="Hello", body="World")
    '<h1>Hello</h1><p>World</p>'
"""

from __future__ import annotations

from typing import Any

from scrivo.context import TemplateContext
from scrivo.environment.exceptions import TemplateNotFoundError, TemplateParseError
from scrivo.environment.loaders import TemplateLoader
from scrivo.options import ParserOptions, ParsingMode, TemplateOptions, nested_parsing_mode
from scrivo.template import Template


class Environment:
    """Central configuration for scrivo templates.

    Args:
        loader: Resolves names for ``get_template()``/``render()`` and includes
        mode: Parsing mode for top-level templates
        strict: Raise UndefinedError for unbound names
        globals: Variables visible to every render
    """

    def __init__(
        self,
        loader: TemplateLoader | None = None,
        *,
        mode: ParsingMode = ParsingMode.DEFAULT,
        strict: bool = True,
        globals: dict[str, Any] | None = None,
    ):
        self.loader = loader
        self.mode = mode
        self.strict = strict
        self.globals: dict[str, Any] = dict(globals or {})

    @property
    def options(self) -> TemplateOptions:
        """Fresh options for one session."""
        return TemplateOptions(
            parser=ParserOptions(mode=self.mode),
            loader=self.loader,
            strict=self.strict,
        )

    def from_string(self, source: str, name: str | None = None) -> Template:
        """Parse ``source`` into a Template.

        Raises:
            TemplateParseError: If the source has parse errors.
        """
        return self._checked(Template.parse(source, name, self.options), name)

    def get_template(self, name: str) -> Template:
        """Load and parse the template called ``name``.

        Not cached across calls; caching is per session.

        Raises:
            TemplateNotFoundError: If there is no loader or it has no source
            TemplateParseError: If the source has parse errors
        """
        if self.loader is None:
            raise TemplateNotFoundError(
                f"Template '{name}' not found: no loader configured for this Environment"
            )
        source, path = self.loader.load(None, None, name)
        if source is None:
            raise TemplateNotFoundError(f"Template '{name}' not found")
        return self._checked(Template.parse(source, path or name, self.options), name)

    def new_context(self, **variables: Any) -> TemplateContext:
        """Open a session with the globals and ``variables`` bound."""
        context = TemplateContext(options=self.options)
        for key, value in {**self.globals, **variables}.items():
            context.set_value(key, value)
        return context

    def render(self, name: str, **variables: Any) -> str:
        """Render the template called ``name`` in a new session.

        When included templates parse in the same mode as this one, the
        template is seeded into the session's cache under the trimmed
        ``name``, so it is not loaded a second time if a nested template
        includes it by that name.
        """
        template = self.get_template(name)
        context = self.new_context(**variables)
        if nested_parsing_mode(self.mode) is self.mode:
            context.cached_templates[name.strip()] = template
        context.current_template = name
        template.render(context)
        return context.output

    def render_string(self, source: str, **variables: Any) -> str:
        """Render template ``source`` in a new session."""
        template = self.from_string(source)
        context = self.new_context(**variables)
        template.render(context)
        return context.output

    @staticmethod
    def _checked(template: Template, name: str | None) -> Template:
        if template.has_errors:
            raise TemplateParseError(
                f"Error while parsing template <{name or template.filename}>",
                template.messages,
                template_name=name,
                filename=template.filename,
            )
        return template

    def __repr__(self) -> str:
        return f"<Environment mode={self.mode.value} loader={self.loader!r}>"

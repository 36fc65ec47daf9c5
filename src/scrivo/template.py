"""scrivo Template — one parsed and compiled template source.

A Template is built once from source by ``Template.parse()`` and is
immutable afterwards. Parsing never raises on bad template syntax: the
problems are collected in ``messages`` and ``has_errors`` is set, and such
a template refuses to render.

Architecture:
    ```
    Template
    ├── source, filename       # Immutable input and canonical identifier
    ├── page: Page             # Immutable AST
    ├── messages               # Parser diagnostics
    ├── options                # Options the source was parsed with
    └── _render_func           # Compiled closures (None when has_errors)
    ```

Thread-Safety:
- Templates are immutable after construction
- ``render()`` keeps all state in the TemplateContext it is given
- One Template may be rendered by many sessions at once

"""

from __future__ import annotations

from typing import Any

from scrivo.compiler import Render, compile_block, compile_page
from scrivo.context import TemplateContext
from scrivo.environment.exceptions import LogMessage, LogMessageType, TemplateParseError
from scrivo.lexer import tokenize
from scrivo.nodes import Page
from scrivo.options import TemplateOptions
from scrivo.parser import Parser


class Template:
    """Compiled template ready for rendering against a TemplateContext.

    Attributes:
        source: Template source text
        filename: Canonical identifier (file path or synthesized name)
        page: Parsed AST
        front_matter: Front matter statements, or None
        messages: Parser diagnostics
        has_errors: True if any diagnostic is an error
        options: Options the template was parsed with

    Example:
        >>> t = Template.parse("Hello, {{ name }}!")
        >>> t.render_to_string(name="World")
        'Hello, World!'
    """

    __slots__ = (
        "_filename",
        "_front_matter_func",
        "_messages",
        "_options",
        "_page",
        "_render_func",
        "_source",
    )

    def __init__(
        self,
        source: str,
        filename: str,
        page: Page,
        messages: list[LogMessage],
        options: TemplateOptions,
    ):
        self._source = source
        self._filename = filename
        self._page = page
        self._messages = tuple(messages)
        self._options = options

        self._render_func: Render | None = None
        self._front_matter_func: Render | None = None
        if not self.has_errors:
            self._render_func = compile_page(page)
            if page.front_matter is not None:
                self._front_matter_func = compile_block(page.front_matter)

    @classmethod
    def parse(
        cls,
        source: str,
        filename: str | None = None,
        options: TemplateOptions | None = None,
    ) -> Template:
        """Parse and compile ``source``.

        Args:
            source: Template source text
            filename: Canonical identifier used in diagnostics
            options: Parsing options; the mode selects text/code splitting

        Returns:
            A Template; check ``has_errors`` before rendering.
        """
        options = options or TemplateOptions()
        filename = filename or "<string>"
        tokens = tokenize(source, filename, options.parser.mode)
        page, messages = Parser(tokens).parse()
        return cls(source, filename, page, messages, options)

    @property
    def source(self) -> str:
        return self._source

    @property
    def filename(self) -> str:
        return self._filename

    @property
    def page(self) -> Page:
        return self._page

    @property
    def front_matter(self):
        return self._page.front_matter

    @property
    def messages(self) -> tuple[LogMessage, ...]:
        return self._messages

    @property
    def has_errors(self) -> bool:
        return any(m.type is LogMessageType.ERROR for m in self._messages)

    @property
    def options(self) -> TemplateOptions:
        return self._options

    def _check_renderable(self) -> None:
        if self.has_errors:
            raise TemplateParseError(
                f"Cannot render template [{self._filename}] with parse errors",
                self._messages,
                filename=self._filename,
            )

    def render(self, context: TemplateContext) -> None:
        """Render into the context's active output frame.

        Raises:
            TemplateParseError: If the template has parse errors.
        """
        self._check_renderable()
        if context.current_template is None:
            context.current_template = self._filename
        self._render_func(context)

    def evaluate_front_matter(self, context: TemplateContext) -> None:
        """Run the front matter so its assignments land in ``context``.

        Anything the front matter writes is discarded. No-op when the
        template has no front matter.
        """
        self._check_renderable()
        if self._front_matter_func is None:
            return
        context.push_output()
        try:
            self._front_matter_func(context)
        finally:
            context.pop_output()

    def render_to_string(self, *args: Any, **kwargs: Any) -> str:
        """Render in a fresh session and return the output.

        Args:
            *args: Single dict of variables
            **kwargs: Variables as keyword arguments
        """
        variables: dict[str, Any] = {}
        if args:
            if len(args) == 1 and isinstance(args[0], dict):
                variables.update(args[0])
            else:
                raise TypeError(
                    f"render_to_string() takes at most 1 positional argument (a dict), "
                    f"got {len(args)}"
                )
        variables.update(kwargs)

        context = TemplateContext(options=self._options.clone())
        for name, value in variables.items():
            context.set_value(name, value)
        self.render(context)
        return context.output

    def __repr__(self) -> str:
        return f"<Template {self._filename}>"

"""Template loaders.

A loader resolves a template name to its source text and, where it has
one, a canonical path. The include function calls::

    loader.load(context, call_site, template_name) -> (source | None, path | None)

``context`` is the rendering session (None for top-level loads made by the
Environment) and ``call_site`` the span of the include call, so custom
loaders can resolve names relative to the including template or report the
location of a failure.

Returning ``None`` as the source makes the include fail with
LoaderReturnedNullError. Raising (typically TemplateNotFoundError) makes it
fail with TemplateLoadError wrapping the original exception.

Built-in Loaders:
- `DictLoader`: In-memory mapping (testing/embedded)
- `FileSystemLoader`: One or more directories
- `ChoiceLoader`: First loader that has the name wins
- `FunctionLoader`: Wrap a callable

Custom Loaders:
Implement ``load()`` directly, or subclass ``BaseLoader`` and implement
``get_source(name)``:
    ```python
    class DatabaseLoader(BaseLoader):
        def get_source(self, name: str) -> tuple[str | None, str | None]:
            row = db.query("SELECT source FROM templates WHERE name = ?", name)
            if not row:
                raise TemplateNotFoundError(f"Template '{name}' not found")
            return row.source, f"db://{name}"
    ```

Load Counting:
Every BaseLoader counts ``load()`` calls per name in ``loads``. Within one
session each name is loaded at most once, so the counts show how many
sessions needed each template.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from scrivo._types import SourceSpan
from scrivo.environment.exceptions import TemplateNotFoundError

if TYPE_CHECKING:
    from scrivo.context import TemplateContext


@runtime_checkable
class TemplateLoader(Protocol):
    def load(
        self,
        context: TemplateContext | None,
        call_site: SourceSpan | None,
        template_name: str,
    ) -> tuple[str | None, str | None]: ...


class BaseLoader:
    """Loader built on ``get_source(name)`` with per-name load counting."""

    def __init__(self) -> None:
        self.loads: Counter[str] = Counter()

    def load(
        self,
        context: TemplateContext | None,
        call_site: SourceSpan | None,
        template_name: str,
    ) -> tuple[str | None, str | None]:
        self.loads[template_name] += 1
        return self.get_source(template_name)

    def get_source(self, name: str) -> tuple[str | None, str | None]:
        raise NotImplementedError

    def list_templates(self) -> list[str]:
        return []


class DictLoader(BaseLoader):
    """Load templates from an in-memory dictionary.

    Returns ``None`` as the path, so includes use the template name as the
    canonical identifier.

    Example:
            >>> loader = DictLoader({
            ...     "header": "<h1>{{ arguments[0] }}</h1>",
            ...     "page": "{{ include('header', 'Home') }}<p>Body</p>",
            ... })
            >>> Environment(loader=loader).render("page")
            '<h1>Home</h1><p>Body</p>'

    Raises:
        TemplateNotFoundError: If the name is not in the mapping
    """

    def __init__(self, mapping: dict[str, str]):
        super().__init__()
        self._mapping = mapping

    def get_source(self, name: str) -> tuple[str, None]:
        if name not in self._mapping:
            from difflib import get_close_matches

            available = sorted(self._mapping.keys())
            msg = f"Template '{name}' not found"
            matches = get_close_matches(name, available, n=1, cutoff=0.6)
            if matches:
                msg += f". Did you mean '{matches[0]}'?"
            elif available:
                msg += f". Available: {', '.join(available[:10])}"
                if len(available) > 10:
                    msg += f" ... ({len(available)} total)"
            raise TemplateNotFoundError(msg)
        return self._mapping[name], None

    def list_templates(self) -> list[str]:
        return sorted(self._mapping.keys())


class FileSystemLoader(BaseLoader):
    """Load templates from filesystem directories.

    Directories are searched in order; the first file wins. Names that
    resolve outside a search directory are treated as not found.

    Example:
            >>> loader = FileSystemLoader(["site/", "shared/"])
            >>> loader.get_source("partials/nav.html")
            ('<nav>...</nav>', 'site/partials/nav.html')

    Raises:
        TemplateNotFoundError: If no directory has the template
    """

    def __init__(
        self,
        paths: str | Path | list[str | Path],
        encoding: str = "utf-8",
    ):
        super().__init__()
        if isinstance(paths, (str, Path)):
            paths = [paths]
        self._paths = [Path(p) for p in paths]
        self._encoding = encoding

    def get_source(self, name: str) -> tuple[str, str]:
        for base in self._paths:
            path = base / name
            try:
                path.resolve().relative_to(base.resolve())
            except ValueError:
                continue
            if path.is_file():
                return path.read_text(self._encoding), str(path)

        raise TemplateNotFoundError(
            f"Template '{name}' not found in: {', '.join(str(p) for p in self._paths)}"
        )

    def list_templates(self) -> list[str]:
        templates: set[str] = set()
        for base in self._paths:
            if base.is_dir():
                for path in base.rglob("*"):
                    if path.is_file():
                        templates.add(path.relative_to(base).as_posix())
        return sorted(templates)


class ChoiceLoader(BaseLoader):
    """Try several loaders in order and return the first match.

    Useful for theme fallback: a custom theme overrides some templates and
    the default theme provides the rest.

    Children are consulted through their own ``load()``, so each keeps its
    ``loads`` count and receives the context and call site. Any object that
    implements the TemplateLoader protocol can be a child.

    Raises:
        TemplateNotFoundError: If no loader has the template
    """

    def __init__(self, loaders: list[TemplateLoader]):
        super().__init__()
        self._loaders = loaders

    def load(
        self,
        context: TemplateContext | None,
        call_site: SourceSpan | None,
        template_name: str,
    ) -> tuple[str | None, str | None]:
        self.loads[template_name] += 1
        return self._resolve(context, call_site, template_name)

    def get_source(self, name: str) -> tuple[str | None, str | None]:
        return self._resolve(None, None, name)

    def _resolve(
        self,
        context: TemplateContext | None,
        call_site: SourceSpan | None,
        name: str,
    ) -> tuple[str | None, str | None]:
        """Ask each child through ``load()``; a ``None`` source falls through.

        If no child has text but at least one answered ``None``, the last
        such answer is returned so the include reports a null result.
        """
        empty: tuple[str | None, str | None] | None = None
        for loader in self._loaders:
            try:
                source, path = loader.load(context, call_site, name)
            except TemplateNotFoundError:
                continue
            if source is not None:
                return source, path
            empty = (source, path)
        if empty is not None:
            return empty
        raise TemplateNotFoundError(
            f"Template '{name}' not found in any of {len(self._loaders)} loaders"
        )

    def list_templates(self) -> list[str]:
        templates: set[str] = set()
        for loader in self._loaders:
            list_templates = getattr(loader, "list_templates", None)
            if list_templates is not None:
                templates.update(list_templates())
        return sorted(templates)


class FunctionLoader(BaseLoader):
    """Wrap a callable as a loader.

    The function receives the template name and returns:
        - ``str``: the source (path is ``None``)
        - ``tuple[str, str | None]``: ``(source, path)``
        - ``None``: no source; an include fails with LoaderReturnedNullError

    Example:
            >>> def load(name):
            ...     return cms.get(name), f"cms://{name}"
            >>> env = Environment(loader=FunctionLoader(load))
    """

    def __init__(
        self,
        load_func: Callable[[str], str | tuple[str, str | None] | None],
    ):
        super().__init__()
        self._load_func = load_func

    def get_source(self, name: str) -> tuple[str | None, str | None]:
        result = self._load_func(name)
        if result is None or isinstance(result, str):
            return result, None
        return result

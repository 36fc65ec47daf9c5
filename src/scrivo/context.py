"""TemplateContext — the state of one rendering session.

A session is the lifetime of one top-level render. Everything an include
needs to stay correct across nested calls lives here, owned by the session
and never shared with another one:

- **Template Cache** (``cached_templates``): template name → parsed
  Template. Insert-only; an entry is never replaced or evicted.
- **Pending-Include Guard** (``pending_includes``): names whose render is
  in progress. A name is a member for exactly the dynamic extent of its own
  render, nested includes included.
- **Output Capture Stack**: output buffers. Writes go to the top buffer;
  an include pushes a fresh one and pops it to obtain its output as a value.
- **Variable scopes**: a global scope plus a stack of local scopes, with
  the builtin functions (``include``) behind them.

``include_scope()`` ties the guard and the output stack together so that
both are released on every exit path, including errors.

Thread-Safety:
    Not thread-safe, and not meant to be: nested includes run synchronously
    within one session. Render concurrent sessions with separate contexts.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from scrivo._types import SourceSpan
from scrivo.environment.exceptions import (
    RecursiveIncludeError,
    TemplateRuntimeError,
    UndefinedError,
)
from scrivo.options import TemplateOptions

if TYPE_CHECKING:
    from scrivo.template import Template

ARGUMENTS = "arguments"


class ScriptObject:
    """A variable scope: name → value with per-name read-only flags."""

    __slots__ = ("_readonly", "_values")

    def __init__(self, values: dict[str, Any] | None = None):
        self._values: dict[str, Any] = dict(values or {})
        self._readonly: set[str] = set()

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __len__(self) -> int:
        return len(self._values)

    def keys(self):
        return self._values.keys()

    def is_readonly(self, name: str) -> bool:
        return name in self._readonly

    def set_value(self, name: str, value: Any, readonly: bool = False) -> None:
        """Bind ``name``.

        A read-only binding can only be replaced by another read-only write.

        Raises:
            TemplateRuntimeError: If ``name`` is read-only and ``readonly``
                is False.
        """
        if name in self._readonly and not readonly:
            raise TemplateRuntimeError(f"Cannot set the readonly variable '{name}'")
        self._values[name] = value
        if readonly:
            self._readonly.add(name)
        else:
            self._readonly.discard(name)


@dataclass
class IncludeCapture:
    """Handle yielded by ``TemplateContext.include_scope``.

    ``output`` is filled in when the scope exits, whether or not the
    included template rendered successfully.
    """

    template_name: str
    output: str = ""


@dataclass
class TemplateContext:
    """Per-session rendering state.

    Attributes:
        options: Parser mode, loader and strictness for this session
        builtins: Read-only functions visible to every template
        cached_templates: Template Cache (name → Template)
        pending_includes: Pending-Include Guard (names being rendered)
        tags: Side-channel storage for host extensions, keyed by any object
        template_stack: (template, line) of each include call in progress,
            outermost first; used for error traces
        current_template: Name of the template currently rendering
    """

    options: TemplateOptions = field(default_factory=TemplateOptions)
    builtins: ScriptObject = field(default_factory=ScriptObject)
    cached_templates: dict[str, Template] = field(default_factory=dict)
    pending_includes: set[str] = field(default_factory=set)
    tags: dict[object, object] = field(default_factory=dict)
    template_stack: list[tuple[str, int]] = field(default_factory=list)
    current_template: str | None = None

    _scopes: list[ScriptObject] = field(default_factory=lambda: [ScriptObject()])
    _outputs: list[list[str]] = field(default_factory=lambda: [[]])

    def __post_init__(self) -> None:
        if not len(self.builtins):
            from scrivo.functions import register_builtins

            register_builtins(self.builtins)

    # ------------------------------------------------------------------
    # Variables
    # ------------------------------------------------------------------

    @property
    def global_scope(self) -> ScriptObject:
        return self._scopes[0]

    @property
    def current_scope(self) -> ScriptObject:
        return self._scopes[-1]

    def push_scope(self) -> ScriptObject:
        scope = ScriptObject()
        self._scopes.append(scope)
        return scope

    def pop_scope(self) -> ScriptObject:
        if len(self._scopes) == 1:
            raise TemplateRuntimeError("Cannot pop the global scope")
        return self._scopes.pop()

    def has_value(self, name: str) -> bool:
        return any(name in scope for scope in self._scopes) or name in self.builtins

    def get_value(self, name: str, default: Any = None) -> Any:
        """Resolve ``name`` innermost scope first, then builtins."""
        for scope in reversed(self._scopes):
            if name in scope:
                return scope[name]
        if name in self.builtins:
            return self.builtins[name]
        return default

    def lookup(self, name: str, span: SourceSpan | None = None) -> Any:
        """Resolve ``name`` as a template expression does.

        Raises:
            UndefinedError: If ``name`` is unbound and the session is strict.
        """
        if self.has_value(name):
            return self.get_value(name)
        if not self.options.strict:
            return None
        available: set[str] = set(self.builtins.keys())
        for scope in self._scopes:
            available.update(scope.keys())
        raise UndefinedError(
            name,
            available_names=available,
            span=span,
            template_stack=self.template_stack,
        )

    def set_value(
        self,
        name: str,
        value: Any,
        readonly: bool = False,
        span: SourceSpan | None = None,
    ) -> None:
        """Bind ``name`` in the innermost scope.

        Raises:
            TemplateRuntimeError: If ``name`` is a builtin, or read-only in
                the innermost scope and ``readonly`` is False.
        """
        scope = self.current_scope
        if self.builtins.is_readonly(name) or (scope.is_readonly(name) and not readonly):
            raise TemplateRuntimeError(
                f"Cannot set the readonly variable '{name}'",
                span=span,
                template_stack=self.template_stack,
            )
        scope.set_value(name, value, readonly)

    # ------------------------------------------------------------------
    # Output capture stack
    # ------------------------------------------------------------------

    def write(self, text: str) -> None:
        if text:
            self._outputs[-1].append(text)

    @property
    def output(self) -> str:
        """Text accumulated in the active output frame."""
        return "".join(self._outputs[-1])

    @property
    def output_depth(self) -> int:
        return len(self._outputs)

    def push_output(self) -> None:
        self._outputs.append([])

    def pop_output(self) -> str:
        """Remove the active frame and return its text.

        Raises:
            TemplateRuntimeError: If only the root frame remains.
        """
        if len(self._outputs) == 1:
            raise TemplateRuntimeError("Unexpected pop of the root output frame")
        return "".join(self._outputs.pop())

    # ------------------------------------------------------------------
    # Side-channel tags
    # ------------------------------------------------------------------

    def get_tag(self, key: object, default: object = None) -> object:
        return self.tags.get(key, default)

    def set_tag(self, key: object, value: object) -> None:
        self.tags[key] = value

    # ------------------------------------------------------------------
    # Include scope
    # ------------------------------------------------------------------

    @contextmanager
    def include_scope(
        self,
        template_name: str,
        call_site: SourceSpan | None = None,
    ) -> Iterator[IncludeCapture]:
        """Hold a guard entry and an output frame for one include.

        On entry: rejects ``template_name`` if it is already pending, then
        marks it pending, pushes an output frame and records the call in
        ``template_stack``. On exit, by any path: pops the frame into the
        yielded capture's ``output``, unmarks the name and restores the
        stack.

        Raises:
            RecursiveIncludeError: If ``template_name`` is already pending.
        """
        previous = self.current_template
        caller = previous or (call_site.filename if call_site else "<string>")
        frame = (caller, call_site.line if call_site else 0)

        if template_name in self.pending_includes:
            raise RecursiveIncludeError(
                template_name,
                span=call_site,
                template_stack=[*self.template_stack, frame],
            )

        self.pending_includes.add(template_name)
        self.push_output()
        self.template_stack.append(frame)
        self.current_template = template_name
        capture = IncludeCapture(template_name)
        try:
            yield capture
        finally:
            capture.output = self.pop_output()
            self.pending_includes.discard(template_name)
            self.template_stack.pop()
            self.current_template = previous

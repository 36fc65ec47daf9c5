"""Compile a scrivo AST into Python closures.

Each node becomes a closure over its children, built once per Template:

    Page       → Render:  (TemplateContext) -> None, writes to the context
    Expr       → Eval:    (TemplateContext) -> value

Rendering a template is then a straight walk over pre-built callables with
no per-render dispatch on node types.

Calls:
    ``CustomFunction`` objects receive ``(context, call_site, arguments)``;
    any other callable receives ``*arguments``. Exceptions from plain
    callables are wrapped in TemplateRuntimeError carrying the call site;
    template errors propagate unchanged.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from scrivo._types import CustomFunction, SourceSpan
from scrivo.environment.exceptions import TemplateError, TemplateRuntimeError
from scrivo.nodes import Assign, Call, Const, Data, Expr, Index, Name, Node, Output, Page
from scrivo.utils.values import get_item, to_text

if TYPE_CHECKING:
    from scrivo.context import TemplateContext

Render = Callable[["TemplateContext"], None]
Eval = Callable[["TemplateContext"], Any]


def compile_page(page: Page) -> Render:
    """Compile the page body."""
    return compile_block(page.body)


def compile_block(nodes: Sequence[Node]) -> Render:
    steps = [compile_statement(node) for node in nodes]

    def render_block(ctx: TemplateContext) -> None:
        for step in steps:
            step(ctx)

    return render_block


def compile_statement(node: Node) -> Render:
    if isinstance(node, Data):
        text = node.value

        def render_data(ctx: TemplateContext) -> None:
            ctx.write(text)

        return render_data

    if isinstance(node, Output):
        evaluate = compile_expression(node.expr)

        def render_output(ctx: TemplateContext) -> None:
            value = evaluate(ctx)
            if value is not None:
                ctx.write(to_text(value))

        return render_output

    if isinstance(node, Assign):
        name, span = node.name, node.span
        evaluate = compile_expression(node.expr)

        def render_assign(ctx: TemplateContext) -> None:
            ctx.set_value(name, evaluate(ctx), span=span)

        return render_assign

    raise TypeError(f"Cannot compile statement node {type(node).__name__}")


def compile_expression(expr: Expr) -> Eval:
    if isinstance(expr, Const):
        value = expr.value
        return lambda ctx: value

    if isinstance(expr, Name):
        name, span = expr.name, expr.span
        return lambda ctx: ctx.lookup(name, span)

    if isinstance(expr, Index):
        return _compile_index(expr)

    if isinstance(expr, Call):
        return _compile_call(expr)

    raise TypeError(f"Cannot compile expression node {type(expr).__name__}")


def _compile_index(expr: Index) -> Eval:
    target = compile_expression(expr.target)
    index = compile_expression(expr.index)
    span = expr.span

    def evaluate_index(ctx: TemplateContext) -> Any:
        try:
            return get_item(target(ctx), index(ctx))
        except TypeError as e:
            raise TemplateRuntimeError(
                str(e), span=span, template_stack=ctx.template_stack
            ) from e

    return evaluate_index


def _compile_call(expr: Call) -> Eval:
    func = compile_expression(expr.func)
    args = [compile_expression(arg) for arg in expr.args]
    span = expr.span
    label = _callee_label(expr.func)

    def evaluate_call(ctx: TemplateContext) -> Any:
        callee = func(ctx)
        arguments = [arg(ctx) for arg in args]
        return call_function(ctx, callee, arguments, span, label)

    return evaluate_call


def call_function(
    ctx: TemplateContext,
    callee: Any,
    arguments: list[Any],
    span: SourceSpan,
    label: str = "<expression>",
) -> Any:
    """Invoke ``callee`` with template calling conventions."""
    if isinstance(callee, CustomFunction):
        return callee.evaluate(ctx, span, arguments)
    if not callable(callee):
        raise TemplateRuntimeError(
            f"'{label}' is not a function",
            span=span,
            template_stack=ctx.template_stack,
        )
    try:
        return callee(*arguments)
    except TemplateError:
        raise
    except Exception as e:
        raise TemplateRuntimeError(
            f"Error calling '{label}': {e}",
            span=span,
            template_stack=ctx.template_stack,
        ) from e


def _callee_label(expr: Expr) -> str:
    if isinstance(expr, Name):
        return expr.name
    if isinstance(expr, Index):
        return f"{_callee_label(expr.target)}[...]"
    return "<expression>"

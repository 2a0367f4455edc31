"""
Control flow: conditional and repeated content.

Both components only run in the render pass. Discovery visits their
children unconditionally, so inputs declared inside a false branch or an
empty loop are still collected.
"""

import logging
from collections.abc import Mapping

from pupt.components.base import Component
from pupt.core.element import Element
from pupt.core.expressions import ValuePlaceholder
from pupt.exceptions import EvaluationError
from pupt.formula import evaluate, to_boolean
from pupt.rendering.context import PendingInput, RenderContext
from pupt.rendering.registry import register

logger = logging.getLogger(__name__)


@register("If")
class If(Component):
    """
    Render children only when every given condition holds.

    ``when`` may be a boolean, a formula string (``=count > 5``) or an
    expression. ``provider``/``notProvider`` match the environment provider.
    """

    def render(self, element: Element, ctx: RenderContext) -> str:
        if element.has("when") and not self._when(element, ctx):
            return ""
        provider = ctx.provider.lower()
        providers = [name.lower() for name in ctx.strings(element, "provider")]
        if providers and provider not in providers:
            return ""
        if provider in (name.lower() for name in ctx.strings(element, "notProvider")):
            return ""
        return ctx.render_children(element)

    def _when(self, element: Element, ctx: RenderContext) -> bool:
        raw = element.get("when")
        if isinstance(raw, str):
            try:
                return evaluate(raw, ctx.formula_scope())
            except EvaluationError as e:
                ctx.report("evaluation_error", str(e))
                return False
        value = ctx.resolve(raw)
        if isinstance(value, PendingInput):
            return False
        return to_boolean(value)


@register("ForEach")
class ForEach(Component):
    def render(self, element: Element, ctx: RenderContext) -> str:
        items = ctx.attr(element, "items")
        name = ctx.attr(element, "as") or "item"
        if items is None or isinstance(items, (ValuePlaceholder, PendingInput)):
            return ""
        if isinstance(items, str):
            items = [part.strip() for part in items.split(",") if part.strip()]
        elif isinstance(items, Mapping):
            items = list(items.values())
        elif not isinstance(items, (list, tuple)):
            items = [items]

        logger.debug("ForEach over %d item(s) as '%s'", len(items), name)
        return "".join(ctx.bind(name, item).render_children(element) for item in items)

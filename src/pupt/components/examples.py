"""
Few-shot example components.
"""

from pupt.components.base import Component, has_content
from pupt.core.element import Element
from pupt.rendering.context import RenderContext
from pupt.rendering.registry import register


@register("Examples")
class Examples(Component):
    def render(self, element: Element, ctx: RenderContext) -> str:
        content = ctx.render_children(element, container="Examples")
        if not has_content(content):
            return ""
        if ctx.flag(element, "extend"):
            content = "Additional examples:\n\n" + content.strip("\n")
        return self.section(element, ctx, "examples", content.strip("\n"))


@register("Example")
class Example(Component):
    """One input/output pair; labelled when ``label`` is given."""

    def render(self, element: Element, ctx: RenderContext) -> str:
        content = ctx.render_children(element, container="Example").strip("\n")
        label = ctx.attr(element, "label")
        if label:
            content = f"{label}\n{content}"
        return self.section(element, ctx, "example", content)


@register("Example.Input")
class ExampleInput(Component):
    def render(self, element: Element, ctx: RenderContext) -> str:
        return f"Input: {ctx.render_children(element).strip()}\n"


@register("Example.Output")
class ExampleOutput(Component):
    def render(self, element: Element, ctx: RenderContext) -> str:
        return f"Output: {ctx.render_children(element).strip()}\n"


@register("NegativeExample")
class NegativeExample(Component):
    def render(self, element: Element, ctx: RenderContext) -> str:
        content = ctx.render_children(element).strip("\n")
        reason = ctx.attr(element, "reason")
        lines = ["Incorrect example (do not produce output like this):", content]
        if reason:
            lines.append(f"Why this is wrong: {reason}")
        return self.section(element, ctx, "bad-example", "\n".join(lines))

"""
Base class and helpers shared by component renderers.
"""

from collections.abc import Mapping
from typing import Any

from pupt.core.element import Element
from pupt.core.requirements import InputRequirement
from pupt.rendering.context import RenderContext
from pupt.rendering.delimiters import wrap_with_delimiter


class Component:
    """
    Renderer for one or more tags.

    Subclasses override ``render``; components that declare inputs set
    ``declares_input`` and implement ``requirement`` for the discovery pass.
    Instances are shared by every render and must not keep state.
    """

    tags: tuple[str, ...] = ()
    declares_input = False

    def render(self, element: Element, ctx: RenderContext) -> str:
        return ctx.render_children(element)

    def requirement(self, element: Element, ctx: RenderContext) -> InputRequirement:
        raise NotImplementedError(f"{type(self).__name__} declares no input")

    def section(
        self, element: Element, ctx: RenderContext, name: str, content: str
    ) -> str:
        """Wrap content in the delimiter envelope chosen for ``element``."""
        return wrap_with_delimiter(content, name, ctx.delimiter_for(element))

    def lookup_preset(
        self, table: Mapping[str, Any], name: str | None, ctx: RenderContext
    ) -> Any:
        """
        Find a named preset, warning when the name is unknown.

        The component then renders from its explicit attributes only.
        """
        if not name:
            return None
        preset = table.get(name)
        if preset is None:
            ctx.report(
                "unknown_preset",
                f"Unknown preset '{name}' (known: {', '.join(sorted(table))})",
                severity="warning",
                key=(ctx.component, name),
            )
        return preset


def has_content(text: str) -> bool:
    return bool(text and text.strip())


def bullet_list(items) -> str:
    return "\n".join(f"- {item}" for item in items)

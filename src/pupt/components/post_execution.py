"""
Post-execution region: descriptors of actions a host runs after the model
call. Nothing here performs the action; the renderer only collects them.
"""

from pupt.components.base import Component
from pupt.core.element import Element
from pupt.rendering.context import RenderContext, format_value
from pupt.rendering.registry import register
from pupt.rendering.results import (
    OpenUrlAction,
    ReviewFileAction,
    RunCommandAction,
    WriteFileAction,
)


@register("PostExecution")
class PostExecution(Component):
    """Defers its children until the main text has been rendered."""

    def render(self, element: Element, ctx: RenderContext) -> str:
        ctx.state.deferred.append((element, ctx.derive(container="PostExecution")))
        return ""


class ActionComponent(Component):
    required_attribute = ""

    def render(self, element: Element, ctx: RenderContext) -> str:
        target = format_value(ctx.attr(element, self.required_attribute))
        if not target:
            ctx.report(
                "runtime_error",
                f"<{element.tag}> needs a non-empty '{self.required_attribute}'",
            )
            return ""
        ctx.state.post_execution.append(self.action(element, ctx, target))
        return ""

    def action(self, element: Element, ctx: RenderContext, target: str):
        raise NotImplementedError


@register("ReviewFile")
class ReviewFile(ActionComponent):
    required_attribute = "file"

    def action(self, element, ctx, target):
        return ReviewFileAction(file=target, editor=ctx.attr(element, "editor"))


@register("OpenUrl")
class OpenUrl(ActionComponent):
    required_attribute = "url"

    def action(self, element, ctx, target):
        return OpenUrlAction(url=target, browser=ctx.attr(element, "browser"))


@register("RunCommand")
class RunCommand(ActionComponent):
    required_attribute = "command"

    def action(self, element, ctx, target):
        return RunCommandAction(command=target, cwd=ctx.attr(element, "cwd"))


@register("WriteFile")
class WriteFile(ActionComponent):
    """Write ``content`` (or the rendered children) to ``path``."""

    required_attribute = "path"

    def action(self, element, ctx, target):
        content = ctx.attr(element, "content")
        if content is None:
            content = ctx.render_children(element)
        return WriteFileAction(path=target, content=format_value(content))

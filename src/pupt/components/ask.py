"""
Ask components: the nodes that declare a prompt's inputs.

In the discovery pass each ``Ask.*`` element contributes one
InputRequirement built from its literal attributes. In the render pass it
renders the collected value (or its default) in place.
"""

from collections.abc import Mapping
from typing import Any

from pupt.components.base import Component
from pupt.core.element import Element
from pupt.core.expressions import ValuePlaceholder
from pupt.core.requirements import InputRequirement, SelectOption
from pupt.exceptions import DiscoveryError
from pupt.rendering.context import PendingInput, RenderContext, format_value
from pupt.rendering.registry import register
from pupt.rendering.results import ReviewFileAction

# Requirement fields read from snake_cased attributes, beyond the common ones
CONSTRAINT_FIELDS = (
    "pattern",
    "min",
    "max",
    "min_length",
    "max_length",
    "must_exist",
    "multiple",
    "editor",
)


def _known(value: Any) -> Any:
    """Drop values that cannot be known before inputs are collected."""
    if isinstance(value, (ValuePlaceholder, PendingInput)):
        return None
    return value


def _option_elements(element: Element) -> list[Element]:
    """``Ask.Option`` children, including those grouped under ``Ask.Label``."""
    found = []
    for child in element.element_children():
        if child.tag == "Ask.Option":
            found.append(child)
        elif child.tag == "Ask.Label":
            found.extend(_option_elements(child))
    return found


def collect_options(element: Element, ctx: RenderContext) -> tuple[SelectOption, ...]:
    """
    Options of a select-like ask: ``Ask.Option`` children, also those
    grouped under ``Ask.Label``, then the ``options`` attribute (strings
    or ``{value, label}`` objects).
    """
    options = []
    for child in _option_elements(element):
        text = child.text_content().strip() or None
        value = _known(ctx.attr(child, "value")) or text or ""
        label = _known(ctx.attr(child, "label")) or text or value
        options.append(SelectOption(value=str(value), label=label, text=text or label))

    for option in _known(ctx.attr(element, "options")) or ():
        if isinstance(option, Mapping):
            value = str(option.get("value", ""))
            label = option.get("label") or value
            options.append(SelectOption(value=value, label=label, text=option.get("text") or label))
        else:
            options.append(SelectOption(value=str(option), label=str(option)))
    return tuple(options)


class AskComponent(Component):
    """Shared discovery and rendering for every ``Ask.*`` tag."""

    declares_input = True
    input_type = "text"

    def requirement(self, element: Element, ctx: RenderContext) -> InputRequirement:
        name = element.get("name")
        if not isinstance(name, str) or not name.strip():
            raise DiscoveryError(
                "Ask components need a literal, non-empty 'name' attribute", element.tag
            )
        label = _known(ctx.attr(element, "label")) or name
        fields: dict[str, Any] = {
            "name": name,
            "label": format_value(label),
            "description": _known(ctx.attr(element, "description")) or label,
            "type": self.input_type,
            "required": ctx.flag(element, "required"),
            "default": _known(ctx.attr(element, "default")),
            "silent": ctx.flag(element, "silent"),
            "source_tag": element.tag,
        }
        attributes = ctx.attributes(element)
        for field_name in CONSTRAINT_FIELDS:
            value = _known(attributes.get(field_name))
            if value is not None:
                fields[field_name] = value
        extensions = ctx.strings(element, "extensions")
        if extensions:
            fields["extensions"] = tuple(extensions)
        fields.update(self.extra_fields(element, ctx))
        return InputRequirement(**fields)

    def extra_fields(self, element: Element, ctx: RenderContext) -> dict[str, Any]:
        return {}

    def value(self, element: Element, ctx: RenderContext) -> Any:
        """Supplied value, else the (now resolvable) default, else the input lookup."""
        name = element.get("name")
        if name in ctx.inputs:
            return ctx.inputs[name]
        default = ctx.attr(element, "default")
        if default is not None:
            return default
        return ctx.input_value(name)

    def render(self, element: Element, ctx: RenderContext) -> str:
        if ctx.flag(element, "silent"):
            return ""
        return self.display(element, ctx, self.value(element, ctx))

    def display(self, element: Element, ctx: RenderContext, value: Any) -> str:
        return format_value(value)


@register("Ask.Text")
class AskText(AskComponent):
    input_type = "text"


@register("Ask.Number")
class AskNumber(AskComponent):
    input_type = "number"


@register("Ask.Secret")
class AskSecret(AskComponent):
    input_type = "secret"


@register("Ask.Editor")
class AskEditor(AskComponent):
    input_type = "editor"


@register("Ask.Confirm")
class AskConfirm(AskComponent):
    input_type = "boolean"


@register("Ask.File", "Ask.Path")
class AskFile(AskComponent):
    input_type = "file"


@register("Ask.Select", "Ask.Choice")
class AskSelect(AskComponent):
    input_type = "select"

    def extra_fields(self, element: Element, ctx: RenderContext) -> dict[str, Any]:
        return {"options": collect_options(element, ctx)}

    def display(self, element: Element, ctx: RenderContext, value: Any) -> str:
        if value is None or isinstance(value, PendingInput):
            return format_value(value)
        by_value = {option.value: option for option in collect_options(element, ctx)}

        def text(item: Any) -> str:
            option = by_value.get(str(item))
            return option.display_text if option else format_value(item)

        if isinstance(value, (list, tuple)):
            return ", ".join(text(item) for item in value)
        return text(value)


@register("Ask.MultiSelect")
class AskMultiSelect(AskSelect):
    input_type = "multiselect"


@register("Ask.ReviewFile")
class AskReviewFile(AskComponent):
    """File input whose collected path is also queued for review after the run."""

    input_type = "reviewFile"

    def display(self, element: Element, ctx: RenderContext, value: Any) -> str:
        if value and not isinstance(value, PendingInput):
            editor = _known(ctx.attr(element, "editor"))
            ctx.state.post_execution.append(
                ReviewFileAction(file=format_value(value), editor=editor)
            )
        return format_value(value)


@register("Ask.Option")
class AskOption(Component):
    """Option of a select-like ask; read by its parent, renders nothing itself."""

    def render(self, element: Element, ctx: RenderContext) -> str:
        return ""


@register("Ask.Label")
class AskLabel(Component):
    """Groups ``Ask.Option`` children under a heading; renders nothing itself."""

    def render(self, element: Element, ctx: RenderContext) -> str:
        return ""

"""
Reasoning scaffolds: numbered step lists with a reasoning-style preamble.
"""

from pupt.components.base import Component
from pupt.core.element import Element
from pupt.presets import STEPS_PRESETS, STYLE_INSTRUCTIONS
from pupt.rendering.context import PendingInput, RenderContext
from pupt.rendering.registry import register


@register("Steps")
class Steps(Component):
    """
    Reasoning instructions followed by a ``<steps>`` block.

    Preset phases come first; ``Step`` children continue the numbering
    unless they carry an explicit ``number``, after which counting resumes
    from that number.
    """

    def render(self, element: Element, ctx: RenderContext) -> str:
        preset = self.lookup_preset(STEPS_PRESETS, ctx.attr(element, "preset"), ctx)
        style = ctx.attr(element, "style") or (preset.style if preset else "step-by-step")
        parts = [STYLE_INSTRUCTIONS.get(style, STYLE_INSTRUCTIONS["step-by-step"])]
        parts.append("\n\n<steps>\n")

        number = 1
        for phase in preset.phases if preset else ():
            parts.append(f"{number}. {phase}\n")
            number += 1

        for child in element.children:
            if isinstance(child, Element) and child.tag == "Step":
                label = number
                explicit = ctx.attr(child, "number")
                if isinstance(explicit, PendingInput):
                    label = explicit
                elif explicit is not None:
                    try:
                        number = label = int(explicit)
                    except (TypeError, ValueError):
                        ctx.report(
                            "runtime_error",
                            f"Step number must be an integer, got {explicit!r}",
                            component="Step",
                        )
                text = ctx.render_node(child).strip()
                parts.append(f"{label}. {text}\n")
                number += 1
            else:
                text = ctx.render_node(child)
                if text.strip():
                    parts.append(text if text.endswith("\n") else text + "\n")
        parts.append("</steps>\n")

        if ctx.flag(element, "verify"):
            parts.append("\nVerify your answer is correct before finalizing.\n")
        if ctx.flag(element, "selfCritique"):
            parts.append(
                "\nReview your response and identify any potential issues or improvements.\n"
            )
        show_reasoning = ctx.flag(
            element, "showReasoning", preset.show_reasoning if preset else False
        )
        if show_reasoning:
            parts.append("\nShow your reasoning process in the output.\n")
        return "".join(parts)


@register("Step")
class Step(Component):
    def render(self, element: Element, ctx: RenderContext) -> str:
        text = ctx.render_children(element).strip()
        if ctx.component == "Step" and ctx.path[-2:-1] == ("Steps",):
            return text
        number = ctx.attr(element, "number")
        return f"{number}. {text}\n" if number is not None else f"{text}\n"


@register("ChainOfThought")
class ChainOfThought(Component):
    """
    Reasoning instructions in a ``reasoning`` section.

    Children replace the style instruction; ``showReasoning`` is on unless
    switched off.
    """

    STRUCTURED = (
        "Structure your reasoning:\n"
        "1. Understanding: restate the problem in your own words\n"
        "2. Analysis: work through the relevant factors\n"
        "3. Conclusion: state your answer and why it follows"
    )

    def render(self, element: Element, ctx: RenderContext) -> str:
        children = ctx.render_children(element).strip()
        style = ctx.attr(element, "style") or "step-by-step"
        if children:
            parts = [children]
        elif style == "structured":
            parts = [self.STRUCTURED]
        else:
            parts = [STYLE_INSTRUCTIONS.get(style, STYLE_INSTRUCTIONS["step-by-step"])]
        if ctx.flag(element, "showReasoning", True):
            parts.append("Show your reasoning process in the output.")
        return self.section(element, ctx, "reasoning", "\n\n".join(parts))

"""
Structural components: the prompt container and its delimited sections.

Each section renders its children (or text built from a preset and explicit
attributes) inside the envelope chosen by ``RenderContext.delimiter_for``.
"""

import json
from collections.abc import Mapping

from pupt.components.base import Component, bullet_list, has_content
from pupt.core.element import Element
from pupt.presets import (
    CONSTRAINT_PRESETS,
    DEFAULT_CONSTRAINTS,
    DEFAULT_SUCCESS_CRITERIA,
    EDGE_CASE_PRESETS,
    EXPERIENCE_PREFIXES,
    FALLBACK_PRESETS,
    GUARDRAIL_PRESETS,
    LEVEL_MARKERS,
    POSITIVE_LEVELS,
    ROLE_PRESETS,
    SUCCESS_CRITERIA_PRESETS,
    TASK_PRESETS,
    UNCERTAINTY_ACTIONS,
    ProviderAdaptation,
)
from pupt.rendering.context import RenderContext, format_value
from pupt.rendering.delimiters import wrap_with_delimiter
from pupt.rendering.registry import register


def _excluding(items, exclude: list[str]) -> list[str]:
    lowered = [word.lower() for word in exclude]
    return [item for item in items if not any(word in item.lower() for word in lowered)]


@register("Prompt")
class Prompt(Component):
    """
    Root container that injects default sections.

    Unless ``bare`` (or ``defaults="none"``), missing Role/Format/Constraints
    sections are generated from the environment's prompt settings, and
    success criteria and guardrails are added when enabled. ``noRole``,
    ``noFormat`` etc. and a ``defaults`` object switch single sections off.
    """

    SWITCHES = {
        "noRole": "role",
        "noFormat": "format",
        "noConstraints": "constraints",
        "noSuccessCriteria": "successCriteria",
        "noGuardrails": "guardrails",
    }

    def render(self, element: Element, ctx: RenderContext) -> str:
        if ctx.flag(element, "bare"):
            return ctx.render_children(element, bare=True)
        defaults = ctx.attr(element, "defaults")
        if defaults == "none":
            return ctx.render_children(element)

        overrides = dict(defaults) if isinstance(defaults, Mapping) else {}
        for attribute, key in self.SWITCHES.items():
            if ctx.flag(element, attribute):
                overrides[key] = False

        config = ctx.env.prompt
        child_tags = {child.tag for child in element.element_children()}

        def include(key: str, configured: bool) -> bool:
            return bool(overrides.get(key, configured))

        if not any(node.tag == "Task" for node in element.iter_tree()):
            ctx.report(
                "warn_missing_task",
                "Prompt has no Task child. Consider adding a <Task> element "
                "to define the objective.",
                severity="warning",
            )

        sections = []
        if include("role", config.include_role) and "Role" not in child_tags:
            sections.append(self._default_role(element, ctx))

        sections.append(ctx.render_children(element))

        if include("format", config.include_format) and "Format" not in child_tags:
            sections.append(
                wrap_with_delimiter(
                    f"Output format: {ctx.adaptation.format_preference}",
                    "format",
                    ctx.delimiter_for(element),
                )
            )

        include_constraints = include("constraints", config.include_constraints)
        containers = element.find_all("Constraints")
        if containers:
            # A container replaces the defaults unless it extends them
            if include_constraints and ctx.flag(containers[0], "extend"):
                exclude = ctx.strings(containers[0], "exclude")
                sections.append(self._default_constraints(element, ctx, exclude))
        elif include_constraints and "Constraint" not in child_tags:
            sections.append(self._default_constraints(element, ctx, []))

        if (
            include("successCriteria", config.include_success_criteria)
            and "SuccessCriteria" not in child_tags
        ):
            sections.append(
                wrap_with_delimiter(
                    bullet_list(DEFAULT_SUCCESS_CRITERIA),
                    "success-criteria",
                    ctx.delimiter_for(element),
                )
            )

        include_guardrails = include("guardrails", config.include_guardrails)
        containers = element.find_all("Guardrails")
        if containers:
            if include_guardrails and ctx.flag(containers[0], "extend"):
                exclude = ctx.strings(containers[0], "exclude")
                sections.append(self._default_guardrails(element, ctx, exclude))
        elif include_guardrails:
            sections.append(self._default_guardrails(element, ctx, []))

        return "".join(sections)

    def _default_role(self, element: Element, ctx: RenderContext) -> str:
        key = ctx.attr(element, "role") or ctx.env.prompt.default_role
        preset = ROLE_PRESETS.get(key)
        title = preset.title if preset else key
        expertise = ctx.strings(element, "expertise")
        if not expertise and preset:
            expertise = list(preset.expertise)

        text = f"{ctx.adaptation.role_prefix}a helpful {title}."
        if expertise:
            text += f" You have expertise in {', '.join(expertise)}."
        return wrap_with_delimiter(text, "role", ctx.delimiter_for(element))

    def _default_constraints(self, element, ctx, exclude: list[str]) -> str:
        items = _excluding(DEFAULT_CONSTRAINTS, exclude)
        if not items:
            return ""
        return wrap_with_delimiter(
            bullet_list(items), "constraints", ctx.delimiter_for(element)
        )

    def _default_guardrails(self, element, ctx, exclude: list[str]) -> str:
        items = _excluding(GUARDRAIL_PRESETS["standard"], exclude)
        lines = ["Safety and compliance requirements:", bullet_list(items)]
        return wrap_with_delimiter(
            "\n".join(lines), "guardrails", ctx.delimiter_for(element)
        )


@register("Section")
class Section(Component):
    def render(self, element: Element, ctx: RenderContext) -> str:
        content = ctx.render_children(element)
        if not has_content(content):
            return ""
        name = ctx.attr(element, "name") or "section"
        return self.section(element, ctx, format_value(name), content)


@register("Role")
class Role(Component):
    """Who the model should be: from children, or a preset plus attributes."""

    def render(self, element: Element, ctx: RenderContext) -> str:
        expertise = ctx.strings(element, "expertise")
        domain = ctx.attr(element, "domain")
        children = ctx.render_children(element)

        if has_content(children):
            parts = [children.strip()]
            if expertise:
                parts.append(f"with expertise in {', '.join(expertise)}")
            if domain:
                parts.append(f"specializing in the {domain} domain")
            return self.section(element, ctx, "role", "\n".join(parts))

        preset = self.lookup_preset(ROLE_PRESETS, ctx.attr(element, "preset"), ctx)
        title = ctx.attr(element, "title") or (preset.title if preset else "Assistant")
        level = ctx.attr(element, "experience") or (
            preset.experience_level if preset else None
        )

        known = {item.lower() for item in expertise}
        for item in preset.expertise if preset else ():
            if item.lower() not in known:
                expertise.append(item)
                known.add(item.lower())

        sentence = f"{ctx.adaptation.role_prefix}{EXPERIENCE_PREFIXES.get(level, '')}{title}"
        if expertise:
            sentence += f" with expertise in {', '.join(expertise)}"
        parts = [sentence + "."]

        traits = ctx.strings(element, "traits") or (list(preset.traits) if preset else [])
        if traits:
            parts.append(f"You are {', '.join(traits)}.")
        if domain:
            parts.append(f"Specializing in the {domain} domain.")
        return self.section(element, ctx, "role", " ".join(parts))


@register("Task")
class Task(Component):
    def render(self, element: Element, ctx: RenderContext) -> str:
        content = ctx.render_children(element)
        preset = self.lookup_preset(TASK_PRESETS, ctx.attr(element, "preset"), ctx)
        if not has_content(content) and preset:
            content = preset.instruction
            if preset.output_hint:
                content += f" Provide {preset.output_hint}."
        return self.section(element, ctx, "task", content)


@register("Context")
class Context(Component):
    def render(self, element: Element, ctx: RenderContext) -> str:
        content = ctx.render_children(element)
        label = ctx.attr(element, "label")
        source = ctx.attr(element, "source")
        if label:
            content = f"{label}:\n{content.strip()}"
        if source:
            content = f"{content.rstrip()}\n(Source: {source})"
        return self.section(element, ctx, "context", content)


@register("Objective")
class Objective(Component):
    def render(self, element: Element, ctx: RenderContext) -> str:
        children = ctx.render_children(element)
        primary = ctx.attr(element, "primary")
        lines = []
        if primary:
            lines.append(f"Primary goal: {primary}")
        secondary = ctx.strings(element, "secondary")
        if secondary:
            lines.extend(["", "Secondary goals:", bullet_list(secondary)])
        metrics = ctx.strings(element, "metrics")
        if metrics:
            lines.extend(["", "Success metrics:", bullet_list(metrics)])
        if has_content(children):
            lines.extend(["", children.strip()] if lines else [children.strip()])
        return self.section(element, ctx, "objective", "\n".join(lines))


def constraint_line(
    level: str | None,
    text: str,
    positive: str | None,
    adaptation: ProviderAdaptation,
) -> str:
    """
    One constraint with its normative marker.

    Providers that prefer positive framing get the positive alternative of a
    negative constraint when one exists.
    """
    if adaptation.constraint_style == "positive" and positive and level in POSITIVE_LEVELS:
        text, level = positive, POSITIVE_LEVELS[level]
    marker = LEVEL_MARKERS.get(level or "")
    return f"{marker}: {text}" if marker else text


@register("Constraint")
class Constraint(Component):
    def render(self, element: Element, ctx: RenderContext) -> str:
        preset = self.lookup_preset(
            CONSTRAINT_PRESETS, ctx.attr(element, "preset"), ctx
        )
        level = ctx.attr(element, "level") or ctx.attr(element, "type")
        if level is None and preset:
            level = preset.level
        text = ctx.render_children(element).strip()
        if not text and preset:
            text = preset.text
        positive = ctx.attr(element, "positive") or (preset.positive if preset else None)

        line = constraint_line(level, text, positive, ctx.adaptation)
        if ctx.container == "Constraints":
            return f"- {line}\n"
        return self.section(element, ctx, "constraint", line)


@register("Constraints")
class Constraints(Component):
    """Constraint list; ``extend``/``exclude`` are read by the enclosing Prompt."""

    def render(self, element: Element, ctx: RenderContext) -> str:
        lines = []
        children = ctx.render_children(element, container="Constraints")
        if has_content(children):
            lines.append(children.strip("\n"))
        for name in ctx.strings(element, "presets"):
            preset = self.lookup_preset(CONSTRAINT_PRESETS, name, ctx)
            if preset:
                line = constraint_line(preset.level, preset.text, preset.positive, ctx.adaptation)
                lines.append(f"- {line}")
        if not lines:
            return ""
        return self.section(element, ctx, "constraints", "\n".join(lines))


@register("Format")
class Format(Component):
    def render(self, element: Element, ctx: RenderContext) -> str:
        children = ctx.render_children(element)
        format_type = ctx.attr(element, "type")
        if has_content(children) and not format_type:
            return self.section(element, ctx, "format", children)

        description = format_type or ctx.adaptation.format_preference
        language = ctx.attr(element, "language")
        if language:
            description = f"{description} ({language})"
        blocks = [f"Output format: {description}"]

        schema = ctx.attr(element, "schema")
        if schema:
            if not isinstance(schema, str):
                schema = json.dumps(schema, indent=2, default=str)
            blocks.append(f"Schema:\n```json\n{schema}\n```")
        template = ctx.attr(element, "template")
        if template:
            blocks.append(f"Follow this structure:\n{template}")
        example = ctx.attr(element, "example")
        if example:
            blocks.append(f"Example output:\n{example}")
        max_length = ctx.attr(element, "maxLength")
        if max_length:
            blocks.append(f"Maximum length: {max_length} characters.")
        min_length = ctx.attr(element, "minLength")
        if min_length:
            blocks.append(f"Minimum length: {min_length} characters.")
        if ctx.flag(element, "strict"):
            blocks.append(
                "Return ONLY the formatted output with no additional text or explanation."
            )
        if ctx.flag(element, "validate"):
            blocks.append(
                "Validate your output matches the specified format before responding."
            )
        if has_content(children):
            blocks.append(children.strip())
        return self.section(element, ctx, "format", "\n\n".join(blocks))


@register("Audience")
class Audience(Component):
    LEVEL_GUIDANCE = {
        "beginner": "Use simple language, avoid jargon, and provide analogies where helpful.",
        "intermediate": "You can use technical terms but provide brief explanations when needed.",
        "advanced": "Use full technical vocabulary and assume strong foundational knowledge.",
        "expert": "Communicate as a peer; no need to explain standard concepts.",
        "mixed": "Provide multiple levels of explanation when covering technical topics.",
    }

    def render(self, element: Element, ctx: RenderContext) -> str:
        children = ctx.render_children(element)
        if has_content(children):
            return self.section(element, ctx, "audience", children)

        level = ctx.attr(element, "level")
        audience_type = ctx.attr(element, "type")
        lines = []
        if level or audience_type:
            words = " ".join(str(part) for part in (level, audience_type) if part)
            lines.append(f"Target audience: {words} users")
        description = ctx.attr(element, "description")
        if description:
            lines.append(str(description))
        knowledge = ctx.attr(element, "knowledgeLevel")
        if knowledge:
            lines.append(f"Assume they know: {knowledge}")
        goals = ctx.strings(element, "goals")
        if goals:
            lines.append(f"Their goals: {', '.join(goals)}")
        guidance = self.LEVEL_GUIDANCE.get(level)
        if guidance:
            lines.extend(["", guidance])
        return self.section(element, ctx, "audience", "\n".join(lines))


@register("Tone")
class Tone(Component):
    DESCRIPTIONS = {
        "professional": "Maintain a formal, business-appropriate communication style.",
        "casual": "Use a relaxed, conversational style.",
        "friendly": "Be warm, approachable, and supportive.",
        "academic": "Use scholarly precision with formal structure.",
        "authoritative": "Be confident and decisive in your guidance.",
        "empathetic": "Show understanding and emotional sensitivity.",
        "enthusiastic": "Be energetic and positive.",
        "neutral": "Maintain objectivity and balanced perspective.",
        "humorous": "Use light humor and wit where appropriate.",
        "serious": "Address topics with gravity and importance.",
    }

    def render(self, element: Element, ctx: RenderContext) -> str:
        children = ctx.render_children(element)
        if has_content(children):
            return self.section(element, ctx, "tone", children)

        lines = []
        tone_type = ctx.attr(element, "type")
        if tone_type:
            lines.append(f"Tone: {tone_type}")
            if tone_type in self.DESCRIPTIONS:
                lines.append(self.DESCRIPTIONS[tone_type])
        characteristics = [
            f"{name}: {value}"
            for name in ("formality", "energy", "warmth")
            if (value := ctx.attr(element, name))
        ]
        if characteristics:
            lines.append(f"Voice characteristics: {', '.join(characteristics)}")
        brand_voice = ctx.attr(element, "brandVoice")
        if brand_voice:
            lines.append(f"Match the {brand_voice} brand voice.")
        avoid = ctx.strings(element, "avoidTones")
        if avoid:
            lines.append(f"Avoid these tones: {', '.join(avoid)}")
        return self.section(element, ctx, "tone", "\n".join(lines))


@register("SuccessCriteria")
class SuccessCriteria(Component):
    def render(self, element: Element, ctx: RenderContext) -> str:
        lines = []
        for name in ctx.strings(element, "presets"):
            criteria = self.lookup_preset(SUCCESS_CRITERIA_PRESETS, name, ctx)
            if criteria:
                lines.append(bullet_list(criteria))
        metrics = ctx.attr(element, "metrics") or ()
        for metric in metrics:
            if isinstance(metric, Mapping):
                lines.append(f"- {metric.get('name')}: {metric.get('threshold')}")
            else:
                lines.append(f"- {format_value(metric)}")
        children = ctx.render_children(element, container="SuccessCriteria")
        if has_content(children):
            lines.append(children.strip("\n"))
        return self.section(element, ctx, "success-criteria", "\n".join(lines))


@register("Criterion")
class Criterion(Component):
    def render(self, element: Element, ctx: RenderContext) -> str:
        text = ctx.render_children(element).strip()
        category = ctx.attr(element, "category")
        if category:
            text = f"{text} ({category})"
        return f"- {text}\n"


@register("Guardrails")
class Guardrails(Component):
    """Safety requirements from a preset plus explicit prohibit/require lists."""

    def render(self, element: Element, ctx: RenderContext) -> str:
        name = ctx.attr(element, "preset") or "standard"
        items = self.lookup_preset(GUARDRAIL_PRESETS, name, ctx) or ()
        items = _excluding(items, ctx.strings(element, "exclude"))

        lines = []
        if items:
            lines.extend(["Safety and compliance requirements:", bullet_list(items)])
        required = ctx.strings(element, "require")
        if required:
            lines.extend(["", "Required behaviors:", bullet_list(required)])
        prohibited = ctx.strings(element, "prohibit")
        if prohibited:
            lines.extend(
                ["", "Prohibited actions:", bullet_list(f"Do not: {item}" for item in prohibited)]
            )
        children = ctx.render_children(element)
        if has_content(children):
            lines.extend(["", children.strip()])
        return self.section(element, ctx, "guardrails", "\n".join(lines).strip("\n"))


@register("Contexts")
class Contexts(Component):
    """Groups several Context sections under one envelope."""

    def render(self, element: Element, ctx: RenderContext) -> str:
        content = ctx.render_children(element)
        if not has_content(content):
            return ""
        return self.section(element, ctx, "contexts", content)


@register("Style")
class Style(Component):
    DESCRIPTIONS = {
        "concise": "Be brief and to the point.",
        "detailed": "Be thorough and cover the topic in depth.",
        "academic": "Write with scholarly rigor and cite reasoning.",
        "casual": "Write in a relaxed, conversational way.",
        "technical": "Use precise technical language.",
        "simple": "Use plain words and short sentences.",
    }

    def render(self, element: Element, ctx: RenderContext) -> str:
        children = ctx.render_children(element)
        if has_content(children):
            return self.section(element, ctx, "style", children)

        lines = []
        style_type = ctx.attr(element, "type")
        if style_type:
            lines.append(f"Writing style: {style_type}")
            if style_type in self.DESCRIPTIONS:
                lines.append(self.DESCRIPTIONS[style_type])
        verbosity = ctx.attr(element, "verbosity")
        if verbosity:
            lines.append(f"Verbosity: {verbosity}")
        formality = ctx.attr(element, "formality")
        if formality:
            lines.append(f"Formality: {formality}")
        return self.section(element, ctx, "style", "\n".join(lines))


@register("WhenUncertain")
class WhenUncertain(Component):
    def render(self, element: Element, ctx: RenderContext) -> str:
        children = ctx.render_children(element)
        if has_content(children):
            content = children
        else:
            action = ctx.attr(element, "action") or "acknowledge"
            content = UNCERTAINTY_ACTIONS.get(action)
            if content is None:
                content = f"If you are uncertain: {action}"
        return self.section(element, ctx, "uncertainty-handling", content)


@register("Specialization")
class Specialization(Component):
    def render(self, element: Element, ctx: RenderContext) -> str:
        children = ctx.render_children(element)
        if has_content(children):
            return self.section(element, ctx, "specialization", children)

        lines = []
        areas = ctx.strings(element, "areas")
        if areas:
            lines.append(f"Specialized in: {', '.join(areas)}")
        level = ctx.attr(element, "level")
        if level:
            lines.append(f"Expertise level: {level}")
        return self.section(element, ctx, "specialization", "\n".join(lines))


def _condition_lines(pairs, template: str) -> list[str]:
    return [template.format(condition=condition, action=action) for condition, action in pairs]


@register("EdgeCases")
class EdgeCases(Component):
    """Preset edge cases followed by ``When`` children; empty when there are none."""

    LINE = "- When {condition}: {action}"

    def render(self, element: Element, ctx: RenderContext) -> str:
        preset = self.lookup_preset(EDGE_CASE_PRESETS, ctx.attr(element, "preset"), ctx)
        lines = _condition_lines(preset or (), self.LINE)
        children = ctx.render_children(element, container="EdgeCases")
        if has_content(children):
            lines.append(children.strip("\n"))
        if not lines:
            return ""
        return self.section(element, ctx, "edge-cases", "\n".join(lines))


@register("When")
class When(Component):
    def render(self, element: Element, ctx: RenderContext) -> str:
        condition = format_value(ctx.attr(element, "condition"))
        action = ctx.render_children(element).strip() or format_value(ctx.attr(element, "then"))
        line = f"When {condition}: {action}"
        return f"- {line}\n" if ctx.container == "EdgeCases" else f"{line}\n"


@register("Fallbacks")
class Fallbacks(Component):
    LINE = "- If {condition}, then {action}"

    def render(self, element: Element, ctx: RenderContext) -> str:
        preset = self.lookup_preset(FALLBACK_PRESETS, ctx.attr(element, "preset"), ctx)
        lines = _condition_lines(preset or (), self.LINE)
        children = ctx.render_children(element, container="Fallbacks")
        if has_content(children):
            lines.append(children.strip("\n"))
        if not lines:
            return ""
        return self.section(element, ctx, "fallbacks", "\n".join(lines))


@register("Fallback")
class Fallback(Component):
    def render(self, element: Element, ctx: RenderContext) -> str:
        condition = format_value(ctx.attr(element, "when"))
        action = format_value(ctx.attr(element, "then")) or ctx.render_children(element).strip()
        line = f"If {condition}, then {action}"
        return f"- {line}\n" if ctx.container == "Fallbacks" else f"{line}\n"


def reference_text(
    title: str, url: str | None, description: str | None, style: str = "inline"
) -> str:
    """
    One reference in the given citation style.

    ``inline`` puts URL and description on their own lines, ``bibliography``
    makes a single bullet and ``footnote`` a markdown link definition.
    """
    if style == "bibliography":
        text = f"- {title}"
        if url:
            text += f" <{url}>"
        return f"{text}: {description}" if description else text
    if style == "footnote":
        text = f"[{title}]: {url}" if url else f"[{title}]"
        return f"{text} ({description})" if description else text
    lines = [title]
    if url:
        lines.append(f"URL: {url}")
    if description:
        lines.append(description)
    return "\n".join(lines)


@register("References")
class References(Component):
    """
    Source list from the ``sources`` attribute and ``Reference`` children.

    Sources are ``{title, url, description}`` objects; ``style`` selects the
    citation format for all of them.
    """

    def render(self, element: Element, ctx: RenderContext) -> str:
        style = ctx.attr(element, "style") or "inline"
        entries = []
        for source in ctx.attr(element, "sources") or ():
            if isinstance(source, Mapping):
                entries.append(
                    reference_text(
                        format_value(source.get("title")),
                        source.get("url"),
                        source.get("description"),
                        style,
                    )
                )
            else:
                entries.append(reference_text(format_value(source), None, None, style))

        for child in element.children:
            if isinstance(child, Element) and child.tag == "Reference":
                entries.append(Reference.text(child, ctx.enter(child), style))
            else:
                text = ctx.render_node(child)
                if has_content(text):
                    entries.append(text.strip())

        if not entries:
            return ""
        separator = "\n\n" if style == "inline" else "\n"
        return self.section(element, ctx, "references", separator.join(entries))


@register("Reference")
class Reference(Component):
    @staticmethod
    def text(element: Element, ctx: RenderContext, style: str = "inline") -> str:
        text = reference_text(
            format_value(ctx.attr(element, "title")),
            ctx.attr(element, "url"),
            ctx.attr(element, "description"),
            style,
        )
        notes = ctx.render_children(element).strip()
        return f"{text}\n{notes}" if notes else text

    def render(self, element: Element, ctx: RenderContext) -> str:
        return self.section(element, ctx, "reference", self.text(element, ctx))

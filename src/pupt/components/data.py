"""
Data components: literal payloads embedded in a prompt.
"""

import json
from collections.abc import Mapping
from pathlib import Path

from pupt.components.base import Component, bullet_list
from pupt.core.element import Element
from pupt.presets import get_language_conventions
from pupt.rendering.context import RenderContext, format_value
from pupt.rendering.registry import register


@register("Code")
class Code(Component):
    def render(self, element: Element, ctx: RenderContext) -> str:
        language = format_value(ctx.attr(element, "language"))
        body = ctx.render_children(element).strip("\n")
        filename = ctx.attr(element, "filename")
        header = f"{filename}:\n" if filename else ""
        block = f"{header}```{language}\n{body}\n```\n"
        if ctx.flag(element, "conventions"):
            conventions = get_language_conventions(language)
            block += f"\nConventions:\n{bullet_list(conventions)}\n"
        return block


@register("Json")
class Json(Component):
    """
    JSON block from the ``data`` attribute or from the children's text.

    Text that parses as JSON is re-indented; anything else is kept as is.
    """

    def render(self, element: Element, ctx: RenderContext) -> str:
        indent = ctx.attr(element, "indent", ctx.env.output.indent)
        data = ctx.attr(element, "data")
        if data is not None:
            if isinstance(data, tuple):
                data = list(data)
            elif isinstance(data, Mapping):
                data = dict(data)
            body = json.dumps(data, indent=indent, default=str)
        else:
            body = ctx.render_children(element).strip()
            try:
                body = json.dumps(json.loads(body), indent=indent)
            except ValueError:
                pass
        return f"```json\n{body}\n```\n"


@register("Xml")
class Xml(Component):
    def render(self, element: Element, ctx: RenderContext) -> str:
        tag = format_value(ctx.attr(element, "tag")) or "data"
        body = ctx.render_children(element).strip("\n")
        return f"<{tag}>\n{body}\n</{tag}>\n"


@register("Data")
class Data(Component):
    """
    Named data block; ``format`` picks the fence language.

    A ``data`` attribute is serialized as JSON; otherwise the children's
    text is used unchanged.
    """

    def render(self, element: Element, ctx: RenderContext) -> str:
        name = format_value(ctx.attr(element, "name"))
        data_format = format_value(ctx.attr(element, "format")) or "text"
        data = ctx.attr(element, "data")
        if data is not None and not isinstance(data, str):
            if isinstance(data, tuple):
                data = list(data)
            elif isinstance(data, Mapping):
                data = dict(data)
            body = json.dumps(data, indent=ctx.env.output.indent, default=str)
        else:
            body = format_value(data) if data is not None else ctx.render_children(element)
        header = f"{name}:\n" if name else ""
        return f"{header}```{data_format}\n{body.strip()}\n```\n"


EXTENSION_LANGUAGES = {
    ".py": "python",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".js": "javascript",
    ".jsx": "javascript",
    ".json": "json",
    ".md": "markdown",
    ".rb": "ruby",
    ".go": "go",
    ".rs": "rust",
    ".java": "java",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".hpp": "cpp",
    ".css": "css",
    ".html": "html",
    ".xml": "xml",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".sh": "bash",
    ".sql": "sql",
}


@register("File")
class File(Component):
    """Contents of a file on disk in a fenced block named after the file."""

    def render(self, element: Element, ctx: RenderContext) -> str:
        path = Path(format_value(ctx.attr(element, "path")))
        encoding = ctx.attr(element, "encoding") or "utf-8"
        try:
            content = path.read_text(encoding=encoding)
        except (OSError, LookupError, UnicodeDecodeError) as e:
            ctx.report("runtime_error", f"Cannot read file '{path}': {e}", key=str(path))
            return ""
        language = ctx.attr(element, "language") or EXTENSION_LANGUAGES.get(
            path.suffix.lower(), ""
        )
        body = content.rstrip("\n")
        return f"<!-- {path.name} -->\n```{language}\n{body}\n```\n"

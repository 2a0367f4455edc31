"""
Parser for prompt markup.

This module converts ``.prompt`` markup into an Element tree. The grammar is
a JSX-like subset:

    <Prompt name="greeting">
      <Ask.Text name="who" label="Who" required />
      <Task>Hello {inputs.who}</Task>
    </Prompt>

Attributes are quoted strings, ``{...}`` expressions or bare booleans.
Expressions hold literals (numbers, booleans, strings, arrays, objects),
nested elements, dotted input references, or formulas. References and
formulas are kept unevaluated in the tree.
"""

import html
import re
from typing import Any

from pupt.core.element import Element
from pupt.core.expressions import FIELD_REF_PATTERN, FieldRef, Formula
from pupt.exceptions import ErrorContext, EvaluationError, ParseError
from pupt.formula import parse_formula
from pupt.parsing.tags import resolve_tag_name


class _NotLiteral(Exception):
    """Internal signal: expression text is not a plain literal."""


class LiteralReader:
    """Reads a literal value (JSON-like, single quotes and bare keys allowed)."""

    NUMBER_PATTERN = re.compile(r"-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?")
    KEY_PATTERN = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")
    KEYWORDS = {"true": True, "false": False, "null": None, "undefined": None}

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def read_complete(self) -> Any:
        value = self._read_value()
        self._skip_ws()
        if self.pos != len(self.text):
            raise _NotLiteral()
        return value

    def _skip_ws(self):
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def _read_value(self) -> Any:
        self._skip_ws()
        if self.pos >= len(self.text):
            raise _NotLiteral()
        char = self.text[self.pos]
        if char in "\"'":
            return self._read_string()
        if char == "[":
            return self._read_array()
        if char == "{":
            return self._read_object()

        match = self.NUMBER_PATTERN.match(self.text, self.pos)
        if match:
            end = match.end()
            # "5abc" is not a number
            if end < len(self.text) and (self.text[end].isalnum() or self.text[end] == "_"):
                raise _NotLiteral()
            self.pos = end
            literal = match.group()
            if re.fullmatch(r"-?\d+", literal):
                return int(literal)
            return float(literal)

        match = self.KEY_PATTERN.match(self.text, self.pos)
        if match and match.group() in self.KEYWORDS:
            end = match.end()
            if end < len(self.text) and self.text[end] == ".":
                raise _NotLiteral()
            self.pos = end
            return self.KEYWORDS[match.group()]
        raise _NotLiteral()

    def _read_string(self) -> str:
        quote = self.text[self.pos]
        self.pos += 1
        chars = []
        while self.pos < len(self.text):
            char = self.text[self.pos]
            if char == "\\" and self.pos + 1 < len(self.text):
                escaped = self.text[self.pos + 1]
                chars.append({"n": "\n", "t": "\t"}.get(escaped, escaped))
                self.pos += 2
                continue
            if char == quote:
                self.pos += 1
                return "".join(chars)
            chars.append(char)
            self.pos += 1
        raise _NotLiteral()

    def _read_array(self) -> tuple:
        self.pos += 1
        items = []
        self._skip_ws()
        if self.pos < len(self.text) and self.text[self.pos] == "]":
            self.pos += 1
            return ()
        while True:
            items.append(self._read_value())
            self._skip_ws()
            if self.pos >= len(self.text):
                raise _NotLiteral()
            if self.text[self.pos] == ",":
                self.pos += 1
                self._skip_ws()
                if self.pos < len(self.text) and self.text[self.pos] == "]":
                    self.pos += 1
                    return tuple(items)
                continue
            if self.text[self.pos] == "]":
                self.pos += 1
                return tuple(items)
            raise _NotLiteral()

    def _read_object(self) -> dict:
        self.pos += 1
        result = {}
        while True:
            self._skip_ws()
            if self.pos >= len(self.text):
                raise _NotLiteral()
            if self.text[self.pos] == "}":
                self.pos += 1
                return result
            if self.text[self.pos] in "\"'":
                key = self._read_string()
            else:
                match = self.KEY_PATTERN.match(self.text, self.pos)
                if not match:
                    raise _NotLiteral()
                key = match.group()
                self.pos = match.end()
            self._skip_ws()
            if self.pos >= len(self.text) or self.text[self.pos] != ":":
                raise _NotLiteral()
            self.pos += 1
            result[key] = self._read_value()
            self._skip_ws()
            if self.pos < len(self.text) and self.text[self.pos] == ",":
                self.pos += 1


def normalize_text(text: str, is_first: bool, is_last: bool) -> str | None:
    """
    Normalize a literal text child according to its position among siblings.

    Text without newlines is kept verbatim. Whitespace-only text spanning
    lines (indentation between tags) is dropped. Otherwise blank lines
    adjoining the opening or closing tag are removed and common indentation
    is stripped, keeping relative indentation.

    Params:
        text: Raw text between tags or expressions
        is_first: Whether this is the first child of its parent
        is_last: Whether this is the last child of its parent

    Returns:
        Normalized text, or None when the text should be removed
    """
    if not text:
        return None
    if "\n" not in text:
        return text
    if not text.strip():
        return None

    lines = text.split("\n")
    if is_first:
        while lines and not lines[0].strip():
            lines.pop(0)
    if is_last:
        while lines and not lines[-1].strip():
            lines.pop()
    if not lines:
        return None

    # A first line not preceded by a newline continues the previous sibling
    continuation = text[0] != "\n" and not is_first
    measured = lines[1:] if continuation else lines
    indents = [len(line) - len(line.lstrip()) for line in measured if line.strip()]
    common = min(indents) if indents else 0

    dedented = []
    for index, line in enumerate(lines):
        if continuation and index == 0:
            dedented.append(line)
        elif not line.strip():
            dedented.append("")
        else:
            dedented.append(line[common:])
    result = "\n".join(dedented)
    return result or None


class MarkupParser:
    """
    Cursor-based parser that builds an Element tree from markup text.

    Usage:
        root = MarkupParser(source, "greeting.prompt").parse()
    """

    TAG_NAME_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)*")
    ATTRIBUTE_NAME_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_:\-]*")
    BRACE_COMMENT_PATTERN = re.compile(r"\{\s*/\*.*?\*/\s*\}", re.DOTALL)

    def __init__(self, source: str, source_name: str | None = None):
        self.source = source
        self.source_name = source_name
        self.pos = 0

    def parse(self) -> Element:
        """
        Parse the whole source into a single root element.

        Returns:
            Root Element of the tree

        Raises:
            ParseError: On malformed markup, unknown namespaces, unterminated
                tags or content after the root element
        """
        self._skip_trivia()
        if self.pos >= len(self.source):
            raise self._error("Markup contains no root element")
        if self.source[self.pos] != "<":
            raise self._error("Expected a root element")

        root = self._parse_element()

        self._skip_trivia()
        if self.pos < len(self.source):
            raise self._error("Unexpected content after the root element")
        return root

    # Errors and positions

    def _context(self, offset: int, tag: str | None = None) -> ErrorContext:
        line = self.source.count("\n", 0, offset) + 1
        column = offset - self.source.rfind("\n", 0, offset)
        snippet = self.source[offset : offset + 40].split("\n", 1)[0]
        return ErrorContext(
            source_name=self.source_name,
            line=line,
            column=column,
            tag=tag,
            snippet=snippet or None,
        )

    def _error(
        self, message: str, offset: int | None = None, tag: str | None = None
    ) -> ParseError:
        where = self.pos if offset is None else offset
        return ParseError(message, self._context(where, tag))

    # Low-level scanning

    def _startswith(self, text: str) -> bool:
        return self.source.startswith(text, self.pos)

    def _skip_ws(self):
        while self.pos < len(self.source) and self.source[self.pos].isspace():
            self.pos += 1

    def _skip_until(self, terminator: str, what: str):
        end = self.source.find(terminator, self.pos)
        if end == -1:
            raise self._error(f"Unterminated {what}")
        self.pos = end + len(terminator)

    def _skip_trivia(self):
        """Skip whitespace and comments outside the root element."""
        while True:
            self._skip_ws()
            if self._startswith("<!--"):
                self._skip_until("-->", "comment")
            elif self._startswith("/*"):
                self._skip_until("*/", "comment")
            elif self._startswith("//"):
                end = self.source.find("\n", self.pos)
                self.pos = len(self.source) if end == -1 else end + 1
            elif self.BRACE_COMMENT_PATTERN.match(self.source, self.pos):
                self.pos = self.BRACE_COMMENT_PATTERN.match(self.source, self.pos).end()
            else:
                return

    def _expect(self, text: str, tag: str | None = None):
        if not self._startswith(text):
            found = self.source[self.pos : self.pos + 1] or "end of input"
            raise self._error(f"Expected '{text}' but found '{found}'", tag=tag)
        self.pos += len(text)

    def _read_tag_name(self) -> str:
        match = self.TAG_NAME_PATTERN.match(self.source, self.pos)
        if not match:
            raise self._error("Expected a tag name")
        self.pos = match.end()
        return match.group()

    # Elements

    def _parse_element(self) -> Element:
        start = self.pos
        line = self._context(start).line
        self._expect("<")
        raw_name = self._read_tag_name()
        try:
            tag = resolve_tag_name(raw_name)
        except ValueError as e:
            raise self._error(str(e), start + 1, raw_name) from e

        attributes: dict[str, Any] = {}
        while True:
            self._skip_ws()
            if self.pos >= len(self.source):
                raise self._error(f"Unterminated tag <{raw_name}>", start, tag)
            if self._startswith("/>"):
                self.pos += 2
                return Element(tag, attributes, (), line, self.source_name)
            if self._startswith(">"):
                self.pos += 1
                break

            name_start = self.pos
            match = self.ATTRIBUTE_NAME_PATTERN.match(self.source, self.pos)
            if not match:
                raise self._error(
                    f"Unexpected character '{self.source[self.pos]}' in <{raw_name}>",
                    tag=tag,
                )
            name = match.group()
            self.pos = match.end()
            if name in attributes:
                raise self._error(f"Duplicate attribute '{name}'", name_start, tag)

            self._skip_ws()
            if self._startswith("="):
                self.pos += 1
                self._skip_ws()
                attributes[name] = self._parse_attribute_value(tag)
            else:
                attributes[name] = True

        children = self._parse_children(raw_name, tag, start)
        return Element(tag, attributes, children, line, self.source_name)

    def _parse_attribute_value(self, tag: str) -> Any:
        if self.pos >= len(self.source):
            raise self._error("Expected an attribute value", tag=tag)
        quote = self.source[self.pos]
        if quote in "\"'":
            end = self.source.find(quote, self.pos + 1)
            if end == -1:
                raise self._error("Unterminated attribute string", tag=tag)
            value = html.unescape(self.source[self.pos + 1 : end])
            self.pos = end + 1
            return value
        if quote == "{":
            return self._parse_braced_expression(tag)
        raise self._error("Attribute values must be quoted or wrapped in {}", tag=tag)

    def _parse_children(self, raw_name: str, tag: str, start: int) -> tuple:
        raw: list[Any] = []

        def add_text(text: str):
            if raw and isinstance(raw[-1], _RawText):
                raw[-1] = _RawText(raw[-1] + text)
            else:
                raw.append(_RawText(text))

        while True:
            if self.pos >= len(self.source):
                raise self._error(f"Unterminated tag <{raw_name}>", start, tag)

            if self._startswith("</"):
                close_start = self.pos
                self.pos += 2
                closing = self._read_tag_name()
                self._skip_ws()
                self._expect(">", tag)
                if closing != raw_name and _canonical_or_none(closing) != tag:
                    raise self._error(
                        f"Mismatched closing tag </{closing}>, expected </{raw_name}>",
                        close_start,
                        tag,
                    )
                break

            if self._startswith("<!--"):
                self._skip_until("-->", "comment")
                continue

            if self._startswith("<"):
                raw.append(self._parse_element())
                continue

            comment = self.BRACE_COMMENT_PATTERN.match(self.source, self.pos)
            if comment:
                self.pos = comment.end()
                continue

            if self._startswith("{"):
                value = self._parse_braced_expression(tag)
                for child in self._expression_children(value, tag):
                    if isinstance(child, str):
                        raw.append(_Literal(child))
                    else:
                        raw.append(child)
                continue

            text_end = len(self.source)
            for marker in ("<", "{"):
                found = self.source.find(marker, self.pos)
                if found != -1:
                    text_end = min(text_end, found)
            add_text(self.source[self.pos : text_end])
            self.pos = text_end

        children = []
        last = len(raw) - 1
        for index, child in enumerate(raw):
            if isinstance(child, _RawText):
                text = normalize_text(str(child), index == 0, index == last)
                if text is not None:
                    children.append(text)
            elif isinstance(child, _Literal):
                children.append(str(child))
            else:
                children.append(child)
        return tuple(children)

    def _expression_children(self, value: Any, tag: str) -> list:
        """Convert a braced child expression into tree children."""
        if value is None or isinstance(value, bool):
            return []
        if isinstance(value, (str, Element, FieldRef, Formula)):
            return [value]
        if isinstance(value, (int, float)):
            return [str(value)]
        if isinstance(value, tuple):
            flat = []
            for item in value:
                flat.extend(self._expression_children(item, tag))
            return flat
        raise self._error("Objects are not valid as element children", tag=tag)

    # Expressions

    def _parse_braced_expression(self, tag: str) -> Any:
        open_pos = self.pos
        self._expect("{", tag)
        self._skip_ws()
        if self._startswith("<"):
            element = self._parse_element()
            self._skip_ws()
            self._expect("}", tag)
            return element

        end = self._find_closing_brace(open_pos, tag)
        inner_start = self.pos
        text = self.source[inner_start:end]
        self.pos = end + 1
        return self._interpret_expression(text, inner_start, tag)

    def _find_closing_brace(self, open_pos: int, tag: str) -> int:
        depth = 0
        index = self.pos
        while index < len(self.source):
            char = self.source[index]
            if char in "\"'`":
                closing = self.source.find(char, index + 1)
                while closing != -1 and self.source[closing - 1] == "\\":
                    closing = self.source.find(char, closing + 1)
                if closing == -1:
                    break
                index = closing + 1
                continue
            if char == "{":
                depth += 1
            elif char == "}":
                if depth == 0:
                    return index
                depth -= 1
            index += 1
        raise self._error("Unterminated expression", open_pos, tag)

    def _interpret_expression(self, text: str, offset: int, tag: str) -> Any:
        stripped = text.strip()
        if not stripped:
            raise self._error("Empty expression", offset, tag)

        try:
            return LiteralReader(stripped).read_complete()
        except _NotLiteral:
            pass

        if FIELD_REF_PATTERN.match(stripped):
            return FieldRef.from_text(stripped)

        try:
            parse_formula(stripped)
        except EvaluationError as e:
            raise self._error(f"Invalid expression: {e.reason}", offset, tag) from e
        return Formula(stripped)


class _RawText(str):
    """Unnormalized text segment collected while scanning children."""


class _Literal(str):
    """String produced by a braced literal; exempt from whitespace normalization."""


def _canonical_or_none(name: str) -> str | None:
    try:
        return resolve_tag_name(name)
    except ValueError:
        return None


def parse(source: str, source_name: str | None = None) -> Element:
    """
    Parse prompt markup into an Element tree.

    Params:
        source: Markup text; comment blocks may precede the root tag
        source_name: Name used in error messages (usually a file name)

    Returns:
        Root Element

    Raises:
        ParseError: If the markup is malformed
    """
    return MarkupParser(source, source_name).parse()

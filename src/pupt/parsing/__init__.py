"""
Markup parsing for pupt prompts.

This package turns prompt markup into Element trees and resolves
namespaced and aliased tag names.
"""

from pupt.parsing.parser import LiteralReader, MarkupParser, normalize_text, parse
from pupt.parsing.tags import NAMESPACES, TAG_ALIASES, is_ask_tag, resolve_tag_name

__all__ = [
    "LiteralReader",
    "MarkupParser",
    "normalize_text",
    "parse",
    "NAMESPACES",
    "TAG_ALIASES",
    "is_ask_tag",
    "resolve_tag_name",
]

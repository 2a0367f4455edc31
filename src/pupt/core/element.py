"""
Element tree model for pupt prompts.

This module defines the tagged node structure produced by the markup parser
or built directly in Python. Elements are immutable once constructed; a tree
has a single root and every node is owned by exactly one parent.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Union

from pupt.core.expressions import FieldRef, Formula

AttributeValue = Union[
    str,
    int,
    float,
    bool,
    None,
    tuple,
    dict,
    "Element",
    FieldRef,
    Formula,
]
Child = Union["Element", str, FieldRef, Formula]


@dataclass(frozen=True, eq=False)
class Element:
    """
    One node of a prompt tree.

    Params:
        tag: Tag name, possibly namespaced (``Ask.Text``)
        attributes: Ordered attribute name to value mapping (read-only)
        children: Ordered children: elements, literal text or expressions
        line: 1-based source line of the opening tag, if parsed
        source_name: Name of the markup source, if parsed
    """

    tag: str
    attributes: Mapping[str, AttributeValue] = field(default_factory=dict)
    children: tuple[Child, ...] = ()
    line: int | None = None
    source_name: str | None = None

    def __post_init__(self):
        object.__setattr__(
            self, "attributes", MappingProxyType(dict(self.attributes))
        )
        object.__setattr__(self, "children", tuple(self.children))

    @property
    def namespace(self) -> str | None:
        """Namespace part of a dotted tag (``Ask`` for ``Ask.Text``)."""
        if "." in self.tag:
            return self.tag.split(".", 1)[0]
        return None

    def get(self, name: str, default: Any = None) -> Any:
        """Return a raw (unresolved) attribute value."""
        return self.attributes.get(name, default)

    def has(self, name: str) -> bool:
        return name in self.attributes

    def element_children(self) -> list["Element"]:
        """Direct children that are elements."""
        return [child for child in self.children if isinstance(child, Element)]

    def find_all(self, tag: str) -> list["Element"]:
        """Direct element children with the given tag."""
        return [child for child in self.element_children() if child.tag == tag]

    def iter_tree(self) -> Iterator["Element"]:
        """Depth-first iteration over this element and all descendants."""
        yield self
        for child in self.children:
            if isinstance(child, Element):
                yield from child.iter_tree()

    def text_content(self) -> str:
        """Concatenated literal text of all descendants (expressions skipped)."""
        parts = []
        for child in self.children:
            if isinstance(child, str):
                parts.append(child)
            elif isinstance(child, Element):
                parts.append(child.text_content())
        return "".join(parts)

    def __repr__(self) -> str:
        return (
            f"Element(tag={self.tag!r}, attributes={dict(self.attributes)!r}, "
            f"children={len(self.children)})"
        )


def create_element(
    tag: str, attributes: Mapping[str, AttributeValue] | None = None, *children: Child
) -> Element:
    """
    Construct an element directly, without markup.

    Params:
        tag: Tag name
        attributes: Attribute mapping (literals or expressions)
        children: Child elements, text or expressions

    Returns:
        New immutable Element
    """
    flat: list[Child] = []
    for child in children:
        if isinstance(child, (list, tuple)):
            flat.extend(child)
        elif child is not None:
            flat.append(child)
    return Element(tag=tag, attributes=dict(attributes or {}), children=tuple(flat))

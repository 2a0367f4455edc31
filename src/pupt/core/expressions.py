"""
Attribute and child expressions for the pupt element tree.

Attribute values written as ``{...}`` in markup are either plain literals
(strings, numbers, booleans, arrays, objects, nested elements) or one of the
deferred expression variants defined here. Deferred expressions are kept
unevaluated in the tree and resolved only during a render pass, against the
final input values.
"""

import re
from dataclasses import dataclass

# Roots that a dotted reference may start from besides a ForEach binding
INPUTS_ROOT = "inputs"
ENV_ROOT = "env"

FIELD_REF_PATTERN = re.compile(
    r"^[A-Za-z_$][A-Za-z0-9_$]*(?:\.[A-Za-z_$][A-Za-z0-9_$]*)*$"
)


@dataclass(frozen=True)
class FieldRef:
    """
    Dotted reference to an input value or loop binding.

    Params:
        path: Path segments, e.g. ("inputs", "who") for ``inputs.who``
    """

    path: tuple[str, ...]

    @classmethod
    def from_text(cls, text: str) -> "FieldRef":
        """Build a reference from dotted source text such as ``inputs.who``."""
        return cls(path=tuple(text.strip().split(".")))

    @property
    def root(self) -> str:
        return self.path[0]

    @property
    def dotted(self) -> str:
        return ".".join(self.path)

    @property
    def input_name(self) -> str | None:
        """Name of the referenced input, or None when the root is not ``inputs``."""
        if self.root == INPUTS_ROOT and len(self.path) > 1:
            return self.path[1]
        return None

    def __str__(self) -> str:
        return "{" + self.dotted + "}"


@dataclass(frozen=True)
class Formula:
    """
    Unevaluated boolean/arithmetic expression written inline in markup.

    Params:
        expression: Formula source text, e.g. ``inputs.count > 5``
    """

    expression: str

    def __str__(self) -> str:
        return "{" + self.expression + "}"


Expression = FieldRef | Formula


def is_expression(value: object) -> bool:
    """Check whether a value is a deferred expression."""
    return isinstance(value, (FieldRef, Formula))


class ValuePlaceholder:
    """
    Read-any-property stand-in for a value that is not known yet.

    Returned when a reference is resolved during discovery, before real
    input values exist. Any attribute or item access yields another
    placeholder; the placeholder renders as an empty string and is falsy.
    """

    __slots__ = ("_path",)

    def __init__(self, path: tuple[str, ...] = ()):
        self._path = path

    @property
    def path(self) -> tuple[str, ...]:
        return self._path

    def __getattr__(self, name: str) -> "ValuePlaceholder":
        if name.startswith("__"):
            raise AttributeError(name)
        return ValuePlaceholder(self._path + (name,))

    def __getitem__(self, key: object) -> "ValuePlaceholder":
        return ValuePlaceholder(self._path + (str(key),))

    def __str__(self) -> str:
        return ""

    def __repr__(self) -> str:
        return f"ValuePlaceholder({'.'.join(self._path)!r})"

    def __bool__(self) -> bool:
        return False

    def __len__(self) -> int:
        return 0

    def __iter__(self):
        return iter(())

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ValuePlaceholder) and other._path == self._path

    def __hash__(self) -> int:
        return hash(self._path)

"""
Per-pass render context.

A RenderContext is an immutable view handed to every component: the pass
mode, the environment and provider adaptation, the input value snapshot and
the inherited scope (loop bindings, delimiter, bare mode). Collected output
that must survive the walk (diagnostics, post-execution actions, deferred
regions) lives in a shared RenderState.
"""

import dataclasses
import json
import logging
import warnings
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

import inflection

from pupt.core.element import Element
from pupt.core.environment import EnvironmentContext
from pupt.core.expressions import (
    ENV_ROOT,
    INPUTS_ROOT,
    FieldRef,
    Formula,
    ValuePlaceholder,
)
from pupt.core.requirements import InputRequirement
from pupt.exceptions import (
    DuplicateInputWarning,
    EvaluationError,
    MissingInputError,
    RenderCancelledError,
    UnknownPresetWarning,
    UnknownTagWarning,
    UnresolvedInputError,
)
from pupt.formula import UNSET, evaluate_value
from pupt.presets import ProviderAdaptation
from pupt.rendering.delimiters import DELIMITERS
from pupt.rendering.results import Diagnostic

if TYPE_CHECKING:
    from pupt.rendering.renderer import Renderer

logger = logging.getLogger(__name__)

WARNING_CATEGORIES = {
    "unknown_tag": UnknownTagWarning,
    "unknown_preset": UnknownPresetWarning,
    "duplicate_input": DuplicateInputWarning,
}


class RenderMode(Enum):
    DISCOVERY = "discovery"
    RENDER = "render"


class PendingInput:
    """Value of an input that is declared but not yet supplied (preview renders)."""

    __slots__ = ("name",)

    def __init__(self, name: str):
        self.name = name

    def __str__(self) -> str:
        return "{" + self.name + "}"

    def __repr__(self) -> str:
        return f"PendingInput({self.name!r})"

    def __bool__(self) -> bool:
        return False


def format_value(value: Any) -> str:
    """
    Text form of a resolved value as it appears in rendered output.

    Params:
        value: Any resolved attribute, input or binding value

    Returns:
        ``""`` for None/unset, ``true``/``false`` for booleans, comma-joined
        items for sequences, JSON for mappings, ``str()`` otherwise
    """
    if value is None or value is UNSET or isinstance(value, ValuePlaceholder):
        return ""
    if isinstance(value, PendingInput):
        return str(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ", ".join(format_value(item) for item in value)
    if isinstance(value, Mapping):
        return json.dumps(dict(value), default=str)
    return str(value)


@dataclass
class RenderState:
    """Mutable collectors shared by every context of one pass."""

    diagnostics: list[Diagnostic] = field(default_factory=list)
    post_execution: list = field(default_factory=list)
    deferred: list = field(default_factory=list)
    reported: set = field(default_factory=set)
    cancel_event: Any = None


@dataclass(frozen=True)
class RenderContext:
    """
    Scope handed to components while walking the tree.

    Params:
        mode: Discovery or render pass
        env: Environment for this call
        adaptation: Provider adaptation record resolved from ``env``
        inputs: Snapshot of supplied input values (read-only)
        requirements: Discovered requirements by name
        state: Shared collectors for this pass
        renderer: Renderer driving the walk
        partial: Preview mode; missing inputs render as ``{name}``
        strict_tags: Unknown tags are errors rather than warnings
        bindings: ForEach loop bindings visible at this node
        delimiter: Delimiter set explicitly by the nearest ancestor
        bare: An ancestor Prompt asked for no envelopes
        container: Tag of the enclosing aggregate component, if any
        path: Tags from the root to the current element
    """

    mode: RenderMode
    env: EnvironmentContext
    adaptation: ProviderAdaptation
    inputs: Mapping[str, Any]
    requirements: Mapping[str, InputRequirement]
    state: RenderState
    renderer: "Renderer"
    partial: bool = False
    strict_tags: bool = True
    bindings: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    delimiter: str | None = None
    bare: bool = False
    container: str | None = None
    path: tuple[str, ...] = ()
    active: frozenset = frozenset()

    # Scope

    @property
    def is_discovery(self) -> bool:
        return self.mode is RenderMode.DISCOVERY

    @property
    def provider(self) -> str:
        return self.env.llm.provider

    @property
    def component(self) -> str | None:
        return self.path[-1] if self.path else None

    def derive(self, **changes: Any) -> "RenderContext":
        return dataclasses.replace(self, **changes)

    def bind(self, name: str, value: Any) -> "RenderContext":
        """Context with one more loop binding."""
        bindings = dict(self.bindings)
        bindings[name] = value
        return self.derive(bindings=MappingProxyType(bindings))

    def enter(self, element: Element) -> "RenderContext":
        """Context for rendering ``element`` and its subtree."""
        changes: dict[str, Any] = {
            "path": self.path + (element.tag,),
            "active": self.active | {id(element)},
        }
        explicit = element.get("delimiter")
        if isinstance(explicit, str) and explicit in DELIMITERS:
            changes["delimiter"] = explicit
        return self.derive(**changes)

    def check_cancelled(self) -> None:
        event = self.state.cancel_event
        if event is not None and event.is_set():
            raise RenderCancelledError()

    # Diagnostics

    def report(
        self,
        code: str,
        message: str,
        severity: str = "error",
        component: str | None = None,
        key: Any = None,
    ) -> None:
        """
        Record a diagnostic once per ``key`` (defaults to code + message).

        Warnings are also logged and emitted through ``warnings.warn`` with
        the matching category.
        """
        dedupe_key = (code, key if key is not None else message)
        if dedupe_key in self.state.reported:
            return
        self.state.reported.add(dedupe_key)
        diagnostic = Diagnostic(
            code=code,
            message=message,
            component=component or self.component,
            severity=severity,
        )
        self.state.diagnostics.append(diagnostic)
        if severity == "warning":
            logger.warning("%s", diagnostic)
            category = WARNING_CATEGORIES.get(code)
            if category is not None:
                warnings.warn(message, category, stacklevel=2)
        else:
            logger.debug("%s", diagnostic)

    # Values

    def attr(self, element: Element, name: str, default: Any = None) -> Any:
        """Resolved attribute value, or ``default`` when absent or None."""
        if name not in element.attributes:
            return default
        value = self.resolve(element.attributes[name])
        return default if value is None else value

    def attributes(self, element: Element) -> dict[str, Any]:
        """All attributes resolved, keyed by snake_case name."""
        return {
            inflection.underscore(name).replace("-", "_"): self.resolve(value)
            for name, value in element.attributes.items()
        }

    def flag(self, element: Element, name: str, default: bool = False) -> bool:
        value = self.attr(element, name)
        if value is None or isinstance(value, (ValuePlaceholder, PendingInput)):
            return default
        if isinstance(value, str):
            return value.strip().lower() not in ("", "false", "0", "no")
        return bool(value)

    def strings(self, element: Element, name: str) -> list[str]:
        """Attribute as a list of strings; comma-separated text is split."""
        value = self.attr(element, name)
        if value is None or isinstance(value, (ValuePlaceholder, PendingInput)):
            return []
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        if isinstance(value, (list, tuple)):
            return [format_value(item) for item in value if item is not None]
        return [format_value(value)]

    def resolve(self, value: Any) -> Any:
        """Resolve a deferred expression; literals are returned unchanged."""
        if isinstance(value, FieldRef):
            return self.resolve_reference(value)
        if isinstance(value, Formula):
            return self.evaluate_formula(value)
        return value

    def resolve_reference(self, ref: FieldRef) -> Any:
        root = ref.root
        if root in self.bindings:
            return self._navigate(self.bindings[root], ref.path[1:], ref)
        if self.is_discovery:
            return ValuePlaceholder(ref.path)
        if root == ENV_ROOT:
            return self._navigate(self.env.model_dump(), ref.path[1:], ref)
        if root == INPUTS_ROOT:
            if len(ref.path) == 1:
                return MappingProxyType(self.formula_scope(include_bindings=False))
            name, rest = ref.input_name, ref.path[2:]
        elif root in self.inputs or root in self.requirements:
            name, rest = root, ref.path[1:]
        else:
            self._unresolved(ref)
            return None

        value = self.input_value(name, ref)
        if value is None or isinstance(value, PendingInput):
            return value
        return self._navigate(value, rest, ref)

    def input_value(self, name: str, ref: FieldRef | None = None) -> Any:
        """
        Value of a named input: supplied value, then discovered default.

        A declared input with neither is a ``missing_input`` error when it
        is required (or a ``{name}`` placeholder in preview renders); an
        undeclared, unsupplied name is an ``unresolved_reference`` error.
        """
        if name in self.inputs:
            return self.inputs[name]
        requirement = self.requirements.get(name)
        if requirement is None:
            if ref is not None:
                self._unresolved(ref)
            else:
                self.report(
                    "unresolved_reference",
                    f"Input '{name}' was not declared or supplied",
                    key=name,
                )
            return None
        if requirement.default is not None:
            return requirement.default
        if self.partial:
            return PendingInput(name)
        if requirement.required:
            self.report("missing_input", str(MissingInputError(name)), key=name)
        return None

    def evaluate_formula(self, formula: Formula) -> Any:
        if self.is_discovery:
            return None
        try:
            value = evaluate_value(formula.expression, self.formula_scope())
        except EvaluationError as e:
            self.report("evaluation_error", str(e))
            return None
        return None if value is UNSET else value

    def formula_scope(self, include_bindings: bool = True) -> dict[str, Any]:
        """Name to value mapping seen by formulas: defaults, inputs, bindings, env."""
        scope: dict[str, Any] = {
            name: requirement.default
            for name, requirement in self.requirements.items()
            if requirement.default is not None
        }
        scope.update(self.inputs)
        if include_bindings:
            scope.update(self.bindings)
            scope.setdefault(ENV_ROOT, self.env.model_dump())
        return scope

    def _navigate(self, value: Any, rest: tuple[str, ...], ref: FieldRef) -> Any:
        for segment in rest:
            if isinstance(value, ValuePlaceholder):
                return value[segment]
            if isinstance(value, Mapping) and segment in value:
                value = value[segment]
            elif isinstance(value, (list, tuple)) and segment.isdigit() and int(segment) < len(value):
                value = value[int(segment)]
            elif segment == "length" and isinstance(value, (list, tuple, str)):
                value = len(value)
            elif not isinstance(value, (Mapping, list, tuple, str)) and hasattr(value, segment):
                value = getattr(value, segment)
            else:
                self._unresolved(ref)
                return None
        return value

    def _unresolved(self, ref: FieldRef) -> None:
        available = sorted(set(self.inputs) | set(self.requirements))
        self.report(
            "unresolved_reference",
            str(UnresolvedInputError(ref.dotted, available)),
            key=ref.dotted,
        )

    # Layout

    def delimiter_for(self, element: Element) -> str:
        """
        Envelope style for a structural element.

        Order: the element's own attribute, the nearest ancestor's explicit
        choice, bare mode, the environment, the provider record.
        """
        explicit = self.attr(element, "delimiter")
        if isinstance(explicit, str) and explicit in DELIMITERS:
            return explicit
        if self.delimiter:
            return self.delimiter
        if self.bare:
            return "none"
        if self.env.output.delimiter:
            return self.env.output.delimiter
        return self.adaptation.delimiter

    def render_children(self, element: Element, **changes: Any) -> str:
        ctx = self.derive(**changes) if changes else self
        return self.renderer.render_children(element, ctx)

    def render_node(self, node: Any, **changes: Any) -> str:
        ctx = self.derive(**changes) if changes else self
        return self.renderer.render_node(node, ctx)

"""
Input iterator: a resumable, sequential protocol for collecting the values a
prompt needs before it can be rendered.

The iterator is an explicit state machine (not started, iterating, done)
driven either one value at a time by an interactive front end or in one call
by ``run_non_interactive``. One iterator serves one session; calls on the
same instance must not overlap.
"""

import logging
from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from pupt.core.element import Element
from pupt.core.environment import EnvironmentContext
from pupt.core.requirements import InputRequirement
from pupt.exceptions import InputValidationError, IteratorStateError, MissingInputError
from pupt.inputs.validation import ValidationResult, validate_input
from pupt.rendering import Diagnostic, Renderer

logger = logging.getLogger(__name__)

MissingDefaultPolicy = Literal["error", "skip", "default"]


class InputIteratorOptions(BaseModel):
    """
    Options for an input iterator.

    Params:
        values: Pre-supplied values; these inputs are not asked for
        validate_on_submit: Validate submitted values and declared defaults
        environment: ``embedded`` hosts cannot check the filesystem, so
            ``mustExist`` becomes a warning there
        on_missing_default: Batch policy for required inputs with no value
    """

    model_config = ConfigDict(populate_by_name=True)

    values: dict[str, Any] = Field(default_factory=dict)
    validate_on_submit: bool = Field(True, alias="validateOnSubmit")
    environment: Literal["interactive", "non-interactive", "embedded"] = "interactive"
    on_missing_default: MissingDefaultPolicy = Field("error", alias="onMissingDefault")


class IteratorState(Enum):
    NOT_STARTED = "not-started"
    ITERATING = "iterating"
    DONE = "done"


class InputIterator:
    """
    Walks the discovered requirements of one prompt tree.

    Params:
        element: Root of the prompt tree
        options: Iterator options
        env: Environment used for the discovery pass
        renderer: Renderer performing discovery (default registry if None)
    """

    def __init__(
        self,
        element: Element,
        options: InputIteratorOptions | None = None,
        env: EnvironmentContext | Mapping | None = None,
        renderer: Renderer | None = None,
    ):
        self.element = element
        self.options = options or InputIteratorOptions()
        self.env = env
        self.renderer = renderer or Renderer()
        self.state = IteratorState.NOT_STARTED
        self.requirements: list[InputRequirement] = []
        self.diagnostics: tuple[Diagnostic, ...] = ()
        self._values: dict[str, Any] = dict(self.options.values)
        self._index = 0

    # Protocol

    def start(self) -> None:
        """
        Run discovery and move to the first requirement that still needs a value.

        Raises:
            IteratorStateError: If the iterator was already started
            DiscoveryError: If the tree's requirements cannot be determined
        """
        if self.state is not IteratorState.NOT_STARTED:
            raise IteratorStateError("Iterator already started")
        self._discover()
        self._index = self._next_unfilled(0)
        self._update_state()
        logger.debug(
            "Input iterator started: %d requirement(s), %d pre-supplied",
            len(self.requirements),
            len(self.options.values),
        )

    def current(self) -> InputRequirement | None:
        """Requirement at the cursor, or None when done."""
        self._require_started()
        if self.state is IteratorState.DONE:
            return None
        return self.requirements[self._index]

    def submit(self, value: Any) -> ValidationResult:
        """
        Validate and store a value for the current requirement.

        On success the cursor advances to the next requirement still lacking
        a value. On failure the cursor stays put and the errors are returned.

        Raises:
            IteratorStateError: Before ``start()`` or after the last requirement
        """
        self._require_started()
        if self.state is IteratorState.DONE:
            raise IteratorStateError("Iterator is done; there is no current requirement")

        requirement = self.requirements[self._index]
        if self.options.validate_on_submit:
            result = self._validate(requirement, value)
            if not result.valid:
                logger.debug("Rejected value for '%s': %s", requirement.name, result.messages)
                return result
        else:
            result = ValidationResult(valid=True)

        self._values[requirement.name] = value
        self._index = self._next_unfilled(self._index + 1)
        self._update_state()
        return result

    def advance(self) -> None:
        """Move past the current requirement without submitting a value."""
        self._require_started()
        if self.state is IteratorState.DONE:
            raise IteratorStateError("Iterator is done; nothing to advance")
        self.go_to(self._index + 1)

    def previous(self) -> None:
        """Step back one requirement; submitted values are kept."""
        self.go_to(self._index - 1)

    def go_to(self, index: int) -> None:
        """Move the cursor, clamped to ``[0, len(requirements)]``."""
        self._require_started()
        self._index = max(0, min(index, len(self.requirements)))
        self._update_state()

    def reset(self) -> None:
        """Forget collected values and rewind; discovery is not repeated."""
        self._require_started()
        self._values = dict(self.options.values)
        self._index = self._next_unfilled(0)
        self._update_state()

    def is_done(self) -> bool:
        return self.state is IteratorState.DONE

    def get_values(self) -> Mapping[str, Any]:
        """Read-only snapshot of the values collected so far."""
        return MappingProxyType(dict(self._values))

    @property
    def index(self) -> int:
        return self._index

    # Batch mode

    def run_non_interactive(
        self, policy: MissingDefaultPolicy | Mapping | None = None
    ) -> Mapping[str, Any]:
        """
        Fill every requirement without prompting.

        Pre-supplied and already collected values are kept as is, unvalidated,
        as when ``start()`` skips them. Otherwise the declared default is
        validated and used, else the missing-default policy applies: ``error``
        fails for required inputs, ``skip`` leaves it out, ``default``
        substitutes the type's empty value unvalidated.

        Params:
            policy: Policy name or ``{"onMissingDefault": ...}``; defaults to
                the iterator options

        Returns:
            Read-only snapshot of the resulting values

        Raises:
            MissingInputError: A required input has no value under ``error``
            InputValidationError: A declared default fails validation
            DiscoveryError: If the tree's requirements cannot be determined
        """
        if isinstance(policy, Mapping):
            policy = policy.get("onMissingDefault", policy.get("on_missing_default"))
        policy = policy or self.options.on_missing_default

        if self.state is IteratorState.NOT_STARTED:
            self._discover()

        values = dict(self._values)
        for requirement in self.requirements:
            name = requirement.name
            if name in values:
                continue
            if requirement.has_default:
                value = requirement.default
                if self.options.validate_on_submit:
                    result = self._validate(requirement, value)
                    if not result.valid:
                        raise InputValidationError(name, result.messages)
            elif policy == "default":
                value = requirement.empty_value()
            elif policy == "error" and requirement.required:
                raise MissingInputError(
                    name,
                    "has no default value; provide a default, pre-supply a value, "
                    "or use the 'skip' or 'default' policy",
                )
            else:
                continue
            values[name] = value

        self._values = values
        self._index = len(self.requirements)
        self.state = IteratorState.DONE
        logger.debug("Non-interactive run collected %d value(s)", len(values))
        return self.get_values()

    # Internals

    def _discover(self) -> None:
        result = self.renderer.discover(self.element, self.env)
        self.requirements = list(result.requirements)
        self.diagnostics = result.diagnostics

    def _validate(self, requirement: InputRequirement, value: Any) -> ValidationResult:
        return validate_input(
            requirement,
            value,
            check_filesystem=self.options.environment != "embedded",
        )

    def _next_unfilled(self, start: int) -> int:
        for index in range(start, len(self.requirements)):
            if self.requirements[index].name not in self._values:
                return index
        return len(self.requirements)

    def _update_state(self) -> None:
        if self._index >= len(self.requirements):
            self.state = IteratorState.DONE
        else:
            self.state = IteratorState.ITERATING

    def _require_started(self) -> None:
        if self.state is IteratorState.NOT_STARTED:
            raise IteratorStateError("Iterator not started; call start() first")


def create_input_iterator(
    element: Element,
    options: InputIteratorOptions | Mapping | None = None,
    env: EnvironmentContext | Mapping | None = None,
    **kwargs: Any,
) -> InputIterator:
    """
    Create an input iterator for a prompt tree.

    Params:
        element: Root of the prompt tree
        options: Options model or mapping (camelCase or snake_case keys)
        env: Environment for the discovery pass
        kwargs: Option fields given directly (``values=...``)

    Returns:
        An InputIterator in the not-started state
    """
    if isinstance(options, InputIteratorOptions):
        data = options.model_dump()
    else:
        data = dict(options or {})
    data.update(kwargs)
    return InputIterator(element, InputIteratorOptions.model_validate(data), env=env)

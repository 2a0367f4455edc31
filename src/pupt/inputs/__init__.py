"""
Input collection: requirement validation and the input iterator protocol.
"""

from pupt.core.requirements import (
    EMPTY_VALUES,
    InputRequirement,
    InputType,
    SelectOption,
)
from pupt.inputs.iterator import (
    InputIterator,
    InputIteratorOptions,
    IteratorState,
    MissingDefaultPolicy,
    create_input_iterator,
)
from pupt.inputs.validation import ValidationIssue, ValidationResult, validate_input

__all__ = [
    "EMPTY_VALUES",
    "InputRequirement",
    "InputType",
    "SelectOption",
    "InputIterator",
    "InputIteratorOptions",
    "IteratorState",
    "MissingDefaultPolicy",
    "create_input_iterator",
    "ValidationIssue",
    "ValidationResult",
    "validate_input",
]

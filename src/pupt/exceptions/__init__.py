"""
pupt exception classes.

This package provides all exception and warning types used throughout pupt
for consistent error handling and reporting.
"""

from pupt.exceptions.core import (
    DiscoveryError,
    DuplicateInputWarning,
    ErrorContext,
    ErrorLevel,
    EvaluationError,
    InputValidationError,
    IteratorStateError,
    MissingInputError,
    ParseError,
    PuptError,
    PuptWarning,
    RenderCancelledError,
    UnknownPresetWarning,
    UnknownTagWarning,
    UnresolvedInputError,
)

__all__ = [
    "ErrorContext",
    "ErrorLevel",
    "PuptError",
    "ParseError",
    "DiscoveryError",
    "EvaluationError",
    "UnresolvedInputError",
    "MissingInputError",
    "InputValidationError",
    "IteratorStateError",
    "RenderCancelledError",
    "PuptWarning",
    "UnknownTagWarning",
    "UnknownPresetWarning",
    "DuplicateInputWarning",
]

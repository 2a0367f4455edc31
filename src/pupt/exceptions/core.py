"""
Exception and warning classes for pupt prompt processing.

This module defines specific exception types for the error conditions that
can occur while parsing prompt markup, discovering input requirements,
evaluating formulas, collecting inputs and rendering.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorLevel(Enum):
    """Error message detail level for end users vs developers."""

    USER = "user"  # Location and offending markup only
    DEVELOPER = "developer"  # Adds column and surrounding snippet


@dataclass
class ErrorContext:
    """
    Context information for error messages.

    Captures where an error occurred in the markup source so that parse and
    evaluation failures can point at the offending text.

    Params:
        source_name: Name of the markup source (usually a file name)
        line: 1-based line number in the source
        column: 1-based column number in the source
        tag: Tag name of the element being processed
        snippet: The source text around the failure
    """

    source_name: str | None = None
    line: int | None = None
    column: int | None = None
    tag: str | None = None
    snippet: str | None = None

    def format_location(self, error_level: ErrorLevel) -> str:
        """
        Format location information based on error level.

        Params:
            error_level: Whether to show USER or DEVELOPER level details

        Returns:
            Formatted location string with appropriate detail level
        """
        lines = []

        if self.line is not None:
            where = f"  at line {self.line}"
            if error_level == ErrorLevel.DEVELOPER and self.column is not None:
                where += f", column {self.column}"
            if self.source_name:
                where += f" of {self.source_name}"
            lines.append(where)
        elif self.source_name:
            lines.append(f"  in {self.source_name}")

        if self.tag:
            lines.append(f"  in <{self.tag}>")

        if error_level == ErrorLevel.DEVELOPER and self.snippet:
            lines.append(f"  near: {self.snippet}")

        return "\n".join(lines)


class PuptError(Exception):
    """Base exception for all pupt errors."""

    pass


class ParseError(PuptError):
    """Raised when prompt markup is malformed."""

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        error_level: ErrorLevel = ErrorLevel.USER,
    ):
        """
        Initialize the exception.

        Params:
            message: Description of the syntax problem
            context: ErrorContext with source location information
            error_level: Level of detail to show in error message
        """
        self.message = message
        self.context = context
        self.error_level = error_level

        full_message = message
        if context:
            location_info = context.format_location(error_level)
            if location_info:
                full_message = f"{message}\n{location_info}"

        super().__init__(full_message)

    @property
    def line(self) -> int | None:
        return self.context.line if self.context else None

    @property
    def column(self) -> int | None:
        return self.context.column if self.context else None


class DiscoveryError(PuptError):
    """Raised when the input requirements of a tree cannot be determined."""

    def __init__(self, reason: str, tag: str | None = None):
        """
        Initialize the exception.

        Params:
            reason: Why discovery failed
            tag: Tag of the element where discovery failed, if known
        """
        self.reason = reason
        self.tag = tag
        location = f" in <{tag}>" if tag else ""
        super().__init__(f"Input discovery failed{location}: {reason}")


class EvaluationError(PuptError):
    """Raised when a formula or condition cannot be evaluated."""

    def __init__(self, expression: str, reason: str, position: int | None = None):
        """
        Initialize the exception.

        Params:
            expression: The formula text that failed
            reason: The underlying reason for the failure
            position: Character offset in the expression, if known
        """
        self.expression = expression
        self.reason = reason
        self.position = position
        at = f" at position {position}" if position is not None else ""
        super().__init__(f"Cannot evaluate '{expression}'{at}: {reason}")


class UnresolvedInputError(PuptError):
    """Raised when an expression references an input nobody declared or supplied."""

    def __init__(self, path: str, available: list[str] | None = None):
        """
        Initialize the exception.

        Params:
            path: The dotted reference that could not be resolved
            available: Input names that were available at the time
        """
        self.path = path
        self.available = available or []
        hint = f" Available inputs: {self.available}" if self.available else ""
        super().__init__(f"Reference '{path}' does not match any declared input.{hint}")


class MissingInputError(PuptError):
    """Raised when a required input has neither a value nor a default."""

    def __init__(self, input_name: str, reason: str = "has no value and no default"):
        """
        Initialize the exception.

        Params:
            input_name: Name of the missing input
            reason: Specific error message
        """
        self.input_name = input_name
        super().__init__(f"Required input '{input_name}' {reason}")


class InputValidationError(PuptError):
    """Raised when a declared default fails validation in batch mode."""

    def __init__(self, input_name: str, messages: list[str]):
        """
        Initialize the exception.

        Params:
            input_name: Name of the input whose value was rejected
            messages: Validation messages for the value
        """
        self.input_name = input_name
        self.messages = messages
        super().__init__(f"Validation failed for '{input_name}': {'; '.join(messages)}")


class IteratorStateError(PuptError):
    """Raised when the input iterator protocol is used out of order."""

    pass


class RenderCancelledError(PuptError):
    """Raised inside a tree walk when the caller's cancellation signal is set."""

    def __init__(self):
        super().__init__("Render cancelled by caller")


class PuptWarning(UserWarning):
    """Base category for recoverable pupt warnings."""

    pass


class UnknownTagWarning(PuptWarning):
    """Emitted when markup uses a tag that has no registered component."""

    pass


class UnknownPresetWarning(PuptWarning):
    """Emitted when a component names a preset that does not exist."""

    pass


class DuplicateInputWarning(PuptWarning):
    """Emitted when two input declarations share a name but differ in constraints."""

    pass

"""
Type-specific validation of submitted input values.

Validation never raises for a bad value: problems come back as
ValidationIssue records so an interactive caller can ask again.
"""

import os
import re
from dataclasses import dataclass, field
from typing import Any

from pupt.core.requirements import InputRequirement

TEXT_TYPES = ("text", "secret", "editor")
PATH_TYPES = ("file", "reviewFile")


@dataclass(frozen=True)
class ValidationIssue:
    """
    One problem with a submitted value.

    Params:
        field: Input name
        message: Human-readable description
        code: Machine-readable code, e.g. ``BELOW_MIN``
    """

    field: str
    message: str
    code: str = "WARNING"


@dataclass
class ValidationResult:
    valid: bool
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    @property
    def messages(self) -> list[str]:
        return [issue.message for issue in self.errors]


def _type_name(value: Any) -> str:
    return "null" if value is None else type(value).__name__


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _extension(path: str) -> str:
    _, ext = os.path.splitext(path)
    return ext


class _Validator:
    """Collects issues for one requirement/value pair."""

    def __init__(self, requirement: InputRequirement, check_filesystem: bool):
        self.requirement = requirement
        self.check_filesystem = check_filesystem
        self.errors: list[ValidationIssue] = []
        self.warnings: list[ValidationIssue] = []

    def error(self, message: str, code: str):
        self.errors.append(ValidationIssue(self.requirement.name, message, code))

    def warn(self, message: str):
        self.warnings.append(ValidationIssue(self.requirement.name, message))

    def run(self, value: Any) -> ValidationResult:
        requirement = self.requirement
        if value is None or value == "" or value == []:
            if requirement.required:
                self.error(f"{requirement.name} is required", "REQUIRED")
            return self.result()

        kind = requirement.type
        if kind in TEXT_TYPES:
            self.text(value)
        elif kind == "number":
            self.number(value)
        elif kind == "boolean":
            if not isinstance(value, bool):
                self.error(f"Expected a boolean, got {_type_name(value)}", "INVALID_TYPE")
        elif kind == "select":
            self.choices([value])
        elif kind == "multiselect":
            if isinstance(value, (list, tuple)):
                self.choices(value)
            else:
                self.error(
                    f"Expected a list for multiselect, got {_type_name(value)}",
                    "INVALID_TYPE",
                )
        elif kind in PATH_TYPES:
            self.paths(value)
        return self.result()

    def result(self) -> ValidationResult:
        return ValidationResult(
            valid=not self.errors, errors=self.errors, warnings=self.warnings
        )

    def text(self, value: Any):
        requirement = self.requirement
        if not isinstance(value, str):
            self.error(f"Expected a string, got {_type_name(value)}", "INVALID_TYPE")
            return
        if requirement.min_length is not None and len(value) < requirement.min_length:
            self.error(
                f"Must be at least {requirement.min_length} characters", "TOO_SHORT"
            )
        if requirement.max_length is not None and len(value) > requirement.max_length:
            self.error(
                f"Must be at most {requirement.max_length} characters", "TOO_LONG"
            )
        if requirement.pattern and not re.search(requirement.pattern, value):
            self.error(
                f"Value does not match pattern {requirement.pattern}", "PATTERN_MISMATCH"
            )

    def number(self, value: Any):
        requirement = self.requirement
        if not _is_number(value):
            self.error(f"Expected a number, got {_type_name(value)}", "INVALID_TYPE")
            return
        if requirement.min is not None and value < requirement.min:
            self.error(f"Value {value} is below minimum {requirement.min:g}", "BELOW_MIN")
        if requirement.max is not None and value > requirement.max:
            self.error(f"Value {value} exceeds max {requirement.max:g}", "EXCEEDS_MAX")

    def choices(self, values):
        valid = [option.value for option in self.requirement.options]
        if not valid:
            return
        for item in values:
            if str(item) not in valid:
                self.error(
                    f'Invalid option "{item}". Valid options: {", ".join(valid)}',
                    "INVALID_OPTION",
                )

    def paths(self, value: Any):
        requirement = self.requirement
        if requirement.multiple:
            if not isinstance(value, (list, tuple)):
                self.error(
                    f"Expected a list of file paths, got {_type_name(value)}",
                    "INVALID_TYPE",
                )
                return
            paths = [item for item in value if isinstance(item, str)]
        elif isinstance(value, str):
            paths = [value]
        else:
            self.error(
                f"Expected a file path string, got {_type_name(value)}", "INVALID_TYPE"
            )
            return

        if requirement.extensions:
            for path in paths:
                if _extension(path) not in requirement.extensions:
                    self.error(
                        f'File "{path}" has invalid extension. '
                        f"Allowed: {', '.join(requirement.extensions)}",
                        "INVALID_EXTENSION",
                    )

        if requirement.must_exist and paths:
            if not self.check_filesystem:
                self.warn(
                    "Cannot check file existence in an embedded environment: "
                    + ", ".join(paths)
                )
                return
            for path in paths:
                if not os.path.exists(path):
                    self.error(f'File does not exist: "{path}"', "FILE_NOT_FOUND")


def validate_input(
    requirement: InputRequirement, value: Any, check_filesystem: bool = True
) -> ValidationResult:
    """
    Validate a value against its requirement.

    Params:
        requirement: Discovered requirement
        value: Submitted value
        check_filesystem: Verify ``mustExist`` paths on disk; when False the
            check is reported as a warning instead

    Returns:
        ValidationResult; ``valid`` is False when any error was found
    """
    return _Validator(requirement, check_filesystem).run(value)

"""
Input requirement model produced by the discovery pass.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

InputType = Literal[
    "text",
    "select",
    "multiselect",
    "number",
    "boolean",
    "file",
    "secret",
    "editor",
    "reviewFile",
]

# Value substituted by the "default" missing-value policy
EMPTY_VALUES: dict[str, Any] = {
    "text": "",
    "select": "",
    "multiselect": [],
    "number": 0,
    "boolean": False,
    "file": "",
    "secret": "",
    "editor": "",
    "reviewFile": "",
}


class SelectOption(BaseModel):
    """One choice of a select or multiselect input."""

    model_config = ConfigDict(frozen=True)

    value: str
    label: str | None = None
    text: str | None = None

    @property
    def display_text(self) -> str:
        return self.text or self.label or self.value


class InputRequirement(BaseModel):
    """
    One interactive input a prompt needs before it can be rendered.

    Field names are snake_case in Python and camelCase when dumped
    ``by_alias`` (``minLength``, ``mustExist``), matching markup attributes.
    """

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    name: str
    label: str
    description: str | None = None
    type: InputType = "text"
    required: bool = False
    default: Any = None
    silent: bool = False

    pattern: str | None = None
    min: float | None = None
    max: float | None = None
    min_length: int | None = None
    max_length: int | None = None
    options: tuple[SelectOption, ...] = ()
    extensions: tuple[str, ...] = ()
    must_exist: bool = False
    multiple: bool = False
    editor: str | None = None

    source_tag: str | None = Field(default=None, exclude=True)

    @property
    def has_default(self) -> bool:
        return self.default is not None

    def constraints(self) -> dict[str, Any]:
        """Everything that affects validation, for duplicate comparison."""
        return self.model_dump(
            include={
                "type",
                "required",
                "default",
                "pattern",
                "min",
                "max",
                "min_length",
                "max_length",
                "options",
                "extensions",
                "must_exist",
                "multiple",
            }
        )

    def empty_value(self) -> Any:
        value = EMPTY_VALUES.get(self.type, "")
        if self.type == "file" and self.multiple:
            return []
        return list(value) if isinstance(value, list) else value

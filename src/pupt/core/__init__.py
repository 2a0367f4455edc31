"""
Core data model for pupt: element tree, expressions and environment.
"""

from pupt.core.element import AttributeValue, Child, Element, create_element
from pupt.core.environment import (
    DEFAULT_ENVIRONMENT,
    EnvironmentContext,
    LlmConfig,
    OutputConfig,
    PromptConfig,
    create_environment,
    create_runtime_config,
)
from pupt.core.expressions import (
    FieldRef,
    Formula,
    ValuePlaceholder,
    is_expression,
)
from pupt.core.requirements import (
    EMPTY_VALUES,
    InputRequirement,
    InputType,
    SelectOption,
)

__all__ = [
    "AttributeValue",
    "Child",
    "Element",
    "create_element",
    "FieldRef",
    "Formula",
    "ValuePlaceholder",
    "is_expression",
    "DEFAULT_ENVIRONMENT",
    "EnvironmentContext",
    "LlmConfig",
    "OutputConfig",
    "PromptConfig",
    "create_environment",
    "create_runtime_config",
    "EMPTY_VALUES",
    "InputRequirement",
    "InputType",
    "SelectOption",
]

"""
Static preset and provider-adaptation tables.
"""

from pupt.presets.providers import (
    LANGUAGE_CONVENTIONS,
    PROVIDER_ADAPTATIONS,
    Provider,
    ProviderAdaptation,
    get_adaptation,
    get_language_conventions,
)
from pupt.presets.roles import EXPERIENCE_PREFIXES, ROLE_PRESETS, RolePreset
from pupt.presets.catalog import (
    CONSTRAINT_PRESETS,
    DEFAULT_CONSTRAINTS,
    DEFAULT_SUCCESS_CRITERIA,
    EDGE_CASE_PRESETS,
    FALLBACK_PRESETS,
    GUARDRAIL_PRESETS,
    LEVEL_MARKERS,
    POSITIVE_LEVELS,
    STEPS_PRESETS,
    STYLE_INSTRUCTIONS,
    SUCCESS_CRITERIA_PRESETS,
    TASK_PRESETS,
    UNCERTAINTY_ACTIONS,
    ConstraintPreset,
    StepsPreset,
    TaskPreset,
)

__all__ = [
    "LANGUAGE_CONVENTIONS",
    "PROVIDER_ADAPTATIONS",
    "Provider",
    "ProviderAdaptation",
    "get_adaptation",
    "get_language_conventions",
    "EXPERIENCE_PREFIXES",
    "ROLE_PRESETS",
    "RolePreset",
    "CONSTRAINT_PRESETS",
    "DEFAULT_CONSTRAINTS",
    "DEFAULT_SUCCESS_CRITERIA",
    "EDGE_CASE_PRESETS",
    "FALLBACK_PRESETS",
    "GUARDRAIL_PRESETS",
    "LEVEL_MARKERS",
    "POSITIVE_LEVELS",
    "STEPS_PRESETS",
    "STYLE_INSTRUCTIONS",
    "SUCCESS_CRITERIA_PRESETS",
    "TASK_PRESETS",
    "UNCERTAINTY_ACTIONS",
    "ConstraintPreset",
    "StepsPreset",
    "TaskPreset",
]

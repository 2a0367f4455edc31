"""
Formula evaluation for conditional prompt content.
"""

from pupt.formula.evaluator import (
    FUNCTIONS,
    UNSET,
    compare_values,
    evaluate,
    evaluate_value,
    parse_formula,
    to_boolean,
    tokenize,
)

__all__ = [
    "FUNCTIONS",
    "UNSET",
    "compare_values",
    "evaluate",
    "evaluate_value",
    "parse_formula",
    "to_boolean",
    "tokenize",
]

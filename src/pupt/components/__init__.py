"""
Built-in components.

Importing this package registers every built-in tag in the default
registry.
"""

from pupt.components import (  # noqa: F401
    ask,
    control,
    data,
    examples,
    post_execution,
    reasoning,
    structural,
    utility,
)
from pupt.components.base import Component, bullet_list, has_content

__all__ = ["Component", "bullet_list", "has_content"]

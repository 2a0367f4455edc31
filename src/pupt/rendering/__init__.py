"""
Discovery and render passes over element trees.
"""

from pupt.rendering.context import (
    PendingInput,
    RenderContext,
    RenderMode,
    RenderState,
    format_value,
)
from pupt.rendering.delimiters import DELIMITERS, wrap_with_delimiter
from pupt.rendering.registry import ComponentRegistry, default_registry, register
from pupt.rendering.renderer import Renderer
from pupt.rendering.results import (
    Diagnostic,
    DiscoveryResult,
    OpenUrlAction,
    PostExecutionAction,
    RenderResult,
    ReviewFileAction,
    RunCommandAction,
    WriteFileAction,
)

__all__ = [
    "PendingInput",
    "RenderContext",
    "RenderMode",
    "RenderState",
    "format_value",
    "DELIMITERS",
    "wrap_with_delimiter",
    "ComponentRegistry",
    "default_registry",
    "register",
    "Renderer",
    "Diagnostic",
    "DiscoveryResult",
    "OpenUrlAction",
    "PostExecutionAction",
    "RenderResult",
    "ReviewFileAction",
    "RunCommandAction",
    "WriteFileAction",
]

"""
pupt - Composable, provider-adapted LLM prompts from declarative markup

pupt parses prompt markup into an element tree, discovers the inputs the
tree needs, collects them through an input iterator and renders the tree
into provider-adapted text plus post-execution actions.
"""

from importlib.metadata import version

from pupt.api import (
    create_input_iterator,
    discover,
    parse,
    parse_file,
    render,
    render_for_providers,
)
from pupt.core import EnvironmentContext, create_element, create_environment
from pupt.rendering import Renderer, RenderResult

__version__ = version("pupt")

__all__ = [
    "__version__",
    "create_element",
    "create_environment",
    "create_input_iterator",
    "discover",
    "parse",
    "parse_file",
    "render",
    "render_for_providers",
    "EnvironmentContext",
    "Renderer",
    "RenderResult",
]

"""
Convenience entry points over the parser, renderer and input iterator.

These functions use the default component registry. Trees and preset tables
are read-only, so one parsed tree may be rendered from several threads at
once as long as each call gets its own input values.
"""

import logging
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

from pupt.core.element import Element
from pupt.core.environment import EnvironmentContext, create_environment
from pupt.inputs import InputIterator, InputIteratorOptions
from pupt.inputs import create_input_iterator as _create_input_iterator
from pupt.parsing import parse as _parse
from pupt.rendering import DiscoveryResult, Renderer, RenderResult

logger = logging.getLogger(__name__)

PROMPT_SUFFIX = ".prompt"

_renderer = Renderer()


def parse(source: str, source_name: str | None = None) -> Element:
    """
    Parse prompt markup.

    Raises:
        ParseError: On malformed markup
    """
    return _parse(source, source_name)


def parse_file(path: str | Path) -> Element:
    """
    Read and parse a ``.prompt`` file; the file name becomes the source name.

    Raises:
        ParseError: On malformed markup
        OSError: If the file cannot be read
    """
    path = Path(path)
    if path.suffix != PROMPT_SUFFIX:
        logger.debug("Parsing %s without the %s suffix", path, PROMPT_SUFFIX)
    return _parse(path.read_text(encoding="utf-8"), path.name)


def discover(
    element: Element, env: EnvironmentContext | Mapping | None = None, **options: Any
) -> DiscoveryResult:
    """Input requirements of a tree. See ``Renderer.discover``."""
    return _renderer.discover(element, env, **options)


def render(
    element: Element,
    env: EnvironmentContext | Mapping | None = None,
    inputs: Mapping[str, Any] | None = None,
    **options: Any,
) -> RenderResult:
    """Render a tree to text. See ``Renderer.render`` for the options."""
    return _renderer.render(element, inputs=inputs, env=env, **options)


def create_input_iterator(
    element: Element,
    options: InputIteratorOptions | Mapping | None = None,
    **kwargs: Any,
) -> InputIterator:
    """Input iterator for a tree. See ``pupt.inputs.create_input_iterator``."""
    return _create_input_iterator(element, options, **kwargs)


def render_for_providers(
    element: Element,
    providers: Iterable[str],
    inputs: Mapping[str, Any] | None = None,
    env: EnvironmentContext | Mapping | None = None,
    max_workers: int | None = None,
    **options: Any,
) -> dict[str, RenderResult]:
    """
    Render one tree for several providers concurrently.

    Params:
        element: Root of the prompt tree (shared read-only)
        providers: Provider identifiers, e.g. ``["anthropic", "openai"]``
        inputs: Input values; each render gets its own copy
        env: Base environment; only ``llm.provider`` differs per render
        max_workers: Thread pool size (executor default if None)
        options: Extra render options

    Returns:
        Provider name to RenderResult, in the order given
    """
    names = list(dict.fromkeys(providers))
    base = create_environment(env)

    def render_one(provider: str) -> RenderResult:
        provider_env = base.model_copy(
            update={"llm": base.llm.model_copy(update={"provider": provider})}
        )
        return _renderer.render(
            element, inputs=dict(inputs or {}), env=provider_env, **options
        )

    logger.debug("Rendering <%s> for %d provider(s)", element.tag, len(names))
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        results = list(executor.map(render_one, names))
    return dict(zip(names, results))

"""
Shared test fixtures and utilities for the pupt test suite.
"""

import warnings
from unittest.mock import Mock

import pytest

from pupt.parsing import parse
from pupt.rendering import Renderer


@pytest.fixture
def renderer():
    """Renderer bound to the default component registry."""
    return Renderer()


@pytest.fixture
def render_markup(renderer):
    """Parse markup and render it in one call.

    Usage:
        def test_something(render_markup):
            result = render_markup("<Task>Hi</Task>", inputs={"x": 1})
    """

    def _render(source: str, **options):
        return renderer.render(parse(source, "test.prompt"), **options)

    return _render


@pytest.fixture
def cancel_event():
    """Cancellation signal stand-in whose ``is_set`` returns True."""
    event = Mock()
    event.is_set.return_value = True
    return event


@pytest.fixture(autouse=True)
def quiet_pupt_warnings():
    """Keep recoverable pupt warnings out of the test output."""
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        yield

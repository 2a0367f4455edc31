"""
Fixtures for component tests.
"""

import pytest


@pytest.fixture
def render_plain(render_markup):
    """Render markup with no section envelopes and return the result.

    Usage:
        def test_something(render_plain):
            assert render_plain("<Task>Hi</Task>").text == "Hi"
    """

    def _render(source: str, env: dict | None = None, **options):
        environment = {"output": {"delimiter": "none"}}
        environment.update(env or {})
        return render_markup(source, env=environment, **options)

    return _render

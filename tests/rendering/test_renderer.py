"""
Tests for the render pass.

This module tests text output, delimiter resolution, diagnostics for bad
tags and inputs, warning handling, cancellation and post-execution actions.
"""

import pytest

from pupt.components.base import Component
from pupt.core import create_element, create_environment
from pupt.exceptions import UnknownTagWarning
from pupt.parsing import parse
from pupt.rendering import OpenUrlAction, Renderer
from pupt.rendering.registry import default_registry, register


class TestRenderText:
    """Tests for basic text output."""

    def test_hello_world(self, render_markup):
        """Test a supplied input reaches the task text."""
        result = render_markup(
            '<Prompt name="p"><Ask.Text name="who" label="Who"/>'
            "<Task>Hello {inputs.who}</Task></Prompt>",
            inputs={"who": "World"},
        )
        assert result.ok
        assert "Hello World" in result.text

    def test_bare_prompt(self, render_markup):
        """Test a bare prompt renders its children without envelopes or defaults."""
        result = render_markup("<Prompt bare><Task>Do it</Task></Prompt>")
        assert result.text == "Do it"
        assert result.diagnostics == ()

    def test_literal_and_binding_children(self, render_markup):
        """Test ForEach bindings are visible to child expressions."""
        result = render_markup("<ForEach items={['a', 'b']} as=\"x\">[{x}]</ForEach>")
        assert result.text == "[a][b]"

    def test_foreach_over_input(self, render_markup):
        """Test ForEach iterates a supplied list input."""
        result = render_markup(
            "<ForEach items={inputs.langs}>{item};</ForEach>",
            inputs={"langs": ["py", "go"]},
        )
        assert result.text == "py;go;"

    def test_env_reference(self, render_markup):
        """Test env references read the environment."""
        result = render_markup(
            "<Prompt bare><Task>{env.llm.provider}</Task></Prompt>",
            env={"llm": {"provider": "openai"}},
        )
        assert result.text == "openai"

    def test_trim_disabled(self, render_markup):
        """Test trimming can be switched off."""
        result = render_markup("<Task>x</Task>", env={"output": {"trim": False}})
        assert result.text == "<task>\nx\n</task>\n"

    def test_render_is_repeatable(self, renderer):
        """Test the same tree and inputs give the same text."""
        element = parse("<Prompt><Task>Hi {inputs.name}</Task></Prompt>")
        inputs = {"name": "Ann"}
        first = renderer.render(element, inputs)
        second = renderer.render(element, inputs)
        assert first.text == second.text
        assert inputs == {"name": "Ann"}

    def test_element_built_in_python(self, renderer):
        """Test trees built without markup render the same way."""
        element = create_element("Prompt", {"bare": True}, create_element("Task", None, "Go"))
        assert renderer.render(element).text == "Go"


class TestDelimiters:
    """Tests for delimiter resolution."""

    @pytest.mark.parametrize(
        "provider, expected",
        [
            ("anthropic", "<task>\nx\n</task>"),
            ("unspecified", "<task>\nx\n</task>"),
            ("openai", "## task\n\nx"),
        ],
    )
    def test_provider_default(self, render_markup, provider, expected):
        """Test the provider record picks the envelope."""
        result = render_markup("<Task>x</Task>", env={"llm": {"provider": provider}})
        assert result.text == expected

    def test_environment_overrides_provider(self, render_markup):
        """Test the environment delimiter beats the provider's."""
        result = render_markup(
            "<Task>x</Task>",
            env={"llm": {"provider": "anthropic"}, "output": {"delimiter": "none"}},
        )
        assert result.text == "x"

    def test_element_attribute_wins(self, render_markup):
        """Test an element's own delimiter beats the environment."""
        result = render_markup(
            '<Task delimiter="markdown">x</Task>', env={"output": {"delimiter": "xml"}}
        )
        assert result.text == "## task\n\nx"

    def test_inherited_from_ancestor(self, render_markup):
        """Test a child inherits its nearest ancestor's explicit delimiter."""
        result = render_markup(
            '<Section name="outer" delimiter="markdown"><Task>x</Task></Section>'
        )
        assert result.text == "## outer\n\n## task\n\nx"

    def test_explicit_inside_bare(self, render_markup):
        """Test an element's own delimiter still applies inside a bare prompt."""
        result = render_markup('<Prompt bare><Task delimiter="xml">x</Task></Prompt>')
        assert result.text == "<task>\nx\n</task>"


class TestDiagnostics:
    """Tests for errors and warnings reported during rendering."""

    def test_unknown_tag_strict(self, render_markup):
        """Test an unknown tag fails a strict render but keeps its children."""
        result = render_markup("<Mystery>x</Mystery>")
        assert not result.ok
        assert result.errors[0].code == "unknown_tag"
        assert result.text == "x"

    def test_unknown_tag_lenient(self, render_markup):
        """Test an unknown tag is only a warning when strict_tags is off."""
        result = render_markup("<Mystery>x</Mystery>", strict_tags=False)
        assert result.ok
        assert [d.code for d in result.warnings] == ["unknown_tag"]

    def test_unknown_tag_warning_emitted(self, render_markup):
        """Test lenient unknown tags also go through the warnings module."""
        with pytest.warns(UnknownTagWarning):
            render_markup("<Mystery>x</Mystery>", strict_tags=False)

    def test_missing_required_input(self, render_markup):
        """Test a required input without value or default is an error."""
        result = render_markup("<Task><Ask.Text name='who' required /></Task>")
        assert not result.ok
        assert result.errors[0].code == "missing_input"
        assert "who" in result.errors[0].message

    def test_missing_optional_input_is_empty(self, render_markup):
        """Test an optional input without value renders empty."""
        result = render_markup(
            "<Prompt bare><Task>[<Ask.Text name='who' />]</Task></Prompt>"
        )
        assert result.ok
        assert result.text == "[]"

    def test_partial_render_placeholder(self, render_markup):
        """Test preview renders show unsupplied inputs as placeholders."""
        result = render_markup(
            "<Prompt bare><Task>Hi {inputs.who}<Ask.Text name='who' required /></Task></Prompt>",
            partial=True,
        )
        assert result.ok
        assert result.text == "Hi {who}{who}"

    def test_default_used(self, render_markup):
        """Test a declared default fills references."""
        result = render_markup(
            "<Prompt bare><Ask.Text name='who' default='you' silent />"
            "<Task>Hi {inputs.who}</Task></Prompt>"
        )
        assert result.text == "Hi you"

    def test_unresolved_reference(self, render_markup):
        """Test a reference to an undeclared input is an error."""
        result = render_markup("<Task>{inputs.nope}</Task>")
        assert not result.ok
        assert result.errors[0].code == "unresolved_reference"
        assert "nope" in result.errors[0].message

    def test_undeclared_but_supplied(self, render_markup):
        """Test a supplied value satisfies a reference without an Ask."""
        result = render_markup(
            "<Prompt bare><Task>{inputs.topic}</Task></Prompt>", inputs={"topic": "cats"}
        )
        assert result.text == "cats"

    def test_throw_on_warnings(self, render_markup):
        """Test warnings can be promoted to errors."""
        result = render_markup("<Mystery />", strict_tags=False, throw_on_warnings=True)
        assert not result.ok
        assert result.errors[0].code == "unknown_tag"

    def test_ignore_warnings(self, render_markup):
        """Test ignored warning codes are dropped."""
        result = render_markup(
            "<Mystery />", strict_tags=False, ignore_warnings=["unknown_tag"]
        )
        assert result.ok
        assert result.diagnostics == ()

    def test_errors_are_not_ignorable(self, render_markup):
        """Test ignore_warnings leaves errors alone."""
        result = render_markup("<Mystery />", ignore_warnings=["unknown_tag"])
        assert not result.ok

    def test_discovery_failure_reported(self, render_markup):
        """Test an invalid input declaration fails the render."""
        result = render_markup("<Ask.Text name={inputs.x} />")
        assert not result.ok
        assert result.errors[0].code == "runtime_error"

    @pytest.mark.parametrize("error", [TypeError("bad operand"), ValueError("bad literal")])
    def test_component_error_reported(self, error):
        """Test a component raising on bad attribute data yields a diagnostic."""
        registry = default_registry.copy()

        @register("Broken", registry=registry)
        class Broken(Component):
            def render(self, element, ctx):
                raise error

        result = Renderer(registry).render(parse("<Prompt bare><Broken /><Task>x</Task></Prompt>"))
        assert not result.ok
        assert [d.code for d in result.errors] == ["runtime_error"]
        assert result.errors[0].component == "Broken"
        assert result.text == "x"


class TestCancellation:
    """Tests for cooperative cancellation."""

    def test_cancelled_render(self, render_markup, cancel_event):
        """Test a set signal stops the render."""
        result = render_markup("<Task>x</Task>", cancel_event=cancel_event)
        assert not result.ok
        assert result.text == ""
        assert result.diagnostics[-1].code == "cancelled"

    def test_signal_not_set(self, render_markup, cancel_event):
        """Test an unset signal does not interfere."""
        cancel_event.is_set.return_value = False
        assert render_markup("<Task>x</Task>", cancel_event=cancel_event).ok


class TestPostExecution:
    """Tests for post-execution action collection."""

    SOURCE = (
        "<Prompt bare><Task>x</Task>"
        "<PostExecution><OpenUrl url='https://example.com' /></PostExecution>{extra}"
        "</Prompt>"
    )

    def test_actions_collected(self, render_markup):
        """Test actions are returned and add no text."""
        result = render_markup(self.SOURCE.replace("{extra}", ""))
        assert result.text == "x"
        assert result.post_execution == (OpenUrlAction(url="https://example.com"),)

    def test_actions_dropped_on_failure(self, render_markup):
        """Test a failed render carries no actions."""
        result = render_markup(self.SOURCE.replace("{extra}", "<Mystery />"))
        assert not result.ok
        assert result.post_execution == ()

    def test_renderer_is_reusable(self):
        """Test one renderer serves independent calls."""
        renderer = Renderer()
        element = parse("<Prompt bare><Task>x</Task></Prompt>")
        env = create_environment({"llm": {"provider": "openai"}})
        assert renderer.render(element, env=env).text == renderer.render(element).text

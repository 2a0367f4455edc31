"""
Tests for If and ForEach.
"""

import pytest


class TestIf:
    """Tests for conditional rendering."""

    @pytest.mark.parametrize("when, expected", [("{true}", "yes"), ("{false}", "")])
    def test_literal_condition(self, render_plain, when, expected):
        """Test boolean literals."""
        assert render_plain(f"<If when={when}>yes</If>").text == expected

    @pytest.mark.parametrize("count, expected", [(7, "big"), (3, "")])
    def test_formula_condition(self, render_plain, count, expected):
        """Test a formula string is evaluated against the inputs."""
        result = render_plain('<If when="=count > 5">big</If>', inputs={"count": count})
        assert result.text == expected

    def test_braced_formula(self, render_plain):
        """Test a braced expression is evaluated in the render pass."""
        result = render_plain(
            "<If when={inputs.count > 5}>big</If>", inputs={"count": 9}
        )
        assert result.text == "big"

    def test_reference_condition(self, render_plain):
        """Test a reference is converted to a boolean."""
        source = "<If when={inputs.flag}>on</If>"
        assert render_plain(source, inputs={"flag": True}).text == "on"
        assert render_plain(source, inputs={"flag": ""}).text == ""

    def test_evaluation_error(self, render_plain):
        """Test a failing formula is reported and treated as false."""
        result = render_plain('<If when="=1 / 0 > 1">x</If>')
        assert not result.ok
        assert result.errors[0].code == "evaluation_error"
        assert result.text == ""

    @pytest.mark.parametrize(
        "provider, expected", [("openai", "gpt"), ("anthropic", ""), ("OpenAI", "gpt")]
    )
    def test_provider_filter(self, render_plain, provider, expected):
        """Test provider lists match the environment provider case-insensitively."""
        result = render_plain(
            '<If provider="openai, google">gpt</If>', env={"llm": {"provider": provider}}
        )
        assert result.text == expected

    def test_not_provider(self, render_plain):
        """Test notProvider excludes providers."""
        source = "<If notProvider={['anthropic']}>not claude</If>"
        assert render_plain(source, env={"llm": {"provider": "anthropic"}}).text == ""
        assert render_plain(source).text == "not claude"


class TestForEach:
    """Tests for repeated rendering."""

    def test_default_binding_name(self, render_plain):
        """Test items are bound as 'item' by default."""
        assert render_plain("<ForEach items={[1, 2]}>({item})</ForEach>").text == "(1)(2)"

    def test_comma_separated_string(self, render_plain):
        """Test a string is split on commas."""
        result = render_plain('<ForEach items="a, b" as="x">{x}.</ForEach>')
        assert result.text == "a.b."

    def test_nested_fields(self, render_plain):
        """Test bindings support dotted access."""
        result = render_plain(
            "<ForEach items={inputs.people} as='p'>{p.name}={p.age} </ForEach>",
            inputs={"people": [{"name": "a", "age": 1}, {"name": "b", "age": 2}]},
        )
        assert result.text == "a=1 b=2"

    def test_empty_items(self, render_plain):
        """Test missing or empty items render nothing."""
        assert render_plain("<ForEach items={[]}>x</ForEach>").text == ""
        assert render_plain("<ForEach>x</ForEach>").text == ""

    def test_nested_loops(self, render_plain):
        """Test inner loops see outer bindings."""
        result = render_plain(
            "<ForEach items={['a', 'b']} as='o'>"
            "<ForEach items={[1, 2]} as='i'>{o}{i} </ForEach></ForEach>"
        )
        assert result.text == "a1 a2 b1 b2"

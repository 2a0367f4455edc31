"""
Tests for the top-level convenience API.
"""

import pytest

import pupt
from pupt.exceptions import ParseError

SOURCE = (
    '<Prompt name="p"><Ask.Text name="who" label="Who"/>'
    "<Task>Hello {inputs.who}</Task></Prompt>"
)


class TestApi:
    """Tests for parse, discover and render entry points."""

    def test_parse_discover_render(self):
        """Test the full pipeline through the package functions."""
        element = pupt.parse(SOURCE)
        assert pupt.discover(element).names == ["who"]
        result = pupt.render(element, inputs={"who": "World"})
        assert result.ok
        assert "Hello World" in result.text

    def test_iterator_pipeline(self):
        """Test collecting inputs through the iterator before rendering."""
        element = pupt.parse(SOURCE)
        iterator = pupt.create_input_iterator(element)
        iterator.start()
        iterator.submit("World")
        assert "Hello World" in pupt.render(element, inputs=iterator.get_values()).text

    def test_parse_file(self, tmp_path):
        """Test a file is parsed with its name as the source name."""
        path = tmp_path / "greet.prompt"
        path.write_text(SOURCE, encoding="utf-8")
        element = pupt.parse_file(path)
        assert element.source_name == "greet.prompt"
        assert element.tag == "Prompt"

    def test_parse_file_error_location(self, tmp_path):
        """Test parse errors name the file."""
        path = tmp_path / "broken.prompt"
        path.write_text("<Prompt>\n<Task>", encoding="utf-8")
        with pytest.raises(ParseError, match="broken.prompt"):
            pupt.parse_file(path)

    def test_render_for_providers(self):
        """Test one tree rendered for several providers at once."""
        element = pupt.parse("<Task>x</Task>")
        results = pupt.render_for_providers(
            element, ["anthropic", "openai", "anthropic"], env={"output": {"trim": True}}
        )
        assert list(results) == ["anthropic", "openai"]
        assert results["anthropic"].text == "<task>\nx\n</task>"
        assert results["openai"].text == "## task\n\nx"

    def test_render_for_providers_keeps_environment(self):
        """Test the base environment applies to every provider."""
        element = pupt.parse("<Task>{inputs.topic}</Task>")
        results = pupt.render_for_providers(
            element,
            ["openai", "google"],
            inputs={"topic": "cats"},
            env={"output": {"delimiter": "none"}},
        )
        assert {name: result.text for name, result in results.items()} == {
            "openai": "cats",
            "google": "cats",
        }

    def test_version(self):
        """Test the package exposes its version."""
        assert pupt.__version__

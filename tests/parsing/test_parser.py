"""
Tests for the markup parser.

This module tests element structure, attribute literals and expressions,
namespaced tags, whitespace normalization and parse error reporting.
"""

import pytest

from pupt.core import FieldRef, Formula
from pupt.exceptions import ParseError
from pupt.parsing import (
    LiteralReader,
    is_ask_tag,
    normalize_text,
    parse,
    resolve_tag_name,
)


class TestElementStructure:
    """Tests for basic tree construction."""

    def test_scenario_markup(self):
        """Test parsing a prompt with an ask and a reference."""
        root = parse(
            '<Prompt name="p"><Ask.Text name="who" label="Who"/>'
            "<Task>Hello {inputs.who}</Task></Prompt>"
        )
        assert root.tag == "Prompt"
        assert root.get("name") == "p"
        ask, task = root.element_children()
        assert ask.tag == "Ask.Text"
        assert ask.get("label") == "Who"
        assert task.children == ("Hello ", FieldRef(("inputs", "who")))

    def test_self_closing_has_no_children(self):
        """Test self-closing tags produce empty children."""
        root = parse("<UUID />")
        assert root.tag == "UUID"
        assert root.children == ()

    def test_line_and_source_name_recorded(self):
        """Test elements remember where they were parsed from."""
        root = parse("<Prompt>\n  <Task>x</Task>\n</Prompt>", "a.prompt")
        task = root.element_children()[0]
        assert task.line == 2
        assert task.source_name == "a.prompt"

    def test_leading_comments_ignored(self):
        """Test comment blocks before the root tag are skipped."""
        source = "<!-- header -->\n// note\n/* block */\n{/* jsx */}\n<Task>x</Task>"
        assert parse(source).tag == "Task"

    def test_comments_inside_children_ignored(self):
        """Test comments between children are dropped."""
        root = parse("<Task>a<!-- hidden -->b{/* also hidden */}</Task>")
        assert root.children == ("ab",)

    def test_nested_element_in_braces(self):
        """Test a braced element child is kept as an element."""
        root = parse("<Section>{<Task>inner</Task>}</Section>")
        assert root.element_children()[0].tag == "Task"


class TestAttributes:
    """Tests for attribute values."""

    def test_quoted_strings_unescaped(self):
        """Test HTML entities in quoted attributes are decoded."""
        root = parse('<Task note="a &amp; b" other=\'x\' />')
        assert root.get("note") == "a & b"
        assert root.get("other") == "x"

    def test_bare_attribute_is_true(self):
        """Test a valueless attribute means True."""
        assert parse("<Ask.Text name='a' required />").get("required") is True

    def test_literals(self):
        """Test braced literal attributes."""
        root = parse(
            "<X n={5} f={1.5} b={false} nil={null} s={'hi'} "
            "arr={['a', 'b']} obj={{role: false, 'x': [1]}} />"
        )
        assert root.get("n") == 5
        assert root.get("f") == 1.5
        assert root.get("b") is False
        assert root.get("nil") is None
        assert root.get("s") == "hi"
        assert root.get("arr") == ("a", "b")
        assert root.get("obj") == {"role": False, "x": (1,)}

    def test_reference_and_formula(self):
        """Test references and formulas stay unevaluated."""
        root = parse("<If when={inputs.count > 5} items={inputs.list} />")
        assert root.get("when") == Formula("inputs.count > 5")
        assert root.get("items") == FieldRef(("inputs", "list"))

    def test_element_attribute(self):
        """Test an element held in an attribute."""
        root = parse("<Section extra={<Ask.Text name='x' />} />")
        assert root.get("extra").tag == "Ask.Text"

    def test_attribute_names_kept_as_written(self):
        """Test camelCase attribute names are not rewritten."""
        root = parse("<Steps selfCritique showReasoning={true} />")
        assert set(root.attributes) == {"selfCritique", "showReasoning"}

    def test_duplicate_attribute_rejected(self):
        """Test a repeated attribute is a parse error."""
        with pytest.raises(ParseError, match="Duplicate attribute"):
            parse('<Task a="1" a="2" />')

    def test_invalid_formula_rejected(self):
        """Test a malformed expression is a parse error."""
        with pytest.raises(ParseError, match="Invalid expression"):
            parse("<If when={a > > b} />")

    def test_unquoted_value_rejected(self):
        """Test unquoted attribute values are a parse error."""
        with pytest.raises(ParseError):
            parse("<Task a=1 />")


class TestTagNames:
    """Tests for namespaced tags and aliases."""

    def test_alias_resolves(self):
        """Test flat aliases map to namespaced tags."""
        root = parse("<Example><ExampleInput>q</ExampleInput></Example>")
        assert root.element_children()[0].tag == "Example.Input"

    def test_alias_closing_tag_accepted(self):
        """Test an alias may be closed with the canonical name."""
        root = parse("<AskSelect name='a'></Ask.Select>")
        assert root.tag == "Ask.Select"

    def test_unknown_namespace(self):
        """Test unknown namespaces are a parse error."""
        with pytest.raises(ParseError, match="Unknown namespace"):
            parse("<Foo.Bar />")

    def test_unknown_member(self):
        """Test unknown namespace members are a parse error."""
        with pytest.raises(ParseError, match="not a member"):
            parse("<Ask.Date name='d' />")

    def test_resolve_tag_name(self):
        """Test direct tag resolution."""
        assert resolve_tag_name("Task") == "Task"
        assert resolve_tag_name("AskText") == "Ask.Text"
        with pytest.raises(ValueError):
            resolve_tag_name("Ask.Nope")

    def test_is_ask_tag(self):
        """Test option and label markers are not input-declaring tags."""
        assert is_ask_tag("Ask.Text")
        assert not is_ask_tag("Ask.Option")
        assert not is_ask_tag("Ask.Label")
        assert is_ask_tag("Ask.Path")
        assert not is_ask_tag("Task")

    @pytest.mark.parametrize(
        "written, canonical",
        [("AskPath", "Ask.Path"), ("AskChoice", "Ask.Choice"), ("AskLabel", "Ask.Label")],
    )
    def test_ask_alias_members(self, written, canonical):
        """Test the path, choice and label asks resolve in both spellings."""
        assert resolve_tag_name(written) == canonical
        assert resolve_tag_name(canonical) == canonical


class TestParseErrors:
    """Tests for fatal parse errors and their locations."""

    def test_unterminated_tag(self):
        """Test an unclosed element reports its location."""
        with pytest.raises(ParseError, match="Unterminated tag") as info:
            parse("<Prompt>\n  <Task>hi", "broken.prompt")
        assert "broken.prompt" in str(info.value)

    def test_mismatched_closing_tag(self):
        """Test a wrong closing tag is reported."""
        with pytest.raises(ParseError, match="Mismatched closing tag"):
            parse("<Task>hi</Role>")

    def test_empty_source(self):
        """Test markup without a root element fails."""
        with pytest.raises(ParseError, match="no root element"):
            parse("   <!-- only a comment -->  ")

    def test_content_after_root(self):
        """Test trailing content after the root fails."""
        with pytest.raises(ParseError, match="after the root"):
            parse("<Task>a</Task><Task>b</Task>")

    def test_error_line_and_column(self):
        """Test the error carries line and column."""
        with pytest.raises(ParseError) as info:
            parse("<Task>\n<Ask.Bogus />\n</Task>")
        assert info.value.line == 2
        assert info.value.column == 2

    def test_object_child_rejected(self):
        """Test object literals cannot be children."""
        with pytest.raises(ParseError, match="Objects are not valid"):
            parse("<Task>{{a: 1}}</Task>")


class TestWhitespace:
    """Tests for text normalization."""

    def test_indented_block_dedented(self):
        """Test multi-line text loses blank edges and common indentation."""
        root = parse("<Task>\n    Line one\n      indented\n    Line two\n</Task>")
        assert root.children == ("Line one\n  indented\nLine two",)

    def test_inline_text_verbatim(self):
        """Test single-line text keeps its spaces."""
        root = parse("<Task>  spaced  </Task>")
        assert root.children == ("  spaced  ",)

    def test_indentation_between_tags_dropped(self):
        """Test whitespace-only text between elements disappears."""
        root = parse("<Prompt>\n  <Task>a</Task>\n  <Role>b</Role>\n</Prompt>")
        assert all(not isinstance(child, str) for child in root.children)

    def test_braced_string_not_normalized(self):
        """Test braced string literals keep their whitespace."""
        root = parse("<Task>{'  keep\n  this  '}</Task>")
        assert root.children == ("  keep\n  this  ",)

    def test_normalize_text_drops_whitespace_only(self):
        """Test whitespace-only multi-line text is removed."""
        assert normalize_text("\n   \n", True, True) is None
        assert normalize_text("", False, False) is None


class TestLiteralReader:
    """Tests for the literal reader used by braced expressions."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("42", 42),
            ("-3.5", -3.5),
            ("'x'", "x"),
            ('"a\\nb"', "a\nb"),
            ("[1, 2,]", (1, 2)),
            ("{a: 1}", {"a": 1}),
            ("undefined", None),
        ],
    )
    def test_reads_literals(self, text, expected):
        """Test literal forms accepted by the reader."""
        assert LiteralReader(text).read_complete() == expected

"""
Tests for the structural components.

This module tests Prompt default sections, Role/Task presets, constraint
framing per provider, and the remaining section components.
"""

import pytest

DEFAULT_CONSTRAINT_LINES = (
    "- Keep responses concise and focused\n"
    "- Be accurate and factual\n"
    "- Acknowledge uncertainty when unsure"
)


class TestPrompt:
    """Tests for Prompt default sections."""

    def test_defaults_injected(self, render_plain):
        """Test role, format and constraints are added around the children."""
        result = render_plain("<Prompt><Task>Do X</Task></Prompt>")
        assert result.ok
        assert result.text == (
            "You are a helpful Assistant. You have expertise in general help.\n"
            "Do X\n"
            "Output format: markdown\n" + DEFAULT_CONSTRAINT_LINES
        )

    def test_defaults_wrapped_for_provider(self, render_markup):
        """Test default sections use the provider's envelope."""
        result = render_markup(
            "<Prompt><Task>Do X</Task></Prompt>", env={"llm": {"provider": "anthropic"}}
        )
        assert result.text.startswith("<role>\nYou are a helpful Assistant.")
        assert "<task>\nDo X\n</task>" in result.text
        assert "<format>\nOutput format: xml\n</format>" in result.text

    def test_defaults_none(self, render_plain):
        """Test defaults='none' renders only the children."""
        result = render_plain('<Prompt defaults="none"><Task>Do X</Task></Prompt>')
        assert result.text == "Do X"

    def test_switches(self, render_plain):
        """Test single default sections can be switched off."""
        result = render_plain(
            "<Prompt noRole defaults={{constraints: false}}><Task>Do X</Task></Prompt>"
        )
        assert result.text == "Do X\nOutput format: markdown"

    def test_environment_switches(self, render_plain):
        """Test the environment decides which defaults are added."""
        result = render_plain(
            "<Prompt><Task>Do X</Task></Prompt>",
            env={
                "prompt": {
                    "include_role": False,
                    "include_format": False,
                    "include_constraints": False,
                    "include_success_criteria": True,
                    "include_guardrails": True,
                }
            },
        )
        assert result.text.startswith(
            "Do X\n- Response addresses the task completely\n"
        )
        assert "Safety and compliance requirements:" in result.text

    def test_existing_sections_not_duplicated(self, render_plain):
        """Test an explicit Role replaces the default role."""
        result = render_plain(
            "<Prompt noFormat noConstraints><Role>Pirate</Role><Task>Sail</Task></Prompt>"
        )
        assert result.text == "Pirate\nSail"

    def test_default_role_from_attributes(self, render_plain):
        """Test the Prompt role and expertise attributes shape the default role."""
        result = render_plain(
            '<Prompt role="engineer" expertise="Go" noFormat noConstraints>'
            "<Task>t</Task></Prompt>"
        )
        assert result.text.startswith(
            "You are a helpful Software Engineer. You have expertise in Go."
        )

    def test_missing_task_warning(self, render_plain):
        """Test a Prompt without a Task warns but still renders."""
        result = render_plain("<Prompt noRole><Context>c</Context></Prompt>")
        assert result.ok
        assert [d.code for d in result.warnings] == ["warn_missing_task"]

    @pytest.mark.parametrize(
        "body",
        [
            "<Section name='work'><Task>t</Task></Section>",
            "<If when={true}><Task>t</Task></If>",
        ],
    )
    def test_nested_task_counts(self, render_plain, body):
        """Test a Task anywhere below the Prompt silences the missing-task warning."""
        result = render_plain(f"<Prompt noRole>{body}</Prompt>")
        assert result.ok
        assert "warn_missing_task" not in [d.code for d in result.warnings]

    def test_constraints_container_replaces_defaults(self, render_plain):
        """Test explicit constraints suppress the default list."""
        result = render_plain(
            "<Prompt noRole noFormat><Task>t</Task>"
            "<Constraints><Constraint>Custom</Constraint></Constraints></Prompt>"
        )
        assert result.text == "t\n- Custom"

    def test_constraints_extend_with_exclude(self, render_plain):
        """Test extend keeps the defaults minus the excluded ones."""
        result = render_plain(
            "<Prompt noRole noFormat><Task>t</Task>"
            '<Constraints extend exclude="concise"><Constraint>Custom</Constraint></Constraints>'
            "</Prompt>"
        )
        assert result.text == (
            "t\n- Custom\n- Be accurate and factual\n- Acknowledge uncertainty when unsure"
        )

    def test_bare_skips_everything(self, render_plain):
        """Test bare mode adds nothing, not even the missing-task warning."""
        result = render_plain("<Prompt bare><Context>c</Context></Prompt>")
        assert result.text == "c"
        assert result.diagnostics == ()


class TestRole:
    """Tests for Role rendering."""

    def test_preset(self, render_plain):
        """Test a role preset with its level, expertise and traits."""
        result = render_plain('<Role preset="engineer" />')
        assert result.text == (
            "You are a senior Software Engineer with expertise in software development, "
            "programming, system design. You are analytical, detail-oriented, problem-solver."
        )

    def test_provider_prefix(self, render_plain):
        """Test the provider's role prefix is used."""
        result = render_plain(
            '<Role preset="engineer" />', env={"llm": {"provider": "google"}}
        )
        assert result.text.startswith("Your role: a senior Software Engineer")

    def test_attributes_override_preset(self, render_plain):
        """Test explicit attributes merge with the preset."""
        result = render_plain(
            '<Role preset="engineer" title="Architect" experience="principal" '
            'expertise="Programming, cloud" domain="fintech" traits="calm" />'
        )
        assert result.text == (
            "You are a principal Architect with expertise in Programming, cloud, "
            "software development, system design. You are calm. "
            "Specializing in the fintech domain."
        )

    def test_children(self, render_plain):
        """Test children form the role text."""
        result = render_plain('<Role expertise="Go, Rust">A systems expert</Role>')
        assert result.text == "A systems expert\nwith expertise in Go, Rust"

    def test_unknown_preset(self, render_plain):
        """Test an unknown preset warns and falls back to attributes."""
        result = render_plain('<Role preset="wizard" />')
        assert result.ok
        assert result.text == "You are Assistant."
        assert result.warnings[0].code == "unknown_preset"


class TestTaskAndContext:
    """Tests for Task, Context, Objective and Section."""

    def test_task_preset(self, render_plain):
        """Test a task preset fills an empty Task."""
        result = render_plain('<Task preset="summarize" />')
        assert result.text == "Summarize the provided content. Provide a short summary."

    def test_task_children_win(self, render_plain):
        """Test Task children take precedence over the preset."""
        assert render_plain('<Task preset="summarize">Mine</Task>').text == "Mine"

    def test_context(self, render_plain):
        """Test label and source decorate context."""
        result = render_plain('<Context label="Background" source="wiki">Facts</Context>')
        assert result.text == "Background:\nFacts\n(Source: wiki)"

    def test_objective(self, render_plain):
        """Test objective goal lists."""
        result = render_plain('<Objective primary="Ship" secondary="Test, Doc" />')
        assert result.text == "Primary goal: Ship\n\nSecondary goals:\n- Test\n- Doc"

    def test_section_named_envelope(self, render_markup):
        """Test a Section uses its name as the envelope tag."""
        assert render_markup('<Section name="notes">n</Section>').text == (
            "<notes>\nn\n</notes>"
        )

    def test_empty_section_omitted(self, render_markup):
        """Test a Section without content renders nothing."""
        assert render_markup('<Section name="notes">  </Section>').text == ""


class TestConstraints:
    """Tests for constraint framing."""

    def test_level_marker(self, render_plain):
        """Test the normative marker prefix."""
        result = render_plain('<Constraint level="must">Cite sources</Constraint>')
        assert result.text == "MUST: Cite sources"

    @pytest.mark.parametrize(
        "provider, expected",
        [
            ("unspecified", "MUST: Remain objective and factual"),
            ("anthropic", "MUST: Remain objective and factual"),
            ("openai", "MUST NOT: Include personal opinions"),
        ],
    )
    def test_positive_framing(self, render_plain, provider, expected):
        """Test negative presets are rephrased for positively framed providers."""
        result = render_plain(
            '<Constraint preset="no-opinions" />', env={"llm": {"provider": provider}}
        )
        assert result.text == expected

    def test_constraint_list(self, render_plain):
        """Test a Constraints list merges children and presets."""
        result = render_plain(
            '<Constraints presets="be-concise">'
            '<Constraint level="must">A</Constraint></Constraints>'
        )
        assert result.text == "- MUST: A\n- SHOULD: Keep responses concise and focused"


class TestFormatAndStyle:
    """Tests for Format, Audience, Tone, SuccessCriteria and Guardrails."""

    def test_format(self, render_plain):
        """Test format attributes build the instructions."""
        result = render_plain('<Format type="json" strict maxLength={100} />')
        assert result.text == (
            "Output format: json\n\n"
            "Maximum length: 100 characters.\n\n"
            "Return ONLY the formatted output with no additional text or explanation."
        )

    def test_format_schema(self, render_plain):
        """Test an object schema is shown as JSON."""
        result = render_plain("<Format type='json' schema={{type: 'object'}} />")
        assert 'Schema:\n```json\n{\n  "type": "object"\n}\n```' in result.text

    def test_format_children_only(self, render_plain):
        """Test Format children without a type are used as is."""
        assert render_plain("<Format>Use bullets</Format>").text == "Use bullets"

    def test_tone(self, render_plain):
        """Test tone description and avoid list."""
        result = render_plain('<Tone type="friendly" avoidTones="sarcastic" />')
        assert result.text == (
            "Tone: friendly\nBe warm, approachable, and supportive.\n"
            "Avoid these tones: sarcastic"
        )

    def test_audience(self, render_plain):
        """Test audience level guidance."""
        result = render_plain('<Audience level="beginner" type="technical" />')
        assert result.text == (
            "Target audience: beginner technical users\n\n"
            "Use simple language, avoid jargon, and provide analogies where helpful."
        )

    def test_success_criteria(self, render_plain):
        """Test success criteria presets and criterion children."""
        result = render_plain(
            '<SuccessCriteria presets="conciseness">'
            '<Criterion category="style">Short</Criterion></SuccessCriteria>'
        )
        assert result.text == "- No unnecessary repetition or filler\n- Short (style)"

    def test_guardrails(self, render_plain):
        """Test guardrail preset with required and prohibited lists."""
        result = render_plain(
            '<Guardrails preset="minimal" require="Be polite" prohibit="Share secrets" />'
        )
        assert result.text == (
            "Safety and compliance requirements:\n"
            "- Do not generate harmful content\n"
            "- Acknowledge uncertainty when unsure\n\n"
            "Required behaviors:\n- Be polite\n\n"
            "Prohibited actions:\n- Do not: Share secrets"
        )


class TestGuidanceSections:
    """Tests for style, uncertainty, specialization and context grouping."""

    def test_contexts_groups_children(self, render_markup):
        """Test several contexts share one outer envelope."""
        result = render_markup("<Contexts><Context>a</Context><Context>b</Context></Contexts>")
        assert result.text == (
            "<contexts>\n<context>\na\n</context>\n<context>\nb\n</context>\n</contexts>"
        )

    def test_empty_contexts_omitted(self, render_plain):
        """Test an empty group renders nothing."""
        assert render_plain("<Contexts />").text == ""

    def test_style(self, render_plain):
        """Test style type, verbosity and formality."""
        result = render_plain("<Style type='concise' verbosity='minimal' formality='formal' />")
        assert result.text == (
            "Writing style: concise\nBe brief and to the point.\n"
            "Verbosity: minimal\nFormality: formal"
        )

    def test_style_children(self, render_markup):
        """Test children replace the generated style text."""
        result = render_markup("<Style type='casual'>Write like a pirate</Style>")
        assert result.text == "<style>\nWrite like a pirate\n</style>"

    @pytest.mark.parametrize(
        "action, expected",
        [
            ("ask", "If you are uncertain, ask clarifying questions before proceeding."),
            ("shrug", "If you are uncertain: shrug"),
        ],
    )
    def test_when_uncertain(self, render_plain, action, expected):
        """Test known and free-form uncertainty actions."""
        assert render_plain(f"<WhenUncertain action='{action}' />").text == expected

    def test_specialization(self, render_markup):
        """Test areas and expertise level."""
        result = render_markup("<Specialization areas={['TypeScript', 'React']} level='expert' />")
        assert result.text == (
            "<specialization>\nSpecialized in: TypeScript, React\n"
            "Expertise level: expert\n</specialization>"
        )


class TestConditionLists:
    """Tests for edge cases and fallbacks."""

    def test_edge_cases_preset_and_children(self, render_plain):
        """Test preset cases come before When children."""
        result = render_plain(
            "<EdgeCases preset='minimal'>"
            "<When condition='a timeout occurs'>Retry once</When></EdgeCases>"
        )
        assert result.text == (
            "- When input is unclear: ask a clarifying question\n"
            "- When a timeout occurs: Retry once"
        )

    def test_edge_cases_standard(self, render_plain):
        """Test the standard preset covers missing data and ambiguity."""
        text = render_plain("<EdgeCases preset='standard' />").text
        assert "missing required data" in text
        assert "outside your expertise" in text
        assert "multiple valid interpretations" in text

    def test_edge_cases_empty(self, render_markup):
        """Test no preset and no children renders nothing."""
        result = render_markup("<EdgeCases />")
        assert result.ok
        assert result.text == ""

    def test_edge_cases_envelope(self, render_markup):
        """Test the section name."""
        result = render_markup("<EdgeCases><When condition='x'>y</When></EdgeCases>")
        assert result.text == "<edge-cases>\n- When x: y\n</edge-cases>"

    def test_fallbacks(self, render_plain):
        """Test fallback preset plus explicit fallbacks."""
        result = render_plain(
            "<Fallbacks preset='standard'><Fallback when='timeout' then='retry' /></Fallbacks>"
        )
        assert result.text.splitlines() == [
            "- If unable to complete the request, then explain why and suggest alternatives",
            "- If missing required information, then ask specific questions to gather it",
            "- If encountering an error, then describe the error and how to recover",
            "- If timeout, then retry",
        ]

    def test_standalone_fallback(self, render_plain):
        """Test a Fallback outside a list renders without a bullet."""
        assert render_plain("<Fallback when='stuck' then='say so' />").text == (
            "If stuck, then say so"
        )

    def test_unknown_preset_warns(self, render_plain):
        """Test an unknown edge-case preset is a warning."""
        result = render_plain("<EdgeCases preset='exotic' />")
        assert [d.code for d in result.warnings] == ["unknown_preset"]


class TestReferences:
    """Tests for reference lists."""

    SOURCES = (
        "sources={[{title: 'API Docs', url: 'https://api.example.com', "
        "description: 'Official'}]}"
    )

    def test_inline_style(self, render_plain):
        """Test the default style puts each field on its own line."""
        result = render_plain(
            f"<References {self.SOURCES}><Reference title='Wiki'>Team notes</Reference></References>"
        )
        assert result.text == (
            "API Docs\nURL: https://api.example.com\nOfficial\n\nWiki\nTeam notes"
        )

    @pytest.mark.parametrize(
        "style, expected",
        [
            ("bibliography", "- API Docs <https://api.example.com>: Official"),
            ("footnote", "[API Docs]: https://api.example.com (Official)"),
        ],
    )
    def test_citation_styles(self, render_plain, style, expected):
        """Test bibliography and footnote formats."""
        result = render_plain(f"<References style='{style}' {self.SOURCES} />")
        assert result.text == expected

    def test_empty_references(self, render_plain):
        """Test no sources and no children renders nothing."""
        assert render_plain("<References />").text == ""

    def test_standalone_reference(self, render_markup):
        """Test a Reference outside a list has its own envelope."""
        result = render_markup("<Reference title='Guide' url='https://example.com' />")
        assert result.text == "<reference>\nGuide\nURL: https://example.com\n</reference>"

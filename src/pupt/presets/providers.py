"""
Provider adaptation records.

One read-only record per supported LLM provider. Components consult the
active record for role wording, constraint framing and the default
delimiter envelope. Unknown provider identifiers fall back to the
``unspecified`` record.
"""

from enum import Enum
from types import MappingProxyType

from attrs import frozen


class Provider(Enum):
    anthropic = "anthropic"
    openai = "openai"
    google = "google"
    meta = "meta"
    mistral = "mistral"
    deepseek = "deepseek"
    xai = "xai"
    cohere = "cohere"
    unspecified = "unspecified"


@frozen
class ProviderAdaptation:
    provider: Provider
    role_prefix: str
    constraint_style: str  # positive | negative | balanced
    format_preference: str  # xml | markdown | json
    instruction_style: str  # direct | elaborate | structured
    delimiter: str  # envelope used when nothing closer sets one


def _record(provider, role_prefix="You are ", constraint_style="balanced",
            format_preference="markdown", instruction_style="direct",
            delimiter="markdown"):
    return ProviderAdaptation(
        provider=provider,
        role_prefix=role_prefix,
        constraint_style=constraint_style,
        format_preference=format_preference,
        instruction_style=instruction_style,
        delimiter=delimiter,
    )


PROVIDER_ADAPTATIONS = MappingProxyType(
    {
        Provider.anthropic.value: _record(
            Provider.anthropic,
            constraint_style="positive",
            format_preference="xml",
            instruction_style="structured",
            delimiter="xml",
        ),
        Provider.openai.value: _record(Provider.openai),
        Provider.google.value: _record(
            Provider.google, role_prefix="Your role: ", constraint_style="positive"
        ),
        Provider.meta.value: _record(Provider.meta),
        Provider.mistral.value: _record(Provider.mistral),
        Provider.deepseek.value: _record(
            Provider.deepseek, instruction_style="structured"
        ),
        Provider.xai.value: _record(Provider.xai),
        Provider.cohere.value: _record(Provider.cohere),
        Provider.unspecified.value: _record(
            Provider.unspecified,
            constraint_style="positive",
            instruction_style="structured",
            delimiter="xml",
        ),
    }
)


def get_adaptation(provider: "str | Provider | None") -> ProviderAdaptation:
    """
    Look up the adaptation record for a provider.

    Params:
        provider: Provider identifier; case-insensitive, unknown values allowed

    Returns:
        The provider's record, or the ``unspecified`` record
    """
    if isinstance(provider, Provider):
        key = provider.value
    else:
        key = (provider or "").strip().lower()
    return PROVIDER_ADAPTATIONS.get(key, PROVIDER_ADAPTATIONS[Provider.unspecified.value])


LANGUAGE_CONVENTIONS = MappingProxyType(
    {
        "typescript": (
            "Use explicit type annotations",
            "Prefer interfaces over type aliases for objects",
            "Use async/await over raw promises",
        ),
        "python": (
            "Follow PEP 8 style guide",
            "Use type hints",
            "Prefer list comprehensions where readable",
        ),
        "rust": (
            "Use idiomatic Rust patterns",
            "Handle errors with Result type",
            "Prefer references over cloning",
        ),
        "go": (
            "Follow effective Go guidelines",
            "Handle errors explicitly",
            "Use short variable names in small scopes",
        ),
        "unspecified": ("Follow language best practices",),
    }
)


def get_language_conventions(language: str | None) -> tuple[str, ...]:
    """Coding conventions for a language, or the generic fallback."""
    key = (language or "").lower()
    return LANGUAGE_CONVENTIONS.get(key, LANGUAGE_CONVENTIONS["unspecified"])

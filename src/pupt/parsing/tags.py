"""
Tag name resolution for prompt markup.

Namespaced tags are written with a dot (``Ask.Text``). Only the namespaces
and members listed here are valid; a few flat spellings are accepted as
aliases of their namespaced form.
"""

from types import MappingProxyType

ASK_NAMESPACE = "Ask"
EXAMPLE_NAMESPACE = "Example"

NAMESPACES = MappingProxyType(
    {
        ASK_NAMESPACE: frozenset(
            {
                "Text",
                "Number",
                "Select",
                "MultiSelect",
                "Confirm",
                "File",
                "Secret",
                "Editor",
                "ReviewFile",
                "Option",
                "Path",
                "Choice",
                "Label",
            }
        ),
        EXAMPLE_NAMESPACE: frozenset({"Input", "Output"}),
    }
)

TAG_ALIASES = MappingProxyType(
    {
        "AskText": "Ask.Text",
        "AskNumber": "Ask.Number",
        "AskSelect": "Ask.Select",
        "AskMultiSelect": "Ask.MultiSelect",
        "AskConfirm": "Ask.Confirm",
        "AskFile": "Ask.File",
        "AskSecret": "Ask.Secret",
        "AskEditor": "Ask.Editor",
        "AskReviewFile": "Ask.ReviewFile",
        "AskOption": "Ask.Option",
        "AskPath": "Ask.Path",
        "AskChoice": "Ask.Choice",
        "AskLabel": "Ask.Label",
        "ExampleInput": "Example.Input",
        "ExampleOutput": "Example.Output",
    }
)


def resolve_tag_name(name: str) -> str:
    """
    Normalize a tag name as written in markup.

    Params:
        name: Raw tag name

    Returns:
        Canonical tag name

    Raises:
        ValueError: If a namespaced tag uses an unknown namespace or member
    """
    if name in TAG_ALIASES:
        return TAG_ALIASES[name]

    if "." not in name:
        return name

    namespace, _, member = name.partition(".")
    members = NAMESPACES.get(namespace)
    if members is None:
        raise ValueError(
            f"Unknown namespace '{namespace}' (known: {', '.join(sorted(NAMESPACES))})"
        )
    if member not in members:
        raise ValueError(
            f"'{member}' is not a member of namespace '{namespace}' "
            f"(known: {', '.join(sorted(members))})"
        )
    return name


def is_ask_tag(tag: str) -> bool:
    """Whether a canonical tag declares an input (option and label markers do not)."""
    return tag.startswith(ASK_NAMESPACE + ".") and tag not in ("Ask.Option", "Ask.Label")

"""
Section envelopes for the three delimiter styles.
"""

DELIMITERS = ("xml", "markdown", "none")


def wrap_with_delimiter(content: str, tag: str, delimiter: str) -> str:
    """
    Wrap section content in its envelope.

    Params:
        content: Rendered section body; surrounding blank lines are dropped
        tag: Section name, e.g. ``role`` or ``constraints``
        delimiter: One of ``xml``, ``markdown`` or ``none``

    Returns:
        The wrapped section, always ending with a newline
    """
    body = content.strip("\n")
    if delimiter == "xml":
        return f"<{tag}>\n{body}\n</{tag}>\n"
    if delimiter == "markdown":
        return f"## {tag}\n\n{body}\n\n"
    return f"{body}\n"

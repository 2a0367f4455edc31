"""LangChain integration for rendered prompts.

Helpers here turn pupt trees and render results into `langchain_core`
objects so they can be composed with chat models:
    - `as_runnable` wraps the render pass itself as a `Runnable`
    - `to_prompt_template` / `to_chat_prompt` wrap finished text as templates

Rendered text is literal: any braces it contains are escaped so LangChain's
f-string templating leaves them untouched.
"""

from collections.abc import Mapping
from typing import Any

from langchain_core.prompts import (
    ChatPromptTemplate,
    HumanMessagePromptTemplate,
    PromptTemplate,
    SystemMessagePromptTemplate,
)
from langchain_core.runnables import Runnable, RunnableLambda

from pupt.core.element import Element
from pupt.core.environment import EnvironmentContext
from pupt.exceptions import PuptError
from pupt.rendering import Renderer, RenderResult


def escape_braces(text: str) -> str:
    return text.replace("{", "{{").replace("}", "}}")


def _require_ok(result: RenderResult) -> str:
    if not result.ok:
        details = "; ".join(str(diagnostic) for diagnostic in result.errors)
        raise PuptError(f"Render failed: {details}")
    return result.text


def as_runnable(
    element: Element,
    env: EnvironmentContext | Mapping | None = None,
    renderer: Renderer | None = None,
    **options: Any,
) -> Runnable:
    """
    Wrap rendering of a tree as a runnable mapping input values to text.

    Params:
        element: Root of the prompt tree
        env: Environment applied to every invocation
        renderer: Renderer to use (default registry if None)
        options: Extra render options (``partial``, ``strict_tags`` ...)

    Returns:
        `RunnableLambda` taking a dict of input values and returning text

    Raises:
        PuptError: At invocation time, when the render fails
    """
    active = renderer or Renderer()

    def render_inputs(values: Mapping[str, Any] | None) -> str:
        result = active.render(element, inputs=dict(values or {}), env=env, **options)
        return _require_ok(result)

    return RunnableLambda(render_inputs, name="pupt_render")


def to_prompt_template(result: RenderResult) -> PromptTemplate:
    """
    Wrap successful render text in a template with no input variables.

    Raises:
        PuptError: If the render result is not ok
    """
    return PromptTemplate.from_template(escape_braces(_require_ok(result)))


def to_chat_prompt(result: RenderResult, human_template: str = "{input}") -> ChatPromptTemplate:
    """
    Chat template using the rendered prompt as the system message.

    Params:
        result: Successful render result
        human_template: Template for the human turn; its variables remain open

    Returns:
        ChatPromptTemplate with a system and a human message

    Raises:
        PuptError: If the render result is not ok
    """
    system = escape_braces(_require_ok(result))
    return ChatPromptTemplate.from_messages(
        [
            SystemMessagePromptTemplate.from_template(system),
            HumanMessagePromptTemplate.from_template(human_template),
        ]
    )

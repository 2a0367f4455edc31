"""
Environment configuration handed to the renderer.

The environment is supplied by the caller (usually from a configuration
loading collaborator) and carries the target LLM provider, output options
and prompt default-section switches.
"""

import getpass
import os
import socket
import uuid
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Delimiter = Literal["xml", "markdown", "none"]


class LlmConfig(BaseModel):
    """Target model description. Unknown providers are accepted as-is."""

    model_config = ConfigDict(frozen=True, extra="allow")

    provider: str = "unspecified"
    model: str | None = None
    max_tokens: int | None = None
    temperature: float | None = None


class OutputConfig(BaseModel):
    """Output shaping options.

    Params:
        delimiter: Envelope style forced for the whole render; when None each
            node falls back to its ancestors, then to the provider preference
        trim: Strip leading/trailing whitespace from the final text
        indent: Indent unit used by data components
    """

    model_config = ConfigDict(frozen=True)

    delimiter: Delimiter | None = None
    trim: bool = True
    indent: str = "  "


class PromptConfig(BaseModel):
    """Which default sections a non-bare ``Prompt`` injects."""

    model_config = ConfigDict(frozen=True)

    include_role: bool = True
    include_format: bool = True
    include_constraints: bool = True
    include_success_criteria: bool = False
    include_guardrails: bool = False
    default_role: str = "assistant"


class EnvironmentContext(BaseModel):
    """Complete environment for one render call."""

    model_config = ConfigDict(frozen=True)

    llm: LlmConfig = Field(default_factory=LlmConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    prompt: PromptConfig = Field(default_factory=PromptConfig)
    runtime: dict[str, Any] = Field(default_factory=dict)

    @property
    def provider(self) -> str:
        return self.llm.provider


DEFAULT_ENVIRONMENT = EnvironmentContext()


def create_environment(
    env: "EnvironmentContext | dict[str, Any] | None" = None, **overrides: Any
) -> EnvironmentContext:
    """
    Build an environment from a model, a nested dict, or keyword overrides.

    Params:
        env: Existing environment or nested dict such as ``{"llm": {"provider": "openai"}}``
        overrides: Top-level sections to replace (``llm=...``, ``output=...``)

    Returns:
        Validated EnvironmentContext
    """
    if isinstance(env, EnvironmentContext):
        data = env.model_dump()
    else:
        data = dict(env or {})
    data.update(overrides)
    return EnvironmentContext.model_validate(data)


def create_runtime_config() -> dict[str, Any]:
    """
    Gather host/time values consumed by the utility components.

    These values change between calls, so they are only collected when a
    caller explicitly opts in; the default environment carries none.
    """
    now = datetime.now(timezone.utc)
    try:
        username = getpass.getuser()
    except (KeyError, OSError):
        username = "anonymous"
    return {
        "hostname": socket.gethostname(),
        "username": username,
        "cwd": os.getcwd(),
        "timestamp": int(now.timestamp() * 1000),
        "date": now.date().isoformat(),
        "time": now.strftime("%H:%M:%S"),
        "uuid": str(uuid.uuid4()),
    }

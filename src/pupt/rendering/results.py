"""
Result records returned by the discovery and render passes.
"""

from dataclasses import dataclass, field
from typing import Literal

from pupt.core.requirements import InputRequirement

Severity = Literal["error", "warning"]


@dataclass(frozen=True)
class Diagnostic:
    """
    A problem recorded during a pass.

    Params:
        code: Machine-readable code, e.g. ``missing_input``
        message: Human-readable description
        component: Tag of the element that raised it, if any
        severity: ``error`` fails the render, ``warning`` does not
    """

    code: str
    message: str
    component: str | None = None
    severity: Severity = "error"

    @property
    def is_error(self) -> bool:
        return self.severity == "error"

    def __str__(self) -> str:
        where = f" <{self.component}>" if self.component else ""
        return f"[{self.severity}] {self.code}{where}: {self.message}"


# Post-execution actions are descriptors only; the renderer never runs them.


@dataclass(frozen=True)
class ReviewFileAction:
    file: str
    editor: str | None = None
    type: str = field(default="reviewFile", init=False)


@dataclass(frozen=True)
class OpenUrlAction:
    url: str
    browser: str | None = None
    type: str = field(default="openUrl", init=False)


@dataclass(frozen=True)
class RunCommandAction:
    command: str
    cwd: str | None = None
    type: str = field(default="runCommand", init=False)


@dataclass(frozen=True)
class WriteFileAction:
    path: str
    content: str
    type: str = field(default="writeFile", init=False)


PostExecutionAction = ReviewFileAction | OpenUrlAction | RunCommandAction | WriteFileAction


@dataclass(frozen=True)
class RenderResult:
    """
    Outcome of a render pass.

    Params:
        ok: False when any error diagnostic was recorded
        text: Rendered prompt text (treat as invalid when ok is False)
        post_execution: Side-effect descriptors, empty unless ok
        diagnostics: Errors and warnings in the order they were recorded
    """

    ok: bool
    text: str
    post_execution: tuple[PostExecutionAction, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if not d.is_error]


@dataclass(frozen=True)
class DiscoveryResult:
    """Ordered, deduplicated requirements plus any warnings raised while collecting them."""

    requirements: tuple[InputRequirement, ...]
    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def names(self) -> list[str]:
        return [requirement.name for requirement in self.requirements]

    def get(self, name: str) -> InputRequirement | None:
        for requirement in self.requirements:
            if requirement.name == name:
                return requirement
        return None

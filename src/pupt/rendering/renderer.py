"""
Two-pass renderer: input discovery and text rendering.

Discovery walks every node of a tree, including branches behind If/ForEach
guards and elements held in attributes, and collects the declared input
requirements without evaluating anything. Rendering walks the tree again
with a finished input value snapshot and produces provider-adapted text
plus post-execution action descriptors.
"""

import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

import pupt.components  # noqa: F401  populates the default registry
from pupt.core.element import Element
from pupt.core.environment import EnvironmentContext, create_environment
from pupt.core.expressions import FieldRef, Formula
from pupt.core.requirements import InputRequirement
from pupt.exceptions import DiscoveryError, PuptError, RenderCancelledError
from pupt.presets import get_adaptation
from pupt.rendering.context import (
    RenderContext,
    RenderMode,
    RenderState,
    format_value,
)
from pupt.rendering.registry import ComponentRegistry, default_registry
from pupt.rendering.results import Diagnostic, DiscoveryResult, RenderResult

logger = logging.getLogger(__name__)


def _as_environment(env: "EnvironmentContext | Mapping | None") -> EnvironmentContext:
    if isinstance(env, EnvironmentContext):
        return env
    return create_environment(dict(env) if env else None)


class Renderer:
    """
    Walks element trees against a component registry.

    Renderers hold no per-call state; one instance may serve concurrent
    calls on different threads.
    """

    def __init__(self, registry: ComponentRegistry | None = None):
        self.registry = registry if registry is not None else default_registry

    def _context(
        self,
        mode: RenderMode,
        env: EnvironmentContext,
        inputs: Mapping[str, Any],
        requirements: Mapping[str, InputRequirement],
        cancel_event: Any = None,
        **options: Any,
    ) -> RenderContext:
        return RenderContext(
            mode=mode,
            env=env,
            adaptation=get_adaptation(env.llm.provider),
            inputs=MappingProxyType(dict(inputs)),
            requirements=MappingProxyType(dict(requirements)),
            state=RenderState(cancel_event=cancel_event),
            renderer=self,
            **options,
        )

    # Discovery

    def discover(
        self,
        element: Element,
        env: "EnvironmentContext | Mapping | None" = None,
        cancel_event: Any = None,
    ) -> DiscoveryResult:
        """
        Collect the input requirements declared anywhere in a tree.

        Params:
            element: Root of the tree
            env: Environment (affects nothing but is visible to components)
            cancel_event: Object with ``is_set()`` checked between nodes

        Returns:
            DiscoveryResult with requirements in first-occurrence order

        Raises:
            DiscoveryError: On a cyclic tree or an invalid input declaration
            RenderCancelledError: If the cancellation signal was set
        """
        environment = _as_environment(env)
        ctx = self._context(
            RenderMode.DISCOVERY, environment, {}, {}, cancel_event=cancel_event
        )
        logger.debug("Discovery started for <%s>", element.tag)

        found: list[tuple[InputRequirement, bool]] = []
        self._collect(element, ctx, found, active=set(), top_level=False)
        requirements = self._deduplicate(found, ctx)

        logger.debug(
            "Discovery finished for <%s>: %d requirement(s)",
            element.tag,
            len(requirements),
        )
        return DiscoveryResult(
            requirements=tuple(requirements), diagnostics=tuple(ctx.state.diagnostics)
        )

    def _collect(
        self,
        element: Element,
        ctx: RenderContext,
        found: list,
        active: set,
        top_level: bool,
    ) -> None:
        ctx.check_cancelled()
        if id(element) in active:
            raise DiscoveryError("cyclic element reference", element.tag)
        active.add(id(element))

        ctx = ctx.enter(element)
        component = self.registry.get(element.tag)
        if component is not None and component.declares_input:
            try:
                requirement = component.requirement(element, ctx)
            except DiscoveryError:
                raise
            except PuptError as e:
                raise DiscoveryError(str(e), element.tag) from e
            found.append((requirement, top_level))

        for nested in self._attribute_elements(element.attributes.values()):
            self._collect(nested, ctx, found, active, top_level=False)
        for child in element.children:
            if isinstance(child, Element):
                is_root = len(ctx.path) == 1
                self._collect(child, ctx, found, active, top_level=is_root)

        active.discard(id(element))

    def _attribute_elements(self, values: Iterable[Any]) -> Iterable[Element]:
        for value in values:
            if isinstance(value, Element):
                yield value
            elif isinstance(value, (list, tuple)):
                yield from self._attribute_elements(value)
            elif isinstance(value, Mapping):
                yield from self._attribute_elements(value.values())

    def _deduplicate(
        self, found: list[tuple[InputRequirement, bool]], ctx: RenderContext
    ) -> list[InputRequirement]:
        """
        Merge requirements sharing a name.

        The first occurrence fixes the position. A declaration made directly
        under the root replaces the content of an earlier inline one.
        """
        merged: dict[str, InputRequirement] = {}
        declared_top_level: set[str] = set()

        for requirement, top_level in found:
            name = requirement.name
            existing = merged.get(name)
            if existing is None:
                merged[name] = requirement
            else:
                if existing.constraints() != requirement.constraints():
                    ctx.report(
                        "duplicate_input",
                        f"Input '{name}' is declared more than once with different "
                        "constraints",
                        severity="warning",
                        component=requirement.source_tag,
                        key=name,
                    )
                if top_level and name not in declared_top_level:
                    merged[name] = requirement
            if top_level:
                declared_top_level.add(name)

        return list(merged.values())

    # Render

    def render(
        self,
        element: Element,
        inputs: Mapping[str, Any] | None = None,
        env: "EnvironmentContext | Mapping | None" = None,
        partial: bool = False,
        strict_tags: bool = True,
        throw_on_warnings: bool = False,
        ignore_warnings: Iterable[str] = (),
        cancel_event: Any = None,
    ) -> RenderResult:
        """
        Render a tree to text.

        Params:
            element: Root of the tree
            inputs: Input values by name; copied, never mutated
            env: Environment (provider, output options, prompt defaults)
            partial: Preview mode; unsupplied inputs render as ``{name}``
            strict_tags: Unknown tags fail the render (else warn)
            throw_on_warnings: Promote warnings to errors
            ignore_warnings: Warning codes to drop
            cancel_event: Object with ``is_set()`` checked between nodes

        Returns:
            RenderResult; problems are reported as diagnostics, not raised
        """
        environment = _as_environment(env)
        values = dict(inputs or {})

        try:
            discovery = self.discover(element, environment, cancel_event)
        except RenderCancelledError:
            return self._cancelled(())
        except DiscoveryError as e:
            return self._finish(
                "",
                [],
                [Diagnostic("runtime_error", str(e), e.tag)],
                throw_on_warnings,
                ignore_warnings,
            )

        ctx = self._context(
            RenderMode.RENDER,
            environment,
            values,
            {requirement.name: requirement for requirement in discovery.requirements},
            cancel_event=cancel_event,
            partial=partial,
            strict_tags=strict_tags,
        )
        ctx.state.diagnostics.extend(discovery.diagnostics)
        logger.debug(
            "Render started for <%s> (provider=%s, partial=%s)",
            element.tag,
            environment.llm.provider,
            partial,
        )

        try:
            text = self.render_node(element, ctx)
            # Post-execution regions run after all text is final
            for region, region_ctx in ctx.state.deferred:
                self.render_children(region, region_ctx)
        except RenderCancelledError:
            return self._cancelled(ctx.state.diagnostics)

        if environment.output.trim:
            text = text.strip()

        result = self._finish(
            text,
            ctx.state.post_execution,
            ctx.state.diagnostics,
            throw_on_warnings,
            ignore_warnings,
        )
        logger.debug(
            "Render finished for <%s>: ok=%s, %d diagnostic(s)",
            element.tag,
            result.ok,
            len(result.diagnostics),
        )
        return result

    def _finish(
        self,
        text: str,
        actions: list,
        diagnostics: list,
        throw_on_warnings: bool,
        ignore_warnings: Iterable[str],
    ) -> RenderResult:
        ignored = set(ignore_warnings)
        kept = []
        for diagnostic in diagnostics:
            if not diagnostic.is_error:
                if diagnostic.code in ignored:
                    continue
                if throw_on_warnings:
                    diagnostic = Diagnostic(
                        diagnostic.code,
                        diagnostic.message,
                        diagnostic.component,
                        "error",
                    )
            kept.append(diagnostic)

        ok = not any(diagnostic.is_error for diagnostic in kept)
        return RenderResult(
            ok=ok,
            text=text,
            post_execution=tuple(actions) if ok else (),
            diagnostics=tuple(kept),
        )

    def _cancelled(self, diagnostics) -> RenderResult:
        logger.debug("Render cancelled")
        return RenderResult(
            ok=False,
            text="",
            post_execution=(),
            diagnostics=tuple(diagnostics)
            + (Diagnostic("cancelled", "Render cancelled by caller"),),
        )

    def render_node(self, node: Any, ctx: RenderContext) -> str:
        """Render one child: element, literal text or expression."""
        ctx.check_cancelled()
        if isinstance(node, str):
            return node
        if isinstance(node, (FieldRef, Formula)):
            return format_value(ctx.resolve(node))
        if isinstance(node, Element):
            return self.render_element(node, ctx)
        return format_value(node)

    def render_children(self, element: Element, ctx: RenderContext) -> str:
        return "".join(self.render_node(child, ctx) for child in element.children)

    def render_element(self, element: Element, ctx: RenderContext) -> str:
        if id(element) in ctx.active:
            ctx.report("runtime_error", "cyclic element reference", component=element.tag)
            return ""

        inner = ctx.enter(element)
        component = self.registry.get(element.tag)
        if component is None:
            if ctx.strict_tags:
                inner.report("unknown_tag", f"Unknown tag <{element.tag}>", key=element.tag)
            else:
                inner.report(
                    "unknown_tag",
                    f"Unknown tag <{element.tag}> rendered as its children",
                    severity="warning",
                    key=element.tag,
                )
            return self.render_children(element, inner)

        try:
            return component.render(element, inner)
        except RenderCancelledError:
            raise
        except PuptError as e:
            inner.report("runtime_error", str(e))
            return ""
        except (TypeError, ValueError) as e:
            logger.debug("Component <%s> failed", element.tag, exc_info=True)
            inner.report("runtime_error", f"<{element.tag}> could not render: {e}")
            return ""

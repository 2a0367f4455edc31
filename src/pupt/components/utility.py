"""
Utility components that render host and time values.

Values come from ``env.runtime`` when the caller supplied them (see
``create_runtime_config``); otherwise they are gathered at render time, so
these components make a render non-deterministic.
"""

from datetime import datetime, timezone

from pupt.components.base import Component
from pupt.core.element import Element
from pupt.core.environment import create_runtime_config
from pupt.rendering.context import RenderContext, format_value
from pupt.rendering.registry import register


class RuntimeValue(Component):
    key = ""

    def render(self, element: Element, ctx: RenderContext) -> str:
        runtime = ctx.env.runtime
        if self.key not in runtime:
            runtime = create_runtime_config()
        return format_value(runtime.get(self.key))


@register("UUID")
class UUID(RuntimeValue):
    key = "uuid"


@register("Hostname")
class Hostname(RuntimeValue):
    key = "hostname"


@register("Username")
class Username(RuntimeValue):
    key = "username"


@register("Cwd")
class Cwd(RuntimeValue):
    key = "cwd"


@register("Timestamp")
class Timestamp(RuntimeValue):
    """Milliseconds since the epoch."""

    key = "timestamp"


@register("DateTime")
class DateTime(Component):
    """Current UTC time, ISO formatted, or with a ``format`` strftime pattern."""

    def render(self, element: Element, ctx: RenderContext) -> str:
        timestamp = ctx.env.runtime.get("timestamp")
        if timestamp is None:
            moment = datetime.now(timezone.utc)
        else:
            moment = datetime.fromtimestamp(int(timestamp) / 1000, timezone.utc)
        pattern = ctx.attr(element, "format")
        return moment.strftime(pattern) if pattern else moment.isoformat()

"""
Registry mapping tag names to component renderers.

The default registry is populated once, when ``pupt.components`` is
imported, and is treated as read-only afterwards. Custom registries can be
built from a copy of it and handed to a Renderer.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pupt.components.base import Component


class ComponentRegistry:
    """Tag name to component lookup used by the renderer."""

    def __init__(self, components: "dict[str, Component] | None" = None):
        self._components: dict[str, "Component"] = dict(components or {})

    def store(self, tag: str, component: "Component") -> None:
        """
        Register a component under a tag name.

        Params:
            tag: Canonical tag name (``Task``, ``Ask.Text``)
            component: Component instance that renders the tag

        Raises:
            ValueError: If the tag is already registered
        """
        if tag in self._components:
            raise ValueError(
                f"Tag '{tag}' is already registered to "
                f"{type(self._components[tag]).__name__}"
            )
        self._components[tag] = component

    def get(self, tag: str) -> "Component | None":
        """Component for a tag, or None when the tag is unknown."""
        return self._components.get(tag)

    def has(self, tag: str) -> bool:
        return tag in self._components

    def list_tags(self) -> list[str]:
        return sorted(self._components)

    def copy(self) -> "ComponentRegistry":
        """Independent registry with the same entries, for customization."""
        return ComponentRegistry(self._components)

    def __contains__(self, tag: str) -> bool:
        return tag in self._components

    def __len__(self) -> int:
        return len(self._components)


default_registry = ComponentRegistry()


def register(*tags: str, registry: ComponentRegistry | None = None):
    """
    Class decorator registering a component class under one or more tags.

    The class is instantiated once; components hold no per-render state.
    Without explicit tags the class name is used.
    """

    def decorator(cls):
        target = registry if registry is not None else default_registry
        instance = cls()
        for tag in tags or (cls.__name__,):
            target.store(tag, instance)
        cls.tags = tuple(tags or (cls.__name__,))
        return cls

    return decorator

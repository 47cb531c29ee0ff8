from __future__ import annotations

from typing import TYPE_CHECKING

from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

if TYPE_CHECKING:
    from gadgets.base import BaseGadget


class GadgetTypeNotFound(LookupError):
    """Raised when no registered gadget type matches a stored type identifier."""


class BasePlugin:
    name: str = ""
    label: str = ""
    version: str = "1.0.0"
    description: str = ""
    # Dotted paths, imported on first use so plugins can be registered from
    # AppConfig.ready() before their gadget modules load.
    gadget_type_paths: tuple[str, ...] = ()

    def get_gadget_types(self) -> list[type[BaseGadget]]:
        return [import_string(path) for path in self.gadget_type_paths]


class PluginRegistry:
    """Plugins and the gadget types they provide, indexed by gadget slug."""

    def __init__(self):
        self._plugins: dict[str, BasePlugin] = {}
        self._gadget_types: dict[str, type[BaseGadget]] = {}
        self._owners: dict[str, str] = {}

    def register(self, plugin: BasePlugin) -> None:
        if not plugin.name:
            raise ImproperlyConfigured(f"{type(plugin).__name__} has no name.")
        if plugin.name in self._plugins:
            self.unregister(plugin.name)

        gadget_types = {}
        for cls in plugin.get_gadget_types():
            if not cls.slug:
                raise ImproperlyConfigured(f"Gadget type {cls.__name__} has no slug.")
            owner = self._owners.get(cls.slug)
            if owner is not None or cls.slug in gadget_types:
                raise ImproperlyConfigured(
                    f"Gadget slug {cls.slug!r} from plugin {plugin.name!r} is already "
                    f"registered by plugin {owner or plugin.name!r}."
                )
            gadget_types[cls.slug] = cls

        self._plugins[plugin.name] = plugin
        self._gadget_types.update(gadget_types)
        self._owners.update(dict.fromkeys(gadget_types, plugin.name))

    def unregister(self, name: str) -> None:
        self._plugins.pop(name, None)
        for slug in [slug for slug, owner in self._owners.items() if owner == name]:
            del self._owners[slug]
            del self._gadget_types[slug]

    def all_plugins(self) -> list[BasePlugin]:
        return list(self._plugins.values())

    def get_plugin(self, name: str) -> BasePlugin | None:
        return self._plugins.get(name)

    def get_all_gadget_types(self) -> list[type[BaseGadget]]:
        return list(self._gadget_types.values())

    def get_gadget_type(self, slug: str) -> type[BaseGadget]:
        try:
            return self._gadget_types[slug]
        except KeyError:
            raise GadgetTypeNotFound(f"No gadget type registered for {slug!r}.") from None

    def has_gadget_type(self, slug: str) -> bool:
        return slug in self._gadget_types

    def gadget_choices(self) -> list[tuple[str, str]]:
        """(slug, label) pairs sorted by label, for the gadget picker."""
        return sorted(
            ((slug, cls.label or slug) for slug, cls in self._gadget_types.items()),
            key=lambda choice: choice[1].lower(),
        )


registry = PluginRegistry()

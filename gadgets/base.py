from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Callable, Optional, TextIO

from django import forms
from django.utils.html import format_html
from django.utils.translation import gettext, ngettext

from .models import GadgetInstance, NoDatabaseError
from .setting_types import GadgetSetting, SettingType

logger = logging.getLogger(__name__)

TITLE_CSS_CLASS = "gadget-title"


class UnknownSettingError(ValueError):
    """Raised when a gadget is asked for a setting it never defined."""


class GadgetDefinitionError(RuntimeError):
    """Raised when a gadget is modified outside of its define() hook."""


@dataclass
class GadgetContext:
    request: Any = None
    gettext: Callable[[str], str] = field(default=gettext)
    ngettext: Callable[[str, str, int], str] = field(default=ngettext)


class BaseGadget:
    """Base class for sidebar gadgets.

    A gadget is built from a :class:`GadgetContext` and the
    :class:`~gadgets.models.GadgetInstance` that binds setting values to it.
    Subclasses declare settings, a default title, a description, AJAX proxy
    mappings and static resources in :meth:`define`, then override
    :meth:`init`, :meth:`process` and :meth:`display` as needed.

    Every gadget has a ``title`` string setting, always listed first, whose
    default is the default title.
    """

    slug: str = ""
    label: str = ""

    def __init__(self, context: GadgetContext, instance: GadgetInstance):
        self._default_title = context.gettext("Untitled Gadget")
        self._settings: dict[str, GadgetSetting] = {}
        self._description: Optional[str] = None
        self._ajax_proxy_map: dict[str, str] = {}
        self._style_sheets: list[str] = []
        self._javascripts: list[str] = []

        self.instance = instance
        self.context = context

        self._defining = True
        try:
            self.define()

            # common settings go before the ones the subclass defined
            user_defined_settings = self._settings
            self._settings = {}
            self.define_setting(
                "title",
                context.gettext("Title"),
                SettingType.STRING,
                self._default_title,
            )
            self._settings.update(user_defined_settings)
        finally:
            self._defining = False

    def __repr__(self):
        return f"<{type(self).__name__} instance={self.instance.pk}>"

    # Lifecycle hooks

    def init(self) -> None:
        pass

    def process(self) -> None:
        pass

    def display(self, out: TextIO) -> None:
        """Write this gadget's HTML to ``out``. Only the title by default."""
        self.display_title(out)

    def display_title(self, out: TextIO) -> None:
        out.write(format_html('<h3 class="{}">{}</h3>', TITLE_CSS_CLASS, self.get_title()))

    # Introspection

    def get_title(self) -> str:
        return self.get_value("title")

    def get_description(self) -> Optional[str]:
        return self._description

    def get_settings(self) -> list[GadgetSetting]:
        return list(self._settings.values())

    def get_ajax_proxy_map(self) -> dict[str, str]:
        return dict(self._ajax_proxy_map)

    @property
    def media(self) -> forms.Media:
        return forms.Media(
            css={"all": tuple(self._style_sheets)} if self._style_sheets else {},
            js=tuple(self._javascripts),
        )

    def has_setting(self, name: str) -> bool:
        return name in self._settings

    # Values

    @cached_property
    def _values(self) -> dict[str, Any]:
        values: dict[str, Any] = {}
        try:
            setting_values = self.instance.get_setting_values()
        except NoDatabaseError as exc:
            logger.debug("Skipping stored values for %r: %s", self, exc)
            return values

        for setting_value in setting_values:
            setting = self._settings.get(setting_value.name)
            if setting is None:
                continue
            try:
                value = setting_value.get_value(setting.type)
            except ValueError:
                logger.warning(
                    "Ignoring invalid %s value %r for setting %r of %r",
                    setting.type,
                    setting_value.value,
                    setting.name,
                    self,
                )
                continue
            # an empty stored value counts as unset
            if value is not None:
                values[setting.name] = value
        return values

    def get_value(self, name: str) -> Any:
        """Return the stored value of ``name``, or its default if none is stored."""
        self._check_setting(name)
        if name in self._values:
            return self._values[name]
        return self.get_default_value(name)

    def get_default_value(self, name: str) -> Any:
        self._check_setting(name)
        return self._settings[name].default

    def _check_setting(self, name: str) -> None:
        if not self.has_setting(name):
            raise UnknownSettingError(
                f'Gadget "{type(self).__name__}" does not have a setting named "{name}".'
            )

    # Definition

    def define(self) -> None:
        """Hook for subclasses to declare settings and resources."""

    def _check_defining(self, what: str) -> None:
        if not self._defining:
            raise GadgetDefinitionError(
                f"{what} can only be called from {type(self).__name__}.define()."
            )

    def define_setting(
        self,
        name: str,
        title: str,
        type: str = SettingType.STRING,
        default: Any = None,
    ) -> None:
        self._check_defining("define_setting()")
        self._settings[name] = GadgetSetting(name, title, type, default)

    def define_default_title(self, title: str) -> None:
        self._check_defining("define_default_title()")
        self._default_title = str(title)

    def define_description(self, description: str) -> None:
        self._check_defining("define_description()")
        self._description = str(description)

    def define_ajax_proxy_mapping(self, from_: str, to: str) -> None:
        """Map a request path pattern to a third-party URI.

        ``to`` may contain ``\\1``-style references to groups of ``from_``.
        The proxy view does the matching and substitution.
        """
        self._check_defining("define_ajax_proxy_mapping()")
        self._ajax_proxy_map[from_] = to

    def add_style_sheet(self, path: str) -> None:
        self._check_defining("add_style_sheet()")
        if path not in self._style_sheets:
            self._style_sheets.append(path)

    def add_javascript(self, path: str) -> None:
        self._check_defining("add_javascript()")
        if path not in self._javascripts:
            self._javascripts.append(path)

from __future__ import annotations

import logging

from urllib.parse import urlencode

import markdown
from django.urls import reverse
from django.utils import timezone
from django.utils.html import format_html, linebreaks
from django.utils.safestring import mark_safe

from .base import BaseGadget
from .setting_types import SettingType

logger = logging.getLogger(__name__)

CONTENT_TYPES = ("text", "markdown", "html")


class ContentGadget(BaseGadget):
    slug = "content"
    label = "Arbitrary Content"

    def define(self):
        _ = self.context.gettext
        self.define_default_title(_("Content"))
        self.define_description(
            _(
                "Provides a place to put arbitrary content in the sidebar. "
                "Content may be Markdown, plain text or raw HTML depending on "
                "the 'content_type' setting."
            )
        )
        self.define_setting("content", _("Content"), SettingType.TEXT, "")
        self.define_setting("content_type", _("Content Type"), SettingType.STRING, "markdown")

    def render_content(self) -> str:
        content = self.get_value("content") or ""
        content_type = self.get_value("content_type")
        if content_type not in CONTENT_TYPES:
            logger.warning("ContentGadget: unknown content_type %r, treating as text", content_type)
            content_type = "text"

        if content_type == "html":
            return mark_safe(content)
        if content_type == "markdown":
            md = markdown.Markdown(extensions=["fenced_code"])
            return mark_safe(md.convert(content))
        return mark_safe(linebreaks(content, autoescape=True))

    def display(self, out):
        super().display(out)
        out.write(format_html('<div class="gadget-content">{}</div>', self.render_content()))


class FlickrGadget(BaseGadget):
    slug = "flickr"
    label = "Flickr Photos"

    def define(self):
        _ = self.context.gettext
        self.define_default_title(_("Photos"))
        self.define_description(_("Shows recent public photos from a Flickr account."))
        self.define_setting("username", _("Flickr User ID"), SettingType.STRING, "")
        self.define_setting("limit", _("Photo Limit"), SettingType.INTEGER, 5)
        self.define_setting("show_titles", _("Show Photo Titles"), SettingType.BOOLEAN, True)
        self.define_ajax_proxy_mapping(
            r"^flickr/(.*)$",
            r"https://api.flickr.com/services/feeds/\1",
        )
        self.add_style_sheet("gadgets/css/flickr-gadget.css")
        self.add_javascript("gadgets/js/flickr-gadget.js")

    def display(self, out):
        super().display(out)
        username = self.get_value("username")
        if not username:
            return
        feed_url = reverse("gadgets:ajax_proxy", kwargs={"path": "flickr/photos_public.gne"})
        query = urlencode({"id": username, "format": "json", "nojsoncallback": 1})
        out.write(
            format_html(
                '<div class="flickr-gadget" data-feed="{}" data-limit="{}" data-show-titles="{}"></div>',
                f"{feed_url}?{query}",
                self.get_value("limit"),
                "true" if self.get_value("show_titles") else "false",
            )
        )


class CountdownGadget(BaseGadget):
    slug = "countdown"
    label = "Countdown"

    def define(self):
        _ = self.context.gettext
        self.define_default_title(_("Countdown"))
        self.define_description(_("Counts the days remaining until an event."))
        self.define_setting("event_name", _("Event Name"), SettingType.STRING, "")
        self.define_setting("event_date", _("Event Date"), SettingType.DATE)
        self.define_setting("show_past", _("Show After Event"), SettingType.BOOLEAN, False)

    def days_remaining(self) -> int | None:
        event_date = self.get_value("event_date")
        if event_date is None:
            return None
        return (event_date - timezone.localdate()).days

    def display(self, out):
        days = self.days_remaining()
        if days is None or (days < 0 and not self.get_value("show_past")):
            return

        super().display(out)
        event_name = self.get_value("event_name")
        ngettext = self.context.ngettext
        if days > 0:
            message = ngettext("%(days)d day until %(event)s", "%(days)d days until %(event)s", days)
        elif days == 0:
            message = self.context.gettext("%(event)s is today")
        else:
            message = ngettext("%(event)s was %(days)d day ago", "%(event)s was %(days)d days ago", -days)
        out.write(
            format_html(
                '<p class="countdown-gadget">{}</p>',
                message % {"days": abs(days), "event": event_name},
            )
        )

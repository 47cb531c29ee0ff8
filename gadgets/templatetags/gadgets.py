import logging
from io import StringIO

from django import forms, template
from django.conf import settings
from django.utils.html import format_html
from django.utils.safestring import mark_safe

register = template.Library()
logger = logging.getLogger(__name__)


def _area_gadgets(context, area_slug: str):
    declared = getattr(settings, "GADGET_AREAS", None)
    if declared is not None and area_slug not in declared:
        return []

    from gadgets.base import GadgetContext
    from gadgets.factory import get_area_gadgets

    return get_area_gadgets(GadgetContext(request=context.get("request")), area_slug)


@register.simple_tag(takes_context=True)
def render_gadget_area(context, area_slug: str = "sidebar") -> str:
    parts = []
    for gadget in _area_gadgets(context, area_slug):
        out = StringIO()
        try:
            gadget.init()
            gadget.process()
            gadget.display(out)
        except Exception:
            logger.exception(
                "Gadget %s pk=%s failed to render", gadget.slug, gadget.instance.pk
            )
            continue
        parts.append(
            format_html(
                '<div class="gadget gadget-{}">{}</div>',
                gadget.slug,
                mark_safe(out.getvalue()),
            )
        )
    return mark_safe("".join(parts))


@register.simple_tag(takes_context=True)
def gadget_area_media(context, area_slug: str = "sidebar") -> str:
    media = forms.Media()
    for gadget in _area_gadgets(context, area_slug):
        media += gadget.media
    return mark_safe(media.render())

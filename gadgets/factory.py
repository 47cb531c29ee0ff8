from __future__ import annotations

import logging
from typing import Iterable

from core.plugins import GadgetTypeNotFound, registry

from .base import BaseGadget, GadgetContext
from .models import GadgetInstance

logger = logging.getLogger(__name__)

__all__ = ["GadgetTypeNotFound", "build_gadgets", "get_area_gadgets", "get_gadget"]


def get_gadget(context: GadgetContext, instance: GadgetInstance) -> BaseGadget:
    """Instantiate the gadget class registered for ``instance.gadget_type``.

    Raises :class:`GadgetTypeNotFound` for an unregistered type.
    """
    cls = registry.get_gadget_type(instance.gadget_type)
    return cls(context, instance)


def build_gadgets(context: GadgetContext, instances: Iterable[GadgetInstance]) -> list[BaseGadget]:
    """Build a gadget per placement, leaving out any that cannot be built."""
    gadgets = []
    for inst in instances:
        try:
            gadgets.append(get_gadget(context, inst))
        except GadgetTypeNotFound:
            logger.warning("Skipping gadget pk=%s with unknown type %r", inst.pk, inst.gadget_type)
        except Exception:
            logger.exception("Gadget %s pk=%s failed to initialize", inst.gadget_type, inst.pk)
    return gadgets


def get_area_gadgets(context: GadgetContext, area: str) -> list[BaseGadget]:
    instances = GadgetInstance.objects.filter(area=area, is_active=True).order_by("order", "pk")
    return build_gadgets(context, instances)

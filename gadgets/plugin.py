from core.plugins import BasePlugin


class GadgetsPlugin(BasePlugin):
    name = "gadgets"
    label = "Gadgets"
    description = "Built-in sidebar gadgets."
    gadget_type_paths = (
        "gadgets.gadget_types.ContentGadget",
        "gadgets.gadget_types.FlickrGadget",
        "gadgets.gadget_types.CountdownGadget",
    )

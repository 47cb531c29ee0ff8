from django.apps import AppConfig


class GadgetsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "gadgets"
    verbose_name = "Sidebar gadgets"

    def ready(self):
        from core.plugins import registry

        from .plugin import GadgetsPlugin

        # ready() can run more than once under some test runners
        if registry.get_plugin(GadgetsPlugin.name) is None:
            registry.register(GadgetsPlugin())

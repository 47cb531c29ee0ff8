from django.db import connections, models, router
from django.db.utils import OperationalError

from .setting_types import coerce_value


class NoDatabaseError(Exception):
    """Raised when setting values are read without a usable database connection."""


class GadgetInstance(models.Model):
    gadget_type = models.CharField(max_length=64)
    area = models.CharField(max_length=64, default="sidebar")
    order = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["area", "order", "pk"]

    def __str__(self):
        return f"{self.gadget_type} in {self.area} (order={self.order})"

    def get_setting_values(self) -> list["GadgetSettingValue"]:
        if self.pk is None:
            return []
        alias = router.db_for_read(GadgetSettingValue, instance=self)
        try:
            connections[alias].ensure_connection()
        except OperationalError as exc:
            raise NoDatabaseError(f"Database {alias!r} is unavailable: {exc}") from exc
        return list(self.setting_values.all())


class GadgetSettingValue(models.Model):
    instance = models.ForeignKey(
        GadgetInstance,
        on_delete=models.CASCADE,
        related_name="setting_values",
    )
    name = models.CharField(max_length=255)
    value = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["instance", "name"]
        constraints = [
            models.UniqueConstraint(
                fields=["instance", "name"],
                name="unique_gadget_setting_value",
            )
        ]

    def __str__(self):
        return f"{self.name}={self.value!r}"

    def get_value(self, setting_type):
        return coerce_value(setting_type, self.value)

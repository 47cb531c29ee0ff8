from django import forms
from django.db import transaction

from .base import BaseGadget
from .models import GadgetSettingValue
from .setting_types import SettingType, serialize_value


def _field_for_setting(setting) -> forms.Field:
    required = setting.default is not None
    if setting.type == SettingType.BOOLEAN:
        return forms.BooleanField(required=False, label=setting.title)
    if setting.type == SettingType.INTEGER:
        return forms.IntegerField(required=required, label=setting.title)
    if setting.type == SettingType.FLOAT:
        return forms.FloatField(required=required, label=setting.title)
    if setting.type == SettingType.DATE:
        return forms.DateField(
            required=required,
            label=setting.title,
            widget=forms.DateInput(attrs={"type": "date"}),
        )
    if setting.type == SettingType.TEXT:
        return forms.CharField(
            required=False,
            label=setting.title,
            widget=forms.Textarea(attrs={"rows": 6}),
        )
    return forms.CharField(required=False, label=setting.title)


class GadgetSettingsForm(forms.Form):
    """Editor form with one field per setting of ``gadget``."""

    def __init__(self, gadget: BaseGadget, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.gadget = gadget
        for setting in gadget.get_settings():
            field = _field_for_setting(setting)
            field.initial = gadget.get_value(setting.name)
            self.fields[setting.name] = field

    @transaction.atomic
    def save(self):
        instance = self.gadget.instance
        for setting in self.gadget.get_settings():
            GadgetSettingValue.objects.update_or_create(
                instance=instance,
                name=setting.name,
                defaults={"value": serialize_value(setting.type, self.cleaned_data.get(setting.name))},
            )
        return instance

import datetime

from django import forms
from django.test import TestCase

from gadgets.base import GadgetContext
from gadgets.forms import GadgetSettingsForm
from gadgets.gadget_types import CountdownGadget, FlickrGadget
from gadgets.models import GadgetInstance, GadgetSettingValue


class GadgetSettingsFormTests(TestCase):
    def setUp(self):
        self.inst = GadgetInstance.objects.create(gadget_type="flickr")

    def _gadget(self, cls=FlickrGadget):
        return cls(GadgetContext(), self.inst)

    def test_fields_follow_settings(self):
        form = GadgetSettingsForm(self._gadget())
        self.assertEqual(list(form.fields), ["title", "username", "limit", "show_titles"])
        self.assertIsInstance(form.fields["limit"], forms.IntegerField)
        self.assertIsInstance(form.fields["show_titles"], forms.BooleanField)
        self.assertEqual(form.fields["limit"].label, "Photo Limit")

    def test_initial_values_from_gadget(self):
        GadgetSettingValue.objects.create(instance=self.inst, name="limit", value="8")
        form = GadgetSettingsForm(self._gadget())
        self.assertEqual(form.fields["limit"].initial, 8)
        self.assertEqual(form.fields["title"].initial, "Photos")
        self.assertIs(form.fields["show_titles"].initial, True)

    def test_save_stores_serialized_values(self):
        form = GadgetSettingsForm(
            self._gadget(),
            data={"title": "Snaps", "username": "me", "limit": "4"},
        )
        self.assertTrue(form.is_valid(), form.errors)
        form.save()

        stored = dict(self.inst.setting_values.values_list("name", "value"))
        self.assertEqual(
            stored,
            {"title": "Snaps", "username": "me", "limit": "4", "show_titles": "0"},
        )

        gadget = self._gadget()
        self.assertEqual(gadget.get_title(), "Snaps")
        self.assertEqual(gadget.get_value("limit"), 4)
        self.assertIs(gadget.get_value("show_titles"), False)

    def test_save_updates_existing_values(self):
        GadgetSettingValue.objects.create(instance=self.inst, name="limit", value="8")
        form = GadgetSettingsForm(self._gadget(), data={"title": "Photos", "limit": "2"})
        self.assertTrue(form.is_valid(), form.errors)
        form.save()
        self.assertEqual(self.inst.setting_values.get(name="limit").value, "2")
        self.assertEqual(self.inst.setting_values.filter(name="limit").count(), 1)

    def test_integer_required_when_defaulted(self):
        form = GadgetSettingsForm(self._gadget(), data={"title": "Photos", "limit": ""})
        self.assertFalse(form.is_valid())
        self.assertIn("limit", form.errors)

    def test_date_field(self):
        inst = GadgetInstance.objects.create(gadget_type="countdown")
        gadget = CountdownGadget(GadgetContext(), inst)
        form = GadgetSettingsForm(gadget, data={"title": "Soon", "event_date": "2027-01-01"})
        self.assertIsInstance(form.fields["event_date"], forms.DateField)
        self.assertFalse(form.fields["event_date"].required)
        self.assertTrue(form.is_valid(), form.errors)
        form.save()
        self.assertEqual(
            CountdownGadget(GadgetContext(), inst).get_value("event_date"),
            datetime.date(2027, 1, 1),
        )

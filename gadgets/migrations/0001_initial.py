import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="GadgetInstance",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("gadget_type", models.CharField(max_length=64)),
                ("area", models.CharField(default="sidebar", max_length=64)),
                ("order", models.PositiveIntegerField(default=0)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "ordering": ["area", "order", "pk"],
            },
        ),
        migrations.CreateModel(
            name="GadgetSettingValue",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("name", models.CharField(max_length=255)),
                ("value", models.TextField(blank=True, default="")),
                (
                    "instance",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="setting_values",
                        to="gadgets.gadgetinstance",
                    ),
                ),
            ],
            options={
                "ordering": ["instance", "name"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("instance", "name"),
                        name="unique_gadget_setting_value",
                    )
                ],
            },
        ),
    ]

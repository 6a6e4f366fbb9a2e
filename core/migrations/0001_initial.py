import django.db.models.deletion
import mptt.fields
import simple_history.models
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Entity",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("currency", models.CharField(default="DKK", max_length=3)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "ordering": ["name"],
                "verbose_name_plural": "entities",
            },
        ),
        migrations.CreateModel(
            name="Account",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("number", models.CharField(max_length=20)),
                ("name", models.CharField(max_length=255)),
                ("is_postable", models.BooleanField(default=True)),
                ("lft", models.PositiveIntegerField(editable=False)),
                ("rght", models.PositiveIntegerField(editable=False)),
                ("tree_id", models.PositiveIntegerField(db_index=True, editable=False)),
                ("level", models.PositiveIntegerField(editable=False)),
                ("entity", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="accounts", to="core.entity")),
                ("parent", mptt.fields.TreeForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="children", to="core.account")),
            ],
            options={
                "ordering": ["number"],
                "unique_together": {("entity", "number")},
            },
        ),
        migrations.AddField(
            model_name="entity",
            name="default_ap_account",
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="+", to="core.account"),
        ),
        migrations.AddField(
            model_name="entity",
            name="default_ar_account",
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="+", to="core.account"),
        ),
        migrations.AddField(
            model_name="entity",
            name="default_input_vat_account",
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="+", to="core.account"),
        ),
        migrations.AddField(
            model_name="entity",
            name="default_output_vat_account",
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="+", to="core.account"),
        ),
        migrations.CreateModel(
            name="UserProfile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("roles", models.CharField(blank=True, default="", help_text="Comma separated, e.g. 'admin,bookkeeper'", max_length=255)),
                ("is_entity_admin", models.BooleanField(default=False)),
                ("entity", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="users", to="core.entity")),
                ("user", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="profile", to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name="NumberSeries",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=50)),
                ("next_number", models.IntegerField(default=1)),
                ("entity", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="number_series", to="core.entity")),
            ],
            options={
                "ordering": ["code"],
                "verbose_name_plural": "number series",
                "constraints": [
                    models.UniqueConstraint(fields=("entity", "code"), name="uniq_number_series_per_entity"),
                ],
            },
        ),
        migrations.CreateModel(
            name="VatCode",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=20)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("vat_type", models.CharField(choices=[("SALE", "Sale"), ("PURCHASE", "Purchase")], default="SALE", max_length=10)),
                ("rate", models.DecimalField(blank=True, decimal_places=4, help_text="VAT rate (e.g. 0.2500 for 25%)", max_digits=6, null=True)),
                ("entity", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="vat_codes", to="core.entity")),
                ("input_vat_account", models.ForeignKey(blank=True, help_text="Purchase VAT account, overrides the entity default", null=True, on_delete=django.db.models.deletion.PROTECT, related_name="+", to="core.account")),
                ("output_vat_account", models.ForeignKey(blank=True, help_text="Sales VAT account, overrides the entity default", null=True, on_delete=django.db.models.deletion.PROTECT, related_name="+", to="core.account")),
            ],
            options={
                "ordering": ["code"],
                "unique_together": {("entity", "code")},
            },
        ),
        migrations.CreateModel(
            name="AccountingPeriod",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("date_from", models.DateField()),
                ("date_to", models.DateField()),
                ("is_locked", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("entity", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="accounting_periods", to="core.entity")),
            ],
            options={
                "ordering": ["entity", "date_from"],
                "indexes": [models.Index(fields=["entity", "date_from", "date_to"], name="period_entity_dates_idx")],
            },
        ),
        migrations.CreateModel(
            name="HistoricalAccountingPeriod",
            fields=[
                ("id", models.BigIntegerField(auto_created=True, blank=True, db_index=True, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("date_from", models.DateField()),
                ("date_to", models.DateField()),
                ("is_locked", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(blank=True, editable=False)),
                ("history_id", models.AutoField(primary_key=True, serialize=False)),
                ("history_date", models.DateTimeField(db_index=True)),
                ("history_change_reason", models.CharField(max_length=100, null=True)),
                ("history_type", models.CharField(choices=[("+", "Created"), ("~", "Changed"), ("-", "Deleted")], max_length=1)),
                ("entity", models.ForeignKey(blank=True, db_constraint=False, null=True, on_delete=django.db.models.deletion.DO_NOTHING, related_name="+", to="core.entity")),
                ("history_user", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name": "historical accounting period",
                "verbose_name_plural": "historical accounting periods",
                "ordering": ("-history_date", "-history_id"),
                "get_latest_by": ("history_date", "history_id"),
            },
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
    ]

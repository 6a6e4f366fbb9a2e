import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("core", "0001_initial"),
        ("documents", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="LedgerEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("entry_guid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("account_number", models.CharField(max_length=20)),
                ("voucher_number", models.IntegerField(blank=True, null=True)),
                ("voucher_type", models.CharField(blank=True, default="", max_length=40)),
                ("entry_date", models.DateField()),
                ("amount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("vat_code", models.CharField(blank=True, default="", max_length=20)),
                ("entry_type", models.CharField(choices=[("Normal", "Normal"), ("Primo", "Opening balance")], default="Normal", max_length=10)),
                ("contact_guid", models.CharField(blank=True, default="", max_length=64)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("document", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="ledger_entries", to="documents.document")),
                ("entity", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="ledger_entries", to="core.entity")),
            ],
            options={
                "ordering": ("entry_date", "id"),
                "verbose_name_plural": "ledger entries",
                "indexes": [
                    models.Index(fields=["entity", "account_number", "entry_date"], name="entry_entity_account_date_idx"),
                    models.Index(fields=["entity", "voucher_type", "voucher_number"], name="entry_entity_voucher_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReportSnapshot",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("report_type", models.CharField(choices=[("balance", "Balance"), ("result", "Result"), ("primo", "Opening balance")], max_length=20)),
                ("rows", models.JSONField(default=list)),
                ("created_at", models.DateTimeField(auto_now=True)),
                ("entity", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="report_snapshots", to="core.entity")),
                ("period", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="report_snapshots", to="core.accountingperiod")),
            ],
            options={
                "ordering": ["period", "report_type"],
                "constraints": [
                    models.UniqueConstraint(fields=("entity", "period", "report_type"), name="uniq_report_snapshot"),
                ],
            },
        ),
    ]

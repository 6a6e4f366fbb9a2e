import uuid
from decimal import Decimal

import django.db.models.deletion
import django_fsm
import simple_history.models
from django.conf import settings
from django.db import migrations, models

DOCUMENT_CLASSES = [
    ("invoice", "Invoice"),
    ("credit_note", "Credit note"),
    ("manual_voucher", "Manual voucher"),
    ("purchase_voucher", "Purchase voucher"),
    ("purchase_credit_note", "Purchase credit note"),
]

STATES = [
    ("draft", "Draft"),
    ("booked", "Booked"),
    ("partial", "Partially paid"),
    ("overdue", "Overdue"),
    ("paid", "Paid"),
    ("overpaid", "Overpaid"),
    ("deleted", "Deleted"),
]


def money(**kwargs):
    return models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14, **kwargs)


def header_fields():
    return [
        ("document_class", models.CharField(choices=DOCUMENT_CLASSES, max_length=30)),
        ("state", django_fsm.FSMField(choices=STATES, default="draft", max_length=50, protected=True)),
        ("number", models.IntegerField(blank=True, null=True)),
        ("date", models.DateField()),
        ("currency", models.CharField(default="DKK", max_length=3)),
        ("contact_guid", models.CharField(blank=True, default="", max_length=64)),
        ("contact_name", models.CharField(blank=True, default="", max_length=255)),
        ("reference", models.CharField(blank=True, default="", max_length=255)),
        ("description", models.TextField(blank=True, default="")),
        ("payment_terms_days", models.IntegerField(default=14)),
        ("reminder_fee", money()),
        ("reminder_interest_rate", models.DecimalField(decimal_places=2, default=Decimal("0.00"), help_text="Annual interest in percent", max_digits=6)),
        ("total_excl_vat", money()),
        ("total_vatable_amount", money()),
        ("total_non_vatable_amount", money()),
        ("total_vat", money()),
        ("total_incl_vat", money()),
        ("payment_status", models.CharField(blank=True, choices=STATES, default="", max_length=20)),
        ("paid_amount", money()),
        ("remaining_amount", money()),
        ("paid_on", models.DateField(blank=True, null=True)),
        ("booked_at", models.DateTimeField(blank=True, null=True)),
        ("deleted_at", models.DateTimeField(blank=True, null=True)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("core", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Document",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("guid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                *header_fields(),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("booked_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("entity", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="documents", to="core.entity")),
                ("reversal_of", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="reversals", to="documents.document")),
            ],
            options={
                "ordering": ("-date", "-id"),
                "constraints": [
                    models.UniqueConstraint(fields=("entity", "document_class", "number"), name="uniq_document_number_per_class"),
                ],
                "indexes": [
                    models.Index(fields=["entity", "document_class", "state"], name="document_entity_class_idx"),
                    models.Index(fields=["entity", "date"], name="document_entity_date_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="DocumentLine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("line_no", models.IntegerField()),
                ("account_number", models.CharField(max_length=20)),
                ("account_name", models.CharField(blank=True, default="", max_length=255)),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("quantity", models.DecimalField(decimal_places=3, default=Decimal("1.000"), max_digits=14)),
                ("unit_price", money()),
                ("discount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), help_text="Percent", max_digits=5)),
                ("vat_code", models.CharField(blank=True, default="", max_length=20)),
                ("vat_rate", models.DecimalField(decimal_places=4, default=Decimal("0.0000"), max_digits=6)),
                ("total_amount", money()),
                ("total_amount_incl_vat", money()),
                ("document", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="lines", to="documents.document")),
            ],
            options={
                "ordering": ["line_no"],
                "unique_together": {("document", "line_no")},
            },
        ),
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField()),
                ("amount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("method", models.CharField(blank=True, default="unknown", max_length=50)),
                ("note", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("document", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="payments", to="documents.document")),
            ],
            options={
                "ordering": ["date", "id"],
            },
        ),
        migrations.CreateModel(
            name="HistoricalDocument",
            fields=[
                ("id", models.BigIntegerField(auto_created=True, blank=True, db_index=True, verbose_name="ID")),
                ("guid", models.UUIDField(db_index=True, default=uuid.uuid4, editable=False)),
                *header_fields(),
                ("created_at", models.DateTimeField(blank=True, editable=False)),
                ("updated_at", models.DateTimeField(blank=True, editable=False)),
                ("history_id", models.AutoField(primary_key=True, serialize=False)),
                ("history_date", models.DateTimeField(db_index=True)),
                ("history_change_reason", models.CharField(max_length=100, null=True)),
                ("history_type", models.CharField(choices=[("+", "Created"), ("~", "Changed"), ("-", "Deleted")], max_length=1)),
                ("booked_by", models.ForeignKey(blank=True, db_constraint=False, null=True, on_delete=django.db.models.deletion.DO_NOTHING, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("entity", models.ForeignKey(blank=True, db_constraint=False, null=True, on_delete=django.db.models.deletion.DO_NOTHING, related_name="+", to="core.entity")),
                ("history_user", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("reversal_of", models.ForeignKey(blank=True, db_constraint=False, null=True, on_delete=django.db.models.deletion.DO_NOTHING, related_name="+", to="documents.document")),
            ],
            options={
                "verbose_name": "historical document",
                "verbose_name_plural": "historical documents",
                "ordering": ("-history_date", "-history_id"),
                "get_latest_by": ("history_date", "history_id"),
            },
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
        migrations.CreateModel(
            name="Invoice",
            fields=[],
            options={"verbose_name": "Invoice", "verbose_name_plural": "Invoices", "proxy": True, "indexes": [], "constraints": []},
            bases=("documents.document",),
        ),
        migrations.CreateModel(
            name="CreditNote",
            fields=[],
            options={"verbose_name": "Credit note", "verbose_name_plural": "Credit notes", "proxy": True, "indexes": [], "constraints": []},
            bases=("documents.document",),
        ),
        migrations.CreateModel(
            name="ManualVoucher",
            fields=[],
            options={"verbose_name": "Manual voucher", "verbose_name_plural": "Manual vouchers", "proxy": True, "indexes": [], "constraints": []},
            bases=("documents.document",),
        ),
        migrations.CreateModel(
            name="PurchaseVoucher",
            fields=[],
            options={"verbose_name": "Purchase voucher", "verbose_name_plural": "Purchase vouchers", "proxy": True, "indexes": [], "constraints": []},
            bases=("documents.document",),
        ),
        migrations.CreateModel(
            name="PurchaseCreditNote",
            fields=[],
            options={"verbose_name": "Purchase credit note", "verbose_name_plural": "Purchase credit notes", "proxy": True, "indexes": [], "constraints": []},
            bases=("documents.document",),
        ),
    ]

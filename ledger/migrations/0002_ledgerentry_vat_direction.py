from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("ledger", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="ledgerentry",
            name="vat_direction",
            field=models.CharField(
                blank=True,
                choices=[("", "Not VAT"), ("output", "Output VAT"), ("input", "Input VAT")],
                default="",
                max_length=10,
            ),
        ),
    ]

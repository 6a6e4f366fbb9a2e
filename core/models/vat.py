from decimal import Decimal

from django.db import models
from django.utils.translation import gettext_lazy as _


class VatCode(models.Model):
    """VAT code per entity (the VAT-rate registry).

    ``rate`` is a fraction: 0.2500 means 25 %. A code without a rate
    counts as 0 %.
    """

    class VatType(models.TextChoices):
        SALE = "SALE", "Sale"
        PURCHASE = "PURCHASE", "Purchase"

    entity = models.ForeignKey(
        "core.Entity",
        on_delete=models.CASCADE,
        related_name="vat_codes",
    )

    output_vat_account = models.ForeignKey(
        "core.Account",
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="+",
        help_text=_("Sales VAT account, overrides the entity default"),
    )
    input_vat_account = models.ForeignKey(
        "core.Account",
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="+",
        help_text=_("Purchase VAT account, overrides the entity default"),
    )

    code = models.CharField(max_length=20)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    vat_type = models.CharField(
        max_length=10,
        choices=VatType.choices,
        default=VatType.SALE,
    )

    rate = models.DecimalField(
        max_digits=6,
        decimal_places=4,
        null=True,
        blank=True,
        help_text="VAT rate (e.g. 0.2500 for 25%)",
    )

    class Meta:
        unique_together = ("entity", "code")
        ordering = ["code"]

    def __str__(self) -> str:
        return f"{self.code} {self.name}"

    @property
    def effective_rate(self) -> Decimal:
        return self.rate if self.rate is not None else Decimal("0")

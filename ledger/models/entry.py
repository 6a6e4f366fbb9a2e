import uuid
from decimal import Decimal

from django.db import models

from core.exceptions import ImmutableEntryError


class LedgerEntryQuerySet(models.QuerySet):
    def update(self, **kwargs):
        raise ImmutableEntryError()

    def delete(self):
        raise ImmutableEntryError()

    def for_account(self, account_number):
        return self.filter(account_number=account_number)

    def primo(self):
        return self.filter(entry_type=LedgerEntry.EntryType.PRIMO)

    def normal(self):
        return self.filter(entry_type=LedgerEntry.EntryType.NORMAL)


class LedgerEntry(models.Model):
    """One signed posting on one account.

    Debit is positive, credit negative. The entries of one voucher sum to
    zero. Entries are append-only: corrections are made with new entries
    (a credit note), never by editing or deleting rows.
    """

    class EntryType(models.TextChoices):
        NORMAL = "Normal", "Normal"
        PRIMO = "Primo", "Opening balance"

    class VatDirection(models.TextChoices):
        NONE = "", "Not VAT"
        OUTPUT = "output", "Output VAT"
        INPUT = "input", "Input VAT"

    entity = models.ForeignKey("core.Entity", on_delete=models.CASCADE, related_name="ledger_entries")
    entry_guid = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)

    account_number = models.CharField(max_length=20)
    voucher_number = models.IntegerField(null=True, blank=True)
    voucher_type = models.CharField(max_length=40, blank=True, default="")
    entry_date = models.DateField()

    amount = models.DecimalField(max_digits=14, decimal_places=2)
    description = models.CharField(max_length=255, blank=True, default="")
    vat_code = models.CharField(max_length=20, blank=True, default="")
    # Set on the entries that carry the VAT amount itself
    vat_direction = models.CharField(max_length=10, choices=VatDirection.choices, blank=True, default="")
    entry_type = models.CharField(max_length=10, choices=EntryType.choices, default=EntryType.NORMAL)
    contact_guid = models.CharField(max_length=64, blank=True, default="")

    document = models.ForeignKey(
        "documents.Document", null=True, blank=True, on_delete=models.PROTECT, related_name="ledger_entries",
    )

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    objects = LedgerEntryQuerySet.as_manager()

    class Meta:
        ordering = ("entry_date", "id")
        verbose_name_plural = "ledger entries"
        indexes = [
            models.Index(fields=["entity", "account_number", "entry_date"], name="entry_entity_account_date_idx"),
            models.Index(fields=["entity", "voucher_type", "voucher_number"], name="entry_entity_voucher_idx"),
        ]

    def __str__(self):
        return f"{self.entry_date} {self.account_number} {self.amount}"

    @property
    def debit(self):
        return self.amount if self.amount > 0 else Decimal("0.00")

    @property
    def credit(self):
        return -self.amount if self.amount < 0 else Decimal("0.00")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ImmutableEntryError()
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableEntryError()

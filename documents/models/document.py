import uuid
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Max
from django.utils import timezone
from django_fsm import FSMField, RETURN_VALUE, transition
from django_fsm_log.decorators import fsm_log_by
from simple_history.models import HistoricalRecords

ZERO = Decimal("0.00")


class Document(models.Model):
    """Commercial document that ends up as ledger entries.

    One table holds every class of document (invoice, credit note, manual
    voucher, purchase voucher, purchase credit note); proxy models give the
    admin one page per class.

    State machine:
        draft -> booked -> partial / overdue / paid / overpaid
        booked (or any payment state) -> deleted (soft)
    Drafts are hard deleted instead.

    ``number`` stays empty until booking, except for credit notes created
    from an invoice, which are numbered right away.
    """

    class DocumentClass(models.TextChoices):
        INVOICE = "invoice", "Invoice"
        CREDIT_NOTE = "credit_note", "Credit note"
        MANUAL_VOUCHER = "manual_voucher", "Manual voucher"
        PURCHASE_VOUCHER = "purchase_voucher", "Purchase voucher"
        PURCHASE_CREDIT_NOTE = "purchase_credit_note", "Purchase credit note"

    class State(models.TextChoices):
        DRAFT = "draft", "Draft"
        BOOKED = "booked", "Booked"
        PARTIAL = "partial", "Partially paid"
        OVERDUE = "overdue", "Overdue"
        PAID = "paid", "Paid"
        OVERPAID = "overpaid", "Overpaid"
        DELETED = "deleted", "Deleted"

    PAYMENT_STATES = [State.PARTIAL, State.OVERDUE, State.PAID, State.OVERPAID]
    BOOKED_STATES = [State.BOOKED, *PAYMENT_STATES]

    # Tag written to LedgerEntry.voucher_type
    VOUCHER_TYPES = {
        DocumentClass.INVOICE: "Invoice",
        DocumentClass.CREDIT_NOTE: "CreditNote",
        DocumentClass.MANUAL_VOUCHER: "ManualVoucher",
        DocumentClass.PURCHASE_VOUCHER: "PurchaseVoucher",
        DocumentClass.PURCHASE_CREDIT_NOTE: "PurchaseCreditNote",
    }

    # Classes whose lines are posted as entered (signed amounts, no VAT split)
    VERBATIM_CLASSES = {DocumentClass.MANUAL_VOUCHER, DocumentClass.PURCHASE_VOUCHER}

    entity = models.ForeignKey("core.Entity", on_delete=models.CASCADE, related_name="documents")
    guid = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    document_class = models.CharField(max_length=30, choices=DocumentClass.choices)
    state = FSMField(default=State.DRAFT, choices=State.choices, protected=True)

    number = models.IntegerField(null=True, blank=True)
    date = models.DateField()
    currency = models.CharField(max_length=3, default="DKK")

    contact_guid = models.CharField(max_length=64, blank=True, default="")
    contact_name = models.CharField(max_length=255, blank=True, default="")
    reference = models.CharField(max_length=255, blank=True, default="")
    description = models.TextField(blank=True, default="")

    payment_terms_days = models.IntegerField(default=14)
    reminder_fee = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)
    reminder_interest_rate = models.DecimalField(
        max_digits=6, decimal_places=2, default=ZERO, help_text="Annual interest in percent",
    )

    # Derived by the totals calculator
    total_excl_vat = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)
    total_vatable_amount = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)
    total_non_vatable_amount = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)
    total_vat = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)
    total_incl_vat = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)

    payment_status = models.CharField(max_length=20, choices=State.choices, blank=True, default="")
    paid_amount = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)
    remaining_amount = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)
    paid_on = models.DateField(null=True, blank=True)

    reversal_of = models.ForeignKey(
        "self", null=True, blank=True, on_delete=models.PROTECT, related_name="reversals",
    )

    booked_at = models.DateTimeField(null=True, blank=True)
    booked_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.PROTECT, related_name="+")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    history = HistoricalRecords()

    class Meta:
        ordering = ("-date", "-id")
        constraints = [
            models.UniqueConstraint(
                fields=["entity", "document_class", "number"],
                name="uniq_document_number_per_class",
            ),
        ]
        indexes = [
            models.Index(fields=["entity", "document_class", "state"], name="document_entity_class_idx"),
            models.Index(fields=["entity", "date"], name="document_entity_date_idx"),
        ]

    def __str__(self):
        return f"{self.get_document_class_display()} {self.display_no}"

    @property
    def display_no(self) -> str:
        return str(self.number) if self.number is not None else f"draft-{self.pk}"

    @property
    def voucher_type(self) -> str:
        return self.VOUCHER_TYPES[self.document_class]

    @property
    def is_verbatim(self) -> bool:
        return self.document_class in self.VERBATIM_CLASSES

    @property
    def due_date(self):
        return self.date + timedelta(days=self.payment_terms_days)

    def allocate_number_if_missing(self) -> int:
        """Give the document the next number of its class if it has none yet."""
        from core.services.numbering import claim_next_number

        if self.number is not None:
            return self.number

        siblings = Document.objects.filter(entity_id=self.entity_id, document_class=self.document_class)
        seed = (siblings.aggregate(m=Max("number"))["m"] or 0) + 1

        def claim(number):
            Document.objects.filter(pk=self.pk).update(number=number)

        self.number = claim_next_number(self.entity, self.document_class, claim, seed=seed)
        return self.number

    @fsm_log_by
    @transition(field=state, source=State.DRAFT, target=State.BOOKED)
    def book(self, by=None):
        """Book the document.

        The accounting work is delegated to the posting engine. If it
        raises, the transaction is rolled back and the state stays draft.
        """
        from core.services.periods import assert_period_open
        from ledger.services.posting import post_document

        assert_period_open(self.entity, self.date)
        post_document(self, by=by)

    @fsm_log_by
    @transition(field=state, source=BOOKED_STATES, target=RETURN_VALUE(*PAYMENT_STATES))
    def apply_payment_status(self, status, paid_on=None, by=None):
        self.payment_status = status
        if status == self.State.PAID:
            self.paid_on = paid_on or timezone.localdate()
        return status

    @fsm_log_by
    @transition(field=state, source=BOOKED_STATES, target=State.DELETED)
    def soft_delete(self, by=None):
        self.deleted_at = timezone.now()


class DocumentLine(models.Model):
    """Document line. Amounts are computed by the totals calculator."""

    document = models.ForeignKey(Document, on_delete=models.CASCADE, related_name="lines")

    line_no = models.IntegerField()

    account_number = models.CharField(max_length=20)
    account_name = models.CharField(max_length=255, blank=True, default="")
    description = models.CharField(max_length=255, blank=True, default="")

    quantity = models.DecimalField(max_digits=14, decimal_places=3, default=Decimal("1.000"))
    unit_price = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)
    discount = models.DecimalField(max_digits=5, decimal_places=2, default=ZERO, help_text="Percent")

    vat_code = models.CharField(max_length=20, blank=True, default="")
    vat_rate = models.DecimalField(max_digits=6, decimal_places=4, default=Decimal("0.0000"))

    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)
    total_amount_incl_vat = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)

    class Meta:
        unique_together = ("document", "line_no")
        ordering = ["line_no"]

    def __str__(self):
        return f"{self.line_no}: {self.account_number} {self.total_amount}"

    @property
    def vat_amount(self) -> Decimal:
        return self.total_amount_incl_vat - self.total_amount


class Payment(models.Model):
    """A payment registered against a booked document. Append-only."""

    document = models.ForeignKey(Document, on_delete=models.PROTECT, related_name="payments")

    date = models.DateField()
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    method = models.CharField(max_length=50, blank=True, default="unknown")
    note = models.CharField(max_length=255, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.PROTECT, related_name="+")

    class Meta:
        ordering = ["date", "id"]

    def __str__(self):
        return f"{self.document} {self.date} {self.amount}"

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from core.exceptions import DocumentValidationError, InvalidStateError, storage_errors
from documents.models import Document, Payment
from documents.services.lifecycle import get_document, parse_document_date
from documents.services.totals import ZERO, round2, to_decimal

logger = logging.getLogger(__name__)

SETTLED_TOLERANCE = Decimal("0.01")
DAYS_PER_YEAR = Decimal("365")


@dataclass(frozen=True)
class PaymentResult:
    status: str
    remaining_amount: Decimal
    additional_charges: Decimal
    paid_amount: Decimal


def derive_payment_status(doc: Document, paid: Decimal, as_of) -> PaymentResult:
    """Classify a document given what has been paid so far.

    Overdue documents accrue the reminder fee plus simple interest for the
    days past due; both are added to the remaining amount.
    """
    remaining = doc.total_incl_vat - paid
    additional = ZERO

    if abs(remaining) < SETTLED_TOLERANCE:
        status = Document.State.PAID
        remaining = ZERO
    elif remaining < 0:
        status = Document.State.OVERPAID
    elif as_of > doc.due_date:
        days_overdue = Decimal((as_of - doc.due_date).days)
        interest = remaining * doc.reminder_interest_rate / Decimal("100") * days_overdue / DAYS_PER_YEAR
        additional = round2(doc.reminder_fee + interest)
        remaining = remaining + additional
        status = Document.State.OVERDUE
    else:
        status = Document.State.PARTIAL

    return PaymentResult(
        status=status,
        remaining_amount=round2(remaining),
        additional_charges=additional,
        paid_amount=paid,
    )


@storage_errors
@transaction.atomic
def record_payment(entity, guid, amount, *, date=None, method="unknown", note="", as_of=None, by=None) -> PaymentResult:
    """Register a payment against a booked document and update its payment state.

    ``as_of`` is the day overdue interest is computed for (defaults to today).
    """
    amount = round2(to_decimal(amount, "amount"))
    if amount == 0:
        raise DocumentValidationError("Payment amount must be non-zero.", field="amount")

    doc = get_document(entity, guid, for_update=True)
    if doc.state not in Document.BOOKED_STATES:
        raise InvalidStateError(f"Document {guid} is {doc.state}, payments need a booked document.")

    today = timezone.localdate()
    payment_date = parse_document_date(date, "date") if date else today
    as_of = parse_document_date(as_of, "as_of") if as_of else today

    Payment.objects.create(
        document=doc,
        date=payment_date,
        amount=amount,
        method=method or "unknown",
        note=note or "",
        created_by=by,
    )
    paid = round2(doc.payments.aggregate(s=Sum("amount"))["s"] or ZERO)

    result = derive_payment_status(doc, paid, as_of)

    doc.apply_payment_status(result.status, paid_on=payment_date, by=by)
    doc.paid_amount = result.paid_amount
    doc.remaining_amount = result.remaining_amount
    doc.save()

    logger.info(
        "Payment %s on %s guid=%s -> %s (remaining %s)",
        amount, doc.document_class, doc.guid, result.status, result.remaining_amount,
    )
    return result

"""Journal posting engine.

Turns the lines of a draft document into balanced ledger entries.

Sales style documents (invoices, credit notes, purchase credit notes)
post per line:
    counterpart control account   +incl
    line account                  -base
    VAT account                   -vat   (only when there is VAT)
Credit notes created from an invoice carry negated lines, so the same rule
gives the mirrored postings.

Vouchers (manual and purchase) post each line's signed amount as entered.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from core.exceptions import DocumentValidationError, UnbalancedEntriesError
from core.models import VatCode
from core.services.vat import vat_account_number, vat_types_for
from documents.models import Document
from ledger.models import LedgerEntry

logger = logging.getLogger(__name__)

VAT_THRESHOLD = Decimal("0.001")

# VAT account kind -> LedgerEntry.vat_direction
VAT_DIRECTIONS = {
    "output_vat": LedgerEntry.VatDirection.OUTPUT,
    "input_vat": LedgerEntry.VatDirection.INPUT,
}

# document class -> (counterpart control account, VAT account kind)
SALES_STYLE = {
    Document.DocumentClass.INVOICE: ("receivable", "output_vat"),
    Document.DocumentClass.CREDIT_NOTE: ("receivable", "output_vat"),
    Document.DocumentClass.PURCHASE_CREDIT_NOTE: ("payable", "input_vat"),
}


@dataclass(frozen=True)
class EntryCandidate:
    account_number: str
    amount: Decimal
    description: str
    vat_code: str = ""
    vat_direction: str = ""


def _verbatim_vat_direction(entity, line, vat_types) -> str:
    """Direction of a hand-entered line posted to the VAT account of its code."""
    vat_type = vat_types.get(line.vat_code)
    if vat_type is None:
        return ""
    kind = "input_vat" if vat_type == VatCode.VatType.PURCHASE else "output_vat"
    if line.account_number != vat_account_number(entity, line.vat_code, kind=kind):
        return ""
    return VAT_DIRECTIONS[kind]


def build_entries(document, lines) -> list[EntryCandidate]:
    """Build entry candidates for a document without touching the database for writes."""
    if document.document_class in Document.VERBATIM_CLASSES:
        vat_types = vat_types_for(document.entity) if any(line.vat_code for line in lines) else {}
        return [
            EntryCandidate(
                account_number=line.account_number,
                amount=line.total_amount,
                description=line.description,
                vat_code=line.vat_code,
                vat_direction=_verbatim_vat_direction(document.entity, line, vat_types),
            )
            for line in lines
        ]

    counterpart_kind, vat_kind = SALES_STYLE[document.document_class]
    counterpart = document.entity.control_account_number(counterpart_kind)

    candidates = []
    for line in lines:
        vat = line.total_amount_incl_vat - line.total_amount
        candidates.append(EntryCandidate(counterpart, line.total_amount_incl_vat, line.description, line.vat_code))
        candidates.append(EntryCandidate(line.account_number, -line.total_amount, line.description, line.vat_code))
        if abs(vat) > VAT_THRESHOLD:
            candidates.append(EntryCandidate(
                vat_account_number(document.entity, line.vat_code, kind=vat_kind),
                -vat,
                f"VAT {line.vat_code}".strip(),
                line.vat_code,
                VAT_DIRECTIONS[vat_kind],
            ))
    return candidates


def assert_balanced(candidates) -> None:
    total = sum((c.amount for c in candidates), Decimal("0.00"))
    tolerance = Decimal(str(settings.LEDGER["BALANCE_TOLERANCE"]))
    if abs(total) >= tolerance:
        raise UnbalancedEntriesError(f"Entries do not balance. Sum={total}", sum=total)


@transaction.atomic
def post_document(document, *, by=None) -> list[LedgerEntry]:
    """Post a draft document.

    Validates, numbers the document if needed, writes all entries in one
    insert and stamps the booking fields on ``document`` (the caller saves
    it). Any error rolls everything back.
    """
    lines = list(document.lines.all())
    if not lines:
        raise DocumentValidationError("Document has no lines.", field="lines")

    candidates = build_entries(document, lines)
    assert_balanced(candidates)

    number = document.allocate_number_if_missing()
    label = f"{document.voucher_type} {number}"

    entries = LedgerEntry.objects.bulk_create([
        LedgerEntry(
            entity=document.entity,
            account_number=c.account_number,
            voucher_number=number,
            voucher_type=document.voucher_type,
            entry_date=document.date,
            amount=c.amount,
            description=f"{label} {c.description}".strip()[:255],
            vat_code=c.vat_code,
            vat_direction=c.vat_direction,
            entry_type=LedgerEntry.EntryType.NORMAL,
            contact_guid=document.contact_guid,
            document=document,
        )
        for c in candidates
    ])

    document.booked_at = timezone.now()
    document.booked_by = by

    logger.debug("Posted %s entries for %s", len(entries), label)
    return entries

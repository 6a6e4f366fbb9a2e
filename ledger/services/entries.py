"""Ledger queries plus bulk import and export."""

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from core.exceptions import DocumentValidationError, storage_errors
from documents.models import Document
from documents.services.lifecycle import parse_document_date
from documents.services.totals import round2, to_decimal
from ledger.models import LedgerEntry

logger = logging.getLogger(__name__)

ENTRY_TYPE_TAGS = {
    "primo": LedgerEntry.EntryType.PRIMO,
    "openingbalance": LedgerEntry.EntryType.PRIMO,
    "normal": LedgerEntry.EntryType.NORMAL,
}


def list_entries(entity, *, date_from=None, date_to=None, account_number=None, include_primo=True):
    """Entries of an entity as a lazy queryset, ordered by date."""
    qs = LedgerEntry.objects.filter(entity=entity)
    if date_from:
        qs = qs.filter(entry_date__gte=date_from)
    if date_to:
        qs = qs.filter(entry_date__lte=date_to)
    if account_number:
        qs = qs.filter(account_number=account_number)
    if not include_primo:
        qs = qs.exclude(entry_type=LedgerEntry.EntryType.PRIMO)
    return qs.order_by("entry_date", "id")


def list_entry_changes(entity, changes_from, changes_to, *, include_primo=True):
    """Entries created between two timestamps. The window is capped."""
    max_days = settings.LEDGER["MAX_CHANGES_WINDOW_DAYS"]
    if changes_to < changes_from:
        raise DocumentValidationError("changes_to is before changes_from.")
    if changes_to - changes_from > timedelta(days=max_days):
        raise DocumentValidationError(f"The changes window cannot exceed {max_days} days.")

    qs = LedgerEntry.objects.filter(entity=entity, created_at__gte=changes_from, created_at__lte=changes_to)
    if not include_primo:
        qs = qs.exclude(entry_type=LedgerEntry.EntryType.PRIMO)
    return qs.order_by("created_at", "id")


def _entry_from_payload(entity, index, item) -> LedgerEntry:
    def fail(message):
        return DocumentValidationError(f"Entry {index}: {message}", index=index)

    if not isinstance(item, dict):
        raise fail("not an object.")

    account_number = str(item.get("account_number") or "").strip()
    if not account_number:
        raise fail("account_number is required.")

    try:
        entry_date = parse_document_date(item.get("date"))
        if item.get("amount") not in (None, ""):
            amount = to_decimal(item["amount"], "amount")
        elif item.get("debit") not in (None, "") or item.get("credit") not in (None, ""):
            debit = to_decimal(item.get("debit"), "debit", default=Decimal("0"))
            credit = to_decimal(item.get("credit"), "credit", default=Decimal("0"))
            amount = debit - credit
        else:
            raise fail("amount or debit/credit is required.")
    except DocumentValidationError as exc:
        if exc.context.get("index") is not None:
            raise
        raise fail(exc.message) from None

    tag = str(item.get("entry_type") or "").replace("_", "").replace(" ", "").lower()
    if tag not in ENTRY_TYPE_TAGS:
        raise fail(f"unknown entry_type {item.get('entry_type')!r}.")

    vat_direction = str(item.get("vat_direction") or "").lower()
    if vat_direction not in LedgerEntry.VatDirection.values:
        raise fail(f"unknown vat_direction {item.get('vat_direction')!r}.")

    voucher_number = item.get("voucher_number")
    if voucher_number in (None, ""):
        voucher_number = None
    else:
        try:
            voucher_number = int(voucher_number)
        except (TypeError, ValueError):
            raise fail("voucher_number must be an integer.") from None

    return LedgerEntry(
        entity=entity,
        account_number=account_number,
        voucher_number=voucher_number,
        voucher_type=str(item.get("voucher_type") or "Import")[:40],
        entry_date=entry_date,
        amount=round2(amount),
        description=str(item.get("description") or "")[:255],
        vat_code=str(item.get("vat_code") or "")[:20],
        vat_direction=vat_direction,
        entry_type=ENTRY_TYPE_TAGS[tag],
        contact_guid=str(item.get("contact_guid") or "")[:64],
    )


@storage_errors
@transaction.atomic
def import_entries(entity, entries) -> list[LedgerEntry]:
    """Bulk load entries (e.g. from a SAF-T file). All or nothing."""
    prepared = [_entry_from_payload(entity, index, item) for index, item in enumerate(entries)]
    created = LedgerEntry.objects.bulk_create(prepared)
    logger.info("Imported %s ledger entries for entity=%s", len(created), entity.pk)
    return created


@dataclass
class LedgerExport:
    entries: list = field(default_factory=list)
    documents: list = field(default_factory=list)
    generated_at: object = None


def export_ledger(entity, *, date_from=None, date_to=None) -> LedgerExport:
    """Entries ordered by voucher number plus the headers of their documents."""
    entries = list(
        list_entries(entity, date_from=date_from, date_to=date_to)
        .order_by("voucher_number", "id")
    )
    document_ids = {e.document_id for e in entries if e.document_id}
    documents = list(
        Document.objects
        .filter(pk__in=document_ids)
        .order_by("document_class", "number")
        .values(
            "guid", "document_class", "number", "date", "currency",
            "contact_guid", "contact_name", "total_excl_vat", "total_vat", "total_incl_vat",
        )
    )
    return LedgerExport(entries=entries, documents=documents, generated_at=timezone.now())

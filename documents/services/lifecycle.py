"""Create, edit, book and delete documents.

Every operation is scoped to an entity and addresses documents by guid.
Booking is all-or-nothing: the document row is locked, the period guard
and the posting engine run, and the state flip commits together with the
ledger entries.
"""

import logging
from datetime import date as date_type

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils.dateparse import parse_date

from core.exceptions import (
    DocumentValidationError,
    ForbiddenError,
    NotDraftError,
    NotFoundError,
    storage_errors,
)
from documents.models import Document, DocumentLine
from documents.services.totals import calculate, to_decimal

logger = logging.getLogger(__name__)

HEADER_FIELDS = (
    "date",
    "currency",
    "contact_guid",
    "contact_name",
    "reference",
    "description",
    "payment_terms_days",
    "reminder_fee",
    "reminder_interest_rate",
)


def parse_document_date(value, field="date") -> date_type:
    if isinstance(value, date_type):
        return value
    try:
        parsed = parse_date(value) if isinstance(value, str) else None
    except ValueError:
        parsed = None
    if parsed is None:
        raise DocumentValidationError(f"{field} must be an ISO date (YYYY-MM-DD).", field=field)
    return parsed


def _clean_header(header: dict, *, partial: bool = False) -> dict:
    """Keep known header fields and coerce their types."""
    cleaned = {k: header[k] for k in HEADER_FIELDS if k in header}

    if "date" in cleaned:
        cleaned["date"] = parse_document_date(cleaned["date"])
    elif not partial:
        raise DocumentValidationError("date is required.", field="date")

    if "payment_terms_days" in cleaned:
        try:
            cleaned["payment_terms_days"] = int(cleaned["payment_terms_days"])
        except (TypeError, ValueError):
            raise DocumentValidationError("payment_terms_days must be an integer.", field="payment_terms_days") from None
        if cleaned["payment_terms_days"] < 0:
            raise DocumentValidationError("payment_terms_days cannot be negative.", field="payment_terms_days")
    for field in ("reminder_fee", "reminder_interest_rate"):
        if field in cleaned:
            cleaned[field] = to_decimal(cleaned[field], field)
    for field in ("currency", "contact_guid", "contact_name", "reference", "description"):
        if field in cleaned:
            cleaned[field] = str(cleaned[field] or "")
    return cleaned


def _write_lines(doc: Document, lines) -> None:
    """Replace all lines of ``doc`` with computed lines."""
    from core.models import Account

    names = Account.objects.names_for(doc.entity)
    doc.lines.all().delete()
    DocumentLine.objects.bulk_create([
        DocumentLine(
            document=doc,
            line_no=(index + 1) * 10,  # ERP-style spacing
            account_number=line.account_number,
            account_name=names.get(line.account_number, ""),
            description=line.description,
            quantity=line.quantity,
            unit_price=line.unit_price,
            discount=line.discount,
            vat_code=line.vat_code,
            vat_rate=line.vat_rate,
            total_amount=line.total_amount,
            total_amount_incl_vat=line.total_amount_incl_vat,
        )
        for index, line in enumerate(lines)
    ])


def get_document(entity, guid, *, for_update: bool = False) -> Document:
    """Load a live (not soft-deleted) document of the entity."""
    qs = Document.objects.filter(entity=entity, deleted_at__isnull=True)
    if for_update:
        qs = qs.select_for_update()
    try:
        return qs.select_related("entity").get(guid=guid)
    except (Document.DoesNotExist, ValueError, DjangoValidationError):
        raise NotFoundError(f"Document {guid} not found.") from None


@storage_errors
@transaction.atomic
def create_document(entity, document_class, *, header: dict, lines, by=None) -> Document:
    """Create a draft with computed lines and totals."""
    if document_class not in Document.DocumentClass.values:
        raise DocumentValidationError(f"Unknown document class {document_class!r}.", field="document_class")

    fields = _clean_header(header)
    fields.setdefault("currency", entity.currency or settings.LEDGER["DEFAULT_CURRENCY"])
    fields.setdefault("payment_terms_days", settings.LEDGER["DEFAULT_PAYMENT_TERMS_DAYS"])

    computed, totals = calculate(
        entity, lines, verbatim=document_class in Document.VERBATIM_CLASSES,
    )

    doc = Document.objects.create(
        entity=entity,
        document_class=document_class,
        **fields,
        **totals.as_fields(),
    )
    _write_lines(doc, computed)

    logger.info("Created %s guid=%s for entity=%s", document_class, doc.guid, entity.pk)
    return doc


@storage_errors
@transaction.atomic
def update_document(entity, guid, *, header: dict, lines, by=None) -> Document:
    """Replace header fields and all lines of a draft."""
    doc = get_document(entity, guid, for_update=True)
    if doc.state != Document.State.DRAFT:
        raise NotDraftError(f"Document {guid} is {doc.state}, only drafts can be edited.")

    fields = _clean_header(header, partial=True)
    computed, totals = calculate(entity, lines, verbatim=doc.is_verbatim)

    for name, value in {**fields, **totals.as_fields()}.items():
        setattr(doc, name, value)
    doc.save()
    _write_lines(doc, computed)

    logger.info("Updated %s guid=%s", doc.document_class, doc.guid)
    return doc


@transaction.atomic
def recalculate_document(doc: Document) -> Document:
    """Recompute stored lines and totals of a draft after lines were edited in place."""
    raw = []
    for line in doc.lines.all():
        item = {
            "account_number": line.account_number,
            "description": line.description,
            "quantity": line.quantity,
            "unit_price": line.unit_price,
            "discount": line.discount,
            "vat_code": line.vat_code,
        }
        # A line without a code keeps the rate it was entered with
        if not line.vat_code:
            item["vat_rate"] = line.vat_rate
        raw.append(item)
    if not raw:
        return doc
    computed, totals = calculate(doc.entity, raw, verbatim=doc.is_verbatim)
    for name, value in totals.as_fields().items():
        setattr(doc, name, value)
    doc.save()
    _write_lines(doc, computed)
    return doc


def check_booking_roles(doc: Document, actor_roles) -> None:
    """Reject the booking when the actor lacks a role the document class requires.

    ``actor_roles=None`` means an internal caller and skips the check.
    """
    if actor_roles is None:
        return
    required = set(settings.LEDGER["BOOKING_ROLES"].get(doc.document_class, ()))
    if required and not required & set(actor_roles):
        raise ForbiddenError(
            f"Booking a {doc.get_document_class_display().lower()} requires one of: {', '.join(sorted(required))}."
        )


@storage_errors
@transaction.atomic
def book_document(entity, guid, *, by=None, actor_roles=None) -> Document:
    """Book a draft and return it with its voucher number."""
    doc = get_document(entity, guid, for_update=True)
    if doc.state != Document.State.DRAFT:
        raise NotDraftError(f"Document {guid} is already {doc.state}.")
    check_booking_roles(doc, actor_roles)
    doc.book(by=by)
    doc.save()

    logger.info(
        "Booked %s guid=%s as number %s for entity=%s",
        doc.document_class, doc.guid, doc.number, entity.pk,
    )
    return doc


@storage_errors
@transaction.atomic
def delete_document(entity, guid, *, by=None):
    """Hard delete a draft, soft delete anything booked. Returns the guid."""
    doc = get_document(entity, guid, for_update=True)

    if doc.state == Document.State.DRAFT:
        doc.lines.all().delete()
        doc.delete()
        logger.info("Deleted draft %s guid=%s", doc.document_class, guid)
    else:
        doc.soft_delete(by=by)
        doc.save()
        logger.info("Soft deleted %s guid=%s number=%s", doc.document_class, guid, doc.number)
    return guid

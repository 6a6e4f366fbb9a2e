import logging

from django.db import transaction
from django.utils import timezone

from core.exceptions import InvalidStateError, storage_errors
from documents.models import Document, DocumentLine
from documents.services.lifecycle import get_document, parse_document_date
from documents.services.totals import DocumentTotals

logger = logging.getLogger(__name__)

COPIED_HEADER_FIELDS = (
    "currency",
    "contact_guid",
    "contact_name",
    "reference",
    "description",
    "payment_terms_days",
    "reminder_fee",
    "reminder_interest_rate",
)


@storage_errors
@transaction.atomic
def create_reversal(entity, source_guid, *, date=None, by=None) -> Document:
    """Create a draft credit note that negates a booked invoice.

    The credit note gets its number right away. Nothing is posted; booking
    the credit note produces the mirrored ledger entries.
    """
    source = get_document(entity, source_guid, for_update=True)
    if source.document_class != Document.DocumentClass.INVOICE:
        raise InvalidStateError(f"Document {source_guid} is not an invoice.")
    if source.state not in Document.BOOKED_STATES:
        raise InvalidStateError(f"Invoice {source_guid} is {source.state}, only booked invoices can be credited.")

    totals = DocumentTotals(
        total_excl_vat=source.total_excl_vat,
        total_vatable_amount=source.total_vatable_amount,
        total_non_vatable_amount=source.total_non_vatable_amount,
        total_vat=source.total_vat,
        total_incl_vat=source.total_incl_vat,
    ).negated()

    credit_note = Document.objects.create(
        entity=entity,
        document_class=Document.DocumentClass.CREDIT_NOTE,
        date=parse_document_date(date) if date else timezone.localdate(),
        reversal_of=source,
        **{name: getattr(source, name) for name in COPIED_HEADER_FIELDS},
        **totals.as_fields(),
    )

    DocumentLine.objects.bulk_create([
        DocumentLine(
            document=credit_note,
            line_no=line.line_no,
            account_number=line.account_number,
            account_name=line.account_name,
            description=line.description,
            quantity=-line.quantity,
            unit_price=line.unit_price,
            discount=line.discount,
            vat_code=line.vat_code,
            vat_rate=line.vat_rate,
            total_amount=-line.total_amount,
            total_amount_incl_vat=-line.total_amount_incl_vat,
        )
        for line in source.lines.all()
    ])

    credit_note.allocate_number_if_missing()

    logger.info(
        "Created credit note %s guid=%s for invoice %s",
        credit_note.number, credit_note.guid, source.number,
    )
    return credit_note

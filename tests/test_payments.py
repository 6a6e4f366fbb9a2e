# tests/test_payments.py
from datetime import date
from decimal import Decimal

import pytest

from core.exceptions import DocumentValidationError, InvalidStateError, NotFoundError
from documents.models import Document, Payment
from documents.services.lifecycle import book_document
from documents.services.payments import derive_payment_status, record_payment


@pytest.fixture
def booked_invoice(entity, make_invoice):
    invoice = make_invoice(reminder_fee="100", reminder_interest_rate="10")
    return book_document(entity, invoice.guid)


@pytest.mark.django_db
class TestRecordPayment:
    def test_full_payment_marks_paid(self, entity, booked_invoice, user):
        result = record_payment(
            entity, booked_invoice.guid, "250.00", date="2024-03-10", as_of="2024-03-10", by=user,
        )

        assert result.status == Document.State.PAID
        assert result.remaining_amount == Decimal("0.00")

        stored = Document.objects.get(pk=booked_invoice.pk)
        assert stored.state == Document.State.PAID
        assert stored.payment_status == Document.State.PAID
        assert stored.paid_on == date(2024, 3, 10)
        assert stored.paid_amount == Decimal("250.00")
        assert Payment.objects.filter(document=stored).count() == 1

    def test_partial_payment_before_due_date(self, entity, booked_invoice):
        result = record_payment(entity, booked_invoice.guid, 100, date="2024-03-05", as_of="2024-03-05")

        assert result.status == Document.State.PARTIAL
        assert result.remaining_amount == Decimal("150.00")
        assert Document.objects.get(pk=booked_invoice.pk).paid_on is None

    def test_payments_accumulate(self, entity, booked_invoice):
        record_payment(entity, booked_invoice.guid, 100, date="2024-03-05", as_of="2024-03-05")
        result = record_payment(entity, booked_invoice.guid, 150, date="2024-03-06", as_of="2024-03-06")

        assert result.status == Document.State.PAID
        assert result.paid_amount == Decimal("250.00")

    def test_overpayment(self, entity, booked_invoice):
        result = record_payment(entity, booked_invoice.guid, 300, date="2024-03-05", as_of="2024-03-05")

        assert result.status == Document.State.OVERPAID
        assert result.remaining_amount == Decimal("-50.00")

    def test_overdue_adds_fee_and_interest(self, entity, booked_invoice):
        # due 2024-03-15, 30 days late on 2024-04-14
        result = record_payment(entity, booked_invoice.guid, 50, date="2024-04-14", as_of="2024-04-14")

        # 200 * 10 % * 30 / 365 = 1.64
        assert result.status == Document.State.OVERDUE
        assert result.additional_charges == Decimal("101.64")
        assert result.remaining_amount == Decimal("301.64")
        assert Document.objects.get(pk=booked_invoice.pk).state == Document.State.OVERDUE

    def test_refund_is_a_negative_payment(self, entity, booked_invoice):
        record_payment(entity, booked_invoice.guid, 300, date="2024-03-05", as_of="2024-03-05")
        result = record_payment(entity, booked_invoice.guid, -50, date="2024-03-06", as_of="2024-03-06")

        assert result.status == Document.State.PAID

    def test_zero_amount_is_rejected(self, entity, booked_invoice):
        with pytest.raises(DocumentValidationError):
            record_payment(entity, booked_invoice.guid, "0.00")
        assert Payment.objects.count() == 0

    def test_draft_cannot_be_paid(self, entity, make_invoice):
        draft = make_invoice()

        with pytest.raises(InvalidStateError):
            record_payment(entity, draft.guid, 10)
        assert Payment.objects.count() == 0

    def test_unknown_document(self, entity):
        with pytest.raises(NotFoundError):
            record_payment(entity, "00000000-0000-0000-0000-000000000000", 10)


@pytest.mark.django_db
class TestDerivePaymentStatus:
    def test_within_one_cent_counts_as_paid(self, entity, booked_invoice):
        result = derive_payment_status(booked_invoice, Decimal("249.995"), as_of=date(2024, 3, 1))
        assert result.status == Document.State.PAID
        assert result.remaining_amount == Decimal("0")

    def test_due_date_itself_is_not_overdue(self, entity, booked_invoice):
        result = derive_payment_status(booked_invoice, Decimal("0"), as_of=date(2024, 3, 15))
        assert result.status == Document.State.PARTIAL
        assert result.additional_charges == Decimal("0")

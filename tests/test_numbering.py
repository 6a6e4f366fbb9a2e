# tests/test_numbering.py
import threading

import pytest
from django.test import override_settings
from django.conf import settings
from django.db import connection

from core.exceptions import ConcurrencyConflictError, UnbalancedEntriesError
from core.models import NumberSeries
from documents.models import Document
from documents.services.lifecycle import book_document
from ledger.models import LedgerEntry

from .factories import DocumentFactory, EntityFactory


@pytest.mark.django_db
class TestNumberSeries:
    def test_allocate_hands_out_consecutive_numbers(self):
        series = NumberSeries.for_code(EntityFactory(), "invoice")

        assert [series.allocate() for _ in range(3)] == [1, 2, 3]
        assert NumberSeries.objects.get(pk=series.pk).next_number == 4

    def test_for_code_seeds_new_series_only(self):
        entity = EntityFactory()
        series = NumberSeries.for_code(entity, "invoice", seed=40)
        again = NumberSeries.for_code(entity, "invoice", seed=1)

        assert again.pk == series.pk
        assert again.allocate() == 40


@pytest.mark.django_db
class TestDocumentNumbering:
    def test_numbers_increase_in_booking_order(self, entity, make_invoice):
        invoices = [make_invoice() for _ in range(3)]

        numbers = [book_document(entity, doc.guid).number for doc in reversed(invoices)]

        assert numbers == [1, 2, 3]

    def test_each_class_has_its_own_sequence(self, entity, make_invoice, make_voucher):
        invoice = make_invoice()
        voucher = make_voucher([
            {"account_number": "5000", "amount": "10"},
            {"account_number": "2100", "amount": "-10"},
        ])

        assert book_document(entity, invoice.guid).number == 1
        assert book_document(entity, voucher.guid).number == 1

    def test_each_entity_has_its_own_sequence(self, entity, make_invoice):
        other = EntityFactory()
        DocumentFactory(entity=other, number=1)

        assert book_document(entity, make_invoice().guid).number == 1

    def test_new_series_continues_after_existing_numbers(self, entity, make_invoice):
        DocumentFactory(entity=entity, number=41)

        assert book_document(entity, make_invoice().guid).number == 42

    def test_taken_number_is_retried(self, entity, make_invoice):
        NumberSeries.for_code(entity, Document.DocumentClass.INVOICE)
        # imported document already holds number 1, the counter does not know
        DocumentFactory(entity=entity, number=1)

        booked = book_document(entity, make_invoice().guid)

        assert booked.number == 2
        assert NumberSeries.objects.get(entity=entity, code="invoice").next_number == 3

    def test_gives_up_after_retries(self, entity, make_invoice):
        NumberSeries.for_code(entity, Document.DocumentClass.INVOICE)
        for number in (1, 2, 3):
            DocumentFactory(entity=entity, number=number)
        invoice = make_invoice()

        with override_settings(LEDGER={**settings.LEDGER, "SEQUENCE_RETRIES": 2}):
            with pytest.raises(ConcurrencyConflictError):
                book_document(entity, invoice.guid)

        stored = Document.objects.get(pk=invoice.pk)
        assert stored.state == Document.State.DRAFT
        assert stored.number is None
        assert LedgerEntry.objects.count() == 0

    def test_failed_booking_does_not_burn_a_number(self, entity, make_invoice, make_voucher):
        bad = make_voucher([
            {"account_number": "5000", "amount": "10"},
            {"account_number": "2100", "amount": "-9"},
        ])
        with pytest.raises(UnbalancedEntriesError):
            book_document(entity, bad.guid)

        good = make_voucher([
            {"account_number": "5000", "amount": "10"},
            {"account_number": "2100", "amount": "-10"},
        ])
        assert book_document(entity, good.guid).number == 1


@pytest.mark.django_db(transaction=True)
def test_concurrent_bookings_get_distinct_numbers(entity, make_invoice):
    invoices = [make_invoice() for _ in range(6)]
    numbers, errors = [], []

    def book(guid):
        try:
            numbers.append(book_document(entity, guid).number)
        except Exception as exc:
            errors.append(exc)
        finally:
            connection.close()

    threads = [threading.Thread(target=book, args=(doc.guid,)) for doc in invoices]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert sorted(numbers) == [1, 2, 3, 4, 5, 6]
    assert LedgerEntry.objects.order_by().values("voucher_number").distinct().count() == 6

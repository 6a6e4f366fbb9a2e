# tests/test_entries.py
from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from core.exceptions import DocumentValidationError, ImmutableEntryError
from documents.services.lifecycle import book_document
from ledger.models import LedgerEntry
from ledger.services.entries import export_ledger, import_entries, list_entries, list_entry_changes

from .factories import EntityFactory, LedgerEntryFactory


@pytest.mark.django_db
class TestListEntries:
    def test_filters(self, entity):
        primo = LedgerEntryFactory(entity=entity, account_number="1100", entry_date=date(2024, 1, 1),
                                   entry_type=LedgerEntry.EntryType.PRIMO)
        march = LedgerEntryFactory(entity=entity, account_number="3000", entry_date=date(2024, 3, 1))
        april = LedgerEntryFactory(entity=entity, account_number="3000", entry_date=date(2024, 4, 1))
        LedgerEntryFactory(account_number="3000", entry_date=date(2024, 3, 1))

        assert list(list_entries(entity)) == [primo, march, april]
        assert list(list_entries(entity, include_primo=False)) == [march, april]
        assert list(list_entries(entity, account_number="3000", date_to=date(2024, 3, 31))) == [march]
        assert list(list_entries(entity, date_from=date(2024, 3, 2))) == [april]

    def test_changes_window(self, entity):
        entry = LedgerEntryFactory(entity=entity)
        now = timezone.now()

        assert list(list_entry_changes(entity, now - timedelta(days=1), now + timedelta(days=1))) == [entry]

    def test_changes_window_is_capped(self, entity):
        now = timezone.now()
        with pytest.raises(DocumentValidationError):
            list_entry_changes(entity, now - timedelta(days=32), now)
        with pytest.raises(DocumentValidationError):
            list_entry_changes(entity, now, now - timedelta(days=1))


@pytest.mark.django_db
class TestImportEntries:
    def test_amount_and_debit_credit(self, entity):
        created = import_entries(entity, [
            {"account_number": "1100", "date": "2024-01-01", "debit": "1000", "entry_type": "OpeningBalance"},
            {"account_number": "2100", "date": "2024-01-01", "credit": "1000", "entry_type": "Opening Balance"},
            {"account_number": "3000", "date": "2024-02-01", "amount": "-12.345", "entry_type": "Normal",
             "voucher_number": "7", "voucher_type": "Saft"},
        ])

        assert [(e.account_number, e.amount, e.entry_type) for e in created] == [
            ("1100", Decimal("1000"), LedgerEntry.EntryType.PRIMO),
            ("2100", Decimal("-1000"), LedgerEntry.EntryType.PRIMO),
            ("3000", Decimal("-12.35"), LedgerEntry.EntryType.NORMAL),
        ]
        assert created[2].voucher_number == 7
        assert LedgerEntry.objects.filter(entity=entity).count() == 3

    def test_vat_direction_is_kept(self, entity):
        created = import_entries(entity, [
            {"account_number": "2610", "date": "2024-02-01", "amount": "-25", "entry_type": "Normal",
             "vat_code": "U25", "vat_direction": "Output"},
            {"account_number": "1100", "date": "2024-02-01", "amount": "25", "entry_type": "Normal"},
        ])

        assert [e.vat_direction for e in created] == [LedgerEntry.VatDirection.OUTPUT, ""]

    @pytest.mark.parametrize("bad, message", [
        ({"date": "2024-01-01", "amount": "1", "entry_type": "Normal"}, "account_number"),
        ({"account_number": "1100", "amount": "1", "entry_type": "Normal"}, "date"),
        ({"account_number": "1100", "date": "2024-01-01", "entry_type": "Normal"}, "amount"),
        ({"account_number": "1100", "date": "2024-01-01", "amount": "x", "entry_type": "Normal"}, "amount"),
        ({"account_number": "1100", "date": "2024-01-01", "amount": "1", "entry_type": "Closing"}, "entry_type"),
        ({"account_number": "1100", "date": "2024-01-01", "amount": "1", "entry_type": "Normal",
          "voucher_number": "A1"}, "voucher_number"),
        ({"account_number": "2610", "date": "2024-01-01", "amount": "1", "entry_type": "Normal",
          "vat_direction": "sideways"}, "vat_direction"),
    ])
    def test_bad_entry_rejects_whole_batch(self, entity, bad, message):
        good = {"account_number": "1100", "date": "2024-01-01", "amount": "1", "entry_type": "Normal"}

        with pytest.raises(DocumentValidationError) as exc:
            import_entries(entity, [good, bad])

        assert exc.value.context["index"] == 1
        assert exc.value.message.startswith("Entry 1:")
        assert message in exc.value.message
        assert LedgerEntry.objects.count() == 0


@pytest.mark.django_db
class TestExportLedger:
    def test_entries_by_voucher_with_document_headers(self, entity, make_invoice):
        second = make_invoice(contact_name="Second")
        first = make_invoice(contact_name="First")
        book_document(entity, first.guid)
        book_document(entity, second.guid)
        LedgerEntryFactory(entity=EntityFactory())

        export = export_ledger(entity)

        assert [e.voucher_number for e in export.entries] == [1, 1, 1, 2, 2, 2]
        assert [d["contact_name"] for d in export.documents] == ["First", "Second"]
        assert export.documents[0]["total_incl_vat"] == Decimal("250.00")
        assert export.generated_at is not None


@pytest.mark.django_db
class TestImmutability:
    def test_saved_entry_cannot_change(self):
        entry = LedgerEntryFactory()
        entry.amount = Decimal("1.00")

        with pytest.raises(ImmutableEntryError):
            entry.save()

    def test_entry_cannot_be_deleted(self):
        entry = LedgerEntryFactory()
        with pytest.raises(ImmutableEntryError):
            entry.delete()

    def test_queryset_update_and_delete_are_blocked(self):
        LedgerEntryFactory()
        with pytest.raises(ImmutableEntryError):
            LedgerEntry.objects.update(amount=0)
        with pytest.raises(ImmutableEntryError):
            LedgerEntry.objects.all().delete()
        assert LedgerEntry.objects.count() == 1

    def test_debit_and_credit(self):
        assert LedgerEntry(amount=Decimal("5")).debit == Decimal("5")
        assert LedgerEntry(amount=Decimal("-5")).credit == Decimal("5")

    def test_zero_side_is_a_decimal(self):
        debit_entry = LedgerEntry(amount=Decimal("5.00"))
        credit_entry = LedgerEntry(amount=Decimal("-5.00"))

        assert isinstance(debit_entry.credit, Decimal)
        assert isinstance(credit_entry.debit, Decimal)
        assert (str(debit_entry.credit), str(credit_entry.debit)) == ("0.00", "0.00")

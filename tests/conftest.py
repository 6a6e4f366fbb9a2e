# tests/conftest.py
from datetime import date
from decimal import Decimal

import pytest

from documents.models import Document
from documents.services.lifecycle import create_document

from .factories import AccountFactory, AccountingPeriodFactory, EntityFactory, UserFactory, VatCodeFactory


@pytest.fixture
def entity():
    """Entity with a small chart of accounts and a 25 % VAT code."""
    entity = EntityFactory()
    AccountFactory(entity=entity, number="1100", name="Receivables")
    AccountFactory(entity=entity, number="2100", name="Payables")
    AccountFactory(entity=entity, number="2610", name="VAT")
    AccountFactory(entity=entity, number="3000", name="Revenue")
    AccountFactory(entity=entity, number="5000", name="Office costs")
    VatCodeFactory(entity=entity, code="U25", name="Sales 25%", rate=Decimal("0.2500"))
    return entity


@pytest.fixture
def user():
    return UserFactory()


@pytest.fixture
def period(entity):
    return AccountingPeriodFactory(entity=entity)


@pytest.fixture
def make_invoice(entity):
    """Create a draft invoice; default is scenario A (2 x 100.00 at 25 %)."""

    def _make(lines=None, **header):
        header.setdefault("date", date(2024, 3, 1))
        if lines is None:
            lines = [{"account_number": "3000", "quantity": 2, "unit_price": "100", "vat_code": "U25"}]
        return create_document(entity, Document.DocumentClass.INVOICE, header=header, lines=lines)

    return _make


@pytest.fixture
def make_voucher(entity):
    def _make(lines, document_class=Document.DocumentClass.MANUAL_VOUCHER, **header):
        header.setdefault("date", date(2024, 3, 1))
        return create_document(entity, document_class, header=header, lines=lines)

    return _make

# tests/test_exceptions.py
from decimal import Decimal

from core.exceptions import (
    InvalidStateError,
    NotDraftError,
    PeriodLockedError,
    StorageError,
    UnbalancedEntriesError,
    error_payload,
)


def test_payload_carries_kind_message_and_context():
    exc = UnbalancedEntriesError("Entries do not balance. Sum=0.10", sum=Decimal("0.10"))

    assert exc.as_dict(debug=False) == {
        "error": "not-balanced",
        "message": "Entries do not balance. Sum=0.10",
        "sum": "0.10",
    }


def test_default_message():
    assert str(PeriodLockedError()) == "Accounting period is locked."


def test_not_draft_is_an_invalid_state():
    assert isinstance(NotDraftError(), InvalidStateError)
    assert isinstance(NotDraftError(), ValueError)


def test_internal_details_only_in_debug():
    exc = StorageError(internal="UNIQUE constraint failed: documents_document.number")

    assert "details" not in exc.as_dict(debug=False)
    assert exc.as_dict(debug=True)["details"].startswith("UNIQUE constraint failed")


def test_unknown_exceptions_are_opaque(settings):
    settings.DEBUG = False
    payload = error_payload(RuntimeError("disk full"))

    assert payload == {"error": "storage", "message": "Storage failure."}

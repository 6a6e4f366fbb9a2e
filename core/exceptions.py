"""Domain errors raised by the booking engine.

Every error is a ``ValueError`` so admin actions and management commands can
report it the same way they report any other business rule violation.
Each error also carries a machine-readable ``kind`` which collaborators
(an HTTP layer, a CLI) turn into their own status codes.

Only ``context`` is public. ``internal`` holds raw details (database
messages and the like) and is rendered only in development.
"""

import functools
import logging

from django.conf import settings
from django.db import DatabaseError


class LedgerError(ValueError):
    kind = "error"
    default_message = "Ledger operation failed."

    def __init__(self, message=None, *, internal=None, **context):
        self.message = message or self.default_message
        self.context = context
        self.internal = internal
        super().__init__(self.message)

    def as_dict(self, debug=None) -> dict:
        """Payload for collaborators: ``{"error": kind, "message": ...}``."""
        if debug is None:
            debug = settings.DEBUG
        payload = {"error": self.kind, "message": self.message}
        payload.update({k: str(v) for k, v in self.context.items()})
        if debug and self.internal:
            payload["details"] = str(self.internal)
        return payload


class DocumentValidationError(LedgerError):
    kind = "validation"
    default_message = "Document is not valid."


class NotFoundError(LedgerError):
    kind = "not-found"
    default_message = "Not found."


class InvalidStateError(LedgerError):
    kind = "invalid-state"
    default_message = "Operation not allowed in the current state."


class NotDraftError(InvalidStateError):
    kind = "not-draft"
    default_message = "Document is not a draft."


class ForbiddenError(LedgerError):
    kind = "forbidden"
    default_message = "Not allowed to perform this operation."


class PeriodLockedError(LedgerError):
    kind = "period-locked"
    default_message = "Accounting period is locked."


class UnbalancedEntriesError(LedgerError):
    kind = "not-balanced"
    default_message = "Entries do not balance."


class ConcurrencyConflictError(LedgerError):
    kind = "concurrency-conflict"
    default_message = "Could not allocate a unique number, please retry."


class StorageError(LedgerError):
    kind = "storage"
    default_message = "Storage failure."


class ImmutableEntryError(LedgerError):
    kind = "immutable"
    default_message = "Ledger entries cannot be changed or deleted."


def error_payload(exc: Exception, debug=None) -> dict:
    """Render any exception as an error payload.

    Unknown exceptions are opaque storage failures; their text is only
    shown when ``DEBUG`` is on.
    """
    if isinstance(exc, LedgerError):
        return exc.as_dict(debug=debug)
    return StorageError(internal=exc).as_dict(debug=debug)


def storage_errors(func):
    """Report database failures of a service call as an opaque StorageError.

    Goes outside ``transaction.atomic`` so the rollback has happened by the
    time the error is raised. The original error is logged with its
    traceback and kept as ``internal``.
    """
    logger = logging.getLogger(func.__module__)

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DatabaseError as exc:
            logger.exception("%s failed in the database", func.__name__)
            raise StorageError(internal=exc) from exc

    return wrapper

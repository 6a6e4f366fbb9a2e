import logging

from django.conf import settings
from django.db import IntegrityError, transaction

from core.exceptions import ConcurrencyConflictError
from core.models import NumberSeries

logger = logging.getLogger(__name__)


def claim_next_number(entity, code: str, claim, *, seed: int = 1, retries=None) -> int:
    """Allocate a number from the (entity, code) series and persist it with ``claim``.

    ``claim(number)`` writes the number onto its row. It runs inside a
    savepoint; a unique-constraint hit means somebody else already holds
    the number (for instance an imported document), so a fresh number is
    drawn. After ``retries`` extra attempts we give up.
    """
    if retries is None:
        retries = settings.LEDGER["SEQUENCE_RETRIES"]

    series = NumberSeries.for_code(entity, code, seed=seed)
    for attempt in range(retries + 1):
        number = series.allocate()
        try:
            with transaction.atomic():
                claim(number)
        except IntegrityError:
            logger.warning(
                "Number %s already taken for entity=%s series=%s (attempt %s)",
                number, entity.pk, code, attempt + 1,
            )
            continue
        return number

    raise ConcurrencyConflictError(
        f"Could not allocate a unique {code} number after {retries + 1} attempts."
    )

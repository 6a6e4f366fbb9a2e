"""Accounting periods and the period lock guard."""

import logging
from datetime import timedelta

from django.db import transaction
from django.db.models import Max

from core.exceptions import DocumentValidationError, NotFoundError, PeriodLockedError, storage_errors
from core.models import AccountingPeriod, Entity

logger = logging.getLogger(__name__)


def locked_periods(entity, on_date):
    return AccountingPeriod.objects.filter(
        entity=entity,
        is_locked=True,
        date_from__lte=on_date,
        date_to__gte=on_date,
    )


def is_date_locked(entity, on_date) -> bool:
    return locked_periods(entity, on_date).exists()


def assert_period_open(entity, on_date):
    """Raise PeriodLockedError if ``on_date`` falls inside a locked period."""
    if is_date_locked(entity, on_date):
        raise PeriodLockedError(
            f"Accounting period is locked for date {on_date.isoformat()}",
            date=on_date.isoformat(),
        )


def get_period(entity, period_id) -> AccountingPeriod:
    try:
        return AccountingPeriod.objects.get(entity=entity, pk=period_id)
    except AccountingPeriod.DoesNotExist:
        raise NotFoundError(f"Accounting period {period_id} not found.") from None


@storage_errors
@transaction.atomic
def create_period(entity, *, name: str, date_from, date_to) -> AccountingPeriod:
    """Open a new period directly after the latest existing one.

    The first period of an entity may start anywhere.
    """
    if date_to < date_from:
        raise DocumentValidationError("Period end date is before its start date.")

    # Serialize period creation per entity
    Entity.objects.select_for_update().get(pk=entity.pk)
    last_end = AccountingPeriod.objects.filter(entity=entity).aggregate(m=Max("date_to"))["m"]
    if last_end is not None and date_from != last_end + timedelta(days=1):
        raise DocumentValidationError(
            f"New period must start on {(last_end + timedelta(days=1)).isoformat()}.",
            expected_start=(last_end + timedelta(days=1)).isoformat(),
        )

    period = AccountingPeriod.objects.create(
        entity=entity, name=name, date_from=date_from, date_to=date_to,
    )
    logger.info("Created accounting period %s for entity=%s", period, entity.pk)
    return period


def lock_period(entity, period_id) -> AccountingPeriod:
    period = get_period(entity, period_id)
    period.lock()
    logger.info("Locked accounting period %s for entity=%s", period, entity.pk)
    return period


def unlock_period(entity, period_id) -> AccountingPeriod:
    period = get_period(entity, period_id)
    period.unlock()
    logger.info("Unlocked accounting period %s for entity=%s", period, entity.pk)
    return period

"""Account reports over posted ledger entries.

    balance  every account
    result   profit & loss accounts (leading digit 5-8)
    primo    opening balance entries only

plus a VAT report over VAT entries for any date range.

Reports are read-only. A stored snapshot for the exact (entity, period,
type) wins over recomputation.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.db import transaction
from django.db.models import Sum

from core.exceptions import DocumentValidationError, storage_errors
from core.models import Account
from documents.services.totals import ZERO, round2
from ledger.models import LedgerEntry, ReportSnapshot

logger = logging.getLogger(__name__)

ReportType = ReportSnapshot.ReportType

RESULT_LEADING_DIGITS = frozenset("5678")


@dataclass(frozen=True)
class ReportRow:
    account_number: str
    account_name: str
    amount: Decimal

    def as_dict(self) -> dict:
        return {
            "account_number": self.account_number,
            "account_name": self.account_name,
            "amount": str(self.amount),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ReportRow":
        return cls(data["account_number"], data.get("account_name", ""), Decimal(data["amount"]))


def all_accounts(account_number: str) -> bool:
    return True


def is_result_account(account_number: str) -> bool:
    return account_number[:1] in RESULT_LEADING_DIGITS


def report_filter(report_type):
    """Return ``(account predicate, entry type or None)`` for a report type."""
    if report_type == ReportType.BALANCE:
        return all_accounts, None
    if report_type == ReportType.RESULT:
        return is_result_account, None
    if report_type == ReportType.PRIMO:
        return all_accounts, LedgerEntry.EntryType.PRIMO
    raise DocumentValidationError(f"Unknown report type {report_type!r}.", field="report_type")


def aggregate_entries(entity, date_from, date_to, *, predicate=all_accounts, entry_type=None) -> list[ReportRow]:
    """Sum entries per account for dates in [date_from, date_to]."""
    qs = LedgerEntry.objects.filter(entity=entity, entry_date__gte=date_from, entry_date__lte=date_to)
    if entry_type:
        qs = qs.filter(entry_type=entry_type)

    totals = (
        qs.order_by()
        .values("account_number")
        .annotate(total=Sum("amount"))
        .order_by("account_number")
    )
    names = Account.objects.names_for(entity)

    return [
        # SQLite sums decimals as floats
        ReportRow(row["account_number"], names.get(row["account_number"], ""), round2(row["total"] or ZERO))
        for row in totals
        if predicate(row["account_number"])
    ]


def compute_report(entity, period, report_type) -> list[ReportRow]:
    predicate, entry_type = report_filter(report_type)
    return aggregate_entries(
        entity, period.date_from, period.date_to, predicate=predicate, entry_type=entry_type,
    )


def generate_report(entity, period, report_type) -> list[ReportRow]:
    """Rows for a report, from the snapshot when one exists."""
    report_filter(report_type)
    snapshot = ReportSnapshot.objects.filter(entity=entity, period=period, report_type=report_type).first()
    if snapshot is not None:
        return [ReportRow.from_dict(row) for row in snapshot.rows]
    return compute_report(entity, period, report_type)


@storage_errors
@transaction.atomic
def materialize_report(entity, period, report_type) -> ReportSnapshot:
    """Compute a report and store it as the snapshot for its period."""
    rows = compute_report(entity, period, report_type)
    snapshot, _ = ReportSnapshot.objects.update_or_create(
        entity=entity,
        period=period,
        report_type=report_type,
        defaults={"rows": [row.as_dict() for row in rows]},
    )
    logger.info("Materialized %s report for %s (%s rows)", report_type, period, len(rows))
    return snapshot


@dataclass(frozen=True)
class VatReportRow:
    vat_code: str
    direction: str
    amount: Decimal


@dataclass(frozen=True)
class VatReport:
    """VAT due for a date range.

    Amounts are positive for VAT charged on sales (output) and VAT paid on
    purchases (input); ``net_vat_payable`` is output minus input.
    """

    date_from: object
    date_to: object
    sales_vat: Decimal
    purchase_vat: Decimal
    net_vat_payable: Decimal
    rows: tuple = ()

    def as_dict(self) -> dict:
        return {
            "period": {"from": self.date_from.isoformat(), "to": self.date_to.isoformat()},
            "sales_vat": str(self.sales_vat),
            "purchase_vat": str(self.purchase_vat),
            "net_vat_payable": str(self.net_vat_payable),
            "rows": [
                {"vat_code": r.vat_code, "direction": r.direction, "amount": str(r.amount)}
                for r in self.rows
            ],
        }


def vat_report(entity, date_from, date_to) -> VatReport:
    """Sum the VAT entries in [date_from, date_to] per VAT code and direction."""
    if date_to < date_from:
        raise DocumentValidationError("date_to is before date_from.", field="date_to")

    totals = (
        LedgerEntry.objects
        .filter(entity=entity, entry_date__gte=date_from, entry_date__lte=date_to)
        .exclude(vat_direction="")
        .order_by()
        .values("vat_direction", "vat_code")
        .annotate(total=Sum("amount"))
        .order_by("vat_direction", "vat_code")
    )

    rows = []
    for row in totals:
        amount = round2(row["total"] or ZERO)
        # output VAT is posted as a credit
        if row["vat_direction"] == LedgerEntry.VatDirection.OUTPUT:
            amount = -amount
        rows.append(VatReportRow(row["vat_code"], row["vat_direction"], amount))

    sales_vat = sum((r.amount for r in rows if r.direction == LedgerEntry.VatDirection.OUTPUT), ZERO)
    purchase_vat = sum((r.amount for r in rows if r.direction == LedgerEntry.VatDirection.INPUT), ZERO)

    return VatReport(
        date_from=date_from,
        date_to=date_to,
        sales_vat=sales_vat,
        purchase_vat=purchase_vat,
        net_vat_payable=sales_vat - purchase_vat,
        rows=tuple(rows),
    )

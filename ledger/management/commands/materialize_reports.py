from django.core.management.base import BaseCommand, CommandError

from core.exceptions import LedgerError
from core.models import Entity
from core.services.periods import get_period
from ledger.models import ReportSnapshot
from ledger.services.reports import materialize_report


class Command(BaseCommand):
    help = "Store report snapshots for an accounting period"

    def add_arguments(self, parser):
        parser.add_argument("--entity-id", type=int, required=True)
        parser.add_argument("--period-id", type=int, required=True)
        parser.add_argument(
            "--type",
            action="append",
            choices=ReportSnapshot.ReportType.values,
            help="Report type, repeatable. Defaults to all types.",
        )

    def handle(self, *args, **opts):
        try:
            entity = Entity.objects.get(id=opts["entity_id"])
            period = get_period(entity, opts["period_id"])
        except Entity.DoesNotExist:
            raise CommandError(f"Entity {opts['entity_id']} does not exist") from None
        except LedgerError as e:
            raise CommandError(e.message) from e

        for report_type in opts["type"] or ReportSnapshot.ReportType.values:
            snapshot = materialize_report(entity, period, report_type)
            self.stdout.write(f"{report_type}: {len(snapshot.rows)} rows")

        self.stdout.write(self.style.SUCCESS(f"Materialized reports for {period}"))

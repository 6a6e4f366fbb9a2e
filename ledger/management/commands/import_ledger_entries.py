import json

from django.core.management.base import BaseCommand, CommandError

from core.exceptions import LedgerError
from core.models import Entity
from ledger.services.entries import import_entries


class Command(BaseCommand):
    help = "Import ledger entries (e.g. opening balances from a SAF-T conversion) from a JSON list"

    def add_arguments(self, parser):
        parser.add_argument("--path", required=True, help="Path to a JSON list of entries")
        parser.add_argument("--entity-id", type=int, required=True, help="Entity ID to import into")

    def handle(self, *args, **opts):
        entity_id = opts["entity_id"]
        try:
            entity = Entity.objects.get(id=entity_id)
        except Entity.DoesNotExist:
            raise CommandError(f"Entity {entity_id} does not exist") from None

        with open(opts["path"], "r", encoding="utf-8") as f:
            payload = json.load(f)

        try:
            created = import_entries(entity, payload)
        except LedgerError as e:
            raise CommandError(e.message) from e

        self.stdout.write(self.style.SUCCESS(f"Imported {len(created)} entries into entity={entity_id}"))

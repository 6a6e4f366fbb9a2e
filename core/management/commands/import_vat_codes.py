import json
from decimal import Decimal, InvalidOperation

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from core.models import Account, Entity, VatCode


def _parse_rate(value) -> Decimal | None:
    """
    "25%"  -> Decimal("0.2500")
    "0.25" -> Decimal("0.2500")
    "x%" or "" -> None
    """
    if value is None:
        return None
    s = str(value).strip().replace(",", ".")
    if not s or "x" in s.lower():
        return None
    try:
        if s.endswith("%"):
            return (Decimal(s[:-1].strip()) / Decimal("100")).quantize(Decimal("0.0001"))
        return Decimal(s).quantize(Decimal("0.0001"))
    except InvalidOperation:
        raise CommandError(f"Invalid VAT rate {value!r}") from None


class Command(BaseCommand):
    help = "Import VAT codes from a JSON list into the VAT registry of an entity"

    def add_arguments(self, parser):
        parser.add_argument(
            "--path",
            required=True,
            help='Path to a JSON list like [{"code": "U25", "name": "Sales 25%", "rate": "25%", "type": "sale"}]',
        )
        parser.add_argument(
            "--entity-id",
            type=int,
            required=True,
            help="Entity ID to import VAT codes into",
        )
        parser.add_argument(
            "--replace",
            action="store_true",
            help="Delete existing VAT codes for the entity before importing",
        )

    @transaction.atomic
    def handle(self, *args, **opts):
        entity_id = opts["entity_id"]

        try:
            entity = Entity.objects.get(id=entity_id)
        except Entity.DoesNotExist:
            raise CommandError(f"Entity {entity_id} does not exist") from None

        with open(opts["path"], "r", encoding="utf-8") as f:
            rows = json.load(f)

        if opts["replace"]:
            VatCode.objects.filter(entity=entity).delete()

        accounts = {a.number: a for a in Account.objects.filter(entity=entity)}

        created = 0
        updated = 0
        for row in rows:
            code = (row.get("code") or "").strip()[:20]
            if not code:
                continue

            vat_type_raw = (row.get("type") or "").strip().lower()
            vat_type = VatCode.VatType.PURCHASE if vat_type_raw.startswith("p") else VatCode.VatType.SALE

            defaults = {
                "name": (row.get("name") or code).strip()[:255],
                "description": (row.get("description") or "").strip(),
                "vat_type": vat_type,
                "rate": _parse_rate(row.get("rate")),
                "output_vat_account": accounts.get(str(row.get("output_vat_account") or "")),
                "input_vat_account": accounts.get(str(row.get("input_vat_account") or "")),
            }

            _, was_created = VatCode.objects.update_or_create(entity=entity, code=code, defaults=defaults)
            created += int(was_created)
            updated += int(not was_created)

        self.stdout.write(self.style.SUCCESS(
            f"VAT import entity={entity_id}: codes created={created}, updated={updated}"
        ))

from decimal import Decimal

from core.models import VatCode


def vat_rates_for(entity) -> dict[str, Decimal]:
    """Map VAT code -> rate (fraction) for an entity. Codes without a rate map to 0."""
    return {
        code: (rate if rate is not None else Decimal("0"))
        for code, rate in VatCode.objects.filter(entity=entity).values_list("code", "rate")
    }


def vat_account_number(entity, vat_code: str, *, kind: str) -> str:
    """Account to post VAT to for a line.

    ``kind`` is "output_vat" (sales) or "input_vat" (purchases).
    The VAT code's own account wins, then the entity's control account,
    then the configured default.
    """
    if vat_code:
        code = (
            VatCode.objects
            .filter(entity=entity, code=vat_code)
            .select_related("output_vat_account", "input_vat_account")
            .first()
        )
        if code is not None:
            account = code.output_vat_account if kind == "output_vat" else code.input_vat_account
            if account is not None:
                return account.number
    return entity.control_account_number(kind)


def vat_types_for(entity) -> dict[str, str]:
    """Map VAT code -> VatCode.VatType for an entity."""
    return dict(VatCode.objects.filter(entity=entity).values_list("code", "vat_type"))

"""Line and document totals.

Amounts are rounded to cents per line (ROUND_HALF_UP) before they are
summed, so the document totals always equal the sum of the stored lines
and a booked document balances to the cent.
"""

from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from core.exceptions import DocumentValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def round2(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_decimal(value, field: str, *, default=None) -> Decimal:
    """Parse a user supplied number. Floats go through ``str`` to avoid binary noise."""
    if value is None or value == "":
        if default is None:
            raise DocumentValidationError(f"{field} is required.", field=field)
        return default
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise DocumentValidationError(f"{field} is not a number: {value!r}", field=field) from None
    if not result.is_finite():
        raise DocumentValidationError(f"{field} is not a number: {value!r}", field=field)
    return result


@dataclass(frozen=True)
class LineAmounts:
    account_number: str
    description: str
    quantity: Decimal
    unit_price: Decimal
    discount: Decimal
    vat_code: str
    vat_rate: Decimal
    total_amount: Decimal
    total_amount_incl_vat: Decimal

    @property
    def vat_amount(self) -> Decimal:
        return self.total_amount_incl_vat - self.total_amount


@dataclass(frozen=True)
class DocumentTotals:
    total_excl_vat: Decimal = ZERO
    total_vatable_amount: Decimal = ZERO
    total_non_vatable_amount: Decimal = ZERO
    total_vat: Decimal = ZERO
    total_incl_vat: Decimal = ZERO

    def as_fields(self) -> dict:
        return asdict(self)

    def negated(self) -> "DocumentTotals":
        return DocumentTotals(**{k: -v for k, v in asdict(self).items()})


def calculate_line(raw: dict, *, vat_rates: dict, verbatim: bool = False) -> LineAmounts:
    """Compute base and incl-VAT amount for one raw line.

    Verbatim lines (manual and purchase vouchers) may carry a signed
    ``amount`` instead of price and quantity, and never get VAT added.
    """
    account_number = str(raw.get("account_number") or "").strip()
    if not account_number:
        raise DocumentValidationError("Line is missing account_number.", field="account_number")

    vat_code = str(raw.get("vat_code") or "").strip()

    if verbatim and raw.get("amount") not in (None, ""):
        quantity = Decimal("1")
        unit_price = to_decimal(raw["amount"], "amount")
    else:
        quantity = to_decimal(raw.get("quantity"), "quantity", default=Decimal("1"))
        price = raw.get("unit_price")
        if price in (None, ""):
            # base_amount is a per-unit price fallback
            price = raw.get("base_amount")
        unit_price = to_decimal(price, "unit_price")
    discount = to_decimal(raw.get("discount"), "discount", default=Decimal("0"))

    if verbatim:
        rate = Decimal("0")
    elif raw.get("vat_rate") not in (None, ""):
        rate = to_decimal(raw["vat_rate"], "vat_rate")
    else:
        rate = vat_rates.get(vat_code, Decimal("0"))

    base = round2(unit_price * quantity * (Decimal("100") - discount) / Decimal("100"))
    incl = round2(base * (Decimal("1") + rate))

    return LineAmounts(
        account_number=account_number,
        description=str(raw.get("description") or "")[:255],
        quantity=quantity,
        unit_price=unit_price,
        discount=discount,
        vat_code=vat_code,
        vat_rate=rate,
        total_amount=base,
        total_amount_incl_vat=incl,
    )


def calculate_totals(lines) -> DocumentTotals:
    excl = sum((line.total_amount for line in lines), ZERO)
    incl = sum((line.total_amount_incl_vat for line in lines), ZERO)
    vatable = sum((line.total_amount for line in lines if line.vat_rate > 0), ZERO)
    non_vatable = sum((line.total_amount for line in lines if line.vat_rate == 0), ZERO)
    return DocumentTotals(
        total_excl_vat=excl,
        total_vatable_amount=vatable,
        total_non_vatable_amount=non_vatable,
        total_vat=incl - excl,
        total_incl_vat=incl,
    )


def calculate(entity, raw_lines, *, verbatim: bool = False):
    """Compute all lines and the document totals for an entity.

    Returns ``(lines, totals)``. Only reads the VAT registry.
    """
    from core.services.vat import vat_rates_for

    if not raw_lines:
        raise DocumentValidationError("Document has no lines.", field="lines")
    if not isinstance(raw_lines, (list, tuple)):
        raise DocumentValidationError("lines must be a list.", field="lines")

    vat_rates = vat_rates_for(entity)
    lines = []
    for index, raw in enumerate(raw_lines):
        if not isinstance(raw, dict):
            raise DocumentValidationError(f"Line {index} is not an object.", field="lines")
        lines.append(calculate_line(raw, vat_rates=vat_rates, verbatim=verbatim))
    return lines, calculate_totals(lines)


# tests/test_totals.py
from decimal import Decimal

import pytest

from core.exceptions import DocumentValidationError
from documents.services.totals import calculate, calculate_line, calculate_totals, round2

RATES = {"U25": Decimal("0.25"), "U0": Decimal("0")}


class TestCalculateLine:
    def test_price_quantity_and_vat_code(self):
        line = calculate_line(
            {"account_number": "3000", "quantity": 2, "unit_price": "100", "vat_code": "U25"},
            vat_rates=RATES,
        )
        assert line.total_amount == Decimal("200.00")
        assert line.total_amount_incl_vat == Decimal("250.00")
        assert line.vat_amount == Decimal("50.00")
        assert line.vat_rate == Decimal("0.25")

    def test_discount_is_applied_before_vat(self):
        line = calculate_line(
            {"account_number": "3000", "quantity": "3", "unit_price": "19.99", "discount": "10", "vat_code": "U25"},
            vat_rates=RATES,
        )
        # 19.99 * 3 * 0.9 = 53.973
        assert line.total_amount == Decimal("53.97")
        assert line.total_amount_incl_vat == Decimal("67.46")

    def test_explicit_rate_wins_over_code(self):
        line = calculate_line(
            {"account_number": "3000", "unit_price": "100", "vat_code": "U25", "vat_rate": "0.12"},
            vat_rates=RATES,
        )
        assert line.total_amount_incl_vat == Decimal("112.00")

    def test_unknown_vat_code_means_no_vat(self):
        line = calculate_line(
            {"account_number": "3000", "unit_price": "100", "vat_code": "NOPE"},
            vat_rates=RATES,
        )
        assert line.vat_rate == 0
        assert line.total_amount_incl_vat == Decimal("100.00")

    def test_base_amount_is_unit_price_fallback(self):
        line = calculate_line(
            {"account_number": "3000", "quantity": 4, "base_amount": "12.50"},
            vat_rates=RATES,
        )
        assert line.unit_price == Decimal("12.50")
        assert line.total_amount == Decimal("50.00")

    def test_verbatim_line_keeps_signed_amount_without_vat(self):
        line = calculate_line(
            {"account_number": "5000", "amount": "-125.00", "vat_code": "U25"},
            vat_rates=RATES,
            verbatim=True,
        )
        assert line.total_amount == Decimal("-125.00")
        assert line.total_amount_incl_vat == Decimal("-125.00")
        assert line.vat_code == "U25"

    def test_rounds_half_up(self):
        assert round2(Decimal("0.125")) == Decimal("0.13")
        assert round2(Decimal("-0.125")) == Decimal("-0.13")

    @pytest.mark.parametrize("raw", [
        {"unit_price": "10"},
        {"account_number": "3000", "unit_price": "ten"},
        {"account_number": "3000"},
        {"account_number": "3000", "unit_price": "10", "quantity": "NaN"},
    ])
    def test_invalid_lines(self, raw):
        with pytest.raises(DocumentValidationError):
            calculate_line(raw, vat_rates=RATES)


class TestCalculateTotals:
    def test_splits_vatable_and_non_vatable(self):
        lines = [
            calculate_line({"account_number": "3000", "unit_price": "100", "vat_code": "U25"}, vat_rates=RATES),
            calculate_line({"account_number": "3100", "unit_price": "40", "vat_code": "U0"}, vat_rates=RATES),
        ]
        totals = calculate_totals(lines)
        assert totals.total_excl_vat == Decimal("140.00")
        assert totals.total_vatable_amount == Decimal("100.00")
        assert totals.total_non_vatable_amount == Decimal("40.00")
        assert totals.total_vat == Decimal("25.00")
        assert totals.total_incl_vat == Decimal("165.00")

    def test_totals_equal_sum_of_rounded_lines(self):
        lines = [
            calculate_line({"account_number": "3000", "unit_price": "0.333", "vat_code": "U25"}, vat_rates=RATES)
            for _ in range(3)
        ]
        totals = calculate_totals(lines)
        assert totals.total_excl_vat == Decimal("0.99")
        assert totals.total_incl_vat == Decimal("1.23")

    def test_negated(self):
        lines = [calculate_line({"account_number": "3000", "unit_price": "100", "vat_code": "U25"}, vat_rates=RATES)]
        negated = calculate_totals(lines).negated()
        assert negated.total_incl_vat == Decimal("-125.00")
        assert negated.total_vat == Decimal("-25.00")


@pytest.mark.django_db
class TestCalculate:
    def test_uses_entity_vat_registry(self, entity):
        lines, totals = calculate(
            entity, [{"account_number": "3000", "quantity": 2, "unit_price": 100, "vat_code": "U25"}],
        )
        assert totals.total_excl_vat == Decimal("200.00")
        assert totals.total_vat == Decimal("50.00")
        assert totals.total_incl_vat == Decimal("250.00")

    def test_no_lines_is_a_validation_error(self, entity):
        with pytest.raises(DocumentValidationError):
            calculate(entity, [])

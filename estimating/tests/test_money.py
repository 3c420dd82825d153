from decimal import Decimal

from estimating.domain.money import (
    calculate_vat,
    compute_line,
    derive_unit_price,
    percent_of,
    round2,
    to_decimal,
)


def test_round2_is_half_up():
    assert round2("2.345") == Decimal("2.35")
    assert round2("2.344") == Decimal("2.34")
    assert round2("0.005") == Decimal("0.01")


def test_to_decimal_guards_non_numbers():
    assert to_decimal(None) == 0
    assert to_decimal("abc") == 0
    assert to_decimal(float("nan")) == 0
    assert to_decimal(float("inf")) == 0
    assert to_decimal(Decimal("Infinity")) == 0
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal(" 12.50 ") == Decimal("12.50")


def test_compute_line_whole_numbers():
    amounts = compute_line(3, 10, 15)
    assert (amounts.line_cost, amounts.line_total) == (Decimal("30"), Decimal("45"))


def test_compute_line():
    amounts = compute_line("3", "10.005", "12.125")
    assert amounts.line_cost == Decimal("30.02")
    assert amounts.line_total == Decimal("36.38")


def test_compute_line_with_missing_values():
    amounts = compute_line(None, "10", None)
    assert amounts.line_cost == 0
    assert amounts.line_total == 0


def test_derive_unit_price():
    assert derive_unit_price("13.80", "15") == Decimal("15.87")
    assert derive_unit_price("100", "0") == 0
    assert derive_unit_price("0", "20") == 0


def test_percentages():
    assert percent_of("1000", "12.5") == Decimal("125.00")
    assert calculate_vat("1300") == Decimal("260.00")

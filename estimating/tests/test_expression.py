from decimal import Decimal

import pytest

from estimating.domain.expression import (
    evaluate,
    evaluate_permissive,
    evaluate_quantity,
    extract_variables,
    preview_quantity,
    to_postfix,
    tokenize,
)
from estimating.errors import DivisionByZero, ExpressionError, InvalidExpression, UnknownVariable


def test_precedence_and_left_associativity():
    assert evaluate("2 + 3 * 4") == Decimal("14")
    assert evaluate("(2 + 3) * 4") == Decimal("20")
    assert evaluate("10 - 4 - 3") == Decimal("3")
    assert evaluate("24 / 4 / 2") == Decimal("3")


def test_postfix_order():
    postfix = to_postfix(tokenize("a + b * c"))
    assert [t.value for t in postfix] == ["a", "b", "c", "*", "+"]


def test_variables_and_decimal_literals():
    tokens = {"perimeter_m": Decimal("18"), "floor_area_m2": 20}
    assert evaluate("perimeter_m * 0.6 * 0.225", tokens) == Decimal("2.43")
    assert evaluate("2 + floor_area_m2 / 20", tokens) == Decimal("3")


def test_decimal_arithmetic_is_exact():
    assert evaluate("0.1 + 0.2") == Decimal("0.3")


def test_empty_expression_is_zero():
    assert evaluate("") == 0
    assert evaluate("   ") == 0
    assert evaluate(None) == 0


def test_unknown_variable_is_strict():
    with pytest.raises(UnknownVariable) as exc:
        evaluate("floor_area_m2 * 2", {})
    assert exc.value.name == "floor_area_m2"
    assert exc.value.expression == "floor_area_m2 * 2"


def test_permissive_treats_missing_as_zero():
    assert evaluate_permissive("2 + missing", {}) == Decimal("2")


def test_permissive_still_rejects_malformed_input():
    with pytest.raises(InvalidExpression):
        evaluate_permissive("2 +", {})


@pytest.mark.parametrize("expression", ["2 +", "(1 + 2", "1 + 2)", "1 $ 2", "-5", "1..2"])
def test_invalid_expressions(expression):
    with pytest.raises(InvalidExpression):
        evaluate(expression)


def test_division_by_zero():
    with pytest.raises(DivisionByZero):
        evaluate("10 / (a - a)", {"a": 3})


def test_expression_errors_are_value_errors():
    with pytest.raises(ValueError):
        evaluate("1 / 0")


def test_quantity_clamps_negative_results():
    assert evaluate("2 - 5") == Decimal("-3")
    assert evaluate_quantity("2 - 5") == 0


def test_quantity_is_strict():
    with pytest.raises(UnknownVariable):
        evaluate_quantity("missing")


def test_preview_quantity_never_raises():
    assert preview_quantity("missing * 3") == 0
    assert preview_quantity("1 / 0") == 0
    assert preview_quantity("((") == 0
    assert preview_quantity("a - 10", {"a": 4}) == 0
    assert preview_quantity("a * 2", {"a": "1.5"}) == Decimal("3.0")


def test_extract_variables_first_seen_order():
    assert extract_variables("b * a + b / c") == ["b", "a", "c"]
    assert extract_variables("") == []


def test_extract_variables_rejects_bad_characters():
    with pytest.raises(ExpressionError):
        extract_variables("a # b")

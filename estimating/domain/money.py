# estimating/domain/money.py
"""
Line costing primitive and currency rounding.

Monetary outputs are rounded half-up to 2 decimal places at the point they
are produced (line totals, section totals, estimate aggregates). Per-unit
rates are never rounded here except by derive_unit_price, whose result is
itself a quoted price.
"""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

D = Decimal

ZERO = D("0")
HUNDRED = D("100")
CENT = D("0.01")


def to_decimal(value: Any) -> Decimal:
    '''
    Coerce a number-like value to Decimal.

    None, NaN, +/-Infinity and unparseable input all become 0 so they never
    propagate into totals.
    '''
    if value is None or isinstance(value, bool):
        return D(int(value or 0))
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    try:
        # str() keeps floats at their shortest repr (0.1 -> "0.1")
        result = D(str(value).strip())
    except (InvalidOperation, ValueError):
        return ZERO
    return result if result.is_finite() else ZERO


def round2(value: Any) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def percent_of(amount: Any, pct: Any) -> Decimal:
    """round2(amount * pct / 100)"""
    return round2(to_decimal(amount) * to_decimal(pct) / HUNDRED)


@dataclass(frozen=True)
class LineAmounts:
    line_cost: Decimal
    line_total: Decimal


def compute_line(quantity: Any, unit_cost: Any, unit_price: Any) -> LineAmounts:
    '''
    Cost and sell totals for one line.

    :param quantity: line quantity
    :param unit_cost: internal cost per unit
    :param unit_price: sell price per unit
    :return: LineAmounts(line_cost=round2(q*cost), line_total=round2(q*price))
    '''
    q = to_decimal(quantity)
    return LineAmounts(
        line_cost=round2(q * to_decimal(unit_cost)),
        line_total=round2(q * to_decimal(unit_price)),
    )


def derive_unit_price(unit_cost: Any, margin_percent: Any) -> Decimal:
    '''
    Sell price from cost plus margin.

    Only priced when both cost and margin are positive. A zero-cost or
    zero-margin item returns 0 and has to be priced explicitly by the caller.
    '''
    cost = to_decimal(unit_cost)
    margin = to_decimal(margin_percent)
    if cost <= 0 or margin <= 0:
        return ZERO
    return round2(cost * (1 + margin / HUNDRED))


def calculate_vat(amount: Any, vat_rate: Any = 20) -> Decimal:
    return percent_of(amount, vat_rate)

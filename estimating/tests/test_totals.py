from decimal import Decimal

from estimating.domain.totals import item_line_total, recompute_estimate, section_total
from estimating.domain.types import InternalCosting, LineItem, Section


def _costing(*items):
    return InternalCosting(sections=[Section(title="Works", items=list(items))])


def test_worked_example():
    costing = recompute_estimate(_costing(
        LineItem(title="Works", quantity=1, unit_price=1000, line_total=Decimal("1000.00")),
    ))
    assert costing.subtotal == Decimal("1000.00")
    assert costing.overhead == Decimal("100.00")
    assert costing.margin == Decimal("150.00")
    assert costing.contingency == Decimal("50.00")
    assert costing.vat == Decimal("260.00")
    assert costing.total == Decimal("1560.00")


def test_line_percentages_do_not_affect_totals():
    costing = recompute_estimate(_costing(
        LineItem(title="A", quantity=1, unit_price=1000, line_total=Decimal("1000.00"),
                 margin_percent=50, overhead_percent=40, vat_rate=0),
    ))
    assert costing.total == Decimal("1560.00")


def test_section_total_rounds_after_summing():
    items = [LineItem(title=str(n), quantity=1, unit_price=Decimal("0.004")) for n in range(3)]
    assert section_total(items) == Decimal("0.01")


def test_precomputed_line_total_wins_unless_dirty():
    item = LineItem(title="A", quantity=2, unit_price=10, line_total=Decimal("15.00"))
    assert item_line_total(item) == Decimal("15.00")
    item.qty_dirty = True
    assert item_line_total(item) == Decimal("20")


def test_recompute_is_idempotent():
    costing = _costing(
        LineItem(title="A", quantity=3, unit_price=Decimal("33.333")),
        LineItem(title="B", quantity=1, unit_price=10, line_total=Decimal("10.00")),
    )
    once = recompute_estimate(costing)
    twice = recompute_estimate(once)
    assert once == twice


def test_recompute_does_not_mutate_input():
    costing = _costing(LineItem(title="A", quantity=1, unit_price=10))
    recompute_estimate(costing)
    assert costing.subtotal == 0
    assert costing.sections[0].section_total == 0


def test_empty_costing():
    costing = recompute_estimate(InternalCosting())
    assert costing.total == 0

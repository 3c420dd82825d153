from decimal import Decimal

from estimating.domain.orders import (
    next_order_number,
    order_total,
    project_order_lines,
    purchasable_items,
    work_order_items,
)
from estimating.domain.types import CostType

from estimating.tests.factories import priced_item, single_section


def _costing():
    return single_section(
        "Shell",
        priced_item("Bricks", "51.75", quantity=45, kind=CostType.MATERIAL, is_purchasable=True),
        priced_item("Bricklaying", "48.30", quantity=45, kind=CostType.LABOUR, is_work_order_eligible=True),
        priced_item("Scaffold", "24.20", quantity=18, kind=CostType.SUBCONTRACT, is_work_order_eligible=True),
        priced_item("Skip", "354.20", quantity=3, kind=CostType.PLANT),
        # flagged but not a material
        priced_item("Odd", "1.00", kind=CostType.PLANT, is_purchasable=True),
    )


def test_eligibility_filters():
    costing = _costing()
    assert [i.title for i in purchasable_items(costing)] == ["Bricks"]
    assert [i.title for i in work_order_items(costing)] == ["Bricklaying", "Scaffold"]


def test_order_lines_are_renumbered_and_totalled():
    items = work_order_items(_costing())
    lines = project_order_lines(items)

    assert [l.sort_order for l in lines] == [0, 1]
    assert [l.source_item_id for l in lines] == [i.id for i in items]
    assert lines[0].line_total == Decimal("2173.50")
    assert order_total(lines) == Decimal("2609.10")


def test_next_order_number():
    assert next_order_number("PO", []) == "PO-1"
    assert next_order_number("PO", ["PO-1", "PO-7", "WO-9", "PO-x", None]) == "PO-8"

from decimal import Decimal

from estimating.domain.customer_estimate import (
    PROVISIONAL_NOTE,
    build_customer_estimate,
    recompute_customer_estimate,
)
from estimating.domain.types import InternalCosting, Section

from estimating.tests.factories import priced_item


def _costing():
    return InternalCosting(sections=[
        Section(title="Shell", items=[
            priced_item("Bricklaying", "35.00", quantity=10, unit_cost=25, sort_order=1),
            priced_item("Blocks", "20.00", quantity=5, unit_cost=15, sort_order=0),
        ]),
        Section(title="Foundations", items=[
            priced_item("Foundations", "6000.00", is_provisional=True, description="Piled"),
        ]),
    ])


def test_projection_mirrors_sections_in_sort_order():
    estimate = build_customer_estimate(_costing())

    assert [s.title for s in estimate.sections] == ["Shell", "Foundations"]
    assert [i.title for i in estimate.sections[0].items] == ["Blocks", "Bricklaying"]
    assert estimate.sections[0].section_total == Decimal("450.00")


def test_projection_carries_no_cost_basis():
    costing = _costing()
    estimate = build_customer_estimate(costing)
    item = estimate.sections[0].items[0]
    assert not hasattr(item, "unit_cost")
    assert not hasattr(item, "line_cost")
    assert item.source_item_id == costing.sections[0].items[1].id


def test_totals_and_provisional_sums():
    estimate = build_customer_estimate(_costing())

    assert estimate.subtotal == Decimal("6450.00")
    assert estimate.vat == Decimal("1290.00")
    assert estimate.total == Decimal("7740.00")
    assert estimate.provisional_sums_total == Decimal("6000.00")
    assert estimate.sections[1].items[0].description == f"Piled ({PROVISIONAL_NOTE})"


def test_no_provisional_sums_total_without_provisional_items():
    costing = InternalCosting(sections=[Section(title="Shell", items=[priced_item("Blocks", "20.00")])])
    assert build_customer_estimate(costing).provisional_sums_total is None


def test_recompute_after_hand_edit():
    estimate = build_customer_estimate(_costing())
    estimate.sections[0].items[0].quantity = Decimal("10")

    recomputed = recompute_customer_estimate(estimate)

    assert recomputed.sections[0].items[0].line_total == Decimal("200.00")
    assert recomputed.sections[0].section_total == Decimal("550.00")
    assert recomputed.subtotal == Decimal("6550.00")
    assert recompute_customer_estimate(recomputed) == recomputed


def test_vat_rate_override():
    estimate = build_customer_estimate(_costing(), vat_pct=Decimal("0"))
    assert estimate.vat == 0
    assert estimate.total == estimate.subtotal

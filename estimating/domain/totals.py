# estimating/domain/totals.py
"""
Section and estimate aggregation.

Recompute never rewrites item-level line totals, only section totals and
the costing aggregates, so recompute(recompute(x)) == recompute(x).
"""
from decimal import Decimal
from typing import Iterable

from estimating.domain.money import ZERO, percent_of, round2, to_decimal
from estimating.domain.types import InternalCosting, LineItem, Section


def item_line_total(item: LineItem) -> Decimal:
    '''
    Unrounded contribution of one item to its section total.

    The precomputed line_total is used unless it is missing or the quantity
    has changed since it was computed (qty_dirty).
    '''
    if item.line_total is not None and not item.qty_dirty:
        return to_decimal(item.line_total)
    return to_decimal(item.quantity) * to_decimal(item.unit_price)


def section_total(items: Iterable[LineItem]) -> Decimal:
    # round once after summation, not per item
    return round2(sum((item_line_total(i) for i in items), ZERO))


def recompute_section(section: Section) -> Section:
    return section.model_copy(
        update={
            "items": [i.model_copy(deep=True) for i in section.items],
            "section_total": section_total(section.items),
        }
    )


def recompute_estimate(costing: InternalCosting) -> InternalCosting:
    '''
    Roll sections up into estimate aggregates using the estimate-level
    percentages. Per-line percentages take no part.

    subtotal = sum(section totals)
    overhead / margin / contingency = round2(subtotal * pct / 100)
    vat = round2((subtotal + overhead + margin + contingency) * vat_pct / 100)
    total = subtotal + overhead + margin + contingency + vat
    '''
    sections = [recompute_section(s) for s in costing.sections]
    subtotal = round2(sum((s.section_total for s in sections), ZERO))

    overhead = percent_of(subtotal, costing.overhead_pct)
    margin = percent_of(subtotal, costing.margin_pct)
    contingency = percent_of(subtotal, costing.contingency_pct)
    vat = percent_of(subtotal + overhead + margin + contingency, costing.vat_pct)
    total = round2(subtotal + overhead + margin + contingency + vat)

    return costing.model_copy(
        update={
            "sections": sections,
            "assumptions": list(costing.assumptions),
            "subtotal": subtotal,
            "overhead": overhead,
            "margin": margin,
            "contingency": contingency,
            "vat": vat,
            "total": total,
        }
    )

# estimating/domain/customer_estimate.py
"""
Client-facing view of a costing.

Sell prices only, no cost basis. The customer estimate is independently
editable, so it has its own idempotent recompute.
"""
from decimal import Decimal
from typing import Optional

from estimating.domain.money import ZERO, percent_of, round2, to_decimal
from estimating.domain.types import (
    CustomerEstimate,
    CustomerEstimateItem,
    CustomerEstimateSection,
    InternalCosting,
    LineItem,
)

PROVISIONAL_NOTE = "Provisional sum"


def project_item(item: LineItem) -> CustomerEstimateItem:
    description = item.description
    if item.is_provisional:
        description = f"{description} ({PROVISIONAL_NOTE})" if description else PROVISIONAL_NOTE
    return CustomerEstimateItem(
        title=item.title,
        description=description,
        quantity=item.quantity,
        unit=item.unit,
        unit_price=item.unit_price,
        line_total=round2(to_decimal(item.quantity) * to_decimal(item.unit_price)),
        is_provisional=item.is_provisional,
        source_item_id=item.id,
    )


def recompute_customer_estimate(estimate: CustomerEstimate, vat_pct: Optional[Decimal] = None) -> CustomerEstimate:
    '''
    Recompute line, section and estimate totals of a customer estimate.

    :param estimate: customer estimate, possibly hand-edited
    :param vat_pct: VAT rate; defaults to the one stored on the estimate
    '''
    vat_pct = estimate.vat_pct if vat_pct is None else to_decimal(vat_pct)
    sections = []
    provisional = ZERO

    for section in estimate.sections:
        items = []
        for item in section.items:
            line_total = round2(to_decimal(item.quantity) * to_decimal(item.unit_price))
            if item.is_provisional:
                provisional += line_total
            items.append(item.model_copy(update={"line_total": line_total}))
        sections.append(
            section.model_copy(
                update={
                    "items": items,
                    "section_total": round2(sum((i.line_total for i in items), ZERO)),
                }
            )
        )

    subtotal = round2(sum((s.section_total for s in sections), ZERO))
    vat = percent_of(subtotal, vat_pct)

    return estimate.model_copy(
        update={
            "sections": sections,
            "vat_pct": vat_pct,
            "subtotal": subtotal,
            "vat": vat,
            "total": round2(subtotal + vat),
            "provisional_sums_total": round2(provisional) if provisional > 0 else None,
        }
    )


def build_customer_estimate(costing: InternalCosting, vat_pct: Optional[Decimal] = None) -> CustomerEstimate:
    """One customer section per internal section, then recompute."""
    estimate = CustomerEstimate(
        sections=[
            CustomerEstimateSection(
                title=section.title,
                notes=section.notes,
                items=[project_item(i) for i in sorted(section.items, key=lambda i: i.sort_order)],
            )
            for section in costing.sections
        ],
        vat_pct=costing.vat_pct if vat_pct is None else to_decimal(vat_pct),
        exclusions=[],
    )
    return recompute_customer_estimate(estimate)

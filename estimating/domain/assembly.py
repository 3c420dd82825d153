# estimating/domain/assembly.py
"""
Assembly expansion: assembly line templates + token map -> priced LineItems.

Evaluator wiring:
- commit (apply_assembly, generation): strict evaluate_quantity, a missing
  token or broken formula raises.
- preview (preview_assembly, refresh_quantities by default): preview_quantity, missing
  tokens count as 0 and broken formulas preview as quantity 0.
"""
from decimal import Decimal
from typing import Dict, List, Mapping, Optional

from estimating.domain import expression
from estimating.domain.money import ZERO, compute_line, derive_unit_price, to_decimal
from estimating.domain.totals import recompute_estimate
from estimating.domain.types import (
    Assembly,
    AssemblyLine,
    CostType,
    InternalCosting,
    LineItem,
    Section,
)
from estimating.errors import NotFound

WORK_ORDER_KINDS = (CostType.LABOUR, CostType.SUBCONTRACT)


def next_sort_order(section: Section) -> int:
    """Position after the last existing item; 0 for an empty section."""
    if not section.items:
        return 0
    return max(i.sort_order for i in section.items) + 1


def line_unit_price(line: AssemblyLine, unit_cost: Decimal) -> Decimal:
    explicit = to_decimal(line.unit_price)
    if explicit > 0:
        return explicit
    return derive_unit_price(unit_cost, line.default_markup_pct)


def expand_lines(
    lines: List[AssemblyLine],
    tokens: Mapping[str, object],
    *,
    assembly_id: Optional[str] = None,
    start_sort_order: int = 0,
    strict: bool = True,
    cost_multiplier: Decimal = Decimal("1"),
    vat_pct: Decimal = Decimal("20"),
    auto_rated: bool = True,
    formula_overrides: Optional[Dict[str, str]] = None,
) -> List[LineItem]:
    '''
    Expand assembly lines into concrete items, in template order.

    :param lines: assembly line templates
    :param tokens: formula variables, snapshotted into source_tokens
    :param assembly_id: provenance id stamped on every item
    :param start_sort_order: sort_order of the first expanded item
    :param strict: commit path (raise) vs preview path (fall back to 0)
    :param cost_multiplier: regional multiplier applied to base unit cost
    :param vat_pct: VAT rate for VAT-applicable lines
    :param auto_rated: mark items as engine-priced
    :param formula_overrides: assembly line id -> replacement formula
    :return: list of LineItem
    '''
    snapshot = {k: to_decimal(v) for k, v in tokens.items()}
    overrides = formula_overrides or {}
    items: List[LineItem] = []

    for offset, line in enumerate(lines):
        formula = overrides.get(line.id, line.qty_formula)
        if strict:
            quantity = expression.evaluate_quantity(formula, snapshot)
        else:
            quantity = expression.preview_quantity(formula, snapshot)

        # per-unit rates stay unrounded
        unit_cost = to_decimal(line.base_unit_cost) * to_decimal(cost_multiplier)
        unit_price = line_unit_price(line, unit_cost)
        amounts = compute_line(quantity, unit_cost, unit_price)

        items.append(
            LineItem(
                kind=line.cost_type,
                title=line.title,
                description=line.customer_text_block,
                quantity=quantity,
                unit=line.unit,
                unit_cost=unit_cost,
                unit_price=unit_price,
                margin_percent=line.default_markup_pct,
                vat_rate=vat_pct if line.vat_applicable else ZERO,
                vat_applicable=line.vat_applicable,
                line_cost=amounts.line_cost,
                line_total=amounts.line_total,
                sort_order=start_sort_order + offset,
                is_purchasable=line.cost_type == CostType.MATERIAL,
                is_work_order_eligible=line.cost_type in WORK_ORDER_KINDS,
                is_auto_rated=auto_rated,
                assembly_id=assembly_id,
                assembly_line_id=line.id,
                qty_formula=formula,
                source_tokens=dict(snapshot),
                calculation_trace=f"{formula or '0'} = {quantity}",
            )
        )
    return items


def expand_assembly(assembly: Assembly, tokens: Mapping[str, object], **kwargs) -> List[LineItem]:
    return expand_lines(assembly.lines, tokens, assembly_id=assembly.id, **kwargs)


def preview_assembly(assembly: Assembly, tokens: Mapping[str, object], **kwargs) -> List[LineItem]:
    """Display-time expansion; never raises on formula errors."""
    return expand_lines(assembly.lines, tokens, assembly_id=assembly.id, strict=False, **kwargs)


def append_items(costing: InternalCosting, section_id: str, items: List[LineItem]) -> InternalCosting:
    '''Insert-only: items go after the section's existing items.'''
    updated = costing.model_copy(deep=True)
    section = updated.find_section(section_id)
    if section is None:
        raise NotFound("Section", section_id)
    section.items.extend(items)
    return recompute_estimate(updated)


def apply_assembly(
    costing: InternalCosting,
    section_id: str,
    assembly: Assembly,
    tokens: Mapping[str, object],
    **kwargs,
) -> InternalCosting:
    '''
    Expand an assembly into a section with the strict evaluator and
    recompute. Existing items are untouched.

    :raises NotFound: unknown section
    :raises ExpressionError: any formula that cannot be committed
    '''
    section = costing.find_section(section_id)
    if section is None:
        raise NotFound("Section", section_id)
    items = expand_assembly(
        assembly,
        tokens,
        start_sort_order=next_sort_order(section),
        strict=True,
        **kwargs,
    )
    return append_items(costing, section_id, items)


def refresh_quantities(section: Section, tokens: Mapping[str, object], *, strict: bool = False) -> Section:
    '''
    Re-evaluate formula-driven quantities against a new token map.

    Locked and manually overridden items keep their quantity.

    - strict=False (preview): broken formulas preview as 0; re-evaluated
      items are marked qty_dirty so section totals use quantity * unit_price
      until the line is settled.
    - strict=True (saving): formula errors propagate and re-evaluated items
      are settled.
    '''
    snapshot = {k: to_decimal(v) for k, v in tokens.items()}
    evaluate = expression.evaluate_quantity if strict else expression.preview_quantity
    refreshed = section.model_copy(deep=True)
    for index, item in enumerate(refreshed.items):
        if item.is_qty_locked or item.is_manual_override or not item.qty_formula:
            continue
        quantity = evaluate(item.qty_formula, snapshot)
        if quantity != item.quantity:
            item.quantity = quantity
            item.qty_dirty = True
        item.source_tokens = dict(snapshot)
        if strict:
            refreshed.items[index] = settle_line(item)
    return refreshed


def settle_line(item: LineItem) -> LineItem:
    """Recompute line_cost/line_total from the current quantity and rates."""
    amounts = compute_line(item.quantity, item.unit_cost, item.unit_price)
    return item.model_copy(
        update={
            "line_cost": amounts.line_cost,
            "line_total": amounts.line_total,
            "qty_dirty": False,
        }
    )

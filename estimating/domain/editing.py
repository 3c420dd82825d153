# estimating/domain/editing.py
"""
Human edits to an internal costing.

Every function returns a new, recomputed costing and leaves its input
untouched.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from estimating.domain.assembly import next_sort_order, settle_line
from estimating.domain.totals import recompute_estimate
from estimating.domain.types import InternalCosting, LineItem, Section
from estimating.errors import NotFound

EDITABLE_FIELDS = frozenset({
    "title",
    "description",
    "quantity",
    "unit",
    "unit_cost",
    "unit_price",
    "margin_percent",
    "overhead_percent",
    "contingency_percent",
    "vat_rate",
    "is_provisional",
    "is_purchasable",
    "is_work_order_eligible",
    "is_qty_locked",
})


@dataclass(frozen=True)
class FieldChange:
    field: str
    before: Any
    after: Any


@dataclass(frozen=True)
class EditResult:
    costing: InternalCosting
    item: LineItem
    changes: List[FieldChange]


def locate_item(costing: InternalCosting, item_id: str) -> Tuple[Section, int]:
    for section in costing.sections:
        for index, item in enumerate(section.items):
            if item.id == item_id:
                return section, index
    raise NotFound("LineItem", item_id)


def edit_item(costing: InternalCosting, item_id: str, updates: Dict[str, Any]) -> EditResult:
    '''
    Apply whitelisted field updates to one item.

    :param costing: current costing
    :param item_id: item to edit
    :param updates: field -> new value
    :return: EditResult with the recomputed costing, the edited item and
             the per-field changes (empty when nothing changed)
    :raises ValueError: a field is not editable, or a value does not validate
    :raises NotFound: unknown item
    '''
    for field in updates:
        if field not in EDITABLE_FIELDS:
            raise ValueError(f"Field '{field}' is not editable")

    updated = costing.model_copy(deep=True)
    section, index = locate_item(updated, item_id)
    item = section.items[index]

    changes: List[FieldChange] = []
    for field, value in updates.items():
        old_value = getattr(item, field)
        # assignment validates and coerces (e.g. "12.5" -> Decimal)
        setattr(item, field, value)
        new_value = getattr(item, field)
        if old_value == new_value:
            continue
        changes.append(FieldChange(field, old_value, new_value))

    if not changes:
        return EditResult(costing=costing, item=costing_item(costing, item_id), changes=[])

    item.is_manual_override = True
    section.items[index] = settle_line(item)
    return EditResult(
        costing=recompute_estimate(updated),
        item=section.items[index],
        changes=changes,
    )


def costing_item(costing: InternalCosting, item_id: str) -> LineItem:
    section, index = locate_item(costing, item_id)
    return section.items[index]


def add_item(costing: InternalCosting, section_id: str, item: LineItem) -> InternalCosting:
    '''Append a hand-entered item to a section.'''
    updated = costing.model_copy(deep=True)
    section = updated.find_section(section_id)
    if section is None:
        raise NotFound("Section", section_id)
    new_item = settle_line(
        item.model_copy(
            update={
                "sort_order": next_sort_order(section),
                "is_manual_override": True,
                "is_auto_rated": False,
            }
        )
    )
    section.items.append(new_item)
    return recompute_estimate(updated)


def delete_item(costing: InternalCosting, item_id: str) -> InternalCosting:
    updated = costing.model_copy(deep=True)
    section, index = locate_item(updated, item_id)
    del section.items[index]
    return recompute_estimate(updated)


def add_section(costing: InternalCosting, title: str, notes: Optional[str] = None) -> Tuple[InternalCosting, Section]:
    updated = costing.model_copy(deep=True)
    section = Section(title=title, notes=notes)
    updated.sections.append(section)
    return recompute_estimate(updated), section


def ensure_section(costing: InternalCosting, title: str) -> Tuple[InternalCosting, Section]:
    """Section with this title, created at the end when absent."""
    existing = costing.find_section_by_title(title)
    if existing is not None:
        return costing, existing
    return add_section(costing, title)

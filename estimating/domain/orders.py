# estimating/domain/orders.py
from decimal import Decimal
from enum import Enum
from typing import Iterable, List, Optional

from pydantic import BaseModel

from estimating.domain.money import ZERO, round2, to_decimal
from estimating.domain.types import CostType, InternalCosting, LineItem


class PurchaseOrderStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    RECEIVED = "received"
    CANCELLED = "cancelled"


class WorkOrderStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PricingMode(str, Enum):
    FIXED = "fixed"
    SCHEDULE = "schedule"


class OrderLine(BaseModel):
    source_item_id: str
    title: str
    description: Optional[str] = None
    quantity: Decimal
    unit: str
    unit_price: Decimal
    line_total: Decimal
    sort_order: int


def is_purchasable(item: LineItem) -> bool:
    return item.is_purchasable and item.kind == CostType.MATERIAL


def is_work_order_eligible(item: LineItem) -> bool:
    return item.is_work_order_eligible


def purchasable_items(costing: InternalCosting) -> List[LineItem]:
    return [i for i in costing.all_items() if is_purchasable(i)]


def work_order_items(costing: InternalCosting) -> List[LineItem]:
    return [i for i in costing.all_items() if is_work_order_eligible(i)]


def project_order_lines(items: Iterable[LineItem]) -> List[OrderLine]:
    """Plain copy of the priced fields, renumbered from 0."""
    return [
        OrderLine(
            source_item_id=item.id,
            title=item.title,
            description=item.description,
            quantity=item.quantity,
            unit=item.unit,
            unit_price=item.unit_price,
            line_total=round2(to_decimal(item.quantity) * to_decimal(item.unit_price)),
            sort_order=n,
        )
        for n, item in enumerate(items)
    ]


def order_total(lines: Iterable[OrderLine]) -> Decimal:
    return round2(sum((l.line_total for l in lines), ZERO))


def next_order_number(prefix: str, existing: Iterable[Optional[str]]) -> str:
    '''
    Next sequential number for a prefix, e.g. "PO-3" after "PO-1", "PO-2".
    Numbers that do not follow the pattern are ignored.
    '''
    highest = 0
    marker = f"{prefix}-"
    for number in existing:
        if not number or not number.startswith(marker):
            continue
        suffix = number[len(marker):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return f"{prefix}-{highest + 1}"

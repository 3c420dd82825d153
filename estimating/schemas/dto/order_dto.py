# estimating/schemas/dto/order_dto.py
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from estimating.models.orders import PurchaseOrder, WorkOrder


class PurchaseOrderDTO(BaseModel):
    id: str
    estimate_id: str
    po_number: str
    supplier_name: str
    status: str
    total: str
    lines: List[Dict[str, Any]]

    @classmethod
    def from_domain_model(cls, order: PurchaseOrder) -> "PurchaseOrderDTO":
        return cls(
            id=order.id,
            estimate_id=order.estimate_id,
            po_number=order.po_number,
            supplier_name=order.supplier_name,
            status=order.status.value,
            total=str(order.total),
            lines=list(order.lines or []),
        )


class WorkOrderDTO(BaseModel):
    id: str
    estimate_id: str
    wo_number: str
    contractor_name: str
    pricing_mode: str
    fixed_price: Optional[str] = None
    status: str
    total: str
    lines: List[Dict[str, Any]]

    @classmethod
    def from_domain_model(cls, order: WorkOrder) -> "WorkOrderDTO":
        return cls(
            id=order.id,
            estimate_id=order.estimate_id,
            wo_number=order.wo_number,
            contractor_name=order.contractor_name,
            pricing_mode=order.pricing_mode.value,
            fixed_price=None if order.fixed_price is None else str(order.fixed_price),
            status=order.status.value,
            total=str(order.total),
            lines=list(order.lines or []),
        )

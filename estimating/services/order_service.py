# estimating/services/order_service.py
from decimal import Decimal
from typing import Callable, List, Optional, Sequence, Union
from uuid import uuid4

from sqlalchemy.orm import Session

from estimating.domain.orders import (
    PricingMode,
    PurchaseOrderStatus,
    WorkOrderStatus,
    next_order_number,
    order_total,
    project_order_lines,
    purchasable_items,
    work_order_items,
)
from estimating.domain.types import InternalCosting, LineItem
from estimating.errors import NotFound
from estimating.logger import get_logger
from estimating.models.orders import PurchaseOrder, WorkOrder
from estimating.services.audit_log_service import AuditLogService
from estimating.services.estimate_repository import EstimateRepository, row_costing

logger = get_logger(__name__)


class OrderService:
    """
    Purchase and work orders projected from eligible estimate items.
    """

    def __init__(self, db: Session, audit_log_service: AuditLogService, repository: EstimateRepository):
        self.db = db
        self.audit_log_service = audit_log_service
        self.repository = repository

    def _select(
        self,
        costing: InternalCosting,
        eligible: Callable[[InternalCosting], List[LineItem]],
        item_ids: Optional[Sequence[str]],
        kind: str,
    ) -> List[LineItem]:
        '''
        Eligible items, optionally narrowed to item_ids (kept in estimate order).

        :raises ValueError: an id is not eligible, or nothing is selected
        '''
        items = eligible(costing)
        if item_ids is not None:
            wanted = set(item_ids)
            eligible_ids = {i.id for i in items}
            rejected = sorted(wanted - eligible_ids)
            if rejected:
                raise ValueError(f"Items not eligible for a {kind}: {rejected}")
            items = [i for i in items if i.id in wanted]
        if not items:
            raise ValueError(f"No items eligible for a {kind}")
        return items

    def _costing(self, estimate_id: str) -> InternalCosting:
        costing = row_costing(self.repository.get_estimate(estimate_id))
        if costing is None:
            raise ValueError(f"Estimate {estimate_id} has no costing")
        return costing

    # =========
    # Purchase orders
    # =========
    def create_purchase_order(
        self,
        *,
        estimate_id: str,
        supplier_name: str,
        item_ids: Optional[Sequence[str]] = None,
        notes: Optional[str] = None,
    ) -> PurchaseOrder:
        '''
        :param estimate_id: source estimate
        :param supplier_name: supplier
        :param item_ids: subset of purchasable items; None takes all of them
        '''
        user_id = self.repository.require_user()
        company_id = self.repository.company_id
        items = self._select(self._costing(estimate_id), purchasable_items, item_ids, "purchase order")
        lines = project_order_lines(items)

        existing = [
            n for (n,) in self.db.query(PurchaseOrder.po_number)
            .filter(PurchaseOrder.company_id == company_id)
            .all()
        ]
        order = PurchaseOrder(
            id=str(uuid4()),
            company_id=company_id,
            estimate_id=estimate_id,
            po_number=next_order_number("PO", existing),
            supplier_name=supplier_name,
            status=PurchaseOrderStatus.DRAFT,
            lines=[l.model_dump(mode="json") for l in lines],
            total=order_total(lines),
            notes=notes,
            created_by=user_id,
        )
        self.db.add(order)
        self.db.flush()

        self.audit_log_service.record_create(
            company_id=company_id,
            estimate_id=estimate_id,
            entity_type="PurchaseOrder",
            entity_id=order.id,
            operator_id=user_id,
        )
        logger.info(f"{order.po_number} created for estimate {estimate_id}: {len(lines)} lines, total={order.total}")
        return order

    def set_purchase_order_status(self, *, order_id: str, status: Union[str, PurchaseOrderStatus]) -> PurchaseOrder:
        order = (
            self.db.query(PurchaseOrder)
            .filter(PurchaseOrder.id == order_id, PurchaseOrder.company_id == self.repository.company_id)
            .first()
        )
        if order is None:
            raise NotFound("PurchaseOrder", order_id)
        new_status = PurchaseOrderStatus(status)
        if order.status == new_status:
            return order
        self.audit_log_service.record_update(
            company_id=self.repository.company_id,
            estimate_id=order.estimate_id,
            entity_type="PurchaseOrder",
            entity_id=order.id,
            changed_attribute="status",
            before_value=order.status,
            after_value=new_status,
            operator_id=self.repository.require_user(),
        )
        order.status = new_status
        self.db.flush()
        return order

    # =========
    # Work orders
    # =========
    def create_work_order(
        self,
        *,
        estimate_id: str,
        contractor_name: str,
        item_ids: Optional[Sequence[str]] = None,
        pricing_mode: Union[str, PricingMode] = PricingMode.FIXED,
        fixed_price: Optional[Decimal] = None,
        notes: Optional[str] = None,
    ) -> WorkOrder:
        '''
        :param pricing_mode: "fixed" or "schedule"
        :param fixed_price: agreed price for fixed mode; defaults to the sum of line totals
        '''
        user_id = self.repository.require_user()
        company_id = self.repository.company_id
        pricing_mode = PricingMode(pricing_mode)
        items = self._select(self._costing(estimate_id), work_order_items, item_ids, "work order")
        lines = project_order_lines(items)
        total = order_total(lines)

        if pricing_mode == PricingMode.FIXED and fixed_price is None:
            fixed_price = total
        if pricing_mode == PricingMode.SCHEDULE:
            fixed_price = None

        existing = [
            n for (n,) in self.db.query(WorkOrder.wo_number)
            .filter(WorkOrder.company_id == company_id)
            .all()
        ]
        order = WorkOrder(
            id=str(uuid4()),
            company_id=company_id,
            estimate_id=estimate_id,
            wo_number=next_order_number("WO", existing),
            contractor_name=contractor_name,
            pricing_mode=pricing_mode,
            fixed_price=fixed_price,
            status=WorkOrderStatus.DRAFT,
            lines=[l.model_dump(mode="json") for l in lines],
            total=total,
            notes=notes,
            created_by=user_id,
        )
        self.db.add(order)
        self.db.flush()

        self.audit_log_service.record_create(
            company_id=company_id,
            estimate_id=estimate_id,
            entity_type="WorkOrder",
            entity_id=order.id,
            operator_id=user_id,
        )
        logger.info(f"{order.wo_number} created for estimate {estimate_id}: {len(lines)} lines, mode={pricing_mode.value}")
        return order

    def set_work_order_status(self, *, order_id: str, status: Union[str, WorkOrderStatus]) -> WorkOrder:
        order = (
            self.db.query(WorkOrder)
            .filter(WorkOrder.id == order_id, WorkOrder.company_id == self.repository.company_id)
            .first()
        )
        if order is None:
            raise NotFound("WorkOrder", order_id)
        new_status = WorkOrderStatus(status)
        if order.status == new_status:
            return order
        self.audit_log_service.record_update(
            company_id=self.repository.company_id,
            estimate_id=order.estimate_id,
            entity_type="WorkOrder",
            entity_id=order.id,
            changed_attribute="status",
            before_value=order.status,
            after_value=new_status,
            operator_id=self.repository.require_user(),
        )
        order.status = new_status
        self.db.flush()
        return order

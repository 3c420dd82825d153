# estimating/models/orders.py
from decimal import Decimal
from typing import Optional

from sqlalchemy import JSON, Enum, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from estimating.db.base import Base
from estimating.domain.orders import PricingMode, PurchaseOrderStatus, WorkOrderStatus
from estimating.models.mixins.tenant_record import TenantRecordMixin


class PurchaseOrder(TenantRecordMixin, Base):
    __tablename__ = "purchase_orders"
    __table_args__ = (
        UniqueConstraint("company_id", "po_number", name="uq_po_number"),
    )

    estimate_id :Mapped[str] = mapped_column(String(36), nullable=False, index=True, comment="Source estimate ID")
    po_number :Mapped[str] = mapped_column(String(30), nullable=False, comment="Sequential number, PO-<n>")
    supplier_name :Mapped[str] = mapped_column(String(255), nullable=False, comment="Supplier")
    status :Mapped[PurchaseOrderStatus] = mapped_column(
        Enum(PurchaseOrderStatus, name="purchase_order_status"),
        nullable=False,
        default=PurchaseOrderStatus.DRAFT,
        comment="Purchase order status",
    )
    lines :Mapped[list] = mapped_column(JSON, nullable=False, default=list, comment="Projected order lines")
    total :Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, comment="Sum of line totals")
    notes :Mapped[Optional[str]] = mapped_column(String(1000), nullable=True, comment="Notes")
    created_by :Mapped[str] = mapped_column(String(36), nullable=False, comment="User ID of the creator")

    def __repr__(self) -> str:
        return f"<PurchaseOrder {self.po_number} total={self.total}>"


class WorkOrder(TenantRecordMixin, Base):
    __tablename__ = "work_orders"
    __table_args__ = (
        UniqueConstraint("company_id", "wo_number", name="uq_wo_number"),
    )

    estimate_id :Mapped[str] = mapped_column(String(36), nullable=False, index=True, comment="Source estimate ID")
    wo_number :Mapped[str] = mapped_column(String(30), nullable=False, comment="Sequential number, WO-<n>")
    contractor_name :Mapped[str] = mapped_column(String(255), nullable=False, comment="Contractor")
    pricing_mode :Mapped[PricingMode] = mapped_column(
        Enum(PricingMode, name="work_order_pricing_mode"),
        nullable=False,
        default=PricingMode.FIXED,
        comment="Fixed price or schedule of rates",
    )
    fixed_price :Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True, comment="Agreed fixed price")
    status :Mapped[WorkOrderStatus] = mapped_column(
        Enum(WorkOrderStatus, name="work_order_status"),
        nullable=False,
        default=WorkOrderStatus.DRAFT,
        comment="Work order status",
    )
    lines :Mapped[list] = mapped_column(JSON, nullable=False, default=list, comment="Projected order lines")
    total :Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, comment="Sum of line totals")
    notes :Mapped[Optional[str]] = mapped_column(String(1000), nullable=True, comment="Notes")
    created_by :Mapped[str] = mapped_column(String(36), nullable=False, comment="User ID of the creator")

    def __repr__(self) -> str:
        return f"<WorkOrder {self.wo_number} mode={self.pricing_mode.value if self.pricing_mode else None}>"

# estimating/models/estimate.py
from typing import Optional

from sqlalchemy import JSON, Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from estimating.db.base import Base
from estimating.db.enums import EstimateStatus
from estimating.models.mixins.tenant_record import TenantRecordMixin


class Estimate(TenantRecordMixin, Base):
    """
    Working state of one estimate. Costing, customer view and inputs are
    stored as JSON documents (pydantic model dumps).
    """
    __tablename__ = "estimates"

    # =========
    # 🔒 Immutable facts
    # =========
    template_id :Mapped[str] = mapped_column(String(100), nullable=False, comment="Wizard template ID")

    created_by :Mapped[str] = mapped_column(String(36), nullable=False, comment="User ID of the creator")

    # =========
    # ✍️ Business editable (with AuditLog)
    # =========
    title :Mapped[str] = mapped_column(String(255), nullable=False, comment="Estimate title")

    status :Mapped[EstimateStatus] = mapped_column(
        Enum(EstimateStatus, name="estimate_status"),
        nullable=False,
        default=EstimateStatus.draft,
        comment="Lifecycle status of the estimate",
    )

    answers :Mapped[dict] = mapped_column(JSON, nullable=False, default=dict, comment="Wizard answers")
    measurements :Mapped[Optional[dict]] = mapped_column(JSON, nullable=True, comment="Computed measurements")
    rate_settings :Mapped[Optional[dict]] = mapped_column(JSON, nullable=True, comment="Rate settings")

    # =========
    # 💰 Costing documents
    # =========
    internal_costing :Mapped[Optional[dict]] = mapped_column(JSON, nullable=True, comment="Internal costing")
    customer_estimate :Mapped[Optional[dict]] = mapped_column(JSON, nullable=True, comment="Customer-facing estimate")
    visibility_settings :Mapped[Optional[dict]] = mapped_column(JSON, nullable=True, comment="Customer view toggles")
    brief :Mapped[Optional[dict]] = mapped_column(JSON, nullable=True, comment="Estimate brief content")

    updated_by :Mapped[Optional[str]] = mapped_column(String(36), nullable=True, comment="User ID of the last editor")

    def __repr__(self) -> str:
        return (
            f"<Estimate id={self.id} "
            f"company={self.company_id} "
            f"status={self.status.value if self.status else None}>"
        )

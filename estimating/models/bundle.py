# estimating/models/bundle.py
from typing import Optional

from sqlalchemy import JSON, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from estimating.db.base import Base
from estimating.models.mixins.tenant_record import TenantRecordMixin


class BundleDefinition(TenantRecordMixin, Base):
    """Catalog bundle. Conditions are a serialized condition tree, not code."""
    __tablename__ = "bundles"
    __table_args__ = (
        UniqueConstraint("company_id", "bundle_key", name="uq_bundle_key"),
    )

    bundle_key :Mapped[str] = mapped_column(String(100), nullable=False, comment="Stable catalog key")
    name :Mapped[str] = mapped_column(String(255), nullable=False, comment="Display name")
    description :Mapped[Optional[str]] = mapped_column(String(1000), nullable=True, comment="Description")
    position :Mapped[int] = mapped_column(Integer, nullable=False, default=0, comment="Registry order")
    template_ids :Mapped[Optional[list]] = mapped_column(JSON, nullable=True, comment="Template allow-list; null means any")
    conditions :Mapped[Optional[dict]] = mapped_column(JSON, nullable=True, comment="Condition tree; null means unconditional")
    assembly_refs :Mapped[list] = mapped_column(JSON, nullable=False, default=list, comment="Ordered assembly references")

    def __repr__(self) -> str:
        return f"<BundleDefinition key={self.bundle_key} position={self.position}>"

# estimating/models/estimate_version.py
from datetime import datetime

from sqlalchemy import JSON, DateTime, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from estimating.db.base import Base


class EstimateVersionRecord(Base):
    """
    Immutable snapshot of an estimate. Rows are inserted once and never
    updated or deleted.
    """
    __tablename__ = "estimate_versions"
    __table_args__ = (
        UniqueConstraint("estimate_id", "version_number", name="uq_estimate_version_number"),
    )

    # =========
    # 🔒 Immutable fields (no update, no delete)
    # =========
    id :Mapped[str] = mapped_column(String(36), primary_key=True, comment="Version UUID")

    company_id :Mapped[str] = mapped_column(String(36), nullable=False, index=True, comment="Owning company ID")

    estimate_id :Mapped[str] = mapped_column(String(36), nullable=False, index=True, comment="Estimate ID")

    version_number :Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Monotonic version number per estimate, max existing + 1",
    )

    snapshot :Mapped[dict] = mapped_column(JSON, nullable=False, comment="Full estimate state at creation time")

    note :Mapped[str] = mapped_column(String(255), nullable=True, comment="Why the snapshot was taken")

    created_by :Mapped[str] = mapped_column(String(36), nullable=False, comment="User ID of the author")

    created_at :Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        comment="Creation timestamp"
    )

    def __repr__(self) -> str:
        return (
            f"<EstimateVersionRecord estimate={self.estimate_id} "
            f"version={self.version_number}>"
        )

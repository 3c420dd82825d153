# estimating/models/mixins/tenant_record.py
from datetime import datetime

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column


class TenantRecordMixin:
    """
    Identity, tenant ownership and timestamps shared by company-scoped rows.

    Invariants:
    - Immutable identity
    - Belongs to exactly one company
    """
    # =========
    # 🔒 Identity & ownership
    # =========
    id :Mapped[str] = mapped_column(String(36), primary_key=True, comment="Row UUID")

    company_id :Mapped[str] = mapped_column(String(36), nullable=False, index=True, comment="Owning company ID")

    # =========
    # ⏱ Timestamps
    # =========
    created_at :Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        comment="Creation timestamp"
    )

    updated_at :Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
        comment="Last update timestamp"
    )

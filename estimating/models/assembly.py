# estimating/models/assembly.py
from typing import Optional

from sqlalchemy import JSON, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from estimating.db.base import Base
from estimating.models.mixins.tenant_record import TenantRecordMixin


class AssemblyDefinition(TenantRecordMixin, Base):
    """Catalog assembly. Line templates are stored as JSON data."""
    __tablename__ = "assemblies"
    __table_args__ = (
        UniqueConstraint("company_id", "assembly_key", name="uq_assembly_key"),
    )

    assembly_key :Mapped[str] = mapped_column(String(100), nullable=False, comment="Stable catalog key, e.g. strip-foundations")
    name :Mapped[str] = mapped_column(String(255), nullable=False, comment="Display name")
    category :Mapped[str] = mapped_column(String(100), nullable=False, comment="Section the assembly expands into")
    default_unit :Mapped[str] = mapped_column(String(20), nullable=False, default="item", comment="Default unit")
    description :Mapped[Optional[str]] = mapped_column(String(1000), nullable=True, comment="Description")
    lines :Mapped[list] = mapped_column(JSON, nullable=False, default=list, comment="Ordered assembly line templates")

    def __repr__(self) -> str:
        return f"<AssemblyDefinition key={self.assembly_key} lines={len(self.lines or [])}>"

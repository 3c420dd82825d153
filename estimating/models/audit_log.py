# estimating/models/audit_log.py
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, Enum, String, TypeDecorator, func
from sqlalchemy.orm import Mapped, mapped_column

from estimating.db.base import Base
from estimating.db.enums import AuditAction, AuditEntityType


class AuditEntityTypeEnum(TypeDecorator):
    """
    Stores AuditEntityType by value; accepts enum members, values or names.
    """
    impl = String
    cache_ok = True

    def __init__(self):
        super().__init__(length=50)

    def process_bind_param(self, value: Any, dialect) -> Optional[str]:
        if value is None:
            return None
        if isinstance(value, AuditEntityType):
            return value.value
        return coerce_entity_type(str(value)).value

    def process_result_value(self, value: Any, dialect) -> Optional[AuditEntityType]:
        if value is None:
            return None
        return coerce_entity_type(value)


def coerce_entity_type(value: str) -> AuditEntityType:
    text = value.strip()
    for member in AuditEntityType:
        if member.value == text.lower() or member.name.lower() == text.lower():
            return member
    raise ValueError(
        f"Cannot convert '{value}' to AuditEntityType. Valid values: {[e.value for e in AuditEntityType]}"
    )


class AuditLog(Base):
    __tablename__ = "audit_logs"

    # =========
    # 🔒 Immutable fields (no update, no delete)
    # =========
    id :Mapped[str] = mapped_column(String(36), primary_key=True, comment="Audit log UUID")

    company_id :Mapped[str] = mapped_column(String(36), nullable=False, index=True, comment="Owning company ID")

    estimate_id :Mapped[Optional[str]] = mapped_column(String(36), nullable=True, comment="Associated estimate ID, if applicable")

    entity_type :Mapped[AuditEntityType] = mapped_column(
        AuditEntityTypeEnum(),
        nullable=False,
        comment="Type of the audited entity"
    )

    entity_id :Mapped[str] = mapped_column(String(100), nullable=False, comment="ID of the audited entity")

    action :Mapped[AuditAction] = mapped_column(
        Enum(AuditAction, name="audit_action"),
        nullable=False,
        comment="Type of action performed on the entity"
    )

    changed_attribute :Mapped[str] = mapped_column(String(100), nullable=False, comment="Attribute that was changed")

    before_value :Mapped[Any] = mapped_column(JSON, nullable=True, comment="Value before the change")  # absent for create
    after_value :Mapped[Any] = mapped_column(JSON, nullable=True, comment="Value after the change")    # absent for delete

    operator_id :Mapped[str] = mapped_column(String(36), nullable=False, comment="User ID of the operator who performed the action")

    timestamp :Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        comment="Timestamp when the action was performed"
    )

    def __repr__(self) -> str:
        return (
            f"<AuditLog entity={self.entity_type.value} "
            f"entity_id={self.entity_id} "
            f"action={self.action.value}>"
        )

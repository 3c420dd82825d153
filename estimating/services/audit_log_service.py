# estimating/services/audit_log_service.py
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Union
from uuid import uuid4

from sqlalchemy.orm import Session

from estimating.db.enums import AuditAction, AuditEntityType
from estimating.models.audit_log import AuditLog, coerce_entity_type

SYSTEM_OPERATOR = "SYSTEM"


class AuditLogService:
    """
    Centralized service for recording all auditable actions.
    This service is the ONLY place where AuditLog records are created.
    """

    def __init__(self, db: Session):
        self.db = db

    def serialize_audit_value(self, value) -> Any:
        if value is None:
            return None
        if isinstance(value, Decimal):
            return str(value)
        if isinstance(value, (datetime, date)):
            return value.isoformat()
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, (int, float, str, bool)):
            return value
        if isinstance(value, (dict, list)):
            return value  # already JSON-native (model dumps)
        return str(value)

    def _normalize_entity_type(self, entity_type: Union[str, AuditEntityType]) -> AuditEntityType:
        if isinstance(entity_type, AuditEntityType):
            return entity_type
        return coerce_entity_type(str(entity_type))

    def _record(
        self,
        *,
        company_id: str,
        estimate_id: Optional[str],
        entity_type: Union[str, AuditEntityType],
        entity_id: str,
        action: AuditAction,
        changed_attribute: str,
        before_value: Any,
        after_value: Any,
        operator_id: str,
    ) -> AuditLog:
        log = AuditLog(
            id=str(uuid4()),
            company_id=company_id,
            estimate_id=estimate_id,
            entity_type=self._normalize_entity_type(entity_type),
            entity_id=entity_id,
            action=action,
            changed_attribute=changed_attribute,
            before_value=self.serialize_audit_value(before_value),
            after_value=self.serialize_audit_value(after_value),
            operator_id=operator_id,
            timestamp=datetime.now(),
        )
        self.db.add(log)
        return log

    def record_create(
        self,
        *,
        company_id: str,
        estimate_id: Optional[str],
        entity_type: Union[str, AuditEntityType],
        entity_id: str,
        operator_id: str,
    ) -> AuditLog:
        '''
        Record the creation of an entity (estimate, version, item, order, ...).

        :param company_id: owning company
        :param estimate_id: related estimate, if any
        :param entity_type: AuditEntityType or its value/name
        :param entity_id: id of the created entity
        :param operator_id: user performing the action
        '''
        return self._record(
            company_id=company_id,
            estimate_id=estimate_id,
            entity_type=entity_type,
            entity_id=entity_id,
            action=AuditAction.create,
            changed_attribute="__all__",
            before_value=None,
            after_value=None,
            operator_id=operator_id,
        )

    def record_update(
        self,
        *,
        company_id: str,
        estimate_id: Optional[str],
        entity_type: Union[str, AuditEntityType],
        entity_id: str,
        changed_attribute: str,
        before_value: Any,
        after_value: Any,
        operator_id: str,
    ) -> AuditLog:
        '''
        Record one changed attribute. One row per field.

        :param changed_attribute: name of the changed field
        :param before_value: value before the change
        :param after_value: value after the change
        '''
        return self._record(
            company_id=company_id,
            estimate_id=estimate_id,
            entity_type=entity_type,
            entity_id=entity_id,
            action=AuditAction.update,
            changed_attribute=changed_attribute,
            before_value=before_value,
            after_value=after_value,
            operator_id=operator_id,
        )

    def record_delete(
        self,
        *,
        company_id: str,
        estimate_id: Optional[str],
        entity_type: Union[str, AuditEntityType],
        entity_id: str,
        before_value: Any,
        operator_id: str,
    ) -> AuditLog:
        return self._record(
            company_id=company_id,
            estimate_id=estimate_id,
            entity_type=entity_type,
            entity_id=entity_id,
            action=AuditAction.delete,
            changed_attribute="__all__",
            before_value=before_value,
            after_value=None,
            operator_id=operator_id,
        )

    def record_system_update(
        self,
        *,
        company_id: str,
        estimate_id: Optional[str],
        entity_type: Union[str, AuditEntityType],
        entity_id: str,
        changed_attribute: str,
        before_value: Any,
        after_value: Any,
    ) -> AuditLog:
        '''
        Record a change made by the system rather than a user, e.g. the
        status change after regeneration or a recompute after restore.
        '''
        return self._record(
            company_id=company_id,
            estimate_id=estimate_id,
            entity_type=entity_type,
            entity_id=entity_id,
            action=AuditAction.system,
            changed_attribute=changed_attribute,
            before_value=before_value,
            after_value=after_value,
            operator_id=SYSTEM_OPERATOR,
        )

    def list_for_estimate(self, *, company_id: str, estimate_id: str) -> list[AuditLog]:
        return (
            self.db.query(AuditLog)
            .filter(
                AuditLog.company_id == company_id,
                AuditLog.estimate_id == estimate_id,
            )
            .order_by(AuditLog.timestamp.asc())
            .all()
        )

# estimating/services/version_service.py
from typing import List, Optional

from sqlalchemy.orm import Session

from estimating.domain.types import EstimateVersion, VersionSnapshot
from estimating.logger import get_logger
from estimating.models.estimate import Estimate
from estimating.services.audit_log_service import AuditLogService
from estimating.services.estimate_repository import (
    EstimateRepository,
    row_costing,
    row_measurements,
    row_rate_settings,
    row_visibility,
)

logger = get_logger(__name__)


class VersionService:
    """
    Immutable estimate snapshots.

    A snapshot is taken before every regeneration and before every restore,
    so both can always be undone.
    """

    def __init__(self, db: Session, audit_log_service: AuditLogService, repository: EstimateRepository):
        self.db = db
        self.audit_log_service = audit_log_service
        self.repository = repository

    def build_snapshot(self, row: Estimate) -> VersionSnapshot:
        costing = row_costing(row)
        return VersionSnapshot(
            answers=dict(row.answers or {}),
            measurements=row_measurements(row),
            rate_settings=row_rate_settings(row),
            sections=costing.sections if costing is not None else [],
            visibility_settings=row_visibility(row),
            brief=dict(row.brief) if row.brief else None,
        )

    def create_snapshot(self, *, estimate_id: str, note: Optional[str] = None) -> EstimateVersion:
        '''
        Snapshot the current state of an estimate.

        :param estimate_id: estimate to snapshot
        :param note: reason, e.g. "before regeneration"
        :return: the created EstimateVersion
        '''
        row = self.repository.get_estimate(estimate_id)
        version = self.repository.create_version(estimate_id, self.build_snapshot(row), note=note)

        self.audit_log_service.record_create(
            company_id=self.repository.company_id,
            estimate_id=estimate_id,
            entity_type="EstimateVersion",
            entity_id=version.id,
            operator_id=self.repository.require_user(),
        )
        logger.info(f"Version {version.version_number} created for estimate {estimate_id} ({note or 'manual'})")
        return version

    def list_versions(self, *, estimate_id: str) -> List[EstimateVersion]:
        return self.repository.list_versions(estimate_id)

    def get_version(self, *, estimate_id: str, version_number: int) -> EstimateVersion:
        return self.repository.get_version(estimate_id, version_number)

# estimating/services/estimate_repository.py
"""
Persistence for estimates and their versions, scoped to one company.

Every query filters on the injected company_id. Writes need a user_id and
raise NotAuthenticated without one.
"""
from datetime import datetime
from typing import List, Optional
from uuid import uuid4

from sqlalchemy import func
from sqlalchemy.orm import Session

from estimating.db.enums import EstimateStatus
from estimating.domain.types import (
    CustomerEstimate,
    EstimateMeasurements,
    EstimateVersion,
    InternalCosting,
    RateSettings,
    VersionSnapshot,
    VisibilitySettings,
    WizardAnswers,
)
from estimating.errors import NotAuthenticated, NotFound
from estimating.models.estimate import Estimate
from estimating.models.estimate_version import EstimateVersionRecord


def _dump(model) -> Optional[dict]:
    return None if model is None else model.model_dump(mode="json")


# =========
# Row -> domain converters
# =========
def row_answers(row: Estimate) -> WizardAnswers:
    return WizardAnswers.from_mapping(row.answers or {})


def row_measurements(row: Estimate) -> Optional[EstimateMeasurements]:
    return None if row.measurements is None else EstimateMeasurements.model_validate(row.measurements)


def row_rate_settings(row: Estimate) -> Optional[RateSettings]:
    return None if row.rate_settings is None else RateSettings.model_validate(row.rate_settings)


def row_visibility(row: Estimate) -> VisibilitySettings:
    if row.visibility_settings is None:
        return VisibilitySettings()
    return VisibilitySettings.model_validate(row.visibility_settings)


def row_costing(row: Estimate) -> Optional[InternalCosting]:
    return None if row.internal_costing is None else InternalCosting.model_validate(row.internal_costing)


def row_customer_estimate(row: Estimate) -> Optional[CustomerEstimate]:
    return None if row.customer_estimate is None else CustomerEstimate.model_validate(row.customer_estimate)


def to_domain_version(record: EstimateVersionRecord) -> EstimateVersion:
    return EstimateVersion(
        id=record.id,
        estimate_id=record.estimate_id,
        version_number=record.version_number,
        snapshot=VersionSnapshot.model_validate(record.snapshot),
        created_at=record.created_at,
        created_by=record.created_by,
        note=record.note,
    )


class EstimateRepository:
    def __init__(self, db: Session, company_id: str, user_id: Optional[str] = None):
        if not company_id:
            raise ValueError("company_id is required")
        self.db = db
        self.company_id = company_id
        self.user_id = user_id

    def require_user(self) -> str:
        if not self.user_id:
            raise NotAuthenticated()
        return self.user_id

    # =========
    # Estimates
    # =========
    def create_estimate(
        self,
        *,
        title: str,
        template_id: str,
        answers: WizardAnswers,
        measurements: Optional[EstimateMeasurements] = None,
        rate_settings: Optional[RateSettings] = None,
        visibility_settings: Optional[VisibilitySettings] = None,
        costing: Optional[InternalCosting] = None,
    ) -> Estimate:
        user_id = self.require_user()
        row = Estimate(
            id=str(uuid4()),
            company_id=self.company_id,
            template_id=template_id,
            title=title,
            status=EstimateStatus.draft,
            answers=_dump(answers),
            measurements=_dump(measurements),
            rate_settings=_dump(rate_settings),
            visibility_settings=_dump(visibility_settings or VisibilitySettings()),
            internal_costing=_dump(costing),
            created_by=user_id,
            updated_by=user_id,
        )
        self.db.add(row)
        self.db.flush()
        return row

    def get_estimate(self, estimate_id: str) -> Estimate:
        row = (
            self.db.query(Estimate)
            .filter(Estimate.id == estimate_id, Estimate.company_id == self.company_id)
            .first()
        )
        if row is None:
            raise NotFound("Estimate", estimate_id)
        return row

    def list_estimates(self) -> List[Estimate]:
        return (
            self.db.query(Estimate)
            .filter(Estimate.company_id == self.company_id)
            .order_by(Estimate.created_at.desc())
            .all()
        )

    def load(self, estimate_id: str) -> Optional[InternalCosting]:
        '''Internal costing of an estimate; None when absent or not costed yet.'''
        row = (
            self.db.query(Estimate)
            .filter(Estimate.id == estimate_id, Estimate.company_id == self.company_id)
            .first()
        )
        if row is None:
            return None
        return row_costing(row)

    def save(self, estimate_id: str, costing: InternalCosting) -> None:
        user_id = self.require_user()
        row = self.get_estimate(estimate_id)
        row.internal_costing = _dump(costing)
        row.updated_by = user_id
        self.db.flush()

    def save_state(
        self,
        estimate_id: str,
        *,
        costing: Optional[InternalCosting] = None,
        customer_estimate: Optional[CustomerEstimate] = None,
        measurements: Optional[EstimateMeasurements] = None,
        rate_settings: Optional[RateSettings] = None,
        visibility_settings: Optional[VisibilitySettings] = None,
        brief: Optional[dict] = None,
        status: Optional[EstimateStatus] = None,
    ) -> Estimate:
        """Write whichever parts are given; None leaves a part unchanged."""
        user_id = self.require_user()
        row = self.get_estimate(estimate_id)
        if costing is not None:
            row.internal_costing = _dump(costing)
        if customer_estimate is not None:
            row.customer_estimate = _dump(customer_estimate)
        if measurements is not None:
            row.measurements = _dump(measurements)
        if rate_settings is not None:
            row.rate_settings = _dump(rate_settings)
        if visibility_settings is not None:
            row.visibility_settings = _dump(visibility_settings)
        if brief is not None:
            row.brief = dict(brief)
        if status is not None:
            row.status = status
        row.updated_by = user_id
        self.db.flush()
        return row

    # =========
    # Versions (insert-only)
    # =========
    def _next_version_number(self, estimate_id: str) -> int:
        '''
        max existing version_number + 1, or 1 for the first version
        '''
        latest = (
            self.db.query(func.max(EstimateVersionRecord.version_number))
            .filter(
                EstimateVersionRecord.estimate_id == estimate_id,
                EstimateVersionRecord.company_id == self.company_id,
            )
            .scalar()
        )
        return 1 if latest is None else latest + 1

    def create_version(self, estimate_id: str, snapshot: VersionSnapshot, note: Optional[str] = None) -> EstimateVersion:
        user_id = self.require_user()
        # the estimate must belong to this company
        self.get_estimate(estimate_id)

        record = EstimateVersionRecord(
            id=str(uuid4()),
            company_id=self.company_id,
            estimate_id=estimate_id,
            version_number=self._next_version_number(estimate_id),
            snapshot=snapshot.model_dump(mode="json"),
            note=note,
            created_by=user_id,
            created_at=datetime.now(),
        )
        self.db.add(record)
        self.db.flush()
        return to_domain_version(record)

    def list_versions(self, estimate_id: str) -> List[EstimateVersion]:
        records = (
            self.db.query(EstimateVersionRecord)
            .filter(
                EstimateVersionRecord.estimate_id == estimate_id,
                EstimateVersionRecord.company_id == self.company_id,
            )
            .order_by(EstimateVersionRecord.version_number.asc())
            .all()
        )
        return [to_domain_version(r) for r in records]

    def get_version(self, estimate_id: str, version_number: int) -> EstimateVersion:
        record = (
            self.db.query(EstimateVersionRecord)
            .filter(
                EstimateVersionRecord.estimate_id == estimate_id,
                EstimateVersionRecord.company_id == self.company_id,
                EstimateVersionRecord.version_number == version_number,
            )
            .first()
        )
        if record is None:
            raise NotFound("EstimateVersion", f"{estimate_id}#{version_number}")
        return to_domain_version(record)

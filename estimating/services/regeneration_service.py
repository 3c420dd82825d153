# estimating/services/regeneration_service.py
from dataclasses import dataclass
from typing import Union

from sqlalchemy.orm import Session

from estimating.db.enums import EstimateStatus
from estimating.domain.brief import build_brief_content
from estimating.domain.customer_estimate import build_customer_estimate
from estimating.domain.generator import generate_internal_costing
from estimating.domain.rates import costing_from_rate_settings, default_rate_settings
from estimating.domain.regeneration import RegenerationMode, merge_regeneration
from estimating.domain.types import CustomerEstimate, EstimateVersion, InternalCosting
from estimating.config import get_settings
from estimating.logger import get_logger
from estimating.services.audit_log_service import AuditLogService
from estimating.services.catalog_service import CatalogService
from estimating.services.estimate_repository import (
    EstimateRepository,
    row_answers,
    row_costing,
    row_measurements,
    row_rate_settings,
)
from estimating.services.version_service import VersionService

logger = get_logger(__name__)


@dataclass(frozen=True)
class RegenerationResult:
    snapshot: EstimateVersion
    costing: InternalCosting
    customer_estimate: CustomerEstimate
    mode: RegenerationMode
    kept_overrides: int


class RegenerationService:
    """
    Re-run the pricing engine against the estimate's current inputs.

    Order matters: the version snapshot is created before anything else, and
    a failed snapshot stops the regeneration.
    """

    def __init__(
        self,
        db: Session,
        audit_log_service: AuditLogService,
        repository: EstimateRepository,
        catalog_service: CatalogService,
        version_service: VersionService,
    ):
        self.db = db
        self.audit_log_service = audit_log_service
        self.repository = repository
        self.catalog_service = catalog_service
        self.version_service = version_service

    def regenerate(
        self,
        *,
        estimate_id: str,
        mode: Union[str, RegenerationMode] = RegenerationMode.AUTO_RATED_ONLY,
    ) -> RegenerationResult:
        '''
        :param estimate_id: estimate to regenerate
        :param mode: "auto-rated-only" keeps manual overrides, "full" replaces everything
        :raises MeasurementsRequired: the estimate has no usable measurements
        :raises ExpressionError: a catalog formula cannot be committed
        '''
        mode = RegenerationMode(mode)

        # 1️⃣ snapshot first; failure aborts
        snapshot = self.version_service.create_snapshot(
            estimate_id=estimate_id, note=f"before regeneration ({mode.value})"
        )

        # 2️⃣ load inputs
        row = self.repository.get_estimate(estimate_id)
        answers = row_answers(row)
        measurements = row_measurements(row)
        rate_settings = row_rate_settings(row) or default_rate_settings(answers.region or get_settings().default_region)
        previous = row_costing(row) or costing_from_rate_settings(rate_settings)

        # 3️⃣ fresh costing from the catalog
        fresh = generate_internal_costing(
            answers,
            measurements,
            rate_settings,
            self.catalog_service.list_assemblies(),
            self.catalog_service.list_bundles(),
        )

        # 4️⃣ merge and rebuild the customer view
        merged = merge_regeneration(previous, fresh, mode)
        customer = build_customer_estimate(merged)
        brief = build_brief_content(answers, measurements, rate_settings)

        # 5️⃣ persist
        old_status = row.status
        self.repository.save_state(
            estimate_id,
            costing=merged,
            customer_estimate=customer,
            rate_settings=rate_settings,
            brief=brief.model_dump(mode="json"),
            status=EstimateStatus.generated,
        )
        self.audit_log_service.record_system_update(
            company_id=self.repository.company_id,
            estimate_id=estimate_id,
            entity_type="Estimate",
            entity_id=estimate_id,
            changed_attribute="status",
            before_value=old_status,
            after_value=EstimateStatus.generated,
        )

        kept = sum(1 for i in merged.all_items() if i.is_manual_override)
        logger.info(
            f"Estimate {estimate_id} regenerated mode={mode.value} "
            f"sections={len(merged.sections)} items={len(merged.all_items())} "
            f"kept_overrides={kept} snapshot=v{snapshot.version_number}"
        )
        return RegenerationResult(
            snapshot=snapshot,
            costing=merged,
            customer_estimate=customer,
            mode=mode,
            kept_overrides=kept,
        )

# estimating/services/estimate_service.py
from typing import Any, Dict, List, Optional, Tuple, Union

from sqlalchemy.orm import Session

from estimating.domain import editing
from estimating.domain.assembly import (
    append_items,
    apply_assembly,
    expand_assembly,
    next_sort_order,
    preview_assembly,
    refresh_quantities,
)
from estimating.domain.brief import build_brief_content
from estimating.domain.customer_estimate import build_customer_estimate
from estimating.domain.generator import formula_overrides
from estimating.domain.measurements import compute_measurements, tokens_from_answers
from estimating.domain.rates import costing_from_rate_settings, default_rate_settings
from estimating.domain.totals import recompute_estimate
from estimating.domain.types import (
    CustomerEstimate,
    EstimateVersion,
    InternalCosting,
    LineItem,
    MeasurementInputs,
    RateSettings,
    Section,
    WizardAnswers,
)
from estimating.config import get_settings
from estimating.logger import get_logger
from estimating.models.estimate import Estimate
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


class EstimateService:
    """
    Estimate lifecycle and human edits.

    Every mutation recomputes the costing, persists it through the
    repository and writes AuditLog rows. Transactions are owned by the
    caller (tools commit or roll back).
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

    # =========
    # Helpers
    # =========
    @property
    def company_id(self) -> str:
        return self.repository.company_id

    def _rate_settings(self, row: Estimate) -> RateSettings:
        return row_rate_settings(row) or default_rate_settings()

    def _costing(self, row: Estimate) -> InternalCosting:
        costing = row_costing(row)
        if costing is None:
            costing = recompute_estimate(costing_from_rate_settings(self._rate_settings(row)))
        return costing

    def _tokens(self, row: Estimate) -> Dict[str, Any]:
        return tokens_from_answers(row_answers(row), row_measurements(row))

    def _record_items_created(self, estimate_id: str, items: List[LineItem]) -> None:
        operator_id = self.repository.require_user()
        for item in items:
            self.audit_log_service.record_create(
                company_id=self.company_id,
                estimate_id=estimate_id,
                entity_type="LineItem",
                entity_id=item.id,
                operator_id=operator_id,
            )

    # =========
    # Create
    # =========
    def create_estimate(
        self,
        *,
        title: str,
        template_id: str,
        answers: Union[WizardAnswers, Dict[str, Any]],
        measurement_inputs: Optional[Union[MeasurementInputs, Dict[str, Any]]] = None,
        rate_settings: Optional[RateSettings] = None,
    ) -> Estimate:
        '''
        Create a draft estimate with an empty costing.

        :param title: estimate title
        :param template_id: wizard template
        :param answers: wizard answers (known fields + extras)
        :param measurement_inputs: external dimensions, if known
        :param rate_settings: explicit rate settings; defaults to the answer's region
        '''
        if not isinstance(answers, WizardAnswers):
            answers = WizardAnswers.from_mapping(answers, strict=True)
        if answers.template_id is None:
            answers = answers.model_copy(update={"template_id": template_id})

        measurements = None
        if measurement_inputs is not None:
            measurements = compute_measurements(measurement_inputs)
        if rate_settings is None:
            rate_settings = default_rate_settings(answers.region or get_settings().default_region)

        costing = recompute_estimate(costing_from_rate_settings(rate_settings))
        row = self.repository.create_estimate(
            title=title,
            template_id=template_id,
            answers=answers,
            measurements=measurements,
            rate_settings=rate_settings,
            costing=costing,
        )
        row.brief = build_brief_content(answers, measurements, rate_settings).model_dump(mode="json")
        self.db.flush()

        self.audit_log_service.record_create(
            company_id=self.company_id,
            estimate_id=row.id,
            entity_type="Estimate",
            entity_id=row.id,
            operator_id=self.repository.require_user(),
        )
        logger.info(f"Estimate {row.id} created from template {template_id}")
        return row

    def get_costing(self, *, estimate_id: str) -> InternalCosting:
        return self._costing(self.repository.get_estimate(estimate_id))

    # =========
    # Item edits
    # =========
    def edit_item(self, *, estimate_id: str, item_id: str, updates: Dict[str, Any]) -> LineItem:
        '''
        Edit whitelisted fields of one item. One AuditLog row per changed
        field; unchanged values write nothing.
        '''
        row = self.repository.get_estimate(estimate_id)
        result = editing.edit_item(self._costing(row), item_id, updates)
        if not result.changes:
            return result.item

        self.repository.save(estimate_id, result.costing)
        operator_id = self.repository.require_user()
        for change in result.changes:
            self.audit_log_service.record_update(
                company_id=self.company_id,
                estimate_id=estimate_id,
                entity_type="LineItem",
                entity_id=item_id,
                changed_attribute=change.field,
                before_value=change.before,
                after_value=change.after,
                operator_id=operator_id,
            )
        return result.item

    def add_item(self, *, estimate_id: str, section_id: str, item: LineItem) -> LineItem:
        row = self.repository.get_estimate(estimate_id)
        costing = editing.add_item(self._costing(row), section_id, item)
        self.repository.save(estimate_id, costing)
        added = costing.find_section(section_id).items[-1]
        self._record_items_created(estimate_id, [added])
        return added

    def delete_item(self, *, estimate_id: str, item_id: str) -> None:
        row = self.repository.get_estimate(estimate_id)
        costing = self._costing(row)
        removed = editing.costing_item(costing, item_id)
        self.repository.save(estimate_id, editing.delete_item(costing, item_id))
        self.audit_log_service.record_delete(
            company_id=self.company_id,
            estimate_id=estimate_id,
            entity_type="LineItem",
            entity_id=item_id,
            before_value=removed.title,
            operator_id=self.repository.require_user(),
        )

    def add_section(self, *, estimate_id: str, title: str, notes: Optional[str] = None) -> Section:
        row = self.repository.get_estimate(estimate_id)
        costing, section = editing.add_section(self._costing(row), title, notes)
        self.repository.save(estimate_id, costing)
        self.audit_log_service.record_create(
            company_id=self.company_id,
            estimate_id=estimate_id,
            entity_type="Section",
            entity_id=section.id,
            operator_id=self.repository.require_user(),
        )
        return section

    # =========
    # Assemblies & bundles
    # =========
    def preview_assembly(self, *, estimate_id: str, assembly_id: str) -> List[LineItem]:
        '''
        Expansion for display only. Missing tokens count as 0 and broken
        formulas preview as quantity 0. Nothing is saved.
        '''
        row = self.repository.get_estimate(estimate_id)
        rate_settings = self._rate_settings(row)
        return preview_assembly(
            self.catalog_service.get_assembly(assembly_id),
            self._tokens(row),
            cost_multiplier=rate_settings.regional_multiplier,
            vat_pct=rate_settings.vat_pct,
        )

    def apply_assembly(self, *, estimate_id: str, section_id: str, assembly_id: str) -> List[LineItem]:
        '''
        Expand an assembly into a section with strict formula evaluation.
        Insert-only; a formula error aborts without changing anything.

        :return: the inserted items
        '''
        row = self.repository.get_estimate(estimate_id)
        rate_settings = self._rate_settings(row)
        assembly = self.catalog_service.get_assembly(assembly_id)
        costing = self._costing(row)
        before = {i.id for i in costing.all_items()}

        costing = apply_assembly(
            costing,
            section_id,
            assembly,
            self._tokens(row),
            cost_multiplier=rate_settings.regional_multiplier,
            vat_pct=rate_settings.vat_pct,
        )
        self.repository.save(estimate_id, costing)

        inserted = [i for i in costing.all_items() if i.id not in before]
        self._record_items_created(estimate_id, inserted)
        logger.info(f"Assembly {assembly_id} applied to estimate {estimate_id}: {len(inserted)} items")
        return inserted

    def apply_bundle(self, *, estimate_id: str, bundle_id: str) -> List[LineItem]:
        '''
        Expand every assembly reference of a bundle, in declared order, into
        the section named after the assembly category (created when absent).
        '''
        row = self.repository.get_estimate(estimate_id)
        rate_settings = self._rate_settings(row)
        bundle = self.catalog_service.get_bundle(bundle_id)
        tokens = self._tokens(row)
        costing = self._costing(row)

        inserted: List[LineItem] = []
        for ref in bundle.assembly_refs:
            assembly = self.catalog_service.get_assembly(ref.assembly_id)
            costing, section = editing.ensure_section(costing, assembly.category)
            items = expand_assembly(
                assembly,
                tokens,
                start_sort_order=next_sort_order(costing.find_section(section.id)),
                strict=True,
                cost_multiplier=rate_settings.regional_multiplier,
                vat_pct=rate_settings.vat_pct,
                formula_overrides=formula_overrides(assembly, ref),
            )
            costing = append_items(costing, section.id, items)
            inserted.extend(items)

        self.repository.save(estimate_id, costing)
        self._record_items_created(estimate_id, inserted)
        logger.info(f"Bundle {bundle_id} applied to estimate {estimate_id}: {len(inserted)} items")
        return inserted

    # =========
    # Measurements
    # =========
    def update_measurements(
        self,
        *,
        estimate_id: str,
        measurement_inputs: Union[MeasurementInputs, Dict[str, Any]],
    ) -> InternalCosting:
        '''
        Recompute measurements and re-evaluate formula-driven quantities of
        items that are neither locked nor manually overridden. Formulas are
        evaluated strictly: an ExpressionError aborts the update and nothing
        is saved. Refreshed lines are settled before saving.
        '''
        row = self.repository.get_estimate(estimate_id)
        before = row.measurements
        measurements = compute_measurements(measurement_inputs)
        tokens = tokens_from_answers(row_answers(row), measurements)

        costing = self._costing(row)
        costing = recompute_estimate(
            costing.model_copy(update={"sections": [refresh_quantities(s, tokens, strict=True) for s in costing.sections]})
        )
        brief = build_brief_content(row_answers(row), measurements, row_rate_settings(row))
        self.repository.save_state(
            estimate_id,
            costing=costing,
            measurements=measurements,
            brief=brief.model_dump(mode="json"),
        )
        self.audit_log_service.record_update(
            company_id=self.company_id,
            estimate_id=estimate_id,
            entity_type="Estimate",
            entity_id=estimate_id,
            changed_attribute="measurements",
            before_value=before,
            after_value=measurements.model_dump(mode="json"),
            operator_id=self.repository.require_user(),
        )
        return costing

    # =========
    # Customer view & versions
    # =========
    def rebuild_customer_estimate(self, *, estimate_id: str) -> CustomerEstimate:
        """Replace the customer view with a fresh projection of the costing."""
        row = self.repository.get_estimate(estimate_id)
        customer = build_customer_estimate(self._costing(row))
        self.repository.save_state(estimate_id, customer_estimate=customer)
        return customer

    def restore_version(self, *, estimate_id: str, version_number: int) -> Tuple[EstimateVersion, EstimateVersion]:
        '''
        Restore an earlier version. The current state is snapshotted first,
        so a restore can itself be undone.

        :return: (snapshot taken before the restore, restored version)
        '''
        target = self.version_service.get_version(estimate_id=estimate_id, version_number=version_number)
        safety = self.version_service.create_snapshot(
            estimate_id=estimate_id, note=f"before restore of v{version_number}"
        )

        row = self.repository.get_estimate(estimate_id)
        snapshot = target.snapshot
        rate_settings = snapshot.rate_settings or self._rate_settings(row)
        base = self._costing(row).model_copy(update={"sections": list(snapshot.sections)})
        costing = recompute_estimate(costing_from_rate_settings(rate_settings, base))

        self.repository.save_state(
            estimate_id,
            costing=costing,
            measurements=snapshot.measurements,
            rate_settings=snapshot.rate_settings,
            visibility_settings=snapshot.visibility_settings,
            brief=snapshot.brief,
        )
        self.audit_log_service.record_system_update(
            company_id=self.company_id,
            estimate_id=estimate_id,
            entity_type="Estimate",
            entity_id=estimate_id,
            changed_attribute="restored_version",
            before_value=safety.version_number,
            after_value=version_number,
        )
        logger.info(f"Estimate {estimate_id} restored to v{version_number} (safety snapshot v{safety.version_number})")
        return safety, target

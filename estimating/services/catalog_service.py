# estimating/services/catalog_service.py
from typing import List, Optional
from uuid import uuid4

from sqlalchemy import func
from sqlalchemy.orm import Session

from estimating.domain.bundles import recommend
from estimating.domain.seed_catalog import seed_assemblies, seed_bundles
from estimating.domain.types import Assembly, AssemblyLine, AssemblyRef, Bundle, BundleCondition, WizardAnswers
from estimating.errors import NotFound
from estimating.logger import get_logger
from estimating.models.assembly import AssemblyDefinition
from estimating.models.bundle import BundleDefinition
from estimating.services.audit_log_service import AuditLogService

logger = get_logger(__name__)


def to_domain_assembly(row: AssemblyDefinition) -> Assembly:
    return Assembly(
        id=row.assembly_key,
        name=row.name,
        category=row.category,
        default_unit=row.default_unit,
        description=row.description,
        lines=[AssemblyLine.model_validate(line) for line in row.lines or []],
    )


def to_domain_bundle(row: BundleDefinition) -> Bundle:
    return Bundle(
        id=row.bundle_key,
        name=row.name,
        description=row.description,
        template_ids=row.template_ids,
        conditions=None if row.conditions is None else BundleCondition.model_validate(row.conditions),
        assembly_refs=[AssemblyRef.model_validate(ref) for ref in row.assembly_refs or []],
    )


class CatalogService:
    """
    Company catalog of assemblies and bundles.

    Catalog entries are addressed by their stable key (Assembly.id /
    Bundle.id), not by the row UUID.
    """

    def __init__(self, db: Session, audit_log_service: AuditLogService, *, company_id: str):
        self.db = db
        self.audit_log_service = audit_log_service
        self.company_id = company_id

    # =========
    # Assemblies
    # =========
    def _assembly_row(self, assembly_id: str) -> Optional[AssemblyDefinition]:
        return (
            self.db.query(AssemblyDefinition)
            .filter(
                AssemblyDefinition.company_id == self.company_id,
                AssemblyDefinition.assembly_key == assembly_id,
            )
            .first()
        )

    def list_assemblies(self) -> List[Assembly]:
        rows = (
            self.db.query(AssemblyDefinition)
            .filter(AssemblyDefinition.company_id == self.company_id)
            .order_by(AssemblyDefinition.category.asc(), AssemblyDefinition.name.asc())
            .all()
        )
        return [to_domain_assembly(r) for r in rows]

    def get_assembly(self, assembly_id: str) -> Assembly:
        row = self._assembly_row(assembly_id)
        if row is None:
            raise NotFound("Assembly", assembly_id)
        return to_domain_assembly(row)

    def create_assembly(self, *, assembly: Assembly, operator_id: str) -> Assembly:
        '''
        Add an assembly to the catalog.

        :raises ValueError: an assembly with the same key already exists
        '''
        if self._assembly_row(assembly.id) is not None:
            raise ValueError(f"Assembly already exists: {assembly.id}")
        row = AssemblyDefinition(
            id=str(uuid4()),
            company_id=self.company_id,
            assembly_key=assembly.id,
            name=assembly.name,
            category=assembly.category,
            default_unit=assembly.default_unit,
            description=assembly.description,
            lines=[line.model_dump(mode="json") for line in assembly.lines],
        )
        self.db.add(row)
        self.db.flush()
        self.audit_log_service.record_create(
            company_id=self.company_id,
            estimate_id=None,
            entity_type="Assembly",
            entity_id=row.id,
            operator_id=operator_id,
        )
        return to_domain_assembly(row)

    # =========
    # Bundles
    # =========
    def _bundle_row(self, bundle_id: str) -> Optional[BundleDefinition]:
        return (
            self.db.query(BundleDefinition)
            .filter(
                BundleDefinition.company_id == self.company_id,
                BundleDefinition.bundle_key == bundle_id,
            )
            .first()
        )

    def list_bundles(self) -> List[Bundle]:
        """Registry order."""
        rows = (
            self.db.query(BundleDefinition)
            .filter(BundleDefinition.company_id == self.company_id)
            .order_by(BundleDefinition.position.asc())
            .all()
        )
        return [to_domain_bundle(r) for r in rows]

    def get_bundle(self, bundle_id: str) -> Bundle:
        row = self._bundle_row(bundle_id)
        if row is None:
            raise NotFound("Bundle", bundle_id)
        return to_domain_bundle(row)

    def create_bundle(self, *, bundle: Bundle, operator_id: str) -> Bundle:
        '''
        Append a bundle to the end of the registry.

        :raises ValueError: duplicate key
        '''
        if self._bundle_row(bundle.id) is not None:
            raise ValueError(f"Bundle already exists: {bundle.id}")
        last = (
            self.db.query(func.max(BundleDefinition.position))
            .filter(BundleDefinition.company_id == self.company_id)
            .scalar()
        )
        row = BundleDefinition(
            id=str(uuid4()),
            company_id=self.company_id,
            bundle_key=bundle.id,
            name=bundle.name,
            description=bundle.description,
            position=0 if last is None else last + 1,
            template_ids=bundle.template_ids,
            conditions=None if bundle.conditions is None else bundle.conditions.model_dump(mode="json", exclude_none=True),
            assembly_refs=[ref.model_dump(mode="json") for ref in bundle.assembly_refs],
        )
        self.db.add(row)
        self.db.flush()
        self.audit_log_service.record_create(
            company_id=self.company_id,
            estimate_id=None,
            entity_type="Bundle",
            entity_id=row.id,
            operator_id=operator_id,
        )
        return to_domain_bundle(row)

    def recommend_bundles(self, *, answers: WizardAnswers, template_id: Optional[str]) -> List[Bundle]:
        return recommend(self.list_bundles(), answers, template_id)

    # =========
    # Seeding
    # =========
    def seed_catalog(self, *, operator_id: str) -> int:
        '''
        Insert the seed assemblies and bundles that are not there yet.
        Safe to run repeatedly.

        :return: number of definitions created
        '''
        created = 0
        for assembly in seed_assemblies():
            if self._assembly_row(assembly.id) is None:
                self.create_assembly(assembly=assembly, operator_id=operator_id)
                created += 1
        for bundle in seed_bundles():
            if self._bundle_row(bundle.id) is None:
                self.create_bundle(bundle=bundle, operator_id=operator_id)
                created += 1
        logger.info(f"Seeded {created} catalog definitions for company {self.company_id}")
        return created

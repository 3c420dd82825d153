# estimating/services/service_container.py
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from estimating.services.audit_log_service import AuditLogService
from estimating.services.catalog_service import CatalogService
from estimating.services.estimate_repository import EstimateRepository
from estimating.services.estimate_service import EstimateService
from estimating.services.order_service import OrderService
from estimating.services.regeneration_service import RegenerationService
from estimating.services.report_service import ReportService
from estimating.services.version_service import VersionService


@dataclass(frozen=True)
class Services:
    audit: AuditLogService
    repository: EstimateRepository
    catalog: CatalogService
    versions: VersionService
    estimates: EstimateService
    regeneration: RegenerationService
    orders: OrderService
    reports: ReportService


def build_services(db: Session, *, company_id: str, user_id: Optional[str] = None) -> Services:
    '''
    Wire every service over one Session, scoped to one company and user.

    :param db: open Session; the caller owns commit/rollback
    :param company_id: tenant id
    :param user_id: acting user; writes fail with NotAuthenticated without one
    '''
    audit = AuditLogService(db)
    repository = EstimateRepository(db, company_id, user_id)
    catalog = CatalogService(db, audit, company_id=company_id)
    versions = VersionService(db, audit, repository)
    return Services(
        audit=audit,
        repository=repository,
        catalog=catalog,
        versions=versions,
        estimates=EstimateService(db, audit, repository, catalog, versions),
        regeneration=RegenerationService(db, audit, repository, catalog, versions),
        orders=OrderService(db, audit, repository),
        reports=ReportService(db, repository),
    )

# estimating/db/auto_init.py
"""
Database auto-initialisation, run at startup: create tables when missing,
then seed the assembly/bundle catalog for the configured company.
"""
from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from estimating.config import get_settings
from estimating.db.init_db import init_db
from estimating.db.session import get_engine, get_session
from estimating.logger import get_logger
from estimating.services.audit_log_service import AuditLogService
from estimating.services.catalog_service import CatalogService

logger = get_logger(__name__)


def check_tables_exist() -> bool:
    """True when the schema has been created."""
    try:
        inspector = inspect(get_engine())
        return "estimates" in inspector.get_table_names()
    except SQLAlchemyError as e:
        logger.warning(f"Failed to inspect database tables: {e}")
        return False


def seed_catalog(company_id: str) -> int:
    """Seed the catalog for one company; returns the number of rows created."""
    db = get_session()
    try:
        service = CatalogService(db, AuditLogService(db), company_id=company_id)
        created = service.seed_catalog(operator_id="SYSTEM")
        db.commit()
        return created
    except Exception:
        db.rollback()
        logger.exception("Catalog seeding failed")
        raise
    finally:
        db.close()


def auto_init():
    logger.info("Checking database initialisation state...")

    if not check_tables_exist():
        logger.info("Tables missing, creating schema")
        init_db()
        logger.info("Schema created")
    else:
        logger.info("Tables already exist")

    company_id = get_settings().require_company_id()
    created = seed_catalog(company_id)
    logger.info(f"Catalog seeded for company {company_id}: {created} new definitions")


if __name__ == "__main__":
    auto_init()

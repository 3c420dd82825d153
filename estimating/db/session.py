# estimating/db/session.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from estimating.config import get_settings
from estimating.logger import get_logger

logger = get_logger(__name__)

_engine = None
_SessionLocal = None


def get_engine():
    global _engine
    if _engine is None:
        db_url = get_settings().database_url
        logger.info(f"Using database URL: {db_url}")
        if not db_url:
            raise RuntimeError("DATABASE_URL not set")
        connect_args = {"check_same_thread": False} if db_url.startswith("sqlite") else {}
        _engine = create_engine(db_url, connect_args=connect_args)
    return _engine


def get_session():
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=get_engine()
        )
    return _SessionLocal()

# estimating/db/init_db.py
from estimating.db.base import Base
from estimating.db.session import get_engine

# table registration
from estimating.models import assembly, audit_log, bundle, estimate, estimate_version, orders  # noqa: F401


def init_db(engine=None):
    engine = engine or get_engine()
    Base.metadata.create_all(bind=engine)

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from estimating.db.init_db import init_db
from estimating.domain.seed_catalog import SINGLE_STOREY_EXTENSION, seed_assemblies, seed_bundles
from estimating.services.service_container import build_services
from estimating.tests.factories import ANSWERS, COMPANY_ID, MEASUREMENT_INPUTS, USER_ID


@pytest.fixture
def engine():
    # one shared in-memory database per test
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def services(db):
    services = build_services(db, company_id=COMPANY_ID, user_id=USER_ID)
    services.catalog.seed_catalog(operator_id=USER_ID)
    db.commit()
    return services


@pytest.fixture
def estimate(services, db):
    row = services.estimates.create_estimate(
        title="Rear extension",
        template_id=SINGLE_STOREY_EXTENSION,
        answers=dict(ANSWERS),
        measurement_inputs=dict(MEASUREMENT_INPUTS),
    )
    db.commit()
    return row


@pytest.fixture
def assemblies():
    return seed_assemblies()


@pytest.fixture
def bundles():
    return seed_bundles()

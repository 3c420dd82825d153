import pytest
from pydantic import ValidationError

from estimating.db.enums import EstimateStatus
from estimating.domain.types import VersionSnapshot, WizardAnswers
from estimating.errors import NotAuthenticated, NotFound
from estimating.services.estimate_repository import EstimateRepository

from estimating.tests.factories import COMPANY_ID, OTHER_COMPANY_ID, USER_ID, priced_item, single_section


def test_create_and_load(db):
    repo = EstimateRepository(db, COMPANY_ID, USER_ID)
    costing = single_section("Works", priced_item("Skip", "280.00"))

    row = repo.create_estimate(title="Kitchen", template_id="t1", answers=WizardAnswers(), costing=costing)
    db.commit()

    assert row.status == EstimateStatus.draft
    assert row.created_by == USER_ID
    loaded = repo.load(row.id)
    assert loaded == costing


def test_load_missing_returns_none(db):
    assert EstimateRepository(db, COMPANY_ID, USER_ID).load("missing") is None


def test_company_scoping(db):
    row = EstimateRepository(db, COMPANY_ID, USER_ID).create_estimate(
        title="Kitchen", template_id="t1", answers=WizardAnswers()
    )
    db.commit()

    other = EstimateRepository(db, OTHER_COMPANY_ID, USER_ID)
    assert other.load(row.id) is None
    assert other.list_estimates() == []
    with pytest.raises(NotFound):
        other.get_estimate(row.id)
    with pytest.raises(NotFound):
        other.create_version(row.id, VersionSnapshot())


def test_writes_need_a_user(db):
    owner = EstimateRepository(db, COMPANY_ID, USER_ID)
    row = owner.create_estimate(title="Kitchen", template_id="t1", answers=WizardAnswers())
    db.commit()

    anonymous = EstimateRepository(db, COMPANY_ID)
    with pytest.raises(NotAuthenticated):
        anonymous.create_estimate(title="x", template_id="t1", answers=WizardAnswers())
    with pytest.raises(NotAuthenticated):
        anonymous.save(row.id, single_section("Works"))
    with pytest.raises(NotAuthenticated):
        anonymous.create_version(row.id, VersionSnapshot())
    # reads are fine
    assert anonymous.get_estimate(row.id).id == row.id


def test_company_is_required(db):
    with pytest.raises(ValueError):
        EstimateRepository(db, "", USER_ID)


def test_version_numbers_are_sequential_per_estimate(db):
    repo = EstimateRepository(db, COMPANY_ID, USER_ID)
    first = repo.create_estimate(title="A", template_id="t1", answers=WizardAnswers())
    second = repo.create_estimate(title="B", template_id="t1", answers=WizardAnswers())

    numbers = [repo.create_version(first.id, VersionSnapshot()).version_number for _ in range(3)]
    other = repo.create_version(second.id, VersionSnapshot())
    db.commit()

    assert numbers == [1, 2, 3]
    assert other.version_number == 1
    assert [v.version_number for v in repo.list_versions(first.id)] == [1, 2, 3]


def test_versions_are_immutable(db):
    repo = EstimateRepository(db, COMPANY_ID, USER_ID)
    row = repo.create_estimate(title="A", template_id="t1", answers=WizardAnswers())
    snapshot = VersionSnapshot(sections=single_section("Works", priced_item("Skip", "280.00")).sections)
    version = repo.create_version(row.id, snapshot, note="manual")
    db.commit()

    with pytest.raises(ValidationError):
        version.version_number = 9

    fetched = repo.get_version(row.id, 1)
    assert fetched.snapshot.sections[0].items[0].title == "Skip"
    assert fetched.note == "manual"
    with pytest.raises(NotFound):
        repo.get_version(row.id, 2)

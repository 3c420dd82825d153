from decimal import Decimal

import pytest

from estimating.db.enums import AuditAction, EstimateStatus
from estimating.domain.regeneration import RegenerationMode
from estimating.domain.seed_catalog import SINGLE_STOREY_EXTENSION
from estimating.errors import MeasurementsRequired
from estimating.services.estimate_repository import row_customer_estimate

from estimating.tests.factories import ANSWERS, COMPANY_ID


def _manual_edit(services, estimate_id):
    costing = services.estimates.get_costing(estimate_id=estimate_id)
    item = next(i for i in costing.all_items() if i.assembly_line_id == "flat-roof-membrane")
    services.estimates.edit_item(estimate_id=estimate_id, item_id=item.id, updates={"unit_price": "99.99"})
    return item


def test_regenerate_builds_costing_and_customer_view(services, estimate, db):
    result = services.regeneration.regenerate(estimate_id=estimate.id)
    db.commit()

    assert result.mode == RegenerationMode.AUTO_RATED_ONLY
    assert len(result.costing.all_items()) == 21
    assert estimate.status == EstimateStatus.generated

    customer = row_customer_estimate(estimate)
    assert customer.subtotal == result.costing.subtotal
    assert len(customer.sections) == len(result.costing.sections)


def test_snapshot_is_taken_before_regenerating(services, estimate, db):
    first = services.regeneration.regenerate(estimate_id=estimate.id)
    assert first.snapshot.version_number == 1
    assert first.snapshot.snapshot.sections == []
    assert first.snapshot.note.startswith("before regeneration")

    second = services.regeneration.regenerate(estimate_id=estimate.id)
    db.commit()

    assert second.snapshot.version_number == 2
    assert len(second.snapshot.snapshot.sections) == len(first.costing.sections)
    assert [v.version_number for v in services.versions.list_versions(estimate_id=estimate.id)] == [1, 2]


def test_manual_override_survives_regeneration(services, estimate, db):
    services.regeneration.regenerate(estimate_id=estimate.id)
    edited = _manual_edit(services, estimate.id)

    result = services.regeneration.regenerate(estimate_id=estimate.id)
    db.commit()

    membrane = next(i for i in result.costing.all_items() if i.assembly_line_id == "flat-roof-membrane")
    assert membrane.id == edited.id
    assert membrane.unit_price == Decimal("99.99")
    assert membrane.is_manual_override
    assert result.kept_overrides == 1


def test_full_regeneration_discards_overrides(services, estimate, db):
    services.regeneration.regenerate(estimate_id=estimate.id)
    edited = _manual_edit(services, estimate.id)

    result = services.regeneration.regenerate(estimate_id=estimate.id, mode="full")
    db.commit()

    membrane = next(i for i in result.costing.all_items() if i.assembly_line_id == "flat-roof-membrane")
    assert membrane.id != edited.id
    assert not membrane.is_manual_override
    assert result.kept_overrides == 0
    # the edited state is still recoverable
    versions = services.versions.list_versions(estimate_id=estimate.id)
    snapshot_items = [i for s in versions[-1].snapshot.sections for i in s.items]
    assert any(i.id == edited.id and i.is_manual_override for i in snapshot_items)


def test_regeneration_is_audited_as_system_action(services, estimate, db):
    services.regeneration.regenerate(estimate_id=estimate.id)
    db.commit()

    logs = services.audit.list_for_estimate(company_id=COMPANY_ID, estimate_id=estimate.id)
    system = [log for log in logs if log.action == AuditAction.system]
    assert len(system) == 1
    assert system[0].before_value == "draft"
    assert system[0].after_value == "generated"
    assert system[0].operator_id == "SYSTEM"


def test_regeneration_without_measurements_fails(services, db):
    row = services.estimates.create_estimate(title="No dims", template_id=SINGLE_STOREY_EXTENSION,
                                             answers=dict(ANSWERS))
    db.commit()

    with pytest.raises(MeasurementsRequired):
        services.regeneration.regenerate(estimate_id=row.id)
    db.rollback()

    assert services.versions.list_versions(estimate_id=row.id) == []


def test_restore_version_snapshots_current_state_first(services, estimate, db):
    services.regeneration.regenerate(estimate_id=estimate.id)
    generated_total = services.estimates.get_costing(estimate_id=estimate.id).total

    services.regeneration.regenerate(estimate_id=estimate.id)  # v2 holds the generated costing
    _manual_edit(services, estimate.id)
    edited_total = services.estimates.get_costing(estimate_id=estimate.id).total
    assert edited_total != generated_total

    safety, target = services.estimates.restore_version(estimate_id=estimate.id, version_number=2)
    db.commit()

    assert target.version_number == 2
    assert safety.version_number == 3
    restored = services.estimates.get_costing(estimate_id=estimate.id)
    assert restored.total == generated_total
    # undo the restore
    services.estimates.restore_version(estimate_id=estimate.id, version_number=safety.version_number)
    assert services.estimates.get_costing(estimate_id=estimate.id).total == edited_total

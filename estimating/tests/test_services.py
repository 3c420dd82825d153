from decimal import Decimal

import pytest

from estimating.db.enums import AuditAction, AuditEntityType
from estimating.domain.money import round2
from estimating.domain.seed_catalog import SINGLE_STOREY_EXTENSION
from estimating.domain.types import Assembly, AssemblyLine, LineItem
from estimating.errors import DivisionByZero, NotFound, UnknownVariable

from estimating.tests.factories import COMPANY_ID, MEASUREMENT_INPUTS, USER_ID


def _audit(services, estimate_id, entity_type=None, action=None):
    logs = services.audit.list_for_estimate(company_id=COMPANY_ID, estimate_id=estimate_id)
    return [
        log for log in logs
        if (entity_type is None or log.entity_type == entity_type)
        and (action is None or log.action == action)
    ]


def test_create_estimate(services, estimate):
    costing = services.estimates.get_costing(estimate_id=estimate.id)

    assert costing.sections == []
    assert costing.total == 0
    assert estimate.answers["template_id"] == SINGLE_STOREY_EXTENSION
    assert estimate.measurements["floor_area_m2"] == "20.00"
    assert estimate.rate_settings["region"] == "South East"
    assert estimate.brief["measurements"]["perimeter_m"] == "18.00"
    assert len(_audit(services, estimate.id, AuditEntityType.Estimate, AuditAction.create)) == 1


def test_unknown_region_is_rejected(services):
    with pytest.raises(ValueError):
        services.estimates.create_estimate(title="x", template_id=SINGLE_STOREY_EXTENSION,
                                           answers={"region": "Atlantis"})


def test_apply_assembly_and_bundle(services, estimate, db):
    section = services.estimates.add_section(estimate_id=estimate.id, title="Preliminaries")
    items = services.estimates.apply_assembly(estimate_id=estimate.id, section_id=section.id,
                                              assembly_id="waste-skips")
    db.commit()

    assert [i.quantity for i in items] == [Decimal("3")]
    assert len(_audit(services, estimate.id, AuditEntityType.LineItem, AuditAction.create)) == 1

    added = services.estimates.apply_bundle(estimate_id=estimate.id, bundle_id="me-standard")
    db.commit()

    costing = services.estimates.get_costing(estimate_id=estimate.id)
    assert [s.title for s in costing.sections] == ["Preliminaries", "Mechanical & Electrical"]
    assert [i.assembly_id for i in added] == ["first-fix-electrics", "heating-allowance"]
    assert costing.total > 0


def test_apply_assembly_errors(services, estimate):
    section = services.estimates.add_section(estimate_id=estimate.id, title="Extras")
    with pytest.raises(NotFound):
        services.estimates.apply_assembly(estimate_id=estimate.id, section_id=section.id,
                                          assembly_id="ghost")
    with pytest.raises(NotFound):
        services.estimates.apply_assembly(estimate_id=estimate.id, section_id="missing",
                                          assembly_id="waste-skips")


def test_apply_assembly_with_unknown_token_writes_nothing(services, estimate):
    services.catalog.create_assembly(
        assembly=Assembly(id="doors", name="Doors", category="Extras",
                          lines=[AssemblyLine(id="doors-1", title="Bifold", qty_formula="bifold_count")]),
        operator_id=USER_ID,
    )
    section = services.estimates.add_section(estimate_id=estimate.id, title="Extras")

    with pytest.raises(UnknownVariable):
        services.estimates.apply_assembly(estimate_id=estimate.id, section_id=section.id, assembly_id="doors")
    assert services.estimates.get_costing(estimate_id=estimate.id).all_items() == []


def test_preview_assembly_does_not_persist(services, estimate):
    items = services.estimates.preview_assembly(estimate_id=estimate.id, assembly_id="scaffolding")
    assert items[0].quantity == Decimal("18")
    assert services.estimates.get_costing(estimate_id=estimate.id).all_items() == []


def test_edit_item_audits_each_changed_field(services, estimate, db):
    section = services.estimates.add_section(estimate_id=estimate.id, title="Preliminaries")
    item = services.estimates.apply_assembly(estimate_id=estimate.id, section_id=section.id,
                                             assembly_id="scaffolding")[0]

    edited = services.estimates.edit_item(estimate_id=estimate.id, item_id=item.id,
                                          updates={"quantity": "20", "unit_price": "25", "unit": "m"})
    db.commit()

    assert edited.is_manual_override
    assert edited.line_total == Decimal("500.00")
    updates = _audit(services, estimate.id, AuditEntityType.LineItem, AuditAction.update)
    assert sorted(log.changed_attribute for log in updates) == ["quantity", "unit_price"]
    quantity_log = next(log for log in updates if log.changed_attribute == "quantity")
    assert quantity_log.before_value == "18.00"
    assert quantity_log.after_value == "20"
    assert quantity_log.operator_id == USER_ID


def test_add_and_delete_item(services, estimate, db):
    section = services.estimates.add_section(estimate_id=estimate.id, title="Extras")
    added = services.estimates.add_item(estimate_id=estimate.id, section_id=section.id,
                                        item=LineItem(title="Survey", quantity=1, unit_price=450))
    assert services.estimates.get_costing(estimate_id=estimate.id).subtotal == Decimal("450.00")

    services.estimates.delete_item(estimate_id=estimate.id, item_id=added.id)
    db.commit()

    assert services.estimates.get_costing(estimate_id=estimate.id).subtotal == 0
    assert len(_audit(services, estimate.id, AuditEntityType.LineItem, AuditAction.delete)) == 1


def test_update_measurements_refreshes_unlocked_quantities(services, estimate, db):
    services.regeneration.regenerate(estimate_id=estimate.id)
    costing = services.estimates.get_costing(estimate_id=estimate.id)
    scaffold = next(i for i in costing.all_items() if i.assembly_id == "scaffolding")
    services.estimates.edit_item(estimate_id=estimate.id, item_id=scaffold.id, updates={"is_qty_locked": True})

    updated = services.estimates.update_measurements(
        estimate_id=estimate.id,
        measurement_inputs={**MEASUREMENT_INPUTS, "external_length_m": "10"},
    )
    db.commit()

    by_line = {i.assembly_line_id: i for i in updated.all_items()}
    assert by_line["scaffolding-hire"].quantity == Decimal("18")
    electrics = by_line["electrics-first-fix"]
    assert electrics.quantity == Decimal("40")
    assert not electrics.qty_dirty
    assert electrics.line_total == round2(electrics.quantity * electrics.unit_price)
    assert updated.subtotal > costing.subtotal


def test_update_measurements_keeps_hand_entered_quantities(services, estimate, db):
    section = services.estimates.add_section(estimate_id=estimate.id, title="Extras")
    added = services.estimates.add_item(
        estimate_id=estimate.id,
        section_id=section.id,
        item=LineItem(title="Edging", qty_formula="perimeter_m/0", quantity=5, unit_price=10),
    )

    updated = services.estimates.update_measurements(
        estimate_id=estimate.id,
        measurement_inputs={**MEASUREMENT_INPUTS, "external_length_m": "10"},
    )
    db.commit()

    kept = next(i for i in updated.all_items() if i.id == added.id)
    assert kept.quantity == Decimal("5")
    assert kept.line_total == Decimal("50.00")
    assert not kept.qty_dirty


def test_update_measurements_with_broken_formula_saves_nothing(services, estimate, db):
    services.catalog.create_assembly(
        assembly=Assembly(id="render", name="Render", category="Extras",
                          lines=[AssemblyLine(id="render-1", title="Render coats",
                                              qty_formula="floor_area_m2/external_wall_area_m2",
                                              unit_price=10)]),
        operator_id=USER_ID,
    )
    section = services.estimates.add_section(estimate_id=estimate.id, title="Extras")
    applied = services.estimates.apply_assembly(estimate_id=estimate.id, section_id=section.id,
                                                assembly_id="render")[0]
    db.commit()

    with pytest.raises(DivisionByZero):
        services.estimates.update_measurements(
            estimate_id=estimate.id,
            measurement_inputs={**MEASUREMENT_INPUTS, "eaves_height_m": "0"},
        )
    db.rollback()

    stored = services.estimates.get_costing(estimate_id=estimate.id).all_items()[0]
    assert stored.quantity == applied.quantity
    assert stored.quantity > 0
    assert estimate.measurements["eaves_height_m"] == "2.5"


def test_rebuild_customer_estimate(services, estimate, db):
    section = services.estimates.add_section(estimate_id=estimate.id, title="Extras")
    services.estimates.add_item(estimate_id=estimate.id, section_id=section.id,
                                item=LineItem(title="Survey", quantity=1, unit_price=450))

    customer = services.estimates.rebuild_customer_estimate(estimate_id=estimate.id)
    db.commit()

    assert customer.subtotal == Decimal("450.00")
    assert customer.total == Decimal("540.00")
    assert estimate.customer_estimate["total"] == "540.00"


def test_catalog_rejects_duplicate_keys(services):
    assembly = services.catalog.get_assembly("scaffolding")
    with pytest.raises(ValueError):
        services.catalog.create_assembly(assembly=assembly, operator_id=USER_ID)
    assert services.catalog.seed_catalog(operator_id=USER_ID) == 0


def test_catalog_round_trips_bundle_conditions(services):
    bundle = services.catalog.get_bundle("me-basic")
    assert bundle.conditions.any_of is not None
    assert [b.id for b in services.catalog.list_bundles()][:2] == [
        "standard-single-storey-shell",
        "pitched-roof-shell",
    ]

from decimal import Decimal

import pytest

from estimating.domain.orders import PricingMode, PurchaseOrderStatus, WorkOrderStatus
from estimating.errors import NotFound


@pytest.fixture
def generated(services, estimate, db):
    services.regeneration.regenerate(estimate_id=estimate.id)
    db.commit()
    return estimate


def test_purchase_order_from_all_purchasable_items(services, generated, db):
    order = services.orders.create_purchase_order(estimate_id=generated.id, supplier_name="Builders Merchant")
    db.commit()

    assert order.po_number == "PO-1"
    assert order.status == PurchaseOrderStatus.DRAFT
    assert len(order.lines) == 12
    assert [l["sort_order"] for l in order.lines] == list(range(12))
    assert order.total == sum(Decimal(l["line_total"]) for l in order.lines)

    second = services.orders.create_purchase_order(estimate_id=generated.id, supplier_name="Timber Yard")
    assert second.po_number == "PO-2"


def test_purchase_order_subset_and_ineligible_items(services, generated):
    costing = services.estimates.get_costing(estimate_id=generated.id)
    membrane = next(i for i in costing.all_items() if i.assembly_line_id == "flat-roof-membrane")
    labour = next(i for i in costing.all_items() if i.assembly_line_id == "flat-roof-labour")

    order = services.orders.create_purchase_order(estimate_id=generated.id, supplier_name="Roofing Supplies",
                                                  item_ids=[membrane.id])
    assert [l["source_item_id"] for l in order.lines] == [membrane.id]

    with pytest.raises(ValueError):
        services.orders.create_purchase_order(estimate_id=generated.id, supplier_name="x", item_ids=[labour.id])
    with pytest.raises(ValueError):
        services.orders.create_purchase_order(estimate_id=generated.id, supplier_name="x", item_ids=[])


def test_work_order_pricing_modes(services, generated):
    fixed = services.orders.create_work_order(estimate_id=generated.id, contractor_name="Bricklayers Ltd")
    assert fixed.wo_number == "WO-1"
    assert fixed.pricing_mode == PricingMode.FIXED
    assert len(fixed.lines) == 7
    assert fixed.fixed_price == fixed.total

    agreed = services.orders.create_work_order(estimate_id=generated.id, contractor_name="Roofers",
                                               fixed_price=Decimal("1500.00"))
    assert agreed.fixed_price == Decimal("1500.00")

    schedule = services.orders.create_work_order(estimate_id=generated.id, contractor_name="Electricians",
                                                 pricing_mode="schedule", fixed_price=Decimal("1"))
    assert schedule.fixed_price is None
    assert schedule.wo_number == "WO-3"


def test_status_changes(services, generated, db):
    po = services.orders.create_purchase_order(estimate_id=generated.id, supplier_name="Merchant")
    wo = services.orders.create_work_order(estimate_id=generated.id, contractor_name="Builder")

    assert services.orders.set_purchase_order_status(order_id=po.id, status="sent").status == PurchaseOrderStatus.SENT
    assert services.orders.set_work_order_status(order_id=wo.id, status=WorkOrderStatus.ACCEPTED).status \
        == WorkOrderStatus.ACCEPTED
    db.commit()

    with pytest.raises(NotFound):
        services.orders.set_purchase_order_status(order_id="missing", status="sent")
    with pytest.raises(ValueError):
        services.orders.set_work_order_status(order_id=wo.id, status="lost")


def test_orders_need_a_costing(services, estimate):
    with pytest.raises(ValueError):
        services.orders.create_purchase_order(estimate_id=estimate.id, supplier_name="Merchant")

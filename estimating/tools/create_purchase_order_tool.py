# estimating/tools/create_purchase_order_tool.py
from typing import List, Optional

from sqlalchemy.orm import Session

from estimating.schemas.dto.order_dto import PurchaseOrderDTO
from estimating.schemas.risk_profile import ToolRiskProfile
from estimating.schemas.tool_result import ToolResult
from estimating.schemas.tool_spec import ToolSpec
from estimating.services.service_container import build_services
from estimating.tools.error_classifier import failure_result
from estimating.tools.registry import tool_registry


def create_purchase_order_tool(
    *,
    db: Session,
    company_id: str,
    user_id: Optional[str],
    estimate_id: str,
    supplier_name: str,
    item_ids: Optional[List[str]] = None,
    notes: Optional[str] = None,
) -> ToolResult:
    """
    Tool: create_purchase_order

    Preconditions:
    - every selected item is purchasable (material and flagged purchasable)
    """
    services = build_services(db, company_id=company_id, user_id=user_id)
    try:
        order = services.orders.create_purchase_order(
            estimate_id=estimate_id, supplier_name=supplier_name, item_ids=item_ids, notes=notes
        )
        db.commit()
        dto = PurchaseOrderDTO.from_domain_model(order)
    except Exception as e:
        db.rollback()
        return failure_result(e, "create the purchase order")

    return ToolResult(
        ok=True,
        data=dto.model_dump(),
        explanation=f"{dto.po_number} created in DRAFT with {len(dto.lines)} lines.",
        side_effect=True,
        irreversible=False,
        audit_ref_id=dto.id,
    )


spec = ToolSpec(
    name="create_purchase_order",
    func=create_purchase_order_tool,
    description="Create a draft purchase order from purchasable estimate items",
    input_schema={"db": "Session",
                  "company_id": "str",
                  "user_id": "str",
                  "estimate_id": "str",
                  "supplier_name": "str",
                  "item_ids": "Optional[List[str]]",
                  "notes": "Optional[str]"},
    output_schema="ToolResult",
    risk_profile=ToolRiskProfile(modifies_persistent_data=True)
)

tool_registry.register(spec)

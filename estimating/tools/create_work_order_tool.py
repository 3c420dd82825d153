# estimating/tools/create_work_order_tool.py
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from estimating.domain.money import to_decimal
from estimating.schemas.dto.order_dto import WorkOrderDTO
from estimating.schemas.risk_profile import ToolRiskProfile
from estimating.schemas.tool_result import ToolResult
from estimating.schemas.tool_spec import ToolSpec
from estimating.services.service_container import build_services
from estimating.tools.error_classifier import failure_result
from estimating.tools.registry import tool_registry


def create_work_order_tool(
    *,
    db: Session,
    company_id: str,
    user_id: Optional[str],
    estimate_id: str,
    contractor_name: str,
    item_ids: Optional[List[str]] = None,
    pricing_mode: str = "fixed",
    fixed_price: Optional[str] = None,
    notes: Optional[str] = None,
) -> ToolResult:
    """
    Tool: create_work_order

    Preconditions:
    - every selected item is labour or subcontract and flagged work-order eligible
    """
    services = build_services(db, company_id=company_id, user_id=user_id)
    try:
        price: Optional[Decimal] = None if fixed_price is None else to_decimal(fixed_price)
        order = services.orders.create_work_order(
            estimate_id=estimate_id,
            contractor_name=contractor_name,
            item_ids=item_ids,
            pricing_mode=pricing_mode,
            fixed_price=price,
            notes=notes,
        )
        db.commit()
        dto = WorkOrderDTO.from_domain_model(order)
    except Exception as e:
        db.rollback()
        return failure_result(e, "create the work order")

    return ToolResult(
        ok=True,
        data=dto.model_dump(),
        explanation=f"{dto.wo_number} created in DRAFT ({dto.pricing_mode}) with {len(dto.lines)} lines.",
        side_effect=True,
        irreversible=False,
        audit_ref_id=dto.id,
    )


spec = ToolSpec(
    name="create_work_order",
    func=create_work_order_tool,
    description="Create a draft work order from labour and subcontract estimate items",
    input_schema={"db": "Session",
                  "company_id": "str",
                  "user_id": "str",
                  "estimate_id": "str",
                  "contractor_name": "str",
                  "item_ids": "Optional[List[str]]",
                  "pricing_mode": "str ('fixed' | 'schedule')",
                  "fixed_price": "Optional[str]",
                  "notes": "Optional[str]"},
    output_schema="ToolResult",
    risk_profile=ToolRiskProfile(modifies_persistent_data=True)
)

tool_registry.register(spec)

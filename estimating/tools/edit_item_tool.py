# estimating/tools/edit_item_tool.py
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from estimating.schemas.risk_profile import ToolRiskProfile
from estimating.schemas.tool_result import ToolResult
from estimating.schemas.tool_spec import ToolSpec
from estimating.services.service_container import build_services
from estimating.tools.error_classifier import failure_result
from estimating.tools.registry import tool_registry


def edit_item_tool(
    *,
    db: Session,
    company_id: str,
    user_id: Optional[str],
    estimate_id: str,
    item_id: str,
    updates: Dict[str, Any],
) -> ToolResult:
    """
    Tool: edit_item

    Edits whitelisted fields of one line item. The item becomes a manual
    override and survives auto-rated-only regeneration.
    """
    services = build_services(db, company_id=company_id, user_id=user_id)
    try:
        item = services.estimates.edit_item(estimate_id=estimate_id, item_id=item_id, updates=updates)
        db.commit()
    except Exception as e:
        db.rollback()
        return failure_result(e, f"edit item {item_id}")

    return ToolResult(
        ok=True,
        data={"item": item.model_dump(mode="json")},
        explanation="Item updated and marked as a manual override.",
        side_effect=True,
        irreversible=False,
        audit_ref_id=item_id,
    )


spec = ToolSpec(
    name="edit_item",
    func=edit_item_tool,
    description="Edit whitelisted fields of a line item",
    input_schema={"db": "Session",
                  "company_id": "str",
                  "user_id": "str",
                  "estimate_id": "str",
                  "item_id": "str",
                  "updates": "Dict[str, Any]"},
    output_schema="ToolResult",
    risk_profile=ToolRiskProfile(modifies_persistent_data=True)
)

tool_registry.register(spec)

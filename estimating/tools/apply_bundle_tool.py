# estimating/tools/apply_bundle_tool.py
from typing import Optional

from sqlalchemy.orm import Session

from estimating.schemas.risk_profile import ToolRiskProfile
from estimating.schemas.tool_result import ToolResult
from estimating.schemas.tool_spec import ToolSpec
from estimating.services.service_container import build_services
from estimating.tools.error_classifier import failure_result
from estimating.tools.registry import tool_registry


def apply_bundle_tool(
    *,
    db: Session,
    company_id: str,
    user_id: Optional[str],
    estimate_id: str,
    bundle_id: str,
) -> ToolResult:
    """
    Tool: apply_bundle

    Expands each assembly of a bundle into the section for its category.
    """
    services = build_services(db, company_id=company_id, user_id=user_id)
    try:
        items = services.estimates.apply_bundle(estimate_id=estimate_id, bundle_id=bundle_id)
        db.commit()
    except Exception as e:
        db.rollback()
        return failure_result(e, f"apply bundle {bundle_id}")

    return ToolResult(
        ok=True,
        data={"items": [i.model_dump(mode="json") for i in items]},
        explanation=f"Bundle {bundle_id} applied: {len(items)} items added.",
        side_effect=True,
        irreversible=False,
        audit_ref_id=estimate_id,
    )


spec = ToolSpec(
    name="apply_bundle",
    func=apply_bundle_tool,
    description="Apply every assembly of a bundle to the estimate",
    input_schema={"db": "Session",
                  "company_id": "str",
                  "user_id": "str",
                  "estimate_id": "str",
                  "bundle_id": "str"},
    output_schema="ToolResult",
    risk_profile=ToolRiskProfile(
        modifies_persistent_data=True,
        affects_multiple_records=True,
    )
)

tool_registry.register(spec)

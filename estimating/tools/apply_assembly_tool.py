# estimating/tools/apply_assembly_tool.py
from typing import Optional

from sqlalchemy.orm import Session

from estimating.schemas.risk_profile import ToolRiskProfile
from estimating.schemas.tool_result import ToolResult
from estimating.schemas.tool_spec import ToolSpec
from estimating.services.service_container import build_services
from estimating.tools.error_classifier import failure_result
from estimating.tools.registry import tool_registry


def apply_assembly_tool(
    *,
    db: Session,
    company_id: str,
    user_id: Optional[str],
    estimate_id: str,
    section_id: str,
    assembly_id: str,
) -> ToolResult:
    """
    Tool: apply_assembly

    Expands one catalog assembly into line items at the end of a section.
    Formulas are evaluated strictly: an unknown variable fails the call and
    nothing is written.
    """
    services = build_services(db, company_id=company_id, user_id=user_id)
    try:
        items = services.estimates.apply_assembly(
            estimate_id=estimate_id, section_id=section_id, assembly_id=assembly_id
        )
        db.commit()
    except Exception as e:
        db.rollback()
        return failure_result(e, f"apply assembly {assembly_id}")

    return ToolResult(
        ok=True,
        data={"items": [i.model_dump(mode="json") for i in items]},
        explanation=f"{len(items)} items added to section {section_id}.",
        side_effect=True,
        irreversible=False,
        audit_ref_id=estimate_id,
    )


spec = ToolSpec(
    name="apply_assembly",
    func=apply_assembly_tool,
    description="Expand a catalog assembly into line items appended to a section",
    input_schema={"db": "Session",
                  "company_id": "str",
                  "user_id": "str",
                  "estimate_id": "str",
                  "section_id": "str",
                  "assembly_id": "str"},
    output_schema="ToolResult",
    risk_profile=ToolRiskProfile(
        modifies_persistent_data=True,
        affects_multiple_records=True,
    )
)

tool_registry.register(spec)

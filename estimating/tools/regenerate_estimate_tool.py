# estimating/tools/regenerate_estimate_tool.py
from typing import Optional

from sqlalchemy.orm import Session

from estimating.schemas.dto.estimate_dto import EstimateDTO
from estimating.schemas.dto.version_dto import EstimateVersionDTO
from estimating.schemas.risk_profile import ToolRiskProfile
from estimating.schemas.tool_result import ToolResult
from estimating.schemas.tool_spec import ToolSpec
from estimating.services.service_container import build_services
from estimating.tools.error_classifier import failure_result
from estimating.tools.registry import tool_registry


def regenerate_estimate_tool(
    *,
    db: Session,
    company_id: str,
    user_id: Optional[str],
    estimate_id: str,
    mode: str = "auto-rated-only",
) -> ToolResult:
    """
    Tool: regenerate_estimate

    Side effects:
    - Creates an EstimateVersion of the current state (always first)
    - Replaces the internal costing and the customer estimate
    """
    services = build_services(db, company_id=company_id, user_id=user_id)
    try:
        result = services.regeneration.regenerate(estimate_id=estimate_id, mode=mode)
        db.commit()
        dto = EstimateDTO.from_domain_model(services.repository.get_estimate(estimate_id), result.costing)
    except Exception as e:
        db.rollback()
        return failure_result(e, "regenerate the estimate")

    return ToolResult(
        ok=True,
        data={
            "snapshot": EstimateVersionDTO.from_domain_model(result.snapshot).model_dump(mode="json"),
            "estimate": dto.model_dump(),
            "mode": result.mode.value,
            "kept_overrides": result.kept_overrides,
        },
        explanation=(
            f"Estimate regenerated. Previous state saved as v{result.snapshot.version_number}; "
            "restore it with restore_version if the result is unwanted."
        ),
        side_effect=True,
        irreversible=False,
        audit_ref_id=estimate_id,
    )


spec = ToolSpec(
    name="regenerate_estimate",
    func=regenerate_estimate_tool,
    description="Snapshot the estimate, then rebuild its costing from wizard answers, measurements and the catalog",
    input_schema={"db": "Session",
                  "company_id": "str",
                  "user_id": "str",
                  "estimate_id": "str",
                  "mode": "str ('auto-rated-only' | 'full')"},
    output_schema="ToolResult",
    risk_profile=ToolRiskProfile(
        modifies_persistent_data=True,
        irreversible=False,
        deletes_data=False,
        affects_multiple_records=True,
        require_human_auth=False
    )
)

tool_registry.register(spec)

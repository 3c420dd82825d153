# estimating/tools/restore_version_tool.py
from typing import Optional

from sqlalchemy.orm import Session

from estimating.schemas.dto.version_dto import EstimateVersionDTO
from estimating.schemas.risk_profile import ToolRiskProfile
from estimating.schemas.tool_result import ToolResult
from estimating.schemas.tool_spec import ToolSpec
from estimating.services.service_container import build_services
from estimating.tools.error_classifier import failure_result
from estimating.tools.registry import tool_registry


def restore_version_tool(
    *,
    db: Session,
    company_id: str,
    user_id: Optional[str],
    estimate_id: str,
    version_number: int,
) -> ToolResult:
    """
    Tool: restore_version

    Side effects:
    - Snapshots the current state as a new version
    - Replaces sections, measurements, rates and visibility with the target version's
    """
    services = build_services(db, company_id=company_id, user_id=user_id)
    try:
        safety, target = services.estimates.restore_version(
            estimate_id=estimate_id, version_number=version_number
        )
        db.commit()
    except Exception as e:
        db.rollback()
        return failure_result(e, f"restore version {version_number}")

    return ToolResult(
        ok=True,
        data={
            "safety_snapshot": EstimateVersionDTO.from_domain_model(safety).model_dump(mode="json"),
            "restored": EstimateVersionDTO.from_domain_model(target).model_dump(mode="json"),
        },
        explanation=(
            f"Restored v{target.version_number}. The state before the restore is kept as "
            f"v{safety.version_number}."
        ),
        side_effect=True,
        irreversible=False,
        audit_ref_id=estimate_id,
    )


spec = ToolSpec(
    name="restore_version",
    func=restore_version_tool,
    description="Restore an earlier estimate version after snapshotting the current one",
    input_schema={"db": "Session",
                  "company_id": "str",
                  "user_id": "str",
                  "estimate_id": "str",
                  "version_number": "int"},
    output_schema="ToolResult",
    risk_profile=ToolRiskProfile(
        modifies_persistent_data=True,
        affects_multiple_records=True,
        require_human_auth=True
    )
)

tool_registry.register(spec)

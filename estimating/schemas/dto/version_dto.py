# estimating/schemas/dto/version_dto.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from estimating.domain.types import EstimateVersion


class EstimateVersionDTO(BaseModel):
    id: str
    estimate_id: str
    version_number: int
    section_count: int
    note: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_domain_model(cls, version: EstimateVersion) -> "EstimateVersionDTO":
        return cls(
            id=version.id,
            estimate_id=version.estimate_id,
            version_number=version.version_number,
            section_count=len(version.snapshot.sections),
            note=version.note,
            created_by=version.created_by,
            created_at=version.created_at,
        )

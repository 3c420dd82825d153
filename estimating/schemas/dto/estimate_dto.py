# estimating/schemas/dto/estimate_dto.py
from typing import List, Optional

from pydantic import BaseModel

from estimating.domain.types import InternalCosting
from estimating.models.estimate import Estimate


class CostingTotalsDTO(BaseModel):
    subtotal: str
    overhead: str
    margin: str
    contingency: str
    vat: str
    total: str

    @classmethod
    def from_costing(cls, costing: InternalCosting) -> "CostingTotalsDTO":
        # money as strings, no float round-trip
        return cls(
            subtotal=str(costing.subtotal),
            overhead=str(costing.overhead),
            margin=str(costing.margin),
            contingency=str(costing.contingency),
            vat=str(costing.vat),
            total=str(costing.total),
        )


class SectionSummaryDTO(BaseModel):
    id: str
    title: str
    item_count: int
    section_total: str


class EstimateDTO(BaseModel):
    id: str
    title: str
    template_id: str
    status: str
    totals: Optional[CostingTotalsDTO] = None
    sections: List[SectionSummaryDTO] = []

    @classmethod
    def from_domain_model(cls, estimate: Estimate, costing: Optional[InternalCosting]) -> "EstimateDTO":
        return cls(
            id=estimate.id,
            title=estimate.title,
            template_id=estimate.template_id,
            status=estimate.status.value,
            totals=None if costing is None else CostingTotalsDTO.from_costing(costing),
            sections=[] if costing is None else [
                SectionSummaryDTO(
                    id=s.id,
                    title=s.title,
                    item_count=len(s.items),
                    section_total=str(s.section_total),
                )
                for s in costing.sections
            ],
        )

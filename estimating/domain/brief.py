# estimating/domain/brief.py
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from estimating.domain.types import EstimateMeasurements, RateSettings, WizardAnswers

PROVISIONAL_FOUNDATIONS = ("piled", "unknown")

_KEY_SELECTION_FIELDS = (
    "location",
    "knock_through",
    "roof_type",
    "roof_sub_type",
    "roof_covering",
    "wall_finish",
    "door_type",
    "rooflights_count",
    "foundations_type",
    "heating_type",
    "electrics_level",
)

_KEY_SPEC_FIELDS = (
    "roof_type",
    "roof_covering",
    "wall_finish",
    "door_type",
    "rooflights_count",
    "foundations_type",
    "heating_type",
    "electrics_level",
)


class ProjectOverview(BaseModel):
    template: Optional[str] = None
    location: Optional[str] = None
    property_type: Optional[str] = None
    key_selections: Dict[str, Any] = Field(default_factory=dict)


class BriefMeasurements(BaseModel):
    floor_area_m2: Decimal = Decimal("0")
    wall_area_m2: Decimal = Decimal("0")
    roof_area_m2: Decimal = Decimal("0")
    perimeter_m: Decimal = Decimal("0")


class PricingBasis(BaseModel):
    region: str = "South East"
    multiplier: Decimal = Decimal("1.0")
    overhead_pct: Decimal = Decimal("10")
    margin_pct: Decimal = Decimal("15")
    contingency_pct: Decimal = Decimal("5")
    vat_pct: Decimal = Decimal("20")


class EstimateBriefContent(BaseModel):
    project_overview: ProjectOverview
    measurements: BriefMeasurements
    key_specs: Dict[str, Any] = Field(default_factory=dict)
    pricing_basis: PricingBasis
    provisional_sums: List[str] = Field(default_factory=list)
    risks_unknowns: List[str] = Field(default_factory=list)


def build_brief_content(
    answers: WizardAnswers,
    measurements: Optional[EstimateMeasurements] = None,
    rate_settings: Optional[RateSettings] = None,
) -> EstimateBriefContent:
    '''
    Structured summary of an estimate's inputs, stored with every version.

    :param answers: wizard answers
    :param measurements: computed measurements, if any
    :param rate_settings: rate settings, if configured
    '''
    key_selections = {
        name: getattr(answers, name)
        for name in _KEY_SELECTION_FIELDS
        if getattr(answers, name) is not None
    }

    provisional_sums: List[str] = []
    risks: List[str] = []

    if answers.foundations_type in PROVISIONAL_FOUNDATIONS:
        provisional_sums.append("Foundations (provisional sum)")
        risks.append("Foundations type requires site investigation - provisional sum included")

    if measurements is None or measurements.floor_area_m2 <= 0:
        risks.append("Measurements not provided - quantities estimated")

    if rate_settings is None:
        risks.append("Rate settings not configured - using defaults")
        pricing_basis = PricingBasis()
    else:
        pricing_basis = PricingBasis(
            region=rate_settings.region,
            multiplier=rate_settings.regional_multiplier,
            overhead_pct=rate_settings.overhead_pct,
            margin_pct=rate_settings.margin_pct,
            contingency_pct=rate_settings.contingency_pct,
            vat_pct=rate_settings.vat_pct,
        )

    if measurements is None:
        brief_measurements = BriefMeasurements()
    else:
        brief_measurements = BriefMeasurements(
            floor_area_m2=measurements.floor_area_m2,
            wall_area_m2=measurements.external_wall_area_m2,
            roof_area_m2=measurements.roof_area_m2,
            perimeter_m=measurements.perimeter_m,
        )

    return EstimateBriefContent(
        project_overview=ProjectOverview(
            template=answers.template_id,
            location=answers.location,
            property_type=answers.property_type,
            key_selections=key_selections,
        ),
        measurements=brief_measurements,
        key_specs={name: getattr(answers, name) for name in _KEY_SPEC_FIELDS},
        pricing_basis=pricing_basis,
        provisional_sums=provisional_sums,
        risks_unknowns=risks,
    )


def brief_to_markdown(content: EstimateBriefContent) -> str:
    overview = content.project_overview
    lines = ["# Estimate Brief", "", "## Project Overview", ""]
    lines.append(f"**Template:** {overview.template}")
    if overview.location:
        lines.append(f"**Location:** {overview.location}")
    if overview.property_type:
        lines.append(f"**Property Type:** {overview.property_type}")

    m = content.measurements
    lines += [
        "",
        "## Measurements",
        "",
        f"- Floor Area: {m.floor_area_m2:.2f} m²",
        f"- Wall Area: {m.wall_area_m2:.2f} m²",
        f"- Roof Area: {m.roof_area_m2:.2f} m²",
        f"- Perimeter: {m.perimeter_m:.2f} m",
        "",
        "## Key Specifications",
        "",
    ]
    for name, value in content.key_specs.items():
        if value is not None:
            lines.append(f"- {name.replace('_', ' ').capitalize()}: {value}")

    p = content.pricing_basis
    lines += [
        "",
        "## Pricing Basis",
        "",
        f"- Region: {p.region}",
        f"- Regional Multiplier: {p.multiplier:.2f}",
        f"- Overhead: {p.overhead_pct}%",
        f"- Margin: {p.margin_pct}%",
        f"- Contingency: {p.contingency_pct}%",
        f"- VAT: {p.vat_pct}%",
    ]

    if content.provisional_sums:
        lines += ["", "## Provisional Sums", ""]
        lines += [f"- {ps}" for ps in content.provisional_sums]
    if content.risks_unknowns:
        lines += ["", "## Risks & Unknowns", ""]
        lines += [f"- {r}" for r in content.risks_unknowns]

    return "\n".join(lines) + "\n"

# estimating/domain/rates.py
from decimal import Decimal
from typing import Any, Dict, Optional

from estimating.domain.money import to_decimal
from estimating.domain.types import InternalCosting, RateSettings

REGION_MULTIPLIERS: Dict[str, Decimal] = {
    "London": Decimal("1.25"),
    "South East": Decimal("1.15"),
    "South West": Decimal("1.10"),
    "Midlands": Decimal("1.0"),
    "North": Decimal("0.95"),
    "Scotland": Decimal("0.95"),
    "Wales": Decimal("0.95"),
    "Northern Ireland": Decimal("0.95"),
}

# UK domestic baseline rates, per unit
BASELINE_RATES: Dict[str, Decimal] = {
    "labour.general": Decimal("25.00"),
    "labour.skilled": Decimal("35.00"),
    "labour.specialist": Decimal("45.00"),
    "material.concrete.m3": Decimal("120.00"),
    "material.blocks.m2": Decimal("25.00"),
    "material.bricks.m2": Decimal("45.00"),
    "material.insulation.m2": Decimal("12.00"),
    "material.roofing.felt.m2": Decimal("15.00"),
    "material.roofing.grp.m2": Decimal("25.00"),
    "material.roofing.epdm.m2": Decimal("35.00"),
    "material.roofing.slate.m2": Decimal("45.00"),
    "material.roofing.tile.m2": Decimal("35.00"),
    "material.plasterboard.m2": Decimal("8.00"),
    "material.windows.no": Decimal("350.00"),
    "material.doors.no": Decimal("450.00"),
    "subcontract.electrics.m2": Decimal("45.00"),
    "subcontract.plumbing.m2": Decimal("50.00"),
    "subcontract.heating.m2": Decimal("60.00"),
}


def region_multiplier(region: Optional[str]) -> Decimal:
    if region not in REGION_MULTIPLIERS:
        raise ValueError(f"Unknown region: {region}")
    return REGION_MULTIPLIERS[region]


def default_rate_settings(region: str = "South East") -> RateSettings:
    return RateSettings(region=region, regional_multiplier=region_multiplier(region))


def baseline_rate(key: str) -> Decimal:
    return BASELINE_RATES.get(key, Decimal("0"))


def apply_regional_multiplier(base_rate: Any, multiplier: Any) -> Decimal:
    # per-unit rate, deliberately unrounded
    return to_decimal(base_rate) * to_decimal(multiplier)


def costing_from_rate_settings(rate_settings: RateSettings, costing: Optional[InternalCosting] = None) -> InternalCosting:
    """Copy estimate-level percentages from rate settings onto a costing."""
    base = costing if costing is not None else InternalCosting()
    return base.model_copy(
        update={
            "overhead_pct": rate_settings.overhead_pct,
            "margin_pct": rate_settings.margin_pct,
            "contingency_pct": rate_settings.contingency_pct,
            "vat_pct": rate_settings.vat_pct,
        }
    )

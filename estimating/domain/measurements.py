# estimating/domain/measurements.py
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Union

from estimating.domain.money import ZERO, round2, to_decimal
from estimating.domain.types import EstimateMeasurements, MeasurementInputs, WizardAnswers

FLAT_ROOF_FACTOR = Decimal("1.05")
PITCHED_ROOF_FACTOR = Decimal("1.15")


def roof_factor_for(roof_type: Optional[str], override: Optional[Decimal] = None) -> Decimal:
    if override is not None and to_decimal(override) > 0:
        return to_decimal(override)
    if roof_type == "pitched":
        return PITCHED_ROOF_FACTOR
    # flat, and anything unspecified
    return FLAT_ROOF_FACTOR


def compute_measurements(inputs: Union[MeasurementInputs, Mapping[str, Any]]) -> EstimateMeasurements:
    '''
    Derive areas from the external dimensions of the extension.

    floor_area_m2 = round2(L * W)
    perimeter_m = round2(2 * (L + W))
    external_wall_area_m2 = round2(perimeter_m * eaves)
    roof_area_m2 = round2(floor_area_m2 * roof_factor)
    net_wall_area_m2 = max(0, wall area - openings), only when openings given
    '''
    if not isinstance(inputs, MeasurementInputs):
        inputs = MeasurementInputs(**dict(inputs))

    length = to_decimal(inputs.external_length_m)
    width = to_decimal(inputs.external_width_m)
    eaves = to_decimal(inputs.eaves_height_m)

    floor_area = round2(length * width)
    perimeter = round2(2 * (length + width))
    wall_area = round2(perimeter * eaves)
    factor = roof_factor_for(inputs.roof_type, inputs.roof_factor)

    net_wall_area = None
    if inputs.openings_area_m2 is not None:
        net_wall_area = max(ZERO, round2(wall_area - to_decimal(inputs.openings_area_m2)))

    return EstimateMeasurements(
        external_length_m=length,
        external_width_m=width,
        eaves_height_m=eaves,
        floor_area_m2=floor_area,
        perimeter_m=perimeter,
        external_wall_area_m2=wall_area,
        openings_area_m2=inputs.openings_area_m2,
        net_wall_area_m2=net_wall_area,
        roof_factor=factor,
        roof_area_m2=round2(floor_area * factor),
    )


def measurement_tokens(measurements: Optional[EstimateMeasurements]) -> Dict[str, Decimal]:
    """Every numeric measurement field, keyed by field name."""
    if measurements is None:
        return {}
    return {
        name: to_decimal(value)
        for name, value in measurements.model_dump().items()
        if value is not None
    }


def tokens_from_answers(
    answers: Optional[WizardAnswers],
    measurements: Optional[EstimateMeasurements] = None,
) -> Dict[str, Decimal]:
    '''
    Formula token map: measurement tokens, then numeric wizard answers and
    numeric extras. Booleans are not numbers here.
    '''
    tokens = measurement_tokens(measurements)
    if answers is None:
        return tokens

    candidates: Dict[str, Any] = {
        name: getattr(answers, name)
        for name in type(answers).model_fields
        if name != "extras"
    }
    candidates.update(answers.extras)

    for name, value in candidates.items():
        if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
            continue
        tokens.setdefault(name, to_decimal(value))
    return tokens

from decimal import Decimal

from estimating.domain.measurements import compute_measurements, tokens_from_answers
from estimating.domain.types import MeasurementInputs, WizardAnswers

from estimating.tests.factories import MEASUREMENT_INPUTS


def test_flat_roof_measurements():
    m = compute_measurements(MEASUREMENT_INPUTS)
    assert m.floor_area_m2 == Decimal("20.00")
    assert m.perimeter_m == Decimal("18.00")
    assert m.external_wall_area_m2 == Decimal("45.00")
    assert m.roof_factor == Decimal("1.05")
    assert m.roof_area_m2 == Decimal("21.00")
    assert m.net_wall_area_m2 is None


def test_pitched_roof_uses_higher_factor():
    m = compute_measurements(MeasurementInputs(external_length_m=5, external_width_m=4,
                                               eaves_height_m="2.5", roof_type="pitched"))
    assert m.roof_area_m2 == Decimal("23.00")


def test_explicit_roof_factor_overrides_type():
    m = compute_measurements({"external_length_m": 5, "external_width_m": 4,
                              "roof_type": "pitched", "roof_factor": "1.3"})
    assert m.roof_area_m2 == Decimal("26.00")


def test_openings_reduce_net_wall_area_but_never_below_zero():
    m = compute_measurements({**MEASUREMENT_INPUTS, "openings_area_m2": "6.5"})
    assert m.net_wall_area_m2 == Decimal("38.50")
    m = compute_measurements({**MEASUREMENT_INPUTS, "openings_area_m2": "100"})
    assert m.net_wall_area_m2 == 0


def test_tokens_merge_measurements_and_numeric_answers():
    m = compute_measurements(MEASUREMENT_INPUTS)
    answers = WizardAnswers(rooflights_count=2, roof_insulation=True, roof_type="flat",
                            extras={"bifold_width": "ignored", "door_count": 3, "floor_area_m2": 99})
    tokens = tokens_from_answers(answers, m)

    assert tokens["floor_area_m2"] == Decimal("20.00")
    assert tokens["rooflights_count"] == Decimal("2")
    assert tokens["door_count"] == Decimal("3")
    assert "roof_insulation" not in tokens
    assert "roof_type" not in tokens
    assert "bifold_width" not in tokens

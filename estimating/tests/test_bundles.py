import pytest
from pydantic import ValidationError

from estimating.domain.bundles import evaluate_condition, recommend
from estimating.domain.seed_catalog import SINGLE_STOREY_EXTENSION
from estimating.domain.types import Bundle, BundleCondition, ConditionOperator, WizardAnswers


def _cond(field, operator, value=None):
    return BundleCondition(field=field, operator=operator, value=value)


def _ids(bundles):
    return [b.id for b in bundles]


@pytest.mark.parametrize("condition,expected", [
    (_cond("roof_type", ConditionOperator.EQUALS, "flat"), True),
    (_cond("roof_type", ConditionOperator.NOT_EQUALS, "flat"), False),
    (_cond("roof_type", ConditionOperator.IN, ["flat", "pitched"]), True),
    (_cond("roof_type", ConditionOperator.NOT_IN, ["pitched"]), True),
    (_cond("roof_type", ConditionOperator.IS_SET), True),
    (_cond("heating_type", ConditionOperator.IS_SET), False),
    (_cond("heating_type", ConditionOperator.IS_NOT_SET), True),
    (_cond("rooflights_count", ConditionOperator.GREATER_THAN, 1), True),
    (_cond("rooflights_count", ConditionOperator.LESS_THAN, 2), False),
    (_cond("bifold_width", ConditionOperator.GREATER_THAN, 3), True),
])
def test_condition_operators(condition, expected):
    answers = WizardAnswers(roof_type="flat", rooflights_count=2, extras={"bifold_width": 4})
    assert evaluate_condition(condition, answers) is expected


def test_empty_string_counts_as_not_set():
    answers = {"roof_type": ""}
    assert evaluate_condition(_cond("roof_type", ConditionOperator.IS_NOT_SET), answers)


def test_numeric_comparison_on_missing_value_is_false():
    assert not evaluate_condition(_cond("rooflights_count", ConditionOperator.GREATER_THAN, 0), {})


def test_combinators():
    condition = BundleCondition(all_of=[
        _cond("roof_type", ConditionOperator.EQUALS, "flat"),
        BundleCondition(any_of=[
            _cond("electrics_level", ConditionOperator.EQUALS, "standard"),
            _cond("electrics_level", ConditionOperator.IS_NOT_SET),
        ]),
    ])
    assert evaluate_condition(condition, {"roof_type": "flat"})
    assert not evaluate_condition(condition, {"roof_type": "flat", "electrics_level": "basic"})
    assert not evaluate_condition(condition, {"roof_type": "pitched"})


def test_condition_must_have_exactly_one_form():
    with pytest.raises(ValidationError):
        BundleCondition()
    with pytest.raises(ValidationError):
        BundleCondition(field="roof_type", operator="equals", value="flat", all_of=[])
    with pytest.raises(ValidationError):
        BundleCondition(field="roof_type")


def test_template_scoping():
    bundle = Bundle(id="b", name="B", template_ids=["loft-conversion"])
    assert recommend([bundle], {}, SINGLE_STOREY_EXTENSION) == []
    assert _ids(recommend([bundle], {}, "loft-conversion")) == ["b"]
    unscoped = Bundle(id="any", name="Any")
    assert _ids(recommend([unscoped], {}, None)) == ["any"]


def test_seed_bundles_for_flat_roof(bundles):
    answers = WizardAnswers(roof_type="flat")
    assert _ids(recommend(bundles, answers, SINGLE_STOREY_EXTENSION)) == [
        "standard-single-storey-shell",
        "me-basic",
        "finishes-basic",
    ]


def test_seed_bundles_for_pitched_roof_standard_electrics(bundles):
    answers = WizardAnswers(roof_type="pitched", electrics_level="standard")
    assert _ids(recommend(bundles, answers, SINGLE_STOREY_EXTENSION)) == [
        "pitched-roof-shell",
        "me-standard",
        "finishes-basic",
    ]


def test_recommend_preserves_registry_order(bundles):
    answers = {"roof_type": "flat", "electrics_level": "high-spec"}
    result = _ids(recommend(reversed(bundles), answers, SINGLE_STOREY_EXTENSION))
    assert result == ["finishes-basic", "me-high-spec", "standard-single-storey-shell"]


def test_recommend_tolerates_ill_typed_answers(bundles):
    unconditional = Bundle(id="b", name="B", template_ids=[SINGLE_STOREY_EXTENSION])
    for answers in ({"rooflights_count": "several"}, {"roof_type": 5}, {"extras": "not-a-map"}):
        assert _ids(recommend([unconditional], answers, SINGLE_STOREY_EXTENSION)) == ["b"]

    result = _ids(recommend(bundles, {"roof_type": 5, "electrics_level": "basic"}, SINGLE_STOREY_EXTENSION))
    assert result == ["standard-single-storey-shell", "me-basic", "finishes-basic"]


def test_from_mapping_keeps_invalid_values_as_extras():
    answers = WizardAnswers.from_mapping({"rooflights_count": "several", "roof_type": "flat", "region": "Atlantis"})

    assert answers.rooflights_count is None
    assert answers.region is None
    assert answers.roof_type == "flat"
    assert answers.extras == {"rooflights_count": "several", "region": "Atlantis"}


def test_strict_from_mapping_rejects_invalid_values():
    with pytest.raises(ValidationError):
        WizardAnswers.from_mapping({"rooflights_count": "several"}, strict=True)
    with pytest.raises(ValidationError):
        WizardAnswers(region="Atlantis")

# estimating/domain/bundles.py
"""
Bundle recommendation and the condition interpreter.

Bundle conditions are data (BundleCondition), evaluated here against a
WizardAnswers set. Registry order is preserved.
"""
from typing import Any, Iterable, List, Mapping, Optional, Union

from estimating.domain.money import to_decimal
from estimating.domain.types import Bundle, BundleCondition, ConditionOperator, WizardAnswers

Answers = Union[WizardAnswers, Mapping[str, Any]]


def _as_answers(answers: Optional[Answers]) -> WizardAnswers:
    if isinstance(answers, WizardAnswers):
        return answers
    return WizardAnswers.from_mapping(dict(answers or {}))


def _is_set(value: Any) -> bool:
    return value is not None and value != ""


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]


def evaluate_condition(condition: BundleCondition, answers: Answers) -> bool:
    answers = _as_answers(answers)

    if condition.all_of is not None:
        return all(evaluate_condition(c, answers) for c in condition.all_of)
    if condition.any_of is not None:
        return any(evaluate_condition(c, answers) for c in condition.any_of)

    actual = answers.get(condition.field)
    op = condition.operator

    if op == ConditionOperator.IS_SET:
        return _is_set(actual)
    if op == ConditionOperator.IS_NOT_SET:
        return not _is_set(actual)
    if op == ConditionOperator.EQUALS:
        return actual == condition.value
    if op == ConditionOperator.NOT_EQUALS:
        return actual != condition.value
    if op == ConditionOperator.IN:
        return actual in _as_list(condition.value)
    if op == ConditionOperator.NOT_IN:
        return actual not in _as_list(condition.value)
    if op in (ConditionOperator.GREATER_THAN, ConditionOperator.LESS_THAN):
        if not _is_set(actual) or isinstance(actual, bool):
            return False
        left, right = to_decimal(actual), to_decimal(condition.value)
        return left > right if op == ConditionOperator.GREATER_THAN else left < right

    raise ValueError(f"Unsupported condition operator: {op}")


def qualifies(bundle: Bundle, answers: Answers, template_id: Optional[str]) -> bool:
    if bundle.template_ids is not None and template_id not in bundle.template_ids:
        return False
    if bundle.conditions is None:
        return True
    return evaluate_condition(bundle.conditions, answers)


def recommend(bundles: Iterable[Bundle], answers: Answers, template_id: Optional[str]) -> List[Bundle]:
    '''
    Bundles that apply to this template and answer set, in registry order.

    :param bundles: bundle registry
    :param answers: WizardAnswers or a plain answer dict
    :param template_id: wizard template id
    '''
    answers = _as_answers(answers)
    return [b for b in bundles if qualifies(b, answers, template_id)]

# estimating/domain/generator.py
"""
Heuristic estimate generation.

Produces the "fresh" costing that regeneration merges into the stored one:
recommended bundles -> referenced assemblies -> items grouped by assembly
category. Formulas are committed, so the strict evaluator is used.
"""
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from estimating.domain.assembly import expand_assembly, next_sort_order
from estimating.domain.bundles import recommend
from estimating.domain.measurements import tokens_from_answers
from estimating.domain.money import compute_line
from estimating.domain.rates import costing_from_rate_settings, default_rate_settings
from estimating.domain.totals import recompute_estimate
from estimating.domain.types import (
    Assembly,
    AssemblyRef,
    Bundle,
    CostType,
    EstimateMeasurements,
    InternalCosting,
    LineItem,
    RateSettings,
    Section,
    WizardAnswers,
)
from estimating.errors import MeasurementsRequired, NotFound
from estimating.logger import get_logger

logger = get_logger(__name__)

FOUNDATIONS_CATEGORY = "Groundworks & Foundations"
PROVISIONAL_FOUNDATIONS = ("piled", "unknown")
PROVISIONAL_FOUNDATIONS_COST = Decimal("5000.00")
PROVISIONAL_FOUNDATIONS_PRICE = Decimal("6000.00")


def formula_overrides(assembly: Assembly, ref: AssemblyRef) -> Dict[str, str]:
    # an override targets the only line, or the first one of a multi-line assembly
    if not ref.override_qty_formula or not assembly.lines:
        return {}
    return {assembly.lines[0].id: ref.override_qty_formula}


def provisional_foundations_item(answers: WizardAnswers, rate_settings: RateSettings, sort_order: int) -> LineItem:
    amounts = compute_line(1, PROVISIONAL_FOUNDATIONS_COST, PROVISIONAL_FOUNDATIONS_PRICE)
    return LineItem(
        kind=CostType.PRELIM,
        title="Foundations (Provisional Sum)",
        description=f"Foundations type: {answers.foundations_type}",
        quantity=Decimal("1"),
        unit="sum",
        unit_cost=PROVISIONAL_FOUNDATIONS_COST,
        unit_price=PROVISIONAL_FOUNDATIONS_PRICE,
        margin_percent=rate_settings.margin_pct,
        overhead_percent=rate_settings.overhead_pct,
        contingency_percent=rate_settings.contingency_pct,
        vat_rate=rate_settings.vat_pct,
        line_cost=amounts.line_cost,
        line_total=amounts.line_total,
        sort_order=sort_order,
        is_provisional=True,
        is_auto_rated=True,
        calculation_trace=f"Provisional sum for {answers.foundations_type} foundations",
    )


def build_assumptions(answers: WizardAnswers, rate_settings: RateSettings) -> List[str]:
    assumptions = list(answers.assumptions)
    assumptions.append(f"Foundations: {answers.foundations_type or 'standard-strip'}")
    assumptions.append(f"Wall finish: {answers.wall_finish or 'standard'}")
    assumptions.append(
        f"Roof type: {answers.roof_type or 'flat'}, covering: {answers.roof_covering or 'standard'}"
    )
    assumptions.append(
        f"Rates for {rate_settings.region} (multiplier {rate_settings.regional_multiplier})"
    )
    return assumptions


def generate_internal_costing(
    answers: WizardAnswers,
    measurements: Optional[EstimateMeasurements],
    rate_settings: Optional[RateSettings],
    assemblies: Iterable[Assembly],
    bundles: Iterable[Bundle],
) -> InternalCosting:
    '''
    Build a costing from the catalog for the given answers.

    Each assembly is expanded once: the first reference wins, in bundle
    order then reference order. One section per assembly category, in
    first-seen order.

    :raises MeasurementsRequired: no measurements or floor area <= 0
    :raises NotFound: a recommended bundle references an unknown assembly
    :raises ExpressionError: an assembly formula cannot be evaluated
    '''
    if measurements is None or measurements.floor_area_m2 <= 0:
        raise MeasurementsRequired()

    if rate_settings is None:
        rate_settings = default_rate_settings(answers.region or "South East")

    tokens = tokens_from_answers(answers, measurements)
    catalog = {a.id: a for a in assemblies}
    recommended = recommend(bundles, answers, answers.template_id)

    sections: Dict[str, Section] = {}
    seen = set()

    for bundle in recommended:
        for ref in bundle.assembly_refs:
            if ref.assembly_id in seen:
                continue
            seen.add(ref.assembly_id)

            assembly = catalog.get(ref.assembly_id)
            if assembly is None:
                raise NotFound("Assembly", ref.assembly_id)

            section = sections.setdefault(assembly.category, Section(title=assembly.category))
            start = next_sort_order(section)

            if assembly.category == FOUNDATIONS_CATEGORY and answers.foundations_type in PROVISIONAL_FOUNDATIONS:
                section.items.append(provisional_foundations_item(answers, rate_settings, start))
                continue

            items = expand_assembly(
                assembly,
                tokens,
                start_sort_order=start,
                strict=True,
                cost_multiplier=rate_settings.regional_multiplier,
                vat_pct=rate_settings.vat_pct,
                auto_rated=True,
                formula_overrides=formula_overrides(assembly, ref),
            )
            section.items.extend(
                item.model_copy(
                    update={
                        "overhead_percent": rate_settings.overhead_pct,
                        "contingency_percent": rate_settings.contingency_pct,
                    }
                )
                for item in items
            )

    costing = InternalCosting(
        sections=list(sections.values()),
        assumptions=build_assumptions(answers, rate_settings),
    )
    costing = recompute_estimate(costing_from_rate_settings(rate_settings, costing))

    logger.info(
        "Generated costing: %d bundles, %d assemblies, %d sections, total=%s",
        len(recommended), len(seen), len(costing.sections), costing.total,
    )
    return costing

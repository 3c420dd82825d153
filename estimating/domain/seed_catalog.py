# estimating/domain/seed_catalog.py
"""
Seed catalog for UK domestic single storey extensions.

Formulas reference measurement tokens (floor_area_m2, perimeter_m,
external_wall_area_m2, roof_area_m2, ...). Base costs follow the baseline
rates in estimating.domain.rates.
"""
from decimal import Decimal
from typing import List

from estimating.domain.types import (
    Assembly,
    AssemblyLine,
    AssemblyRef,
    Bundle,
    BundleCondition,
    ConditionOperator,
    CostType,
)

SINGLE_STOREY_EXTENSION = "single-storey-extension"

D = Decimal


def _line(line_id, title, cost_type, formula, unit, cost, markup, text=None) -> AssemblyLine:
    return AssemblyLine(
        id=line_id,
        title=title,
        cost_type=cost_type,
        qty_formula=formula,
        unit=unit,
        base_unit_cost=D(cost),
        default_markup_pct=D(markup),
        customer_text_block=text,
    )


def seed_assemblies() -> List[Assembly]:
    return [
        Assembly(
            id="strip-foundations",
            name="Strip Foundations",
            category="Groundworks & Foundations",
            default_unit="m",
            lines=[
                _line("strip-foundations-dig", "Excavate foundation trench", CostType.LABOUR,
                      "perimeter_m * 0.6 * 1", "m3", "45", "20",
                      "Excavate trenches to 1m depth for strip foundations"),
                _line("strip-foundations-concrete", "Concrete strip foundation", CostType.MATERIAL,
                      "perimeter_m * 0.6 * 0.225", "m3", "120", "15"),
                _line("strip-foundations-blocks", "Blockwork below DPC", CostType.MATERIAL,
                      "perimeter_m * 0.75", "m2", "25", "15"),
                _line("strip-foundations-spoil", "Spoil removal", CostType.PLANT,
                      "perimeter_m * 0.6 * 1.3", "m3", "30", "15"),
            ],
        ),
        Assembly(
            id="concrete-slab",
            name="Ground Bearing Concrete Slab",
            category="Structure & Shell",
            default_unit="m2",
            lines=[
                _line("concrete-slab-hardcore", "Hardcore sub-base", CostType.MATERIAL,
                      "floor_area_m2 * 0.15", "m3", "40", "15"),
                _line("concrete-slab-insulation", "Floor insulation", CostType.MATERIAL,
                      "floor_area_m2", "m2", "12", "15"),
                _line("concrete-slab-concrete", "Slab concrete", CostType.MATERIAL,
                      "floor_area_m2 * 0.1", "m3", "120", "15"),
                _line("concrete-slab-labour", "Lay and finish slab", CostType.LABOUR,
                      "floor_area_m2", "m2", "18", "20",
                      "Ground bearing slab with insulation and DPM"),
            ],
        ),
        Assembly(
            id="external-cavity-wall",
            name="External Cavity Wall",
            category="Structure & Shell",
            default_unit="m2",
            lines=[
                _line("cavity-wall-bricks", "Facing brick outer leaf", CostType.MATERIAL,
                      "external_wall_area_m2", "m2", "45", "15"),
                _line("cavity-wall-blocks", "Block inner leaf", CostType.MATERIAL,
                      "external_wall_area_m2", "m2", "25", "15"),
                _line("cavity-wall-insulation", "Cavity insulation", CostType.MATERIAL,
                      "external_wall_area_m2", "m2", "12", "15"),
                _line("cavity-wall-labour", "Bricklaying", CostType.LABOUR,
                      "external_wall_area_m2", "m2", "35", "20",
                      "Brick and block cavity wall with full fill insulation"),
            ],
        ),
        Assembly(
            id="flat-roof-warm-deck",
            name="Flat Roof Warm Deck",
            category="Roofing",
            default_unit="m2",
            lines=[
                _line("flat-roof-structure", "Roof joists and deck", CostType.MATERIAL,
                      "roof_area_m2", "m2", "28", "15"),
                _line("flat-roof-insulation", "Warm deck insulation", CostType.MATERIAL,
                      "roof_area_m2", "m2", "12", "15"),
                _line("flat-roof-membrane", "EPDM membrane", CostType.MATERIAL,
                      "roof_area_m2", "m2", "35", "15"),
                _line("flat-roof-labour", "Flat roof installation", CostType.LABOUR,
                      "roof_area_m2", "m2", "30", "20",
                      "Insulated warm deck flat roof with EPDM covering"),
            ],
        ),
        Assembly(
            id="pitched-roof-covering",
            name="Pitched Roof Covering",
            category="Roofing",
            default_unit="m2",
            lines=[
                _line("pitched-roof-timber", "Roof timbers", CostType.MATERIAL,
                      "roof_area_m2", "m2", "32", "15"),
                _line("pitched-roof-tiles", "Concrete interlocking tiles", CostType.MATERIAL,
                      "roof_area_m2", "m2", "35", "15"),
                _line("pitched-roof-labour", "Roofing labour", CostType.LABOUR,
                      "roof_area_m2", "m2", "35", "20",
                      "Cut timber pitched roof with tiled covering"),
            ],
        ),
        Assembly(
            id="waste-skips",
            name="Waste Skips",
            category="Preliminaries",
            default_unit="no",
            lines=[
                _line("waste-skips-hire", "8 yard skip hire", CostType.PLANT,
                      "2 + floor_area_m2 / 20", "no", "280", "10"),
            ],
        ),
        Assembly(
            id="scaffolding",
            name="Scaffolding",
            category="Preliminaries",
            default_unit="m",
            lines=[
                _line("scaffolding-hire", "Scaffold erect, hire and strike", CostType.SUBCONTRACT,
                      "perimeter_m", "m", "22", "10"),
            ],
        ),
        Assembly(
            id="first-fix-electrics",
            name="First Fix Electrics",
            category="Mechanical & Electrical",
            default_unit="m2",
            lines=[
                _line("electrics-first-fix", "Electrical installation", CostType.SUBCONTRACT,
                      "floor_area_m2", "m2", "45", "15",
                      "Electrical first and second fix to the extension"),
            ],
        ),
        Assembly(
            id="heating-allowance",
            name="Heating Allowance",
            category="Mechanical & Electrical",
            default_unit="m2",
            lines=[
                _line("heating-install", "Heating installation", CostType.SUBCONTRACT,
                      "floor_area_m2", "m2", "60", "15"),
            ],
        ),
        Assembly(
            id="plasterboard-skim",
            name="Plasterboard and Skim",
            category="Finishes",
            default_unit="m2",
            lines=[
                _line("plasterboard-boards", "Plasterboard", CostType.MATERIAL,
                      "external_wall_area_m2 + floor_area_m2", "m2", "8", "15"),
                _line("plasterboard-labour", "Board and skim", CostType.LABOUR,
                      "external_wall_area_m2 + floor_area_m2", "m2", "14", "20",
                      "Plasterboard and skim to walls and ceiling"),
            ],
        ),
    ]


def _cond(field, operator, value=None) -> BundleCondition:
    return BundleCondition(field=field, operator=operator, value=value)


def seed_bundles() -> List[Bundle]:
    shell_refs = ["strip-foundations", "concrete-slab", "external-cavity-wall"]
    prelim_refs = ["waste-skips", "scaffolding"]
    return [
        Bundle(
            id="standard-single-storey-shell",
            name="Standard Single Storey Extension Shell",
            description="Complete shell construction for single storey extension",
            template_ids=[SINGLE_STOREY_EXTENSION],
            conditions=_cond("roof_type", ConditionOperator.NOT_EQUALS, "pitched"),
            assembly_refs=[AssemblyRef(assembly_id=a)
                           for a in shell_refs + ["flat-roof-warm-deck"] + prelim_refs],
        ),
        Bundle(
            id="pitched-roof-shell",
            name="Pitched Roof Extension Shell",
            description="Shell with pitched roof construction",
            template_ids=[SINGLE_STOREY_EXTENSION],
            conditions=_cond("roof_type", ConditionOperator.EQUALS, "pitched"),
            assembly_refs=[AssemblyRef(assembly_id=a)
                           for a in shell_refs + ["pitched-roof-covering"] + prelim_refs],
        ),
        Bundle(
            id="me-basic",
            name="M&E Basic",
            description="Basic mechanical and electrical installation",
            template_ids=[SINGLE_STOREY_EXTENSION],
            conditions=BundleCondition(any_of=[
                _cond("electrics_level", ConditionOperator.EQUALS, "basic"),
                _cond("electrics_level", ConditionOperator.IS_NOT_SET),
            ]),
            assembly_refs=[AssemblyRef(assembly_id="first-fix-electrics")],
        ),
        Bundle(
            id="me-standard",
            name="M&E Standard",
            description="Standard mechanical and electrical installation",
            template_ids=[SINGLE_STOREY_EXTENSION],
            conditions=_cond("electrics_level", ConditionOperator.EQUALS, "standard"),
            assembly_refs=[AssemblyRef(assembly_id="first-fix-electrics"),
                           AssemblyRef(assembly_id="heating-allowance")],
        ),
        Bundle(
            id="me-high-spec",
            name="M&E High Spec",
            description="High specification mechanical and electrical installation",
            template_ids=[SINGLE_STOREY_EXTENSION],
            conditions=_cond("electrics_level", ConditionOperator.EQUALS, "high-spec"),
            assembly_refs=[AssemblyRef(assembly_id="first-fix-electrics"),
                           AssemblyRef(assembly_id="heating-allowance")],
        ),
        Bundle(
            id="finishes-basic",
            name="Basic Finishes",
            description="Basic plasterboard and skim finishes",
            template_ids=[SINGLE_STOREY_EXTENSION],
            assembly_refs=[AssemblyRef(assembly_id="plasterboard-skim")],
        ),
    ]

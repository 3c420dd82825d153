# estimating/domain/types.py
import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator


def new_id() -> str:
    return str(uuid.uuid4())


class CostType(str, Enum):
    MATERIAL = "material"
    LABOUR = "labour"
    SUBCONTRACT = "subcontract"
    PLANT = "plant"
    PRELIM = "prelim"


# =========================
# Internal costing
# =========================
class LineItem(BaseModel):
    '''
    One priced row of an internal costing.

    Param	Description
    kind	cost type of the row
    unit_cost	internal cost basis per unit
    unit_price	sell price per unit
    *_percent / vat_rate	per-line percentages, kept for audit only
    line_cost / line_total	precomputed round2(q*cost) / round2(q*price)
    is_manual_override	user-edited; regeneration never replaces it
    is_auto_rated	priced by the engine; regeneration may replace it
    qty_dirty	quantity changed since line_total was computed
    assembly_id / assembly_line_id / qty_formula / source_tokens	provenance
    '''
    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=new_id)
    kind: CostType = CostType.MATERIAL
    title: str
    description: Optional[str] = None

    quantity: Decimal = Decimal("0")
    unit: str = "item"
    unit_cost: Decimal = Decimal("0")
    unit_price: Decimal = Decimal("0")

    margin_percent: Decimal = Decimal("0")
    overhead_percent: Decimal = Decimal("0")
    contingency_percent: Decimal = Decimal("0")
    vat_rate: Decimal = Decimal("0")
    vat_applicable: bool = True

    line_cost: Optional[Decimal] = None
    line_total: Optional[Decimal] = None
    sort_order: int = 0

    is_provisional: bool = False
    is_purchasable: bool = False
    is_work_order_eligible: bool = False
    is_auto_rated: bool = False
    is_manual_override: bool = False
    is_qty_locked: bool = False
    qty_dirty: bool = False

    assembly_id: Optional[str] = None
    assembly_line_id: Optional[str] = None
    qty_formula: Optional[str] = None
    source_tokens: Dict[str, Decimal] = Field(default_factory=dict)
    calculation_trace: Optional[str] = None

    def merge_key(self) -> str:
        if self.assembly_id and self.assembly_line_id:
            return f"{self.assembly_id}:{self.assembly_line_id}"
        return self.title


class Section(BaseModel):
    id: str = Field(default_factory=new_id)
    title: str
    items: List[LineItem] = Field(default_factory=list)
    notes: Optional[str] = None
    section_total: Decimal = Decimal("0")

    def find_item(self, item_id: str) -> Optional[LineItem]:
        return next((i for i in self.items if i.id == item_id), None)


class InternalCosting(BaseModel):
    '''
    Costing root. Aggregate fields are only ever written by
    totals.recompute_estimate.
    '''
    sections: List[Section] = Field(default_factory=list)

    overhead_pct: Decimal = Decimal("10")
    margin_pct: Decimal = Decimal("15")
    contingency_pct: Decimal = Decimal("5")
    vat_pct: Decimal = Decimal("20")

    subtotal: Decimal = Decimal("0")
    overhead: Decimal = Decimal("0")
    margin: Decimal = Decimal("0")
    contingency: Decimal = Decimal("0")
    vat: Decimal = Decimal("0")
    total: Decimal = Decimal("0")

    assumptions: List[str] = Field(default_factory=list)

    def find_section(self, section_id: str) -> Optional[Section]:
        return next((s for s in self.sections if s.id == section_id), None)

    def find_section_by_title(self, title: str) -> Optional[Section]:
        return next((s for s in self.sections if s.title == title), None)

    def all_items(self) -> List[LineItem]:
        return [item for section in self.sections for item in section.items]


# =========================
# Customer-facing view
# =========================
class CustomerEstimateItem(BaseModel):
    id: str = Field(default_factory=new_id)
    title: str
    description: Optional[str] = None
    quantity: Decimal = Decimal("0")
    unit: str = "item"
    unit_price: Decimal = Decimal("0")
    line_total: Decimal = Decimal("0")
    is_provisional: bool = False
    source_item_id: Optional[str] = None


class CustomerEstimateSection(BaseModel):
    id: str = Field(default_factory=new_id)
    title: str
    items: List[CustomerEstimateItem] = Field(default_factory=list)
    notes: Optional[str] = None
    section_total: Decimal = Decimal("0")


class CustomerEstimate(BaseModel):
    sections: List[CustomerEstimateSection] = Field(default_factory=list)
    vat_pct: Decimal = Decimal("20")
    subtotal: Decimal = Decimal("0")
    vat: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    provisional_sums_total: Optional[Decimal] = None
    intro_text: Optional[str] = None
    exclusions: List[str] = Field(default_factory=list)


class VisibilitySettings(BaseModel):
    '''Presentation toggles for the customer estimate. No arithmetic impact.'''
    show_quantities: bool = True
    show_units: bool = True
    show_unit_prices: bool = True
    show_line_totals: bool = True
    show_section_totals: bool = True
    show_descriptions: bool = True
    show_provisional_sums: bool = True
    show_vat: bool = True
    show_subtotal: bool = True
    show_notes: bool = True
    show_assumptions: bool = True
    show_totals_without_vat: bool = False
    show_grand_total_only: bool = False


# =========================
# Catalog
# =========================
class AssemblyLine(BaseModel):
    id: str = Field(default_factory=new_id)
    title: str
    cost_type: CostType = CostType.MATERIAL
    qty_formula: str = ""
    unit: str = "item"
    base_unit_cost: Decimal = Decimal("0")
    default_markup_pct: Decimal = Decimal("0")
    # explicit sell price; 0 means derive from cost + markup
    unit_price: Decimal = Decimal("0")
    vat_applicable: bool = True
    customer_text_block: Optional[str] = None


class Assembly(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    category: str
    default_unit: str = "item"
    description: Optional[str] = None
    lines: List[AssemblyLine] = Field(default_factory=list)


class ConditionOperator(str, Enum):
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    IN = "in"
    NOT_IN = "not_in"
    IS_SET = "is_set"
    IS_NOT_SET = "is_not_set"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"


class BundleCondition(BaseModel):
    '''
    Serializable predicate over wizard answers.

    Either a leaf {field, operator, value} or a combinator holding
    all_of / any_of children. Exactly one form per node.
    '''
    field: Optional[str] = None
    operator: Optional[ConditionOperator] = None
    value: Any = None
    all_of: Optional[List["BundleCondition"]] = None
    any_of: Optional[List["BundleCondition"]] = None

    @model_validator(mode="after")
    def _one_form(self):
        forms = [self.field is not None, self.all_of is not None, self.any_of is not None]
        if sum(forms) != 1:
            raise ValueError("condition must be exactly one of: field/operator/value, all_of, any_of")
        if self.field is not None and self.operator is None:
            raise ValueError(f"condition on '{self.field}' has no operator")
        return self


BundleCondition.model_rebuild()

class AssemblyRef(BaseModel):
    assembly_id: str
    override_qty_formula: Optional[str] = None


class Bundle(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    description: Optional[str] = None
    template_ids: Optional[List[str]] = None
    conditions: Optional[BundleCondition] = None
    assembly_refs: List[AssemblyRef] = Field(default_factory=list)


# =========================
# Wizard inputs
# =========================
Region = Literal[
    "London",
    "South East",
    "South West",
    "Midlands",
    "North",
    "Scotland",
    "Wales",
    "Northern Ireland",
]


class WizardAnswers(BaseModel):
    '''
    Known wizard fields plus an extras map for template-defined custom fields.
    Unknown keys are rejected at the top level; use extras.
    '''
    model_config = ConfigDict(extra="forbid")

    template_id: Optional[str] = None
    property_type: Optional[str] = None
    location: Optional[str] = None
    region: Optional[Region] = None

    roof_type: Optional[str] = None
    roof_sub_type: Optional[str] = None
    roof_covering: Optional[str] = None
    rooflights_count: Optional[int] = None
    roof_insulation: Optional[bool] = None

    wall_construction_type: Optional[str] = None
    wall_finish: Optional[str] = None
    door_type: Optional[str] = None
    knock_through: Optional[bool] = None

    foundations_type: Optional[str] = None
    ground_floor_type: Optional[str] = None
    floor_insulation: Optional[bool] = None

    heating_type: Optional[str] = None
    electrics_level: Optional[str] = None

    notes: Optional[str] = None
    assumptions: List[str] = Field(default_factory=list)
    extras: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]], *, strict: bool = False) -> "WizardAnswers":
        '''
        Split a flat answer dict into known fields and extras.

        Lenient by default: a known field whose value does not validate is
        kept under extras and the field stays unset. With strict=True the
        ValidationError propagates.
        '''
        data = dict(data or {})
        raw_extras = data.pop("extras", None)
        extras = dict(raw_extras) if isinstance(raw_extras, Mapping) else {}
        known = {}
        for key, value in data.items():
            if key not in cls.model_fields:
                extras[key] = value
            elif strict:
                known[key] = value
            else:
                try:
                    cls.model_validate({key: value})
                except ValidationError:
                    extras[key] = value
                else:
                    known[key] = value
        return cls(**known, extras=extras)

    def get(self, field: str, default: Any = None) -> Any:
        if field in type(self).model_fields and field != "extras":
            value = getattr(self, field)
            return default if value is None else value
        return self.extras.get(field, default)


class MeasurementInputs(BaseModel):
    external_length_m: Decimal = Decimal("0")
    external_width_m: Decimal = Decimal("0")
    eaves_height_m: Decimal = Decimal("0")
    roof_type: Optional[str] = None
    roof_factor: Optional[Decimal] = None
    openings_area_m2: Optional[Decimal] = None


class EstimateMeasurements(BaseModel):
    external_length_m: Decimal = Decimal("0")
    external_width_m: Decimal = Decimal("0")
    eaves_height_m: Decimal = Decimal("0")
    floor_area_m2: Decimal = Decimal("0")
    perimeter_m: Decimal = Decimal("0")
    external_wall_area_m2: Decimal = Decimal("0")
    openings_area_m2: Optional[Decimal] = None
    net_wall_area_m2: Optional[Decimal] = None
    roof_factor: Decimal = Decimal("1.05")
    roof_area_m2: Decimal = Decimal("0")


class RateSettings(BaseModel):
    region: Region = "South East"
    regional_multiplier: Decimal = Decimal("1.15")
    overhead_pct: Decimal = Decimal("10")
    margin_pct: Decimal = Decimal("15")
    contingency_pct: Decimal = Decimal("5")
    vat_pct: Decimal = Decimal("20")
    auto_rate_mode: bool = True


# =========================
# Versions
# =========================
class VersionSnapshot(BaseModel):
    '''Full copy of an estimate's editable state at one point in time.'''
    answers: Dict[str, Any] = Field(default_factory=dict)
    measurements: Optional[EstimateMeasurements] = None
    rate_settings: Optional[RateSettings] = None
    sections: List[Section] = Field(default_factory=list)
    visibility_settings: VisibilitySettings = Field(default_factory=VisibilitySettings)
    brief: Optional[Dict[str, Any]] = None


class EstimateVersion(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    estimate_id: str
    version_number: int
    snapshot: VersionSnapshot
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None
    note: Optional[str] = None


"""Per-pass reviewer findings.

Every field here originates from free-text generation, so each one is optional
and defaulted at validation time: nulls fall back to defaults, unknown enum
values fall back to a neutral member, malformed list entries are dropped.
"""

import math
from enum import Enum
from typing import Annotated, Any, ClassVar, List, Tuple

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator


class Impact(str, Enum):
    """How much a gap affects the estimate."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Severity rank, higher is worse."""
        return {"critical": 3, "high": 2, "medium": 1, "low": 0}[self.value]


class MissingInfoCategory(str, Enum):
    """Kind of information a takeoff item is missing."""
    MEASUREMENT = "measurement"
    QUANTITY = "quantity"
    SPECIFICATION = "specification"
    DETAIL = "detail"
    OTHER = "other"


def _normalize_impact(value: Any) -> Impact:
    if isinstance(value, Impact):
        return value
    try:
        return Impact(str(value).strip().lower())
    except ValueError:
        return Impact.MEDIUM


def _normalize_category(value: Any) -> MissingInfoCategory:
    if isinstance(value, MissingInfoCategory):
        return value
    try:
        return MissingInfoCategory(str(value).strip().lower())
    except ValueError:
        return MissingInfoCategory.OTHER


def _lenient_str(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return "; ".join(str(v) for v in value if v is not None)
    return str(value)


def _lenient_int(value: Any) -> int:
    if isinstance(value, int):
        return int(value)
    try:
        return int(float(str(value).strip()))
    except (TypeError, ValueError, OverflowError):
        return 0


def _lenient_float(value: Any) -> float:
    try:
        number = float(value) if isinstance(value, (int, float)) else float(str(value).strip())
    except (TypeError, ValueError, OverflowError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _lenient_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    return str(value).strip().lower() in ("true", "yes", "y", "1")


def _object_entries(value: Any) -> list:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, (dict, BaseModel))]


def _string_entries(value: Any) -> list:
    if isinstance(value, str):
        return [value] if value.strip() else []
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v is not None and not isinstance(v, (dict, list))]


ImpactField = Annotated[Impact, BeforeValidator(_normalize_impact)]
CategoryField = Annotated[MissingInfoCategory, BeforeValidator(_normalize_category)]
Text = Annotated[str, BeforeValidator(_lenient_str)]
Int = Annotated[int, BeforeValidator(_lenient_int)]
Float = Annotated[float, BeforeValidator(_lenient_float)]
Flag = Annotated[bool, BeforeValidator(_lenient_bool)]
TextList = Annotated[List[str], BeforeValidator(_string_entries)]


class LenientModel(BaseModel):
    """Base for models parsed from model output: ignores unknown keys, treats null as absent."""

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, BaseModel):
            return data
        if not isinstance(data, dict):
            return {}
        return {k: v for k, v in data.items() if v is not None}


class MissingInformation(LenientModel):
    """One piece of information a reviewer says is missing."""
    category: CategoryField = MissingInfoCategory.OTHER
    missing_data: Text = ""
    why_needed: Text = ""
    where_to_find: Text = ""
    impact: ImpactField = Impact.MEDIUM


MissingInformationList = Annotated[List[MissingInformation], BeforeValidator(_object_entries)]


# ---------------------------------------------------------------------------
# Reviewer 1: item audit
# ---------------------------------------------------------------------------

class ReviewedItem(LenientModel):
    """Audit verdict for one existing takeoff item."""
    item_index: Int = Field(0, description="1-based index into the input items")
    item_name: Text = ""
    status: Text = Field("", description="complete|missing_measurements|missing_quantity|missing_specs|incorrect_cost_code")
    missing_information: MissingInformationList = Field(default_factory=list)
    cost_code_issues: Text = ""
    quantity_calculable: Flag = True
    notes: Text = ""


class ReviewMissingItem(LenientModel):
    """An item the auditor believes the takeoff omitted."""
    item_name: Text = ""
    category: Text = ""
    reason: Text = ""
    location: Text = ""
    cost_code: Text = ""
    impact: ImpactField = Impact.MEDIUM


class ReviewSummary(LenientModel):
    items_reviewed: Int = 0
    items_with_issues: Int = 0
    missing_items_found: Int = 0
    critical_issues: Int = 0
    notes: Text = ""


class ReviewFinding(LenientModel):
    """Complete output of the item audit pass."""
    reviewed_items: Annotated[List[ReviewedItem], BeforeValidator(_object_entries)] = Field(default_factory=list)
    missing_items: Annotated[List[ReviewMissingItem], BeforeValidator(_object_entries)] = Field(default_factory=list)
    summary: ReviewSummary = Field(default_factory=ReviewSummary)

    EXPECTED_KEYS: ClassVar[Tuple[str, ...]] = ("reviewed_items", "missing_items")


# ---------------------------------------------------------------------------
# Reviewer 2: plan rescan
# ---------------------------------------------------------------------------

class BoundingBox(LenientModel):
    """Normalised (0-1) region on a plan page."""
    page: Int = 1
    x: Float = 0.0
    y: Float = 0.0
    width: Float = 0.0
    height: Float = 0.0


class ReanalysisMissingItem(LenientModel):
    """An item found on the plans that is absent from the takeoff."""
    name: Text = ""
    description: Text = ""
    category: Text = ""
    subcategory: Text = ""
    cost_code: Text = ""
    cost_code_description: Text = ""
    location: Text = ""
    bounding_box: BoundingBox = Field(default_factory=BoundingBox)
    missing_information: MissingInformationList = Field(default_factory=list)
    confidence: Float = 0.0


class ItemWithMissingData(LenientModel):
    """An item visible on the plans whose measurements or counts are not determinable."""
    item_name: Text = ""
    missing_measurements: TextList = Field(default_factory=list)
    missing_quantities: TextList = Field(default_factory=list)
    where_to_find: Text = ""
    impact: ImpactField = Impact.MEDIUM


class ReanalysisSummary(LenientModel):
    missing_items_found: Int = 0
    items_with_missing_data: Int = 0
    critical_missing_info: Int = 0
    notes: Text = ""


class ReanalysisFinding(LenientModel):
    """Complete output of the plan rescan pass."""
    missing_items: Annotated[List[ReanalysisMissingItem], BeforeValidator(_object_entries)] = Field(default_factory=list)
    items_with_missing_data: Annotated[List[ItemWithMissingData], BeforeValidator(_object_entries)] = Field(default_factory=list)
    summary: ReanalysisSummary = Field(default_factory=ReanalysisSummary)

    EXPECTED_KEYS: ClassVar[Tuple[str, ...]] = ("missing_items", "items_with_missing_data")


# ---------------------------------------------------------------------------
# Reviewer 3: quantity validation
# ---------------------------------------------------------------------------

class ValidatedItem(LenientModel):
    """Quantity and cost-code verdict for one takeoff item."""
    item_index: Int = 0
    item_name: Text = ""
    quantity_valid: Flag = True
    quantity_validation_notes: Text = ""
    cost_code_valid: Flag = True
    cost_code_validation_notes: Text = ""
    calculation_possible: Flag = True
    missing_for_calculation: TextList = Field(default_factory=list)
    discrepancies: TextList = Field(default_factory=list)
    recommendation: Text = ""


class ImpossibleCalculation(LenientModel):
    """An item whose quantity cannot be computed from the available data."""
    item_name: Text = ""
    reason: Text = ""
    missing_data: TextList = Field(default_factory=list)
    impact: ImpactField = Impact.MEDIUM


class ValidationSummary(LenientModel):
    items_validated: Int = 0
    valid_quantities: Int = 0
    invalid_quantities: Int = 0
    impossible_calculations: Int = 0
    cost_code_issues: Int = 0
    notes: Text = ""


class ValidationFinding(LenientModel):
    """Complete output of the quantity validation pass."""
    validated_items: Annotated[List[ValidatedItem], BeforeValidator(_object_entries)] = Field(default_factory=list)
    impossible_calculations: Annotated[List[ImpossibleCalculation], BeforeValidator(_object_entries)] = Field(default_factory=list)
    summary: ValidationSummary = Field(default_factory=ValidationSummary)

    EXPECTED_KEYS: ClassVar[Tuple[str, ...]] = ("validated_items", "impossible_calculations")

"""Aggregate review output handed to the persistence/UI collaborator."""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from config import settings
from .review_contracts import (
    Impact,
    MissingInfoCategory,
    ReviewFinding,
    ReanalysisFinding,
    ValidationFinding,
)


class Source(str, Enum):
    """Which discovery pass(es) reported a missing item."""
    REVIEWER1 = "reviewer1"
    REVIEWER2 = "reviewer2"
    BOTH = "both"


class Origin(str, Enum):
    """Which reviewer pass produced a missing-information entry."""
    ITEM_AUDIT = "reviewer1"
    PLAN_RESCAN = "reviewer2"
    QUANTITY_VALIDATION = "reviewer3"


class PassStatus(str, Enum):
    """How a reviewer pass settled."""
    OK = "ok"
    PARSE_ERROR = "parse_error"
    PARTIAL_DATA = "partial_data"
    PROVIDER_ERROR = "provider_error"
    CANCELLED = "cancelled"
    SKIPPED = "skipped"


class MissingItem(BaseModel):
    """A candidate item absent from the original takeoff, after merging both discovery passes."""
    name: str
    category: str = ""
    reason: str = ""
    location: str = ""
    cost_code: str = ""
    impact: Impact = Impact.MEDIUM
    source: Source


class MissingInformationEntry(BaseModel):
    """One flattened missing-information finding, tied back to a takeoff item where possible."""
    item_id: Optional[str] = None
    item_name: str
    category: MissingInfoCategory = MissingInfoCategory.OTHER
    missing_data: str = ""
    why_needed: str = ""
    where_to_find: str = ""
    impact: Impact = Impact.MEDIUM
    suggested_action: Optional[str] = None
    location: Optional[str] = None
    origin: Origin


class MissingInformationSummary(BaseModel):
    """Counts over the flattened missing-information list."""
    total_missing: int = 0
    by_category: Dict[str, int] = Field(
        default_factory=lambda: {c.value: 0 for c in MissingInfoCategory}
    )
    by_impact: Dict[str, int] = Field(
        default_factory=lambda: {i.value: 0 for i in Impact}
    )
    items_affected: int = 0


class TokenUsage(BaseModel):
    """Track token usage for cost calculation."""
    input_tokens: int = 0
    output_tokens: int = 0
    reported_cost: float = 0.0

    @property
    def total_cost(self) -> float:
        """Backend-reported cost when available, otherwise priced from settings."""
        if self.reported_cost:
            return self.reported_cost
        return settings.calculate_cost(self.input_tokens, self.output_tokens)


class ReviewOrchestratorResult(BaseModel):
    """Everything one review run produced. Built fresh per call and never persisted here."""

    model_config = ConfigDict(populate_by_name=True)

    review_result: ReviewFinding = Field(alias="reviewResult")
    reanalysis_result: ReanalysisFinding = Field(alias="reanalysisResult")
    validation_result: ValidationFinding = Field(alias="validationResult")
    merged_missing_items: List[MissingItem] = Field(default_factory=list, alias="mergedMissingItems")
    all_missing_information: List[MissingInformationEntry] = Field(
        default_factory=list, alias="allMissingInformation"
    )
    missing_information_summary: MissingInformationSummary = Field(
        default_factory=MissingInformationSummary, alias="missingInformationSummary"
    )
    pass_status: Dict[str, PassStatus] = Field(default_factory=dict, alias="passStatus")
    usage: Dict[str, TokenUsage] = Field(default_factory=dict)

    @property
    def degraded(self) -> bool:
        """True when any pass failed or was cancelled. Skipped passes do not count."""
        return any(
            status not in (PassStatus.OK, PassStatus.SKIPPED) for status in self.pass_status.values()
        )

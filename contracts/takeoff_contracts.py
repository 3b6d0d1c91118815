"""Takeoff input contracts: the items under review and the cost-code reference."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator
from typing import Optional

from config import COST_CODE_STANDARD_NAMES


class TakeoffItem(BaseModel):
    """A single line of the primary takeoff. Immutable input to the review."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: Optional[str] = Field(None, description="Identifier assigned by the data store")
    name: str = Field("", description="Short item name")
    description: str = Field("", description="Longer description of the work")
    quantity: Optional[float] = Field(None, description="Measured or counted quantity")
    unit: str = Field("", description="Unit of measure (SF, LF, EA, ...)")
    category: str = Field("", description="structural, exterior, interior, mep, finishes, other")
    cost_code: Optional[str] = Field(None, description="Assigned cost code")
    location: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("location", "location_reference"),
        description="Where on the plans the item appears",
    )
    confidence: Optional[float] = Field(
        None,
        ge=0.0,
        le=1.0,
        validation_alias=AliasChoices("confidence", "confidence_score"),
    )
    dimensions: Optional[str] = Field(None, description="Dimensions as written on the plans")

    @property
    def display_name(self) -> str:
        """Name shown to reviewers; falls back to the description."""
        return self.name.strip() or self.description.strip() or "Unnamed item"


class CostCodeReference(BaseModel):
    """Cost-code standard plus the reference fragment rendered by the external catalog."""

    standard: str = Field("csi-16", description="Standard identifier, e.g. csi-16")
    standard_name: str = Field("", description="Human-readable standard name")
    reference_text: str = Field("", description="Pre-rendered cost-code listing for prompts")

    @model_validator(mode="after")
    def fill_standard_name(self) -> "CostCodeReference":
        """Resolve a display name for known standards when none was given."""
        if not self.standard_name:
            name = COST_CODE_STANDARD_NAMES.get(self.standard.lower(), self.standard.upper())
            object.__setattr__(self, "standard_name", name)
        return self

"""Pydantic contracts for the takeoff review engine.

All reviewer-to-orchestrator handoffs are typed through these contracts.
"""

from .errors import (
    ReviewError,
    ProviderCallFailure,
    ReviewCancelled,
    ResponseParseFailure,
    PartialDataFailure,
)

from .takeoff_contracts import (
    TakeoffItem,
    CostCodeReference,
)

from .review_contracts import (
    Impact,
    MissingInfoCategory,
    MissingInformation,
    ReviewedItem,
    ReviewMissingItem,
    ReviewSummary,
    ReviewFinding,
    BoundingBox,
    ReanalysisMissingItem,
    ItemWithMissingData,
    ReanalysisSummary,
    ReanalysisFinding,
    ValidatedItem,
    ImpossibleCalculation,
    ValidationSummary,
    ValidationFinding,
)

from .result_contracts import (
    Source,
    Origin,
    PassStatus,
    MissingItem,
    MissingInformationEntry,
    MissingInformationSummary,
    TokenUsage,
    ReviewOrchestratorResult,
)

__all__ = [
    # Errors
    "ReviewError",
    "ProviderCallFailure",
    "ReviewCancelled",
    "ResponseParseFailure",
    "PartialDataFailure",
    # Takeoff input
    "TakeoffItem",
    "CostCodeReference",
    # Reviewer findings
    "Impact",
    "MissingInfoCategory",
    "MissingInformation",
    "ReviewedItem",
    "ReviewMissingItem",
    "ReviewSummary",
    "ReviewFinding",
    "BoundingBox",
    "ReanalysisMissingItem",
    "ItemWithMissingData",
    "ReanalysisSummary",
    "ReanalysisFinding",
    "ValidatedItem",
    "ImpossibleCalculation",
    "ValidationSummary",
    "ValidationFinding",
    # Aggregate result
    "Source",
    "Origin",
    "PassStatus",
    "MissingItem",
    "MissingInformationEntry",
    "MissingInformationSummary",
    "TokenUsage",
    "ReviewOrchestratorResult",
]

"""Reviewer passes for the takeoff review engine."""

from .base_reviewer import BaseReviewer
from .cancellation import CancellationToken
from .outcomes import Ok, ParseError, PassOutcome, ProviderError, Skipped, status_of
from .item_auditor import ItemAuditor, clamp_reviewed_items
from .plan_rescanner import PlanRescanner
from .quantity_validator import QuantityValidator

__all__ = [
    "BaseReviewer",
    "CancellationToken",
    "Ok",
    "ParseError",
    "ProviderError",
    "Skipped",
    "PassOutcome",
    "status_of",
    "ItemAuditor",
    "clamp_reviewed_items",
    "PlanRescanner",
    "QuantityValidator",
]

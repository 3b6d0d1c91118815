"""Orchestrator module for takeoff review execution."""

from .collector import collect_missing_information, summarize_missing_information
from .merger import merge_missing_items
from .review_orchestrator import TakeoffReviewOrchestrator, run_review

__all__ = [
    "TakeoffReviewOrchestrator",
    "run_review",
    "merge_missing_items",
    "collect_missing_information",
    "summarize_missing_information",
]

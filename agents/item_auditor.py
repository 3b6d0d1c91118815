"""Item Auditor - reviews every existing takeoff item for completeness and accuracy.

Checks measurements, quantities and cost-code assignments for each item and
names items the takeoff appears to have left out.
"""

import logging
from typing import Optional, Sequence

from config import settings
from contracts import CostCodeReference, ReviewFinding, TakeoffItem
from .base_reviewer import BaseReviewer
from .cancellation import CancellationToken
from .outcomes import Ok, PassOutcome
from .review_prompts import AUDITOR_SYSTEM_PROMPT, build_audit_prompt

logger = logging.getLogger(__name__)


def clamp_reviewed_items(finding: ReviewFinding, item_count: int) -> ReviewFinding:
    """Keep reviewed_items within the takeoff: indices in 1..N, at most N entries."""
    kept = [r for r in finding.reviewed_items if 1 <= r.item_index <= item_count]
    dropped = len(finding.reviewed_items) - len(kept)
    if dropped:
        logger.info("Dropped %d reviewed item(s) with out-of-range item_index", dropped)
    if len(kept) > item_count:
        logger.info("Truncated reviewed items from %d to %d", len(kept), item_count)
        kept = kept[:item_count]
    if len(kept) == len(finding.reviewed_items):
        return finding
    return finding.model_copy(update={"reviewed_items": kept})


class ItemAuditor(BaseReviewer[ReviewFinding]):
    """Reviewer 1: audits the items already in the takeoff."""

    PASS_NAME = "item_auditor"
    PASS_LABEL = "review"
    SYSTEM_PROMPT = AUDITOR_SYSTEM_PROMPT
    output_schema = ReviewFinding

    def default_model(self) -> str:
        return settings.auditor_model

    def run(
        self,
        items: Sequence[TakeoffItem],
        cost_codes: CostCodeReference,
        context: Optional[str] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> PassOutcome:
        logger.info("Reviewing %d takeoff items", len(items))
        prompt = build_audit_prompt(items, cost_codes, context)
        outcome = self._execute(prompt, cancel=cancel)

        if isinstance(outcome, Ok):
            finding = clamp_reviewed_items(outcome.value, len(items))
            logger.info(
                "Item audit completed: %d items reviewed, %d missing items found",
                len(finding.reviewed_items),
                len(finding.missing_items),
            )
            return Ok(value=finding, raw_text=outcome.raw_text, usage=outcome.usage)
        return outcome

    def get_task_description(self) -> str:
        return "Audit existing takeoff items for missing measurements, quantities and cost codes"

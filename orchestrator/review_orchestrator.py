"""Review Orchestrator - runs the three reviewer passes over one takeoff.

Pipeline:
PARALLEL:
  ├── Item Auditor   → ReviewFinding
  └── Plan Rescanner → ReanalysisFinding

THEN:
  → Quantity Validator (receives the audit findings) → ValidationFinding
  → Merger + Missing-Info Collector → ReviewOrchestratorResult

A failed pass never aborts its sibling or the run: it settles as an empty
finding with a note, and its status is recorded on the result.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, Iterable, Optional, Union

from agents import (
    CancellationToken,
    ItemAuditor,
    PassOutcome,
    PlanRescanner,
    QuantityValidator,
    status_of,
)
from config import settings
from contracts import (
    CostCodeReference,
    ReviewOrchestratorResult,
    TakeoffItem,
)
from providers import LLMProvider
from .collector import collect_missing_information, summarize_missing_information
from .merger import merge_missing_items

logger = logging.getLogger(__name__)

ItemInput = Union[TakeoffItem, Dict[str, Any]]
CostCodeInput = Union[CostCodeReference, str, None]


def _as_items(items: Iterable[ItemInput]) -> tuple:
    return tuple(
        item if isinstance(item, TakeoffItem) else TakeoffItem.model_validate(item)
        for item in items
    )


def _as_cost_codes(cost_codes: CostCodeInput) -> CostCodeReference:
    if isinstance(cost_codes, CostCodeReference):
        return cost_codes
    return CostCodeReference(standard=cost_codes or settings.default_cost_code_standard)


class TakeoffReviewOrchestrator:
    """Coordinates the item audit, plan rescan and quantity validation passes.

    Reviewers hold no per-run state, so one orchestrator can serve many runs.
    """

    def __init__(
        self,
        provider: Optional[LLMProvider] = None,
        auditor: Optional[ItemAuditor] = None,
        rescanner: Optional[PlanRescanner] = None,
        validator: Optional[QuantityValidator] = None,
    ):
        """Initialize the orchestrator.

        Args:
            provider: Inference gateway shared by all passes. When None each
                      reviewer builds its own for its configured model.
            auditor: Override the item auditor
            rescanner: Override the plan rescanner
            validator: Override the quantity validator
        """
        self.auditor = auditor or ItemAuditor(provider=provider)
        self.rescanner = rescanner or PlanRescanner(provider=provider)
        self.validator = validator or QuantityValidator(provider=provider)

    def run_review(
        self,
        items: Iterable[ItemInput],
        plan_images: Iterable[str] = (),
        cost_codes: CostCodeInput = None,
        context: Optional[str] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> ReviewOrchestratorResult:
        """Review a takeoff and return the combined findings.

        Args:
            items: Takeoff items, in order (models or plain dicts)
            plan_images: Plan page images as URLs or data URLs, one per page
            cost_codes: Cost-code reference, or a standard id such as "csi-16"
            context: Optional identifier carried into the prompts and logs
            cancel: Token shared by all passes; cancelled passes degrade

        Returns:
            ReviewOrchestratorResult; always structurally complete
        """
        takeoff = _as_items(items)
        images = tuple(plan_images)
        reference = _as_cost_codes(cost_codes)
        cancel = cancel or CancellationToken()

        logger.info(
            "Starting takeoff review with %d items and %d plan images%s",
            len(takeoff),
            len(images),
            f" ({context})" if context else "",
        )

        audit_outcome, rescan_outcome = self._run_discovery(takeoff, images, reference, context, cancel)
        review_result = self.auditor.finding_from(audit_outcome)
        reanalysis_result = self.rescanner.finding_from(rescan_outcome)

        logger.info("Starting %s", self.validator.get_task_description().lower())
        validation_outcome = self.validator.run(takeoff, review_result, context, cancel)
        validation_result = self.validator.finding_from(validation_outcome)

        merged = merge_missing_items(review_result.missing_items, reanalysis_result.missing_items)
        missing_information = collect_missing_information(
            review_result, reanalysis_result, validation_result, takeoff
        )

        outcomes: Dict[str, PassOutcome] = {
            self.auditor.PASS_NAME: audit_outcome,
            self.rescanner.PASS_NAME: rescan_outcome,
            self.validator.PASS_NAME: validation_outcome,
        }
        result = ReviewOrchestratorResult(
            review_result=review_result,
            reanalysis_result=reanalysis_result,
            validation_result=validation_result,
            merged_missing_items=merged,
            all_missing_information=missing_information,
            missing_information_summary=summarize_missing_information(missing_information),
            pass_status={name: status_of(o) for name, o in outcomes.items()},
            usage={name: o.usage for name, o in outcomes.items()},
        )

        logger.info(
            "Takeoff review finished: %d merged missing items, %d missing-information entries, status %s",
            len(merged),
            len(missing_information),
            ", ".join(f"{name}={status.value}" for name, status in result.pass_status.items()),
        )
        return result

    def _run_discovery(
        self,
        takeoff: tuple,
        images: tuple,
        reference: CostCodeReference,
        context: Optional[str],
        cancel: CancellationToken,
    ) -> tuple:
        """Run the item audit and the plan rescan in parallel."""
        audit_outcome = None
        rescan_outcome = None

        with ThreadPoolExecutor(max_workers=2) as executor:
            logger.info("Starting %s", self.auditor.get_task_description().lower())
            audit_future = executor.submit(self.auditor.run, takeoff, reference, context, cancel)
            logger.info("Starting %s", self.rescanner.get_task_description().lower())
            rescan_future = executor.submit(
                self.rescanner.run, images, reference, takeoff, context, cancel
            )

            for future in as_completed([audit_future, rescan_future]):
                if future == audit_future:
                    audit_outcome = future.result()
                else:
                    rescan_outcome = future.result()

        return audit_outcome, rescan_outcome


def run_review(
    items: Iterable[ItemInput],
    plan_images: Iterable[str] = (),
    cost_codes: CostCodeInput = None,
    context: Optional[str] = None,
    cancel: Optional[CancellationToken] = None,
    provider: Optional[LLMProvider] = None,
) -> ReviewOrchestratorResult:
    """Convenience function to review a takeoff with the default reviewers.

    Args:
        items: Takeoff items, in order
        plan_images: Plan page images as URLs or data URLs
        cost_codes: Cost-code reference or standard id
        context: Optional identifier for logs and prompts
        cancel: Optional cancellation token / deadline
        provider: Optional inference gateway shared by all passes

    Returns:
        ReviewOrchestratorResult
    """
    orchestrator = TakeoffReviewOrchestrator(provider=provider)
    return orchestrator.run_review(
        items,
        plan_images=plan_images,
        cost_codes=cost_codes,
        context=context,
        cancel=cancel,
    )

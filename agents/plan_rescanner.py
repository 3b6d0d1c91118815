"""Plan Rescanner - looks at the plan pages again for items the takeoff missed."""

import logging
from typing import Optional, Sequence

from config import settings
from contracts import CostCodeReference, ReanalysisFinding, TakeoffItem
from .base_reviewer import BaseReviewer
from .cancellation import CancellationToken
from .outcomes import Ok, PassOutcome, Skipped
from .review_prompts import RESCANNER_SYSTEM_PROMPT, build_rescan_prompt

logger = logging.getLogger(__name__)

NO_IMAGES_NOTE = "No plan images provided; plan reanalysis skipped"


class PlanRescanner(BaseReviewer[ReanalysisFinding]):
    """Reviewer 2: vision pass over the plan images."""

    PASS_NAME = "plan_rescanner"
    PASS_LABEL = "reanalysis"
    SYSTEM_PROMPT = RESCANNER_SYSTEM_PROMPT
    output_schema = ReanalysisFinding

    def default_model(self) -> str:
        return settings.rescanner_model

    def run(
        self,
        plan_images: Sequence[str],
        cost_codes: CostCodeReference,
        existing_items: Sequence[TakeoffItem] = (),
        context: Optional[str] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> PassOutcome:
        if not plan_images:
            logger.info(NO_IMAGES_NOTE)
            return Skipped(reason=NO_IMAGES_NOTE)

        logger.info("Re-analyzing %d plan page(s)", len(plan_images))
        prompt = build_rescan_prompt(len(plan_images), cost_codes, existing_items, context)
        outcome = self._execute(prompt, images=plan_images, cancel=cancel)

        if isinstance(outcome, Ok):
            logger.info(
                "Plan reanalysis completed: %d missing items found, %d items with missing data",
                len(outcome.value.missing_items),
                len(outcome.value.items_with_missing_data),
            )
        return outcome

    def get_task_description(self) -> str:
        return "Re-analyze plan images for items missing from the takeoff"

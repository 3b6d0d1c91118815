"""Quantity Validator - checks that quantities are computable and cost codes fit the work."""

import logging
from typing import Optional, Sequence

from config import settings
from contracts import ReviewFinding, TakeoffItem, ValidationFinding
from .base_reviewer import BaseReviewer
from .cancellation import CancellationToken
from .outcomes import Ok, PassOutcome
from .review_prompts import VALIDATOR_SYSTEM_PROMPT, build_validation_prompt

logger = logging.getLogger(__name__)


class QuantityValidator(BaseReviewer[ValidationFinding]):
    """Reviewer 3: runs after the item audit and cross-checks its findings."""

    PASS_NAME = "quantity_validator"
    PASS_LABEL = "validation"
    SYSTEM_PROMPT = VALIDATOR_SYSTEM_PROMPT
    output_schema = ValidationFinding

    def default_model(self) -> str:
        return settings.validator_model

    def run(
        self,
        items: Sequence[TakeoffItem],
        review_findings: Optional[ReviewFinding] = None,
        context: Optional[str] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> PassOutcome:
        logger.info("Validating quantities and cost codes for %d items", len(items))
        prompt = build_validation_prompt(items, review_findings, context)
        outcome = self._execute(prompt, cancel=cancel)

        if isinstance(outcome, Ok):
            logger.info(
                "Validation completed: %d items validated, %d impossible calculations",
                len(outcome.value.validated_items),
                len(outcome.value.impossible_calculations),
            )
        return outcome

    def get_task_description(self) -> str:
        return "Validate takeoff quantities and cost code assignments"

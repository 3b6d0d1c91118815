"""Base reviewer class that the three review passes inherit from.

Every reviewer:
- Builds its prompt from the takeoff inputs
- Calls the inference gateway with a JSON response hint
- Extracts, repairs and validates the answer against its finding contract
- Tracks token usage
- Reports an explicit outcome instead of raising; `review()` turns a failed
  outcome into an empty finding whose summary notes carry the error
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Generic, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError

from config import settings
from contracts import (
    PartialDataFailure,
    PassStatus,
    ProviderCallFailure,
    ResponseParseFailure,
    TokenUsage,
)
from parsing import parse_model_json
from providers import LLMProvider, LLMResponse, get_provider
from .cancellation import CancellationToken
from .outcomes import Ok, ParseError, PassOutcome, ProviderError, Skipped, status_of

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class BaseReviewer(ABC, Generic[T]):
    """Shared call/parse/degrade loop for the review passes.

    Subclasses set PASS_NAME, PASS_LABEL, SYSTEM_PROMPT and output_schema, and
    implement run() by building a user message and handing it to _execute().
    """

    PASS_NAME: str = "reviewer"
    PASS_LABEL: str = "review"
    SYSTEM_PROMPT: str = ""
    output_schema: Type[T]

    def __init__(
        self,
        provider: Optional[LLMProvider] = None,
        model: Optional[str] = None,
    ):
        """Initialize the reviewer.

        Args:
            provider: Inference gateway. Defaults to a LiteLLM provider for the model.
            model: Model or tier alias. Defaults to the configured model for this pass.
        """
        self.model = model or self.default_model()
        self.llm_provider: LLMProvider = provider or get_provider(model=self.model)

        self.total_usage = TokenUsage()
        self.last_status: Optional[PassStatus] = None
        self._usage_lock = threading.Lock()

    @abstractmethod
    def default_model(self) -> str:
        """Configured model for this pass."""

    @abstractmethod
    def run(self, *args, **kwargs) -> PassOutcome:
        """Execute the pass and return its outcome. Never raises for bad model output."""

    @abstractmethod
    def get_task_description(self) -> str:
        """Return a description of what this reviewer does.

        Used for logging.
        """

    def review(self, *args, **kwargs) -> T:
        """Execute the pass and always return a finding, empty on failure."""
        outcome = self.run(*args, **kwargs)
        self.last_status = status_of(outcome)
        return self.finding_from(outcome)

    def finding_from(self, outcome: PassOutcome) -> T:
        if isinstance(outcome, Ok):
            return outcome.value
        return self.degraded(self.describe_failure(outcome))

    def describe_failure(self, outcome: PassOutcome) -> str:
        if isinstance(outcome, ParseError):
            return f"Error parsing {self.PASS_LABEL} response: {outcome.reason}"
        if isinstance(outcome, Skipped):
            return outcome.reason
        return f"Error: {outcome.cause}"

    def degraded(self, note: str) -> T:
        """Structurally valid empty finding carrying an explanatory note."""
        return self.output_schema.model_validate({"summary": {"notes": note}})

    def _parse_and_validate(self, response_text: str) -> T:
        """Parse model text and validate against the finding contract.

        Raises:
            ResponseParseFailure: If no JSON object can be recovered
            PartialDataFailure: If the object carries none of the expected keys
        """
        data = parse_model_json(response_text)

        if not isinstance(data, dict):
            raise PartialDataFailure(
                f"Expected a JSON object, got {type(data).__name__}", raw_text=response_text
            )
        expected = self.output_schema.EXPECTED_KEYS
        if not any(key in data for key in expected):
            raise PartialDataFailure(
                f"Response has none of the expected keys ({', '.join(expected)})",
                raw_text=response_text,
            )

        try:
            return self.output_schema.model_validate(data)
        except ValidationError as e:
            raise ResponseParseFailure(str(e), raw_text=response_text) from e

    def _call(
        self,
        user_message: str,
        images: Optional[Sequence[str]],
        cancel: CancellationToken,
        usage: TokenUsage,
    ) -> LLMResponse:
        """One provider call, bounded by the cancellation token."""
        cancel.raise_if_cancelled()
        timeout = cancel.call_timeout(settings.api_timeout_seconds)

        try:
            response = self.llm_provider.complete(
                system_prompt=self.SYSTEM_PROMPT,
                user_message=user_message,
                model=self.model,
                max_tokens=settings.max_tokens_per_review_call,
                temperature=settings.review_temperature,
                images=list(images) if images else None,
                response_format="json_object",
                timeout=timeout,
                metadata={"reviewer": self.PASS_NAME},
            )
        except Exception as e:
            # Backends raise their own exception types; all of them are call failures here.
            raise ProviderCallFailure(f"{self.PASS_NAME} inference call failed: {e}") from e

        usage.input_tokens += response.input_tokens
        usage.output_tokens += response.output_tokens
        usage.reported_cost += response.cost
        with self._usage_lock:
            self.total_usage.input_tokens += response.input_tokens
            self.total_usage.output_tokens += response.output_tokens
            self.total_usage.reported_cost += response.cost

        # A late answer to a cancelled run is discarded
        cancel.raise_if_cancelled()

        if not response.content or not response.content.strip():
            raise ProviderCallFailure(f"{self.PASS_NAME} received an empty response")
        if response.finish_reason == "length":
            logger.warning("%s response hit the token limit; repairing truncated output", self.PASS_NAME)
        return response

    def _execute(
        self,
        user_message: str,
        images: Optional[Sequence[str]] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> PassOutcome:
        """Call the model and parse its answer, re-asking on parse failure if configured."""
        cancel = cancel or CancellationToken()
        usage = TokenUsage()
        message = user_message
        last_error: Optional[ResponseParseFailure] = None

        for attempt in range(settings.review_parse_retries + 1):
            if attempt > 0 and last_error:
                message = (
                    f"{user_message}\n\n"
                    f"# PREVIOUS ERROR\n\n"
                    f"Your previous response could not be used. "
                    f"Error: {last_error}\n\n"
                    f"Please respond again with ONLY the valid JSON object described above."
                )

            try:
                response = self._call(message, images, cancel, usage)
            except ProviderCallFailure as e:
                logger.warning("%s pass failed: %s", self.PASS_NAME, e)
                return ProviderError(cause=e, usage=usage)

            try:
                finding = self._parse_and_validate(response.content)
            except ResponseParseFailure as e:
                last_error = e
                logger.warning(
                    "%s response unusable (attempt %d): %s", self.PASS_NAME, attempt + 1, e
                )
                continue

            return Ok(value=finding, raw_text=response.content, usage=usage)

        return ParseError(
            raw_text=last_error.raw_text,
            reason=str(last_error),
            partial=isinstance(last_error, PartialDataFailure),
            usage=usage,
        )

"""Base inference-gateway interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence


@dataclass
class LLMResponse:
    """Standardized response from any LLM provider."""
    content: str
    input_tokens: int
    output_tokens: int
    model: str
    provider: str
    cost: float = 0.0
    finish_reason: str = "stop"


class LLMProvider(ABC):
    """Abstract base class for inference providers.

    Reviewers only rely on this contract; nothing assumes a particular vendor.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name."""
        pass

    @property
    @abstractmethod
    def default_model(self) -> str:
        """Default model for this provider."""
        pass

    @abstractmethod
    def complete(
        self,
        system_prompt: str,
        user_message: str,
        model: Optional[str] = None,
        max_tokens: int = 4096,
        temperature: Optional[float] = None,
        images: Optional[Sequence[str]] = None,
        response_format: Optional[str] = None,
        timeout: Optional[float] = None,
        metadata: Optional[dict] = None,
    ) -> LLMResponse:
        """Generate a completion.

        Args:
            system_prompt: System/instruction prompt
            user_message: User message/query
            model: Model to use (defaults to provider's default)
            max_tokens: Maximum tokens in response
            temperature: Sampling temperature (provider default when None)
            images: Image URLs or data URLs attached to the user message
            response_format: "json_object" to ask for JSON output, or None
            timeout: Seconds before the call is abandoned
            metadata: Tags for this call only (reviewer name, context id)

        Returns:
            LLMResponse with content and token counts
        """
        pass

    def is_available(self) -> bool:
        """Check if this provider is available (API key set, etc.)."""
        return True

"""Factory for creating inference providers."""

from typing import Optional

from .base import LLMProvider
from .litellm_provider import LiteLLMProvider, _to_litellm_model


def get_provider(
    model: Optional[str] = None,
    metadata: Optional[dict] = None,
) -> LLMProvider:
    """Get an inference provider instance.

    Args:
        model: Model name, short alias (claude-sonnet, gemini-2.5-pro) or tier
            alias (review-text, review-vision)
        metadata: Extra metadata attached to every call

    Returns:
        LLMProvider instance

    Examples:
        get_provider(model="review-vision")  # Routed through the tier Router
        get_provider(model="claude-sonnet")  # anthropic/claude-sonnet-4-20250514
        get_provider(model="gpt-4o-mini")
    """
    return LiteLLMProvider(
        default_model=_to_litellm_model(model),
        metadata=metadata,
    )

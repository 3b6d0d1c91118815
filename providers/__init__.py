"""Inference gateway abstraction for the reviewer passes."""

from .base import LLMProvider, LLMResponse
from .factory import get_provider
from .litellm_provider import LiteLLMProvider

__all__ = [
    "LLMProvider",
    "LLMResponse",
    "LiteLLMProvider",
    "get_provider",
]

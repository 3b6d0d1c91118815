"""LiteLLM-backed provider. Single implementation for all reviewer calls."""

from typing import Any, Dict, List, Optional, Sequence, Union

from .base import LLMProvider, LLMResponse
from .router import TIERS


# LiteLLM model strings: provider/model-name (OpenAI can omit prefix)
DEFAULT_MODELS = {
    "anthropic": "anthropic/claude-sonnet-4-20250514",
    "openai": "gpt-4o",
    "gemini": "gemini/gemini-2.5-pro",
}

# Short model names -> LiteLLM model string
MODEL_ALIASES = {
    "anthropic": {
        "claude-sonnet": "anthropic/claude-sonnet-4-20250514",
        "claude-opus": "anthropic/claude-opus-4-20250514",
        "claude-haiku": "anthropic/claude-3-5-haiku-20241022",
    },
    "openai": {
        "gpt-4o": "gpt-4o",
        "gpt-4o-mini": "gpt-4o-mini",
        "gpt-4-turbo": "gpt-4-turbo",
    },
    "gemini": {
        "gemini-2.0-flash": "gemini/gemini-2.0-flash",
        "gemini-2.5-flash": "gemini/gemini-2.5-flash",
        "gemini-2.5-pro": "gemini/gemini-2.5-pro",
    },
}


def _to_litellm_model(model: Optional[str]) -> str:
    """Map a configured model name or short alias to a LiteLLM model string."""
    if not model:
        return DEFAULT_MODELS["openai"]
    if model in TIERS:
        return model
    model_lower = model.lower()
    for aliases in MODEL_ALIASES.values():
        # Prefer longest alias match first (e.g. gpt-4o-mini before gpt-4o)
        for alias in sorted((a for a in aliases if a), key=len, reverse=True):
            if model_lower == alias or model_lower.startswith(alias + "-") or model_lower.startswith(alias + "."):
                return aliases[alias]
    return model


def _user_content(user_message: str, images: Optional[Sequence[str]]) -> Union[str, List[Dict[str, Any]]]:
    """Plain text, or an OpenAI-style content list when images are attached."""
    if not images:
        return user_message
    parts: List[Dict[str, Any]] = [{"type": "text", "text": user_message}]
    for image in images:
        parts.append({"type": "image_url", "image_url": {"url": image, "detail": "high"}})
    return parts


class LiteLLMProvider(LLMProvider):
    """Single provider that delegates to litellm.completion() or the tier Router."""

    def __init__(self, default_model: str, metadata: Optional[dict] = None):
        """Initialize with the LiteLLM model string to use by default.

        Args:
            default_model: LiteLLM model string or tier alias (e.g. gpt-4o, review-vision).
            metadata: Optional dict sent with every call (merged under per-call metadata).
        """
        self._default_model = default_model
        self._metadata = metadata or {}

    @property
    def name(self) -> str:
        return "litellm"

    @property
    def default_model(self) -> str:
        return self._default_model

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
        import litellm

        resolved_model = model or self._default_model
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": _user_content(user_message, images)},
        ]
        kwargs = {
            "model": resolved_model,
            "messages": messages,
            "max_tokens": max_tokens,
            "metadata": {**self._metadata, **(metadata or {})},
        }
        if temperature is not None:
            kwargs["temperature"] = temperature
        if response_format:
            kwargs["response_format"] = {"type": response_format}
        if timeout is not None:
            kwargs["timeout"] = timeout

        if resolved_model in TIERS:
            from .router import get_router
            response = get_router().completion(**kwargs)
        else:
            response = litellm.completion(**kwargs)

        choice = response.choices[0]
        content = choice.message.content or ""
        usage = getattr(response, "usage", None)
        input_tokens = getattr(usage, "prompt_tokens", 0) or 0
        output_tokens = getattr(usage, "completion_tokens", 0) or 0
        hidden = getattr(response, "_hidden_params", None) or {}
        cost = float(hidden.get("response_cost", 0) or 0)
        model_id = getattr(response, "model", None) or resolved_model
        finish_reason = getattr(choice, "finish_reason", None) or "stop"

        return LLMResponse(
            content=content,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            model=model_id,
            provider=self.name,
            cost=cost,
            finish_reason=finish_reason if isinstance(finish_reason, str) else "stop",
        )

    def is_available(self) -> bool:
        """LiteLLM reads API keys from env; we consider it available if the model is set."""
        return bool(self._default_model)

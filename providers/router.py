"""LiteLLM Router with reviewer tier aliases.

Model list is built dynamically: only models whose provider has an API key
in the environment are included. Add/remove keys in .env and the Router adapts.
"""

import os
from typing import Any, Dict, List

from config import settings

_tier_router = None

TEXT_TIER = "review-text"
VISION_TIER = "review-vision"
TIERS = (TEXT_TIER, VISION_TIER)

# All candidate models per tier, in preference order.
# The Router will only see entries whose API key is set.
_ALL_TIER_MODELS: List[Dict[str, Any]] = [
    # Text reviewers: item audit, quantity validation
    {"model_name": TEXT_TIER, "litellm_params": {"model": "gpt-4o"}, "order": 1},
    {"model_name": TEXT_TIER, "litellm_params": {"model": "anthropic/claude-sonnet-4-20250514"}, "order": 2},
    {"model_name": TEXT_TIER, "litellm_params": {"model": "gemini/gemini-2.5-pro"}, "order": 3},
    # Vision reviewer: plan rescan (must accept images)
    {"model_name": VISION_TIER, "litellm_params": {"model": "anthropic/claude-sonnet-4-20250514"}, "order": 1},
    {"model_name": VISION_TIER, "litellm_params": {"model": "gpt-4o"}, "order": 2},
    {"model_name": VISION_TIER, "litellm_params": {"model": "gemini/gemini-2.5-pro"}, "order": 3},
]

# Map model prefix -> env var that must be set
_PROVIDER_KEY_MAP = {
    "gpt-": "OPENAI_API_KEY",
    "gemini/": "GOOGLE_API_KEY",
    "anthropic/": "ANTHROPIC_API_KEY",
}


def _has_key(model_string: str) -> bool:
    """Check if the provider for this model has an API key set."""
    for prefix, env_var in _PROVIDER_KEY_MAP.items():
        if model_string.startswith(prefix):
            return bool(os.environ.get(env_var, "").strip())
    return False


def get_tier_model_list() -> List[Dict[str, Any]]:
    """Build model_list filtered to providers with API keys present."""
    return [
        entry for entry in _ALL_TIER_MODELS
        if _has_key(entry["litellm_params"]["model"])
    ]


def create_router():
    """Create LiteLLM Router with tier model list and fallbacks."""
    from litellm import Router
    model_list = get_tier_model_list()
    if not model_list:
        raise RuntimeError(
            "No LLM providers configured. Set at least one API key in .env "
            "(OPENAI_API_KEY, GOOGLE_API_KEY, ANTHROPIC_API_KEY)."
        )
    return Router(
        model_list=model_list,
        num_retries=settings.api_max_retries,
        timeout=settings.api_timeout_seconds,
        enable_pre_call_checks=False,
    )


def get_router():
    """Return singleton Router instance."""
    global _tier_router
    if _tier_router is None:
        _tier_router = create_router()
    return _tier_router


def reset_router() -> None:
    """Drop the cached Router so the next call rebuilds it from the environment."""
    global _tier_router
    _tier_router = None

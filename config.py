"""Configuration settings for the takeoff review engine."""

from dotenv import load_dotenv

# Load .env into os.environ so litellm picks up provider keys (OPENAI_API_KEY, ...)
load_dotenv()

from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Dict


class Settings(BaseSettings):
    """Global settings for the review engine.

    Settings can be overridden via environment variables with TAKEOFF_REVIEW_ prefix.
    Example: TAKEOFF_REVIEW_AUDITOR_MODEL=gpt-4o
    """

    # Model config (tier aliases are resolved by the litellm Router)
    auditor_model: str = Field(
        default="review-text",
        description="Model for Reviewer 1 (item audit)"
    )
    rescanner_model: str = Field(
        default="review-vision",
        description="Vision-capable model for Reviewer 2 (plan rescan)"
    )
    validator_model: str = Field(
        default="review-text",
        description="Model for Reviewer 3 (quantity validation)"
    )

    # Call shape
    max_tokens_per_review_call: int = Field(
        default=16384,
        description="Maximum output tokens per reviewer call"
    )
    review_temperature: float = Field(
        default=0.2,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for reviewer calls"
    )
    review_parse_retries: int = Field(
        default=0,
        ge=0,
        description="Re-ask the model this many times when its response cannot be parsed"
    )
    max_existing_items_in_rescan_prompt: int = Field(
        default=20,
        ge=0,
        description="How many existing takeoff items the plan rescan prompt lists"
    )
    default_cost_code_standard: str = Field(
        default="csi-16",
        description="Cost-code standard used when the caller does not name one"
    )

    # Token pricing (per 1M tokens), used when the backend reports no cost
    input_token_cost_per_million: float = Field(
        default=2.50,
        description="Cost per 1M input tokens"
    )
    output_token_cost_per_million: float = Field(
        default=10.00,
        description="Cost per 1M output tokens"
    )

    # API settings
    api_timeout_seconds: float = Field(
        default=120.0,
        gt=0,
        description="Per-call timeout in seconds"
    )
    api_max_retries: int = Field(
        default=2,
        ge=0,
        description="Router retries on API failure"
    )

    model_config = {
        "env_prefix": "TAKEOFF_REVIEW_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",  # ignore extra env vars (e.g. OPENAI_API_KEY) not in schema
    }

    def calculate_cost(self, input_tokens: int, output_tokens: int) -> float:
        """Calculate cost in USD for given token usage."""
        input_cost = (input_tokens / 1_000_000) * self.input_token_cost_per_million
        output_cost = (output_tokens / 1_000_000) * self.output_token_cost_per_million
        return input_cost + output_cost


# Display names for the cost-code standards the catalog ships
COST_CODE_STANDARD_NAMES: Dict[str, str] = {
    "csi-16": "CSI MasterFormat 16-Division",
    "csi-50": "CSI MasterFormat 50-Division",
    "nahb": "NAHB Residential Cost Codes",
}


# Create singleton instance
settings = Settings()

"""Gemini token accounting for generated replies.

A reply can take several ``generate_content`` calls (one per tool-calling
step), so usage is collected per call, summed, and logged once per reply.
"""

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Gemini 2.5 Flash list prices, USD per token
INPUT_PRICE_PER_TOKEN = 0.30 / 1_000_000
OUTPUT_PRICE_PER_TOKEN = 2.50 / 1_000_000


@dataclass(frozen=True)
class TokenUsage:
    """Prompt and completion token counts for one or more Gemini calls."""

    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens

    @property
    def cost_usd(self) -> float:
        return (
            self.prompt_tokens * INPUT_PRICE_PER_TOKEN
            + self.completion_tokens * OUTPUT_PRICE_PER_TOKEN
        )


def extract_usage(response: object) -> TokenUsage:
    """Read token counts off a GenerateContentResponse.

    Missing ``usage_metadata`` or ``None`` counts are read as zero.
    """
    metadata = getattr(response, "usage_metadata", None)
    return TokenUsage(
        prompt_tokens=getattr(metadata, "prompt_token_count", 0) or 0,
        completion_tokens=getattr(metadata, "candidates_token_count", 0) or 0,
    )


def merge_usage(a: TokenUsage, b: TokenUsage) -> TokenUsage:
    return TokenUsage(
        prompt_tokens=a.prompt_tokens + b.prompt_tokens,
        completion_tokens=a.completion_tokens + b.completion_tokens,
    )


def log_usage(model: str, steps: int, usage: TokenUsage) -> None:
    """Emit one structured INFO record with the reply's token usage and cost.

    Args:
        model: Gemini model name.
        steps: Number of generate_content calls the reply took.
        usage: Token usage summed over all steps.
    """
    logger.info(
        "Gemini response complete",
        extra={
            "model": model,
            "steps": steps,
            "prompt_tokens": usage.prompt_tokens,
            "completion_tokens": usage.completion_tokens,
            "total_tokens": usage.total_tokens,
            "cost_usd": round(usage.cost_usd, 6),
        },
    )

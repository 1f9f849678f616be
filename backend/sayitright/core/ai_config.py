"""Generation limits per tier and model parameters"""

import math
from dataclasses import dataclass
from typing import Dict, Optional

GUEST = "guest"
FREE = "free"
PREMIUM = "premium"


@dataclass(frozen=True)
class TierLimits:
    """Static limits of one tier"""
    max_requests_per_day: int
    max_advanced_per_day: Optional[int]
    max_input_chars: int
    max_tokens_per_request: int
    allow_advanced: bool
    credit_cost_per_advanced: int = 0


USER_TIERS: Dict[str, TierLimits] = {
    GUEST: TierLimits(
        max_requests_per_day=3,
        max_advanced_per_day=3,
        max_input_chars=150,
        max_tokens_per_request=100,
        allow_advanced=True,
    ),
    FREE: TierLimits(
        max_requests_per_day=10,
        max_advanced_per_day=5,
        max_input_chars=300,
        max_tokens_per_request=200,
        allow_advanced=False,
    ),
    PREMIUM: TierLimits(
        max_requests_per_day=100,
        max_advanced_per_day=100,
        max_input_chars=600,
        max_tokens_per_request=400,
        allow_advanced=True,
        credit_cost_per_advanced=1,
    ),
}

# Output token budget per requested length
TOKEN_LIMITS: Dict[str, int] = {
    "short": 100,   # ~150 chars
    "medium": 200,  # ~300 chars
    "long": 400,    # ~600 chars
}

ADVANCED_BONUS_TOKENS = 300

# Draft character budget when a length option is chosen
LENGTH_INPUT_LIMITS: Dict[str, int] = {
    "short": 150,
    "medium": 300,
    "long": 600,
}

MODEL_TEMPERATURE = 0.7
MODEL_TOP_P = 0.9
MODEL_MAX_OUTPUT_TOKENS = 1000

PROMPT_OVERHEAD_TOKENS = 150


def get_max_tokens(tier: str, length: str, include_rationale: bool) -> int:
    """Token budget for one request, capped by the tier"""
    max_tokens = TOKEN_LIMITS[length]
    if include_rationale:
        max_tokens += ADVANCED_BONUS_TOKENS
    return min(max_tokens, USER_TIERS[tier].max_tokens_per_request)


def get_max_input_characters(total_tokens: int, output_tokens: int, language: str) -> int:
    """
    Approximate number of input characters left after the output budget.

    Korean averages 1.5 characters per token (conservative), English 4.
    """
    input_tokens = total_tokens - output_tokens - PROMPT_OVERHEAD_TOKENS
    chars_per_token = 1.5 if language == "ko" else 4
    return math.floor(input_tokens * chars_per_token)


def get_input_limits(tier: str, length: str, include_rationale: bool, language: str) -> dict:
    """Input/output size hints for the client"""
    total_tokens = get_max_tokens(tier, length, include_rationale)
    output_tokens = TOKEN_LIMITS[length]
    chars_per_token = 1.5 if language == "ko" else 4
    return {
        "max_characters": get_max_input_characters(total_tokens, output_tokens, language),
        "estimated_output_characters": math.floor(output_tokens * chars_per_token),
        "total_tokens": total_tokens,
    }

"""
Cost estimation for script generation runs.

Only output tokens are tracked per stage, so input tokens are estimated as a
fixed share of output. Prices are per 1M tokens and can be overridden per
call.
"""

from typing import Dict, Optional

from ..models import PipelineStats

# Configurable pricing constants (USD per 1M tokens unless noted)
PRICING_DEFAULTS: Dict[str, float] = {
    "haiku_input_per_m": 0.25,
    "haiku_output_per_m": 1.25,
    "sonnet_input_per_m": 3.0,
    "sonnet_output_per_m": 15.0,
    "opus_input_per_m": 15.0,
    "opus_output_per_m": 75.0,
    "input_token_ratio": 0.2,
    "embedding_per_run": 0.001,
}

# Which stages bill at which tier
TIER_STAGES: Dict[str, tuple] = {
    "haiku": ("validation",),
    "sonnet": ("hook_generation", "script_expansion", "shareability_scoring"),
    "opus": ("voice_transformation", "revision"),
}


def estimate_pipeline_cost(
    stages: PipelineStats,
    pricing: Optional[Dict[str, float]] = None,
) -> Dict:
    """Estimate the cost of a finished run from its stage token counts.

    Args:
        stages: Per-stage stats from the PipelineResult.
        pricing: Optional pricing overrides. Keys from PRICING_DEFAULTS.

    Returns:
        Dict with:
            total_cost: float - estimated cost (USD), 4 decimals
            tokens: dict - output tokens per tier
            breakdown: dict - cost per tier plus embeddings
    """
    p = {**PRICING_DEFAULTS, **(pricing or {})}
    by_stage = stages.tokens_by_stage()

    tokens = {
        tier: sum(by_stage.get(stage, 0) for stage in names)
        for tier, names in TIER_STAGES.items()
    }

    breakdown = {}
    for tier, count in tokens.items():
        output_cost = count * p[f"{tier}_output_per_m"] / 1_000_000
        input_cost = count * p["input_token_ratio"] * p[f"{tier}_input_per_m"] / 1_000_000
        breakdown[tier] = output_cost + input_cost
    breakdown["embedding"] = p["embedding_per_run"]

    total_cost = sum(breakdown.values())

    return {
        "total_cost": round(total_cost, 4),
        "tokens": tokens,
        "breakdown": {k: round(v, 4) for k, v in breakdown.items()},
    }


def calculate_estimated_cost(
    stages: PipelineStats,
    pricing: Optional[Dict[str, float]] = None,
) -> float:
    """Estimated run cost in USD, rounded to 4 decimals."""
    return estimate_pipeline_cost(stages, pricing)["total_cost"]

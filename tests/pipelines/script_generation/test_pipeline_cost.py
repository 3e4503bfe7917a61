"""
Tests for cost estimation - tier mapping, input-token estimate and pricing
overrides.
"""

import pytest

from viralscripts.pipelines.script_generation.models import (
    HookStageStats,
    PipelineStats,
    ShareabilityStageStats,
    TransformationStageStats,
    ValidationStageStats,
)
from viralscripts.pipelines.script_generation.services.cost_estimation import (
    calculate_estimated_cost,
    estimate_pipeline_cost,
)


def _stats(**tokens):
    return PipelineStats(
        hook_generation=HookStageStats(tokens_used=tokens.get("hooks", 0)),
        voice_transformation=TransformationStageStats(tokens_used=tokens.get("voice", 0)),
        validation=ValidationStageStats(tokens_used=tokens.get("validation", 0)),
    )


def test_tier_breakdown():
    cost = estimate_pipeline_cost(_stats(hooks=10_000, voice=10_000, validation=20_000))

    assert cost["tokens"] == {"haiku": 20_000, "sonnet": 10_000, "opus": 10_000}
    assert cost["breakdown"]["haiku"] == pytest.approx(0.026)
    assert cost["breakdown"]["sonnet"] == pytest.approx(0.156)
    assert cost["breakdown"]["opus"] == pytest.approx(0.78)
    assert cost["breakdown"]["embedding"] == pytest.approx(0.001)
    assert cost["total_cost"] == pytest.approx(0.963)


def test_shareability_bills_at_sonnet():
    stats = _stats()
    stats.shareability_scoring = ShareabilityStageStats(tokens_used=5_000)
    assert estimate_pipeline_cost(stats)["tokens"]["sonnet"] == 5_000


def test_no_tokens_costs_only_embedding():
    assert calculate_estimated_cost(_stats()) == pytest.approx(0.001)


def test_pricing_overrides():
    cost = calculate_estimated_cost(
        _stats(validation=1_000_000),
        pricing={"haiku_output_per_m": 1.0, "haiku_input_per_m": 0.0, "embedding_per_run": 0.0},
    )
    assert cost == pytest.approx(1.0)


def test_rounded_to_four_decimals():
    cost = calculate_estimated_cost(_stats(validation=1))
    assert cost == round(cost, 4)

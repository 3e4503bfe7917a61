"""
Tests for FinalizeNode - joining PASS scripts back through the index chain
and compiling the PipelineResult.
"""

import pytest
from unittest.mock import MagicMock

from pydantic_graph import End

from viralscripts.core.models import CreatorModel
from viralscripts.pipelines.script_generation.callbacks import PipelineCallbacks
from viralscripts.pipelines.script_generation.models import (
    ExpandedScript,
    GeneratedHook,
    ShareabilityScore,
    ShareabilityStageStats,
    TransformedScript,
    ValidationResult,
    ValidationSummary,
    Verdict,
)
from viralscripts.pipelines.script_generation.nodes import FinalizeNode
from viralscripts.pipelines.script_generation.nodes.finalize import build_final_scripts
from viralscripts.pipelines.script_generation.state import ScriptPipelineState


def _state():
    state = ScriptPipelineState(model_id="m1")
    state.model = CreatorModel(id="m1", name="Anna", stage_name="Anna Rose")
    state.hooks = [
        GeneratedHook(hook="Do you ever", hook_type="question", parasocial_levers=["direct_address"],
                      pcm_type="harmonizer", concept_id="c1"),
        GeneratedHook(hook="My toxic trait", hook_type="confession"),
    ]
    # expanded order differs from hook order
    state.expanded_scripts = [
        ExpandedScript(hook_index=1, hook="My toxic trait", script="x"),
        ExpandedScript(hook_index=0, hook="Do you ever", script="y", cta_type="rhetorical_close"),
    ]
    state.transformed_scripts = [
        TransformedScript(script_index=1, original_hook="Do you ever",
                          transformed_script="Do you ever " + "word " * 49, word_count=52),
        TransformedScript(script_index=0, original_hook="My toxic trait",
                          transformed_script="My toxic trait is ...", word_count=5),
    ]
    state.validations = [
        ValidationResult(script_index=0, voice_fidelity_score=91, verdict=Verdict.PASS),
        ValidationResult(script_index=1, voice_fidelity_score=40, verdict=Verdict.FAIL),
    ]
    state.validation_summary = ValidationSummary(total=2, passed=1, failed=1)
    state.share_scores = {
        "Do you ever": ShareabilityScore(index=0, content="Do you ever", total_score=66,
                                         primary_trigger="self_identification"),
    }
    state.stages.shareability_scoring = ShareabilityStageStats(scored=2, avg_score=60, high_potential_count=1)
    return state


def test_pass_scripts_joined_through_index_chain():
    scripts = build_final_scripts(_state())

    assert len(scripts) == 1
    script = scripts[0]
    assert script.hook == "Do you ever"
    assert script.hook_type == "question"
    assert script.parasocial_levers == ["direct_address"]
    assert script.pcm_type == "harmonizer"
    assert script.concept_id == "c1"
    assert script.cta_type == "rhetorical_close"
    assert script.voice_fidelity_score == 91
    assert script.shareability_score == 66
    assert script.share_trigger == "self_identification"
    assert script.estimated_duration_seconds == 21


def test_dangling_indices_fall_back():
    state = _state()
    state.transformed_scripts[0] = state.transformed_scripts[0].model_copy(update={"script_index": 9})
    script = build_final_scripts(state)[0]
    assert script.hook_type == "unknown"
    assert script.cta_type is None


def test_duplicate_pass_verdict_emits_script_once():
    state = _state()
    state.validations.append(ValidationResult(script_index=0, voice_fidelity_score=95, verdict=Verdict.PASS))

    scripts = build_final_scripts(state)

    assert [s.hook for s in scripts] == ["Do you ever"]
    assert scripts[0].voice_fidelity_score == 91


@pytest.mark.asyncio
async def test_finalize_returns_result():
    ctx = MagicMock()
    ctx.state = _state()
    ctx.state.started_at = None
    ctx.deps.callbacks = PipelineCallbacks()

    end = await FinalizeNode().run(ctx)

    assert isinstance(end, End)
    result = end.data
    assert result.model_name == "Anna Rose"
    assert result.final_script_count == 1
    assert result.validation_failed_count == 1
    assert result.pcm_distribution == {"harmonizer": 1}
    assert result.shareability_summary.avg_score == 60
    assert result.shareability_summary.top_triggers == {"self_identification": 1}
    assert ctx.state.current_step == "finalize_complete"

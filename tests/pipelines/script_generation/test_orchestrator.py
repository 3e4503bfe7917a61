"""
End-to-end tests for the script pipeline graph with mocked services.

Covers:
- Full run through every node to a PipelineResult
- Critical stage failure surfacing as StageFailedError
- Unexpected errors attributed to the running stage
- Saving scripts and recording the batch
- Revision loop termination and a five-hook run through the real voice transformation
"""

import json

import pytest
from unittest.mock import AsyncMock, MagicMock

from viralscripts.core.llm import LLMResponse
from viralscripts.core.models import CreatorModel, ScriptStatus
from viralscripts.pipelines.script_generation import (
    PipelineCallbacks,
    PipelineDependencies,
    PipelineOptions,
    StageFailedError,
    run_pipeline_and_save,
    run_script_pipeline,
    save_scripts_to_database,
)
from viralscripts.pipelines.script_generation.errors import ModelNotFoundError
from viralscripts.pipelines.script_generation.models import (
    ExpandedScript,
    FinalScript,
    GeneratedHook,
    HookGenerationResult,
    HookGenerationStats,
    ScriptExpansionResult,
    ShareabilityResult,
    ShareabilityScore,
    ShareabilityStats,
    TransformationStats,
    TransformedScript,
    ValidationBatchResult,
    ValidationResult,
    ValidationSummary,
    Verdict,
    VoiceTransformationResult,
)
from viralscripts.pipelines.script_generation.orchestrator import build_script_records
from viralscripts.pipelines.script_generation.services.voice_transformation import VoiceTransformationService

HOOKS = [
    GeneratedHook(hook="Do you ever think about him", hook_type="question", concept_id="c1"),
    GeneratedHook(hook="My toxic trait is this", hook_type="confession", concept_id="c1"),
]


def _final(hook="h", concept_id=None):
    return FinalScript(
        hook=hook, hook_type="question", script="s", word_count=50,
        estimated_duration_seconds=20, voice_fidelity_score=88, concept_id=concept_id,
    )


def _deps():
    model_repo = MagicMock()
    model_repo.get_model.return_value = CreatorModel(id="m1", name="Anna")

    hooks = MagicMock()
    hooks.get_recent_hooks.return_value = []
    hooks.generate_hooks = AsyncMock(return_value=HookGenerationResult(
        model_id="m1", hooks=HOOKS, stats=HookGenerationStats(total_generated=2, tokens_used=1000),
    ))
    hooks.save_generated_hooks.return_value = 2

    shareability = MagicMock()
    shareability.score_hooks = AsyncMock(return_value=ShareabilityResult(
        scores=[ShareabilityScore(index=0, content=HOOKS[0].hook, total_score=75, primary_trigger="tag_friend")],
        stats=ShareabilityStats(scored=1, avg_score=75, high_potential_count=1, tokens_used=200),
    ))

    expansion = MagicMock()
    expansion.expand_scripts = AsyncMock(return_value=ScriptExpansionResult(
        model_id="m1",
        scripts=[
            ExpandedScript(hook_index=i, hook=h.hook, script=f"{h.hook} body", word_count=5)
            for i, h in enumerate(HOOKS)
        ],
    ))

    transformation = MagicMock()
    transformation.get_approved_samples.return_value = []
    transformation.transform_scripts = AsyncMock(return_value=VoiceTransformationResult(
        model_id="m1",
        scripts=[
            TransformedScript(script_index=i, original_hook=h.hook,
                              transformed_script=f"{h.hook} in her voice", word_count=50)
            for i, h in enumerate(HOOKS)
        ],
        stats=TransformationStats(tokens_used=3000),
    ))

    validation = MagicMock()
    validation.validate_scripts = AsyncMock(return_value=ValidationBatchResult(
        model_id="m1",
        validations=[
            ValidationResult(script_index=0, voice_fidelity_score=90, verdict=Verdict.PASS),
            ValidationResult(script_index=1, voice_fidelity_score=30, verdict=Verdict.FAIL),
        ],
        summary=ValidationSummary(total=2, passed=1, failed=1, avg_fidelity_score=60),
        tokens_used=400,
    ))

    batches = MagicMock()
    batches.create_batch.return_value = "batch_20240101_abc123"

    script_repo = MagicMock()
    script_repo.insert_scripts.return_value = ["script-1"]

    return PipelineDependencies.model_construct(
        model_repo=model_repo,
        script_repo=script_repo,
        retrieval=MagicMock(),
        hooks=hooks,
        shareability=shareability,
        expansion=expansion,
        transformation=transformation,
        validation=validation,
        batches=batches,
        callbacks=PipelineCallbacks(),
    )


class TestRunScriptPipeline:

    @pytest.mark.asyncio
    async def test_full_run(self):
        deps = _deps()
        stages_started = []
        callbacks = PipelineCallbacks(on_stage_start=stages_started.append)

        result = await run_script_pipeline("m1", PipelineOptions(hook_count=2), deps=deps, callbacks=callbacks)

        assert result.model_name == "Anna"
        assert result.final_script_count == 1
        assert result.scripts[0].hook == HOOKS[0].hook
        assert result.scripts[0].shareability_score == 75
        assert result.validation_failed_count == 1
        assert result.total_tokens_used == 1000 + 200 + 3000 + 400
        assert stages_started == [
            "initialization", "hook_generation", "shareability_scoring",
            "script_expansion", "voice_transformation", "validation",
        ]
        # no revision needed: only PASS and FAIL verdicts
        assert deps.transformation.transform_scripts.await_count == 1

    @pytest.mark.asyncio
    async def test_empty_model_id(self):
        with pytest.raises(ValueError):
            await run_script_pipeline("", deps=_deps())

    @pytest.mark.asyncio
    async def test_missing_model(self):
        deps = _deps()
        deps.model_repo.get_model.return_value = None
        with pytest.raises(ModelNotFoundError):
            await run_script_pipeline("m1", deps=deps)

    @pytest.mark.asyncio
    async def test_critical_stage_failure(self):
        deps = _deps()
        cause = RuntimeError("anthropic overloaded")
        deps.expansion.expand_scripts = AsyncMock(side_effect=cause)

        with pytest.raises(StageFailedError) as exc_info:
            await run_script_pipeline("m1", deps=deps)

        assert exc_info.value.stage == "script_expansion"
        assert exc_info.value.__cause__ is cause

    @pytest.mark.asyncio
    async def test_unexpected_error_attributed_to_running_stage(self):
        deps = _deps()
        deps.transformation.get_approved_samples.side_effect = KeyError("samples")

        with pytest.raises(StageFailedError) as exc_info:
            await run_script_pipeline("m1", deps=deps)

        assert exc_info.value.stage == "voice_transformation"
        assert isinstance(exc_info.value.__cause__, KeyError)


class TestSaving:

    def test_records_are_drafts_grouped_by_concept(self):
        records = build_script_records("m1", [_final("a", "c1"), _final("b", "c1"), _final("c")], batch_id="b1")

        assert all(r.status == ScriptStatus.DRAFT for r in records)
        assert all(r.batch_id == "b1" for r in records)
        assert records[0].variation_group_id == records[1].variation_group_id
        assert records[0].variation_group_id is not None
        assert records[2].variation_group_id is None

    def test_explicit_variation_group_applies_to_all(self):
        records = build_script_records("m1", [_final("a", "c1"), _final("c")], variation_group_id="g1")
        assert [r.variation_group_id for r in records] == ["g1", "g1"]

    @pytest.mark.asyncio
    async def test_save_failure_reports_save_stage(self):
        repo = MagicMock()
        repo.insert_scripts.side_effect = RuntimeError("Failed to save scripts: timeout")
        errors = []

        with pytest.raises(StageFailedError) as exc_info:
            await save_scripts_to_database(
                "m1", [_final()], repo,
                callbacks=PipelineCallbacks(on_stage_error=lambda stage, e: errors.append(stage)),
            )

        assert exc_info.value.stage == "save"
        assert errors == ["save"]

    @pytest.mark.asyncio
    async def test_nothing_to_save(self):
        repo = MagicMock()
        assert await save_scripts_to_database("m1", [], repo) == []
        repo.insert_scripts.assert_not_called()

    @pytest.mark.asyncio
    async def test_run_and_save(self):
        deps = _deps()

        saved = await run_pipeline_and_save("m1", PipelineOptions(hook_count=2), deps=deps)

        assert saved.batch_id == "batch_20240101_abc123"
        assert saved.saved_script_ids == ["script-1"]
        assert saved.result.scripts[0].id == "script-1"
        deps.batches.create_batch.assert_called_once()
        records = deps.script_repo.insert_scripts.call_args.args[0]
        assert records[0].batch_id == "batch_20240101_abc123"
        assert records[0].model_id == "m1"


FIVE_HOOKS = [
    GeneratedHook(hook="So this guy at the gym asked for my number", hook_type="story", concept_id="c2"),
    GeneratedHook(hook="Like I said, he never texts back", hook_type="confession", concept_id="c2"),
    GeneratedHook(hook="Nobody talks about the morning after", hook_type="statement", concept_id="c3"),
    GeneratedHook(hook="Tell me you miss me without telling me", hook_type="challenge", concept_id="c3"),
    GeneratedHook(hook="My roommate found my diary", hook_type="story", concept_id="c4"),
]


def _always_revise(count):
    return ValidationBatchResult(
        model_id="m1",
        validations=[
            ValidationResult(script_index=i, voice_fidelity_score=70, verdict=Verdict.REVISE)
            for i in range(count)
        ],
        summary=ValidationSummary(total=count, needs_revision=count, avg_fidelity_score=70),
        tokens_used=100,
    )


def _chatty_llm(hooks):
    """LLM stand-in that opens every script with filler and splits it into paragraphs."""
    entries = [
        {
            "script_index": i,
            "transformed_script": f"Okay so like, {hook.hook}.\n\nAnd honestly?\n\nI still think about it.",
            "voice_fidelity_score": 85,
        }
        for i, hook in enumerate(hooks)
    ]
    llm = MagicMock()
    llm.complete = AsyncMock(return_value=LLMResponse(text=json.dumps(entries), output_tokens=500))
    return llm


class TestRevisionLoop:

    @pytest.mark.asyncio
    async def test_stops_after_max_attempts(self):
        deps = _deps()
        deps.validation.validate_scripts = AsyncMock(return_value=_always_revise(2))

        result = await run_script_pipeline(
            "m1", PipelineOptions(hook_count=2, auto_revise=True, max_revision_attempts=2), deps=deps
        )

        # one initial pass plus two revision attempts
        assert deps.transformation.transform_scripts.await_count == 3
        assert deps.validation.validate_scripts.await_count == 3
        assert result.final_script_count == 0
        assert result.stages.revision.attempts == 2
        assert result.stages.revision.scripts_revised == 4

    @pytest.mark.asyncio
    async def test_revision_disabled(self):
        deps = _deps()
        deps.validation.validate_scripts = AsyncMock(return_value=_always_revise(2))

        result = await run_script_pipeline(
            "m1", PipelineOptions(hook_count=2, auto_revise=False), deps=deps
        )

        assert deps.transformation.transform_scripts.await_count == 1
        assert deps.validation.validate_scripts.await_count == 1
        assert result.final_script_count == 0


class TestFiveHookRun:

    @pytest.mark.asyncio
    async def test_scripts_are_single_paragraph_and_open_with_hook(self):
        deps = _deps()
        deps.hooks.generate_hooks = AsyncMock(return_value=HookGenerationResult(
            model_id="m1", hooks=FIVE_HOOKS,
            stats=HookGenerationStats(total_generated=5, tokens_used=1000),
        ))
        deps.expansion.expand_scripts = AsyncMock(return_value=ScriptExpansionResult(
            model_id="m1",
            scripts=[
                ExpandedScript(hook_index=i, hook=h.hook, script=f"{h.hook}. Then it got weird.", word_count=12)
                for i, h in enumerate(FIVE_HOOKS)
            ],
        ))
        llm = _chatty_llm(FIVE_HOOKS)
        deps.transformation = VoiceTransformationService(llm, model="test-model")
        deps.validation.validate_scripts = AsyncMock(return_value=ValidationBatchResult(
            model_id="m1",
            validations=[
                ValidationResult(script_index=i, voice_fidelity_score=90, verdict=Verdict.PASS)
                for i in range(5)
            ],
            summary=ValidationSummary(total=5, passed=5, avg_fidelity_score=90),
            tokens_used=400,
        ))

        result = await run_script_pipeline("m1", PipelineOptions(hook_count=5), deps=deps)

        assert llm.complete.await_count == 1
        assert result.final_script_count == 5
        assert [s.hook for s in result.scripts] == [h.hook for h in FIVE_HOOKS]
        for script in result.scripts:
            assert "\n\n" not in script.script
            assert script.script.startswith(script.hook)
            assert not script.script.lower().startswith("okay")

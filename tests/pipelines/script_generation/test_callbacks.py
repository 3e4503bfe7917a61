"""
Tests for PipelineCallbacks and run_stage - sync/async hooks, retry policy
and error conversion.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from viralscripts.pipelines.script_generation.callbacks import (
    PipelineCallbacks,
    run_stage,
    with_retry,
)
from viralscripts.pipelines.script_generation.errors import (
    ModelNotFoundError,
    PipelineError,
    StageFailedError,
)
from viralscripts.pipelines.script_generation.models import HookStageStats, PipelineStage
from viralscripts.pipelines.script_generation.state import ScriptPipelineState

PATCH_SLEEP = "viralscripts.pipelines.script_generation.callbacks.asyncio.sleep"


def _ctx(callbacks=None, **state_kwargs):
    ctx = MagicMock()
    ctx.deps.callbacks = callbacks or PipelineCallbacks()
    ctx.state = ScriptPipelineState(model_id="m1", **state_kwargs)
    return ctx


class TestPipelineCallbacks:

    @pytest.mark.asyncio
    async def test_sync_and_async_hooks(self):
        events = []

        async def on_complete(stage, stats):
            events.append(("complete", stage, stats))

        callbacks = PipelineCallbacks(
            on_stage_start=lambda stage: events.append(("start", stage)),
            on_stage_complete=on_complete,
        )

        await callbacks.stage_start(PipelineStage.HOOK_GENERATION)
        await callbacks.stage_complete(PipelineStage.HOOK_GENERATION, {"generated": 3})

        assert events == [
            ("start", "hook_generation"),
            ("complete", "hook_generation", {"generated": 3}),
        ]

    @pytest.mark.asyncio
    async def test_model_stats_dumped_to_dict(self):
        on_complete = MagicMock()
        callbacks = PipelineCallbacks(on_stage_complete=on_complete)

        await callbacks.stage_complete(PipelineStage.HOOK_GENERATION, HookStageStats(generated=4))

        stats = on_complete.call_args.args[1]
        assert stats["generated"] == 4

    @pytest.mark.asyncio
    async def test_unset_hooks_are_noops(self):
        callbacks = PipelineCallbacks()
        await callbacks.stage_start(PipelineStage.VALIDATION)
        await callbacks.stage_error(PipelineStage.VALIDATION, RuntimeError("x"))
        await callbacks.progress(PipelineStage.VALIDATION, 1, 2)

    @pytest.mark.asyncio
    async def test_progress(self):
        on_progress = MagicMock()
        await PipelineCallbacks(on_progress=on_progress).progress(PipelineStage.SCRIPT_EXPANSION, 2, 5)
        on_progress.assert_called_once_with("script_expansion", 2, 5)


class TestWithRetry:

    @pytest.mark.asyncio
    async def test_backoff_then_failure(self):
        operation = AsyncMock(side_effect=RuntimeError("boom"))
        with patch(PATCH_SLEEP, new=AsyncMock()) as sleep:
            with pytest.raises(StageFailedError) as exc_info:
                await with_retry(operation, PipelineStage.SCRIPT_EXPANSION, max_retries=2)

        assert operation.await_count == 3
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert exc_info.value.stage == "script_expansion"

    @pytest.mark.asyncio
    async def test_recovers(self):
        operation = AsyncMock(side_effect=[RuntimeError("once"), "ok"])
        with patch(PATCH_SLEEP, new=AsyncMock()):
            assert await with_retry(operation, PipelineStage.VALIDATION, max_retries=2) == "ok"


class TestRunStage:

    @pytest.mark.asyncio
    async def test_success_returns_value(self):
        ctx = _ctx()
        assert await run_stage(ctx, PipelineStage.VALIDATION, AsyncMock(return_value=42)) == 42
        assert ctx.state.error is None

    @pytest.mark.asyncio
    async def test_failure_wrapped_and_recorded(self):
        on_error = MagicMock()
        ctx = _ctx(PipelineCallbacks(on_stage_error=on_error))
        cause = ValueError("bad json")

        with pytest.raises(StageFailedError) as exc_info:
            await run_stage(ctx, PipelineStage.HOOK_GENERATION, AsyncMock(side_effect=cause))

        assert exc_info.value.cause is cause
        assert exc_info.value.__cause__ is cause
        assert ctx.state.error_step == "hook_generation"
        assert "bad json" in ctx.state.error
        assert on_error.call_args.args[0] == "hook_generation"

    @pytest.mark.asyncio
    async def test_pipeline_error_passes_through(self):
        ctx = _ctx()
        error = ModelNotFoundError("m1")

        with pytest.raises(PipelineError) as exc_info:
            await run_stage(ctx, PipelineStage.INITIALIZATION, AsyncMock(side_effect=error))

        assert exc_info.value is error
        assert exc_info.value.stage == "initialization"

    @pytest.mark.asyncio
    async def test_retry_only_when_enabled(self):
        operation = AsyncMock(side_effect=[RuntimeError("once"), "ok"])
        ctx = _ctx(retry_failed_stages=True, max_retries=1)
        with patch(PATCH_SLEEP, new=AsyncMock()):
            assert await run_stage(ctx, PipelineStage.VOICE_TRANSFORMATION, operation) == "ok"

        operation = AsyncMock(side_effect=[RuntimeError("once"), "ok"])
        with pytest.raises(StageFailedError):
            await run_stage(_ctx(), PipelineStage.VOICE_TRANSFORMATION, operation)
        assert operation.await_count == 1

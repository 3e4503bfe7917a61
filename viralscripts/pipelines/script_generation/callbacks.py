"""
Progress callbacks and the shared stage runner.

Callers pass a PipelineCallbacks to run_script_pipeline() to follow a run
stage by stage. Every hook is optional and may be a plain function or a
coroutine function.

run_stage() wraps a critical stage: it reports start and error, applies the
optional retry policy and converts failures into StageFailedError with the
original exception attached.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, TypeVar

from .errors import PipelineError, StageFailedError
from .models.enums import PipelineStage

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRY_BACKOFF_BASE_SECONDS = 1.0


@dataclass
class PipelineCallbacks:
    """
    Optional hooks fired as the pipeline moves through its stages.

    Attributes:
        on_stage_start: (stage) before a stage starts
        on_stage_complete: (stage, stats_dict) after a stage succeeds
        on_stage_error: (stage, error) when a stage fails or degrades
        on_progress: (stage, done, total) item progress within a stage
    """

    on_stage_start: Optional[Callable[..., Any]] = None
    on_stage_complete: Optional[Callable[..., Any]] = None
    on_stage_error: Optional[Callable[..., Any]] = None
    on_progress: Optional[Callable[..., Any]] = None

    @staticmethod
    async def _fire(callback: Optional[Callable[..., Any]], *args: Any) -> None:
        if callback is None:
            return
        result = callback(*args)
        if inspect.isawaitable(result):
            await result

    async def stage_start(self, stage: PipelineStage) -> None:
        await self._fire(self.on_stage_start, stage.value)

    async def stage_complete(self, stage: PipelineStage, stats: Any = None) -> None:
        if hasattr(stats, "model_dump"):
            stats = stats.model_dump()
        await self._fire(self.on_stage_complete, stage.value, stats or {})

    async def stage_error(self, stage: PipelineStage, error: BaseException) -> None:
        await self._fire(self.on_stage_error, stage.value, error)

    async def progress(self, stage: PipelineStage, done: int, total: int) -> None:
        await self._fire(self.on_progress, stage.value, done, total)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    stage: PipelineStage,
    max_retries: int,
) -> T:
    """
    Run operation, retrying with exponential backoff (1s, 2s, 4s, ...).

    Raises:
        StageFailedError: After the last attempt fails
    """
    last_error: Optional[Exception] = None
    for attempt in range(max_retries + 1):
        try:
            return await operation()
        except Exception as e:
            last_error = e
            if attempt < max_retries:
                delay = RETRY_BACKOFF_BASE_SECONDS * (2 ** attempt)
                logger.warning(
                    f"Stage {stage.value} attempt {attempt + 1} failed, retrying in {delay:.0f}s: {e}"
                )
                await asyncio.sleep(delay)

    raise StageFailedError(stage, last_error) from last_error


async def run_stage(
    ctx: Any,
    stage: PipelineStage,
    operation: Callable[[], Awaitable[T]],
) -> T:
    """
    Run one critical stage for a node.

    Args:
        ctx: GraphRunContext carrying ScriptPipelineState and PipelineDependencies
        stage: Stage being run
        operation: Zero-argument coroutine factory doing the stage's work

    Returns:
        Whatever operation returns

    Raises:
        PipelineError: StageFailedError wrapping the cause, or a PipelineError
            raised by the operation itself
    """
    callbacks: PipelineCallbacks = ctx.deps.callbacks
    await callbacks.stage_start(stage)

    try:
        if ctx.state.retry_failed_stages:
            return await with_retry(operation, stage, ctx.state.max_retries)
        return await operation()
    except Exception as e:
        error: PipelineError = e if isinstance(e, PipelineError) else StageFailedError(stage, e)
        ctx.state.error = str(error)
        ctx.state.error_step = stage.value
        logger.error(f"Stage {stage.value} failed: {error}")
        await callbacks.stage_error(stage, error)
        if error is e:
            raise
        raise error from e

"""
TransformVoiceNode - Expanded scripts rewritten in the creator's voice.
"""

import logging
from dataclasses import dataclass
from typing import ClassVar

from pydantic_graph import BaseNode, GraphRunContext

from ..callbacks import run_stage
from ..dependencies import PipelineDependencies
from ..models import PipelineStage, TransformationStageStats
from ..state import ScriptPipelineState
from ...metadata import NodeMetadata

logger = logging.getLogger(__name__)

TRANSFORM_BATCH_SIZE = 5
TRANSFORM_TEMPERATURE = 0.7


@dataclass
class TransformVoiceNode(BaseNode[ScriptPipelineState]):
    """
    Step 5: Voice transformation with hook-opener preservation.

    Reads: model, expanded_scripts
    Writes: approved_samples, transformed_scripts, stages.voice_transformation
    Services: VoiceTransformationService.get_approved_samples(), .transform_scripts()
    """

    metadata: ClassVar[NodeMetadata] = NodeMetadata(
        inputs=["model", "expanded_scripts"],
        outputs=["approved_samples", "transformed_scripts", "stages.voice_transformation"],
        services=["transformation.get_approved_samples", "transformation.transform_scripts"],
        llm="Claude Opus",
        llm_purpose="Rewrite scripts in the creator's exact voice",
        stage=PipelineStage.VOICE_TRANSFORMATION.value,
    )

    async def run(
        self,
        ctx: GraphRunContext[ScriptPipelineState, PipelineDependencies]
    ) -> "ValidateScriptsNode":
        from .validate_scripts import ValidateScriptsNode

        scripts = ctx.state.expanded_scripts
        logger.info(f"Step 5: Transforming {len(scripts)} scripts into voice...")
        ctx.state.current_step = "transform_voice"
        stage = PipelineStage.VOICE_TRANSFORMATION

        ctx.state.approved_samples = ctx.deps.transformation.get_approved_samples(ctx.state.model.id)

        result = await run_stage(ctx, stage, lambda: ctx.deps.transformation.transform_scripts(
            ctx.state.model,
            scripts,
            batch_size=TRANSFORM_BATCH_SIZE,
            temperature=TRANSFORM_TEMPERATURE,
            approved_samples=ctx.state.approved_samples,
        ))

        ctx.state.transformed_scripts = result.scripts
        ctx.state.stages.voice_transformation = TransformationStageStats(
            transformed=len(result.scripts),
            avg_fidelity=result.stats.avg_fidelity_score,
            time_ms=result.stats.transformation_time_ms,
            tokens_used=result.stats.tokens_used,
        )
        await ctx.deps.callbacks.stage_complete(stage, ctx.state.stages.voice_transformation)
        await ctx.deps.callbacks.progress(stage, len(result.scripts), len(scripts))

        ctx.state.mark_step_complete("transform_voice")
        logger.info(f"Transformed {len(result.scripts)} scripts")

        return ValidateScriptsNode()

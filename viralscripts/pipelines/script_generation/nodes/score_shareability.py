"""
ScoreShareabilityNode - Share-potential scores for the generated hooks.

Non-critical: a scoring failure only loses the shareability fields.
"""

import logging
from dataclasses import dataclass
from typing import ClassVar

from pydantic_graph import BaseNode, GraphRunContext

from ..dependencies import PipelineDependencies
from ..errors import StageFailedError
from ..models import PipelineStage, ShareabilityStageStats
from ..state import ScriptPipelineState
from ...metadata import NodeMetadata

logger = logging.getLogger(__name__)


@dataclass
class ScoreShareabilityNode(BaseNode[ScriptPipelineState]):
    """
    Step 3b: Score hooks for shareability.

    Reads: hooks
    Writes: share_scores (keyed by hook text), stages.shareability_scoring
    Services: ShareabilityScoringService.score_hooks()
    """

    metadata: ClassVar[NodeMetadata] = NodeMetadata(
        inputs=["hooks"],
        outputs=["share_scores", "stages.shareability_scoring"],
        services=["shareability.score_hooks"],
        llm="Claude Sonnet",
        llm_purpose="Rubric-score hooks for share potential",
        stage=PipelineStage.SHAREABILITY_SCORING.value,
    )

    async def run(
        self,
        ctx: GraphRunContext[ScriptPipelineState, PipelineDependencies]
    ) -> "ExpandScriptsNode":
        from .expand_scripts import ExpandScriptsNode

        logger.info(f"Step 3b: Scoring {len(ctx.state.hooks)} hooks for shareability...")
        ctx.state.current_step = "score_shareability"
        stage = PipelineStage.SHAREABILITY_SCORING

        await ctx.deps.callbacks.stage_start(stage)

        try:
            result = await ctx.deps.shareability.score_hooks([h.hook for h in ctx.state.hooks])
        except Exception as e:
            logger.warning(f"Shareability scoring failed, continuing without scores: {e}")
            await ctx.deps.callbacks.stage_error(stage, StageFailedError(stage, e))
            return ExpandScriptsNode()

        ctx.state.share_scores = {s.content: s for s in result.scores}
        ctx.state.stages.shareability_scoring = ShareabilityStageStats(
            scored=result.stats.scored,
            avg_score=result.stats.avg_score,
            high_potential_count=result.stats.high_potential_count,
            time_ms=result.stats.scoring_time_ms,
            tokens_used=result.stats.tokens_used,
        )
        await ctx.deps.callbacks.stage_complete(stage, ctx.state.stages.shareability_scoring)

        ctx.state.mark_step_complete("score_shareability")
        logger.info(
            f"Shareability: avg {result.stats.avg_score}, "
            f"{result.stats.high_potential_count} high potential"
        )

        return ExpandScriptsNode()

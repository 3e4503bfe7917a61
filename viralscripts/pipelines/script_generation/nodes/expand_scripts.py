"""
ExpandScriptsNode - Hooks expanded into full scripts.
"""

import logging
from dataclasses import dataclass
from typing import ClassVar

from pydantic_graph import BaseNode, GraphRunContext

from ..callbacks import run_stage
from ..dependencies import PipelineDependencies
from ..models import ExpansionStageStats, PipelineStage
from ..state import ScriptPipelineState
from ...metadata import NodeMetadata

logger = logging.getLogger(__name__)


@dataclass
class ExpandScriptsNode(BaseNode[ScriptPipelineState]):
    """
    Step 4: Expand every hook into a duration-targeted script.

    Reads: model, hooks, corpus_matches, target_duration, cta_style
    Writes: expanded_scripts, stages.script_expansion
    Services: ScriptExpansionService.expand_scripts()
    """

    metadata: ClassVar[NodeMetadata] = NodeMetadata(
        inputs=["model", "hooks", "corpus_matches", "target_duration", "cta_style"],
        outputs=["expanded_scripts", "stages.script_expansion"],
        services=["expansion.expand_scripts"],
        llm="Claude Sonnet",
        llm_purpose="Expand hooks into hook/tension/payload/closer scripts",
        stage=PipelineStage.SCRIPT_EXPANSION.value,
    )

    async def run(
        self,
        ctx: GraphRunContext[ScriptPipelineState, PipelineDependencies]
    ) -> "TransformVoiceNode":
        from .transform_voice import TransformVoiceNode

        hooks = ctx.state.hooks
        logger.info(f"Step 4: Expanding {len(hooks)} hooks ({ctx.state.target_duration})...")
        ctx.state.current_step = "expand_scripts"
        stage = PipelineStage.SCRIPT_EXPANSION

        result = await run_stage(ctx, stage, lambda: ctx.deps.expansion.expand_scripts(
            ctx.state.model,
            hooks,
            corpus_matches=ctx.state.corpus_matches,
            target_duration=ctx.state.target_duration,
            cta_type=ctx.state.cta_style,
        ))

        ctx.state.expanded_scripts = result.scripts
        ctx.state.stages.script_expansion = ExpansionStageStats(
            expanded=len(result.scripts),
            avg_words=result.stats.avg_word_count,
            time_ms=result.stats.expansion_time_ms,
            tokens_used=result.stats.tokens_used,
        )
        await ctx.deps.callbacks.stage_complete(stage, ctx.state.stages.script_expansion)
        await ctx.deps.callbacks.progress(stage, len(result.scripts), len(hooks))

        ctx.state.mark_step_complete("expand_scripts")
        logger.info(f"Expanded {len(result.scripts)} scripts")

        return TransformVoiceNode()

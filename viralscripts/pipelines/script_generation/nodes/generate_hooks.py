"""
GenerateHooksNode - Hook candidates in the creator's voice.
"""

import logging
from dataclasses import dataclass
from typing import ClassVar, Union

from pydantic_graph import BaseNode, GraphRunContext

from ..callbacks import run_stage
from ..dependencies import PipelineDependencies
from ..models import HookStageStats, PipelineStage
from ..state import ScriptPipelineState
from ...metadata import NodeMetadata

logger = logging.getLogger(__name__)

HOOK_TEMPERATURE = 0.9


@dataclass
class GenerateHooksNode(BaseNode[ScriptPipelineState]):
    """
    Step 3: Generate hooks, then record them for future de-duplication.

    Reads: model, corpus_matches, hook_count, variations_per_concept,
           enable_pcm_tracking
    Writes: hooks, variation_sets, stages.hook_generation
    Services: HookGenerationService.get_recent_hooks(), .generate_hooks(),
              .save_generated_hooks()
    """

    metadata: ClassVar[NodeMetadata] = NodeMetadata(
        inputs=["model", "corpus_matches", "hook_count", "variations_per_concept",
                "enable_pcm_tracking"],
        outputs=["hooks", "variation_sets", "stages.hook_generation"],
        services=["hooks.get_recent_hooks", "hooks.generate_hooks", "hooks.save_generated_hooks"],
        llm="Claude Sonnet",
        llm_purpose="Generate scroll-stopping hooks by type distribution",
        stage=PipelineStage.HOOK_GENERATION.value,
    )

    async def run(
        self,
        ctx: GraphRunContext[ScriptPipelineState, PipelineDependencies]
    ) -> Union["ScoreShareabilityNode", "ExpandScriptsNode"]:
        from .score_shareability import ScoreShareabilityNode
        from .expand_scripts import ExpandScriptsNode

        logger.info(f"Step 3: Generating {ctx.state.hook_count} hooks...")
        ctx.state.current_step = "generate_hooks"
        model = ctx.state.model
        stage = PipelineStage.HOOK_GENERATION

        try:
            recent_hooks = ctx.deps.hooks.get_recent_hooks(model.id)
        except Exception as e:
            logger.warning(f"Could not load recent hooks, generating without avoid-list: {e}")
            recent_hooks = []

        result = await run_stage(ctx, stage, lambda: ctx.deps.hooks.generate_hooks(
            model,
            ctx.state.corpus_matches,
            count=ctx.state.hook_count,
            temperature=HOOK_TEMPERATURE,
            variations_per_concept=ctx.state.variations_per_concept,
            enable_pcm_tracking=ctx.state.enable_pcm_tracking,
            recent_hooks=recent_hooks,
        ))

        ctx.state.hooks = result.hooks
        ctx.state.variation_sets = result.variation_sets
        ctx.state.stages.hook_generation = HookStageStats(
            generated=len(result.hooks),
            by_pcm_type=result.stats.by_pcm_type,
            variation_sets_count=result.stats.variation_sets_count,
            time_ms=result.stats.generation_time_ms,
            tokens_used=result.stats.tokens_used,
        )
        await ctx.deps.callbacks.stage_complete(stage, ctx.state.stages.hook_generation)
        await ctx.deps.callbacks.progress(stage, len(result.hooks), ctx.state.hook_count)

        saved = ctx.deps.hooks.save_generated_hooks(model.id, result.hooks)
        logger.debug(f"Tracked {saved} generated hooks")

        ctx.state.mark_step_complete("generate_hooks")
        logger.info(f"Generated {len(result.hooks)} hooks")

        if ctx.state.enable_shareability and ctx.state.hooks:
            return ScoreShareabilityNode()
        return ExpandScriptsNode()

"""
FinalizeNode - PASS scripts assembled into the PipelineResult.
"""

import logging
import time
from collections import Counter
from dataclasses import dataclass
from typing import ClassVar, Dict, List, Optional

from pydantic_graph import BaseNode, End, GraphRunContext

from ..dependencies import PipelineDependencies
from ..models import (
    FinalScript,
    PipelineResult,
    ShareabilitySummary,
    Verdict,
)
from ..state import ScriptPipelineState
from ..utils import round_half_up
from ...metadata import NodeMetadata

logger = logging.getLogger(__name__)

WORDS_PER_SECOND = 2.5


def build_final_scripts(state: ScriptPipelineState) -> List[FinalScript]:
    """
    Join each PASS script back to its expanded script, hook, validation and
    shareability score.

    Lookup chain: validation.script_index -> transformed_scripts slot,
    transformed.script_index -> expanded_scripts, expanded.hook_index -> hooks.
    """
    final: List[FinalScript] = []
    emitted = set()

    for validation in state.validations:
        if validation.verdict != Verdict.PASS:
            continue
        slot = validation.script_index
        if not 0 <= slot < len(state.transformed_scripts):
            continue
        if slot in emitted:
            logger.warning(f"Duplicate PASS verdict for script_index {slot}, keeping the first")
            continue
        emitted.add(slot)
        script = state.transformed_scripts[slot]

        expanded = None
        if 0 <= script.script_index < len(state.expanded_scripts):
            expanded = state.expanded_scripts[script.script_index]

        hook = None
        if expanded is not None and 0 <= expanded.hook_index < len(state.hooks):
            hook = state.hooks[expanded.hook_index]

        share = state.share_scores.get(script.original_hook)

        final.append(FinalScript(
            hook=script.original_hook,
            hook_type=hook.hook_type if hook else "unknown",
            script=script.transformed_script,
            word_count=script.word_count,
            estimated_duration_seconds=round_half_up(script.word_count / WORDS_PER_SECOND),
            voice_fidelity_score=validation.voice_fidelity_score or script.voice_fidelity_score,
            parasocial_levers=hook.parasocial_levers if hook else [],
            concept_id=hook.concept_id if hook else None,
            variation_strategy=hook.variation_strategy if hook else None,
            pcm_type=hook.pcm_type if hook else None,
            shareability_score=share.total_score if share else None,
            share_trigger=share.primary_trigger if share else None,
            share_prediction=share.share_prediction if share else None,
            emotional_response=share.emotional_response if share else None,
            cta_type=expanded.cta_type if expanded else None,
        ))

    return final


def pcm_distribution(scripts: List[FinalScript]) -> Optional[Dict[str, int]]:
    counts = Counter(s.pcm_type for s in scripts if s.pcm_type)
    return dict(counts) if counts else None


@dataclass
class FinalizeNode(BaseNode[ScriptPipelineState]):
    """
    Step 8: Keep PASS scripts and compile the run result.

    FAIL scripts and scripts still REVISE after the last attempt are dropped.

    Reads: validations, transformed_scripts, expanded_scripts, hooks,
           share_scores, variation_sets, stages, started_at
    Writes: (none - returns End with PipelineResult)
    Services: (none)
    """

    metadata: ClassVar[NodeMetadata] = NodeMetadata(
        inputs=["validations", "transformed_scripts", "expanded_scripts", "hooks",
                "share_scores", "variation_sets", "stages", "started_at"],
        outputs=[],
        services=[],
    )

    async def run(
        self,
        ctx: GraphRunContext[ScriptPipelineState, PipelineDependencies]
    ) -> End[PipelineResult]:
        logger.info("Step 8: Compiling final scripts...")
        state = ctx.state
        state.current_step = "finalize"

        scripts = build_final_scripts(state)

        shareability_summary = None
        if state.enable_shareability and state.stages.shareability_scoring is not None:
            shareability_summary = ShareabilitySummary(
                avg_score=state.stages.shareability_scoring.avg_score,
                high_potential_count=state.stages.shareability_scoring.high_potential_count,
                top_triggers=dict(Counter(s.share_trigger for s in scripts if s.share_trigger)),
            )

        started = state.started_at or time.time()
        result = PipelineResult(
            model_id=state.model_id,
            model_name=state.model.display_name if state.model else "",
            scripts=scripts,
            stages=state.stages,
            hooks=state.hooks,
            variation_sets=state.variation_sets,
            pcm_distribution=pcm_distribution(scripts),
            shareability_summary=shareability_summary,
            validation_failed_count=state.validation_summary.failed if state.validation_summary else 0,
            total_time_ms=int((time.time() - started) * 1000),
            total_tokens_used=state.total_tokens,
            final_script_count=len(scripts),
        )

        state.mark_step_complete("finalize")
        logger.info(
            f"Pipeline complete: {len(scripts)} scripts passed "
            f"({result.total_tokens_used} tokens, {result.total_time_ms}ms)"
        )

        return End(result)

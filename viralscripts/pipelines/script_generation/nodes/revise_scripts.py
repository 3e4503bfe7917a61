"""
ReviseScriptsNode - Bounded re-transformation of REVISE scripts.

Loops on itself once per attempt. Each attempt re-transforms only the
REVISE subset at a lower temperature, writes the results back into their
original slots, then re-validates the whole list.
"""

import logging
import time
from dataclasses import dataclass
from typing import ClassVar, Dict, List, Union

from pydantic_graph import BaseNode, GraphRunContext

from ..callbacks import run_stage
from ..dependencies import PipelineDependencies
from ..models import ExpandedScript, PipelineStage, TransformedScript
from ..services.script_validation import get_scripts_needing_revision
from ..state import ScriptPipelineState
from ...metadata import NodeMetadata

logger = logging.getLogger(__name__)

REVISION_BATCH_SIZE = 5
REVISION_TEMPERATURE = 0.5


def merge_revisions(
    current: List[TransformedScript],
    revised: List[TransformedScript],
    subset_to_slot: Dict[int, int],
) -> List[TransformedScript]:
    """
    Write revised scripts back into the current list.

    Each revised script's script_index is a position in the revision subset;
    subset_to_slot maps it to a position in current. The replacement keeps
    the slot's original script_index so it still points at its expanded
    script.

    Returns:
        A new list; slots with no revision are unchanged
    """
    merged = list(current)
    for script in revised:
        slot = subset_to_slot.get(script.script_index)
        if slot is None:
            logger.warning(f"Revision result {script.script_index} has no matching slot, dropping")
            continue
        merged[slot] = script.model_copy(update={"script_index": current[slot].script_index})
    return merged


@dataclass
class ReviseScriptsNode(BaseNode[ScriptPipelineState]):
    """
    Step 7: Auto-revision loop.

    Exits to FinalizeNode when auto_revise is off, attempts are exhausted or
    no script needs revision.

    Reads: auto_revise, max_revision_attempts, revision_attempts,
           transformed_scripts, validations, approved_samples
    Writes: transformed_scripts, validations, validation_summary,
            revision_attempts, scripts_revised, stages.revision,
            stages.validation
    Services: VoiceTransformationService.transform_scripts(),
              ScriptValidationService.validate_scripts()
    """

    metadata: ClassVar[NodeMetadata] = NodeMetadata(
        inputs=["auto_revise", "max_revision_attempts", "revision_attempts",
                "transformed_scripts", "validations", "approved_samples"],
        outputs=["transformed_scripts", "validations", "validation_summary",
                 "revision_attempts", "scripts_revised", "stages.revision", "stages.validation"],
        services=["transformation.transform_scripts", "validation.validate_scripts"],
        llm="Claude Opus + Claude Haiku",
        llm_purpose="Re-transform REVISE scripts and re-validate the full set",
        stage=PipelineStage.REVISION.value,
    )

    async def run(
        self,
        ctx: GraphRunContext[ScriptPipelineState, PipelineDependencies]
    ) -> Union["ReviseScriptsNode", "FinalizeNode"]:
        from .finalize import FinalizeNode

        state = ctx.state
        if not state.auto_revise or state.revision_attempts >= state.max_revision_attempts:
            return FinalizeNode()

        pairs = get_scripts_needing_revision(state.transformed_scripts, state.validations)
        if not pairs:
            logger.info("Step 7: No scripts need revision")
            return FinalizeNode()

        state.revision_attempts += 1
        attempt = state.revision_attempts
        logger.info(f"Step 7: Revision attempt {attempt}: {len(pairs)} scripts...")
        state.current_step = "revise_scripts"
        start = time.time()

        subset_to_slot = {i: v.script_index for i, (_, v) in enumerate(pairs)}
        to_revise = [
            ExpandedScript(
                hook_index=script.script_index,
                hook=script.original_hook,
                script=script.transformed_script,
                word_count=script.word_count,
            )
            for script, _ in pairs
        ]

        stage = PipelineStage.REVISION
        result = await run_stage(ctx, stage, lambda: ctx.deps.transformation.transform_scripts(
            state.model,
            to_revise,
            batch_size=REVISION_BATCH_SIZE,
            temperature=REVISION_TEMPERATURE,
            approved_samples=state.approved_samples,
        ))

        state.transformed_scripts = merge_revisions(
            state.transformed_scripts, result.scripts, subset_to_slot
        )
        state.scripts_revised += len(result.scripts)

        revision = state.stages.revision
        revision.attempts = attempt
        revision.scripts_revised = state.scripts_revised
        revision.tokens_used += result.stats.tokens_used
        revision.time_ms += int((time.time() - start) * 1000)
        await ctx.deps.callbacks.stage_complete(stage, revision)

        validation = await run_stage(ctx, PipelineStage.VALIDATION, lambda: ctx.deps.validation.validate_scripts(
            state.model,
            state.transformed_scripts,
            pass_threshold=state.min_fidelity_score,
        ))
        state.apply_validation(validation)

        state.mark_step_complete("revise_scripts")
        logger.info(
            f"After revision {attempt}: {validation.summary.passed} pass, "
            f"{validation.summary.needs_revision} revise, {validation.summary.failed} fail"
        )

        return ReviseScriptsNode()

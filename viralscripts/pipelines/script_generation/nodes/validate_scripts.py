"""
ValidateScriptsNode - Voice fidelity verdicts for the transformed scripts.
"""

import logging
from dataclasses import dataclass
from typing import ClassVar

from pydantic_graph import BaseNode, GraphRunContext

from ..callbacks import run_stage
from ..dependencies import PipelineDependencies
from ..models import PipelineStage
from ..state import ScriptPipelineState
from ...metadata import NodeMetadata

logger = logging.getLogger(__name__)


@dataclass
class ValidateScriptsNode(BaseNode[ScriptPipelineState]):
    """
    Step 6: Validate every transformed script.

    Reads: model, transformed_scripts, min_fidelity_score
    Writes: validations, validation_summary, stages.validation
    Services: ScriptValidationService.validate_scripts()
    """

    metadata: ClassVar[NodeMetadata] = NodeMetadata(
        inputs=["model", "transformed_scripts", "min_fidelity_score"],
        outputs=["validations", "validation_summary", "stages.validation"],
        services=["validation.validate_scripts"],
        llm="Claude Haiku",
        llm_purpose="Score voice fidelity and flag AI tells and boundary violations",
        stage=PipelineStage.VALIDATION.value,
    )

    async def run(
        self,
        ctx: GraphRunContext[ScriptPipelineState, PipelineDependencies]
    ) -> "ReviseScriptsNode":
        from .revise_scripts import ReviseScriptsNode

        logger.info(f"Step 6: Validating {len(ctx.state.transformed_scripts)} scripts...")
        ctx.state.current_step = "validate_scripts"
        stage = PipelineStage.VALIDATION

        result = await run_stage(ctx, stage, lambda: ctx.deps.validation.validate_scripts(
            ctx.state.model,
            ctx.state.transformed_scripts,
            pass_threshold=ctx.state.min_fidelity_score,
        ))

        ctx.state.apply_validation(result)
        await ctx.deps.callbacks.stage_complete(stage, ctx.state.stages.validation)

        ctx.state.mark_step_complete("validate_scripts")
        logger.info(
            f"Validation: {result.summary.passed} pass, {result.summary.needs_revision} revise, "
            f"{result.summary.failed} fail"
        )

        return ReviseScriptsNode()

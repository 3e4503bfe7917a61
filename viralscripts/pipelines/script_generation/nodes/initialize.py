"""
InitializeNode - Load the creator model.

First node in the script generation pipeline.
"""

import logging
import time
from dataclasses import dataclass
from typing import ClassVar

from pydantic_graph import BaseNode, GraphRunContext

from ..dependencies import PipelineDependencies
from ..errors import ModelNotFoundError, StageFailedError
from ..models import PipelineStage
from ..state import ScriptPipelineState
from ...metadata import NodeMetadata

logger = logging.getLogger(__name__)


@dataclass
class InitializeNode(BaseNode[ScriptPipelineState]):
    """
    Step 1: Fetch the creator model and its voice profile.

    Reads: model_id
    Writes: model, started_at
    Services: ModelRepository.get_model()
    """

    metadata: ClassVar[NodeMetadata] = NodeMetadata(
        inputs=["model_id"],
        outputs=["model", "started_at"],
        services=["model_repo.get_model"],
        stage=PipelineStage.INITIALIZATION.value,
    )

    async def run(
        self,
        ctx: GraphRunContext[ScriptPipelineState, PipelineDependencies]
    ) -> "RetrieveCorpusNode":
        from .retrieve_corpus import RetrieveCorpusNode

        logger.info(f"Step 1: Loading model {ctx.state.model_id}...")
        ctx.state.current_step = "initialize"
        ctx.state.started_at = time.time()
        stage = PipelineStage.INITIALIZATION

        await ctx.deps.callbacks.stage_start(stage)

        try:
            model = ctx.deps.model_repo.get_model(ctx.state.model_id)
        except Exception as e:
            error = StageFailedError(stage, e)
            ctx.state.error = str(error)
            ctx.state.error_step = stage.value
            logger.error(f"Initialization failed: {e}")
            await ctx.deps.callbacks.stage_error(stage, error)
            raise error from e

        if model is None:
            error = ModelNotFoundError(ctx.state.model_id)
            ctx.state.error = str(error)
            ctx.state.error_step = stage.value
            await ctx.deps.callbacks.stage_error(stage, error)
            raise error

        ctx.state.model = model
        await ctx.deps.callbacks.stage_complete(
            stage, {"model_id": model.id, "model_name": model.display_name}
        )

        ctx.state.mark_step_complete("initialize")
        logger.info(f"Loaded model: {model.display_name}")

        return RetrieveCorpusNode()

"""
RetrieveCorpusNode - Exemplar scripts that match the creator's voice.

Non-critical: a retrieval failure is reported and the run continues with no
exemplars.
"""

import logging
from dataclasses import dataclass
from typing import ClassVar

from pydantic_graph import BaseNode, GraphRunContext

from ..dependencies import PipelineDependencies
from ..errors import StageFailedError
from ..models import CorpusStageStats, PipelineStage
from ..state import ScriptPipelineState
from ...metadata import NodeMetadata

logger = logging.getLogger(__name__)


@dataclass
class RetrieveCorpusNode(BaseNode[ScriptPipelineState]):
    """
    Step 2: Retrieve corpus exemplars by voice similarity.

    Skipped when the model has no stored embedding and no thematic query was
    given, or when corpus_limit is 0.

    Reads: model, corpus_limit, thematic_query
    Writes: corpus_matches, stages.corpus_retrieval
    Services: CorpusRetrievalService.retrieve_for_model()
    """

    metadata: ClassVar[NodeMetadata] = NodeMetadata(
        inputs=["model", "corpus_limit", "thematic_query"],
        outputs=["corpus_matches", "stages.corpus_retrieval"],
        services=["retrieval.retrieve_for_model"],
        stage=PipelineStage.CORPUS_RETRIEVAL.value,
    )

    async def run(
        self,
        ctx: GraphRunContext[ScriptPipelineState, PipelineDependencies]
    ) -> "GenerateHooksNode":
        from .generate_hooks import GenerateHooksNode

        ctx.state.current_step = "retrieve_corpus"
        model = ctx.state.model
        stage = PipelineStage.CORPUS_RETRIEVAL

        if ctx.state.corpus_limit <= 0 or not (model.embedding or ctx.state.thematic_query):
            logger.info("Step 2: No voice embedding or corpus disabled, skipping retrieval")
            return GenerateHooksNode()

        logger.info(f"Step 2: Retrieving up to {ctx.state.corpus_limit} corpus examples...")
        await ctx.deps.callbacks.stage_start(stage)

        try:
            result = await ctx.deps.retrieval.retrieve_for_model(
                model.id,
                limit=ctx.state.corpus_limit,
                thematic_query=ctx.state.thematic_query,
                model=model,
            )
        except Exception as e:
            logger.warning(f"Corpus retrieval failed, continuing without examples: {e}")
            ctx.state.corpus_matches = []
            await ctx.deps.callbacks.stage_error(stage, StageFailedError(stage, e))
            return GenerateHooksNode()

        ctx.state.corpus_matches = result.matches
        ctx.state.stages.corpus_retrieval = CorpusStageStats(
            matches=result.stats.candidates_returned,
            avg_similarity=result.stats.avg_similarity,
            time_ms=result.stats.retrieval_time_ms,
        )
        await ctx.deps.callbacks.stage_complete(stage, ctx.state.stages.corpus_retrieval)

        ctx.state.mark_step_complete("retrieve_corpus")
        logger.info(f"Retrieved {len(result.matches)} corpus examples")

        return GenerateHooksNode()

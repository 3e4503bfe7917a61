"""
Pipeline Dependencies - Typed dependency injection for the script pipeline graph.

Bundles the repositories, gateways and stage services every node reaches
through ctx.deps. Nothing is created at import time; create() wires real
clients from Config, and tests build the model directly with mocks.
"""

import logging
from typing import Any, Optional

from pydantic import BaseModel, Field

from ...core.database import create_supabase_client
from ...core.embeddings import EmbeddingService
from ...core.llm import LLMGateway
from ...repositories import (
    BatchRepository,
    CorpusRepository,
    HookRepository,
    ModelRepository,
    ScriptRepository,
)
from .callbacks import PipelineCallbacks
from .services.batch_tracking import BatchTrackingService
from .services.corpus_retrieval import CorpusRetrievalService
from .services.hook_generation import HookGenerationService
from .services.script_expansion import ScriptExpansionService
from .services.script_validation import ScriptValidationService
from .services.shareability_scoring import ShareabilityScoringService
from .services.voice_transformation import VoiceTransformationService

logger = logging.getLogger(__name__)


class PipelineDependencies(BaseModel):
    """
    Services and repositories used by script generation nodes.

    Attributes:
        model_repo: Creator model lookups
        script_repo: Saved scripts
        retrieval: Corpus similarity search
        hooks: Hook generation and tracking
        shareability: Shareability scoring
        expansion: Hook to script expansion
        transformation: Voice transformation
        validation: Script validation
        batches: Per-run batch records
        callbacks: Progress hooks for the current run
    """
    model_config = {"arbitrary_types_allowed": True}

    model_repo: ModelRepository
    script_repo: ScriptRepository
    retrieval: CorpusRetrievalService
    hooks: HookGenerationService
    shareability: ShareabilityScoringService
    expansion: ScriptExpansionService
    transformation: VoiceTransformationService
    validation: ScriptValidationService
    batches: BatchTrackingService
    callbacks: PipelineCallbacks = Field(default_factory=PipelineCallbacks)

    @classmethod
    def create(
        cls,
        supabase_client: Optional[Any] = None,
        anthropic_api_key: Optional[str] = None,
        openai_api_key: Optional[str] = None,
    ) -> "PipelineDependencies":
        """
        Create dependencies backed by real clients.

        Args:
            supabase_client: Existing Supabase client (created from Config if None)
            anthropic_api_key: Anthropic key (defaults to ANTHROPIC_API_KEY)
            openai_api_key: OpenAI key for embeddings (defaults to OPENAI_API_KEY)

        Returns:
            PipelineDependencies ready for run_script_pipeline()
        """
        supabase = supabase_client or create_supabase_client()
        llm = LLMGateway(api_key=anthropic_api_key)
        embeddings = EmbeddingService(api_key=openai_api_key)

        model_repo = ModelRepository(supabase)
        script_repo = ScriptRepository(supabase)

        deps = cls(
            model_repo=model_repo,
            script_repo=script_repo,
            retrieval=CorpusRetrievalService(CorpusRepository(supabase), model_repo, embeddings),
            hooks=HookGenerationService(llm, hook_repo=HookRepository(supabase)),
            shareability=ShareabilityScoringService(llm),
            expansion=ScriptExpansionService(llm),
            transformation=VoiceTransformationService(llm, script_repo=script_repo),
            validation=ScriptValidationService(llm),
            batches=BatchTrackingService(BatchRepository(supabase)),
        )
        logger.info("Pipeline dependencies initialized")
        return deps

    def with_callbacks(self, callbacks: Optional[PipelineCallbacks]) -> "PipelineDependencies":
        """Copy of these dependencies reporting to the given callbacks."""
        return self.model_copy(update={"callbacks": callbacks or PipelineCallbacks()})

"""
Corpus Retrieval Service - Ranked exemplar scripts for a creator.

The query vector is either the creator's stored voice embedding or, for a
thematic search, a fresh embedding of the theme plus the creator's bio.

Filtering uses the creator's parasocial lever strengths only. Creator
archetype tags (girl_next_door, bratty_princess, ...) describe personality,
while corpus script_archetype describes content type, so the archetype
filter is always sent as null.
"""

import logging
import time
from typing import List, Optional

from ....core.embeddings import EmbeddingService, parse_embedding
from ....core.models import CorpusMatch, CreatorModel
from ....repositories import CorpusRepository, ModelRepository
from ..models import RetrievalResult, RetrievalStats

logger = logging.getLogger(__name__)


class CorpusRetrievalService:
    """Similarity search over the viral script corpus."""

    def __init__(
        self,
        corpus_repo: CorpusRepository,
        model_repo: ModelRepository,
        embeddings: Optional[EmbeddingService] = None,
    ):
        self.corpus_repo = corpus_repo
        self.model_repo = model_repo
        self.embeddings = embeddings

    def _ensure_embeddings(self) -> EmbeddingService:
        if self.embeddings is None:
            raise ValueError("Embedding service not configured. Set OPENAI_API_KEY environment variable.")
        return self.embeddings

    async def retrieve_for_model(
        self,
        model_id: str,
        limit: int = 10,
        min_similarity: float = 0.3,
        diversify: bool = True,
        per_hook_type: int = 3,
        hook_type_filter: Optional[str] = None,
        thematic_query: Optional[str] = None,
        model: Optional[CreatorModel] = None,
    ) -> RetrievalResult:
        """
        Retrieve corpus exemplars that match a creator's voice.

        Args:
            model_id: Creator model UUID
            limit: Max matches
            min_similarity: Similarity floor
            diversify: Cap matches per hook type instead of flat top-K
            per_hook_type: Cap per hook type in diversified mode
            hook_type_filter: Restrict flat search to one hook type
            thematic_query: Search by theme instead of the stored voice embedding
            model: Already-loaded model record (skips the fetch)

        Returns:
            RetrievalResult with matches and stats

        Raises:
            ValueError: If the model does not exist
            EmbeddingError: If the stored embedding is missing or malformed
        """
        start = time.time()

        if model is None:
            model = self.model_repo.get_model(model_id)
        if model is None:
            raise ValueError(f"Model not found: {model_id}")

        if thematic_query:
            bio = model.voice_profile.identity.quick_bio or ""
            query_embedding = await self._ensure_embeddings().embed(
                f"{thematic_query}\n\nVoice style: {bio}"
            )
        else:
            query_embedding = parse_embedding(model.embedding)

        lever_filter = model.voice_profile.lever_strengths or None

        if diversify:
            matches = self.corpus_repo.match_diversified(
                query_embedding=query_embedding,
                min_similarity=min_similarity,
                total_count=limit,
                per_hook_type=per_hook_type,
                lever_filter=lever_filter,
                archetype_filter=None,
            )
        else:
            matches = self.corpus_repo.match_hybrid(
                query_embedding=query_embedding,
                match_count=limit,
                min_similarity=min_similarity,
                lever_filter=lever_filter,
                hook_type_filter=hook_type_filter,
                archetype_filter=None,
            )

        stats = RetrievalStats(
            total_corpus=self.corpus_repo.count_embedded(),
            candidates_returned=len(matches),
            avg_similarity=(
                sum(m.similarity_score for m in matches) / len(matches) if matches else 0
            ),
            archetype_matches=sum(1 for m in matches if "archetype_match" in m.match_reasons),
            lever_matches=sum(1 for m in matches if "lever_match" in m.match_reasons),
            retrieval_time_ms=int((time.time() - start) * 1000),
        )

        logger.info(
            f"Retrieved {len(matches)} corpus matches for model {model_id} "
            f"(avg similarity {stats.avg_similarity:.3f}, {'diversified' if diversify else 'flat'})"
        )
        return RetrievalResult(model_id=model_id, matches=matches, stats=stats)

    async def search_by_theme(
        self,
        query: str,
        limit: int = 10,
        min_similarity: float = 0.4,
    ) -> List[CorpusMatch]:
        """Semantic search by theme with no creator context."""
        query_embedding = await self._ensure_embeddings().embed(query)
        return self.corpus_repo.match_hybrid(
            query_embedding=query_embedding,
            match_count=limit,
            min_similarity=min_similarity,
        )

    async def find_similar_entries(self, entry_id: str, limit: int = 5) -> List[CorpusMatch]:
        """
        Corpus entries similar to an existing entry, excluding the entry itself.

        Raises:
            ValueError: If the entry does not exist or has no embedding
        """
        raw = self.corpus_repo.get_embedding(entry_id)
        if not raw:
            raise ValueError(f"Entry not found or has no embedding: {entry_id}")

        matches = self.corpus_repo.match_hybrid(
            query_embedding=parse_embedding(raw),
            match_count=limit + 1,
            min_similarity=0.5,
        )
        return [m for m in matches if m.id != entry_id]

"""
Corpus Repository - Exemplar scripts and the similarity ranking RPCs.

The two ranking operations are database functions consumed as black boxes:
- match_corpus_hybrid: flat top-K by similarity with optional filters
- match_corpus_diversified: capped at per_hook_type rows per hook_type
"""

import logging
from typing import Any, Dict, List, Optional

from supabase import Client

from ..core.models import CorpusEntry, CorpusMatch

logger = logging.getLogger(__name__)


def cap_per_hook_type(
    matches: List[CorpusMatch], per_hook_type: int, total_count: int
) -> List[CorpusMatch]:
    """Keep rank order; drop rows past the per-type cap or the overall total."""
    kept: List[CorpusMatch] = []
    per_type: Dict[Optional[str], int] = {}
    for match in matches:
        if len(kept) >= total_count:
            break
        seen = per_type.get(match.hook_type, 0)
        if seen >= per_hook_type:
            continue
        per_type[match.hook_type] = seen + 1
        kept.append(match)
    return kept


class CorpusRepository:
    """Typed access to the corpus table and its ranking RPCs."""

    def __init__(self, supabase_client: Client):
        self.supabase = supabase_client

    # =========================================================================
    # Ranking
    # =========================================================================

    def _rpc(self, name: str, params: Dict[str, Any]) -> List[CorpusMatch]:
        try:
            result = self.supabase.rpc(name, params).execute()
        except Exception as e:
            logger.error(f"Corpus search error ({name}): {e}")
            raise

        return [CorpusMatch.model_validate(row) for row in (result.data or [])]

    def match_diversified(
        self,
        query_embedding: List[float],
        min_similarity: float,
        total_count: int,
        per_hook_type: int,
        lever_filter: Optional[List[str]] = None,
        archetype_filter: Optional[List[str]] = None,
    ) -> List[CorpusMatch]:
        """At most per_hook_type matches per hook_type, total_count overall."""
        matches = self._rpc("match_corpus_diversified", {
            "query_embedding": query_embedding,
            "min_similarity": min_similarity,
            "archetype_filter": archetype_filter,
            "lever_filter": lever_filter,
            "total_count": total_count,
            "per_hook_type": per_hook_type,
        })
        return cap_per_hook_type(matches, per_hook_type, total_count)

    def match_hybrid(
        self,
        query_embedding: List[float],
        match_count: int,
        min_similarity: float,
        lever_filter: Optional[List[str]] = None,
        hook_type_filter: Optional[str] = None,
        archetype_filter: Optional[List[str]] = None,
    ) -> List[CorpusMatch]:
        """Flat top-K similarity search."""
        return self._rpc("match_corpus_hybrid", {
            "query_embedding": query_embedding,
            "match_count": match_count,
            "min_similarity": min_similarity,
            "archetype_filter": archetype_filter,
            "lever_filter": lever_filter,
            "hook_type_filter": hook_type_filter,
        })

    # =========================================================================
    # Rows
    # =========================================================================

    def count_embedded(self) -> int:
        """Number of corpus rows that have an embedding."""
        result = self.supabase.table("corpus").select(
            "id", count="exact"
        ).not_.is_("embedding", "null").execute()
        return result.count or 0

    def get_embedding(self, entry_id: str) -> Optional[Any]:
        """Raw stored embedding for one entry (None if missing)."""
        result = self.supabase.table("corpus").select("embedding").eq(
            "id", entry_id
        ).limit(1).execute()
        if not result.data:
            return None
        return result.data[0].get("embedding")

    def list_missing_embeddings(self) -> List[Dict[str, Any]]:
        """Rows still waiting for an embedding."""
        result = self.supabase.table("corpus").select(
            "id, content, hook, hook_type, script_archetype"
        ).is_("embedding", "null").execute()
        return result.data or []

    def update_embedding(self, entry_id: str, embedding: List[float]) -> None:
        self.supabase.table("corpus").update(
            {"embedding": embedding}
        ).eq("id", entry_id).execute()

    def insert_entries(self, entries: List[CorpusEntry]) -> int:
        """
        Insert corpus rows.

        Returns:
            Number of rows inserted
        """
        if not entries:
            return 0

        records = [e.model_dump() for e in entries]
        result = self.supabase.table("corpus").insert(records).execute()
        return len(result.data) if result.data else len(records)

    def count_all(self) -> int:
        result = self.supabase.table("corpus").select("id", count="exact").execute()
        return result.count or 0

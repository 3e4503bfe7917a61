"""Corpus retrieval contracts."""

from typing import List

from pydantic import BaseModel, Field

from ....core.models import CorpusMatch


class RetrievalStats(BaseModel):
    total_corpus: int = 0
    candidates_returned: int = 0
    avg_similarity: float = 0
    archetype_matches: int = 0
    lever_matches: int = 0
    retrieval_time_ms: int = 0


class RetrievalResult(BaseModel):
    model_id: str
    matches: List[CorpusMatch] = Field(default_factory=list)
    stats: RetrievalStats = Field(default_factory=RetrievalStats)

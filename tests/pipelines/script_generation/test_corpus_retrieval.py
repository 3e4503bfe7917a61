"""
Tests for CorpusRetrievalService - query vector selection, lever-only
filtering and similar-entry lookup.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from viralscripts.core.embeddings import EmbeddingError
from viralscripts.core.models import CorpusMatch, CreatorModel
from viralscripts.pipelines.script_generation.services.corpus_retrieval import CorpusRetrievalService


def _match(id, similarity=0.8, reasons=None):
    return CorpusMatch(id=id, content="c", similarity_score=similarity, match_reasons=reasons or [])


def _creator(embedding="[0.1, 0.2]", strengths=None):
    return CreatorModel(
        id="m1",
        name="Anna",
        embedding=embedding,
        archetype_tags=["girl_next_door"],
        voice_profile={
            "identity": {"quick_bio": "Texas gym girl"},
            "parasocial": {"strengths": strengths or []},
        },
    )


def _service(creator=None, matches=None):
    corpus_repo = MagicMock()
    corpus_repo.match_diversified.return_value = matches or []
    corpus_repo.match_hybrid.return_value = matches or []
    corpus_repo.count_embedded.return_value = 500
    model_repo = MagicMock()
    model_repo.get_model.return_value = creator
    embeddings = MagicMock()
    embeddings.embed = AsyncMock(return_value=[0.9, 0.9])
    return CorpusRetrievalService(corpus_repo, model_repo, embeddings)


class TestRetrieveForModel:

    @pytest.mark.asyncio
    async def test_diversified_uses_stored_embedding(self):
        matches = [_match("a", 0.9, ["lever_match"]), _match("b", 0.7)]
        service = _service(_creator(strengths=["direct_address"]), matches)

        result = await service.retrieve_for_model("m1", limit=15, per_hook_type=3)

        kwargs = service.corpus_repo.match_diversified.call_args.kwargs
        assert kwargs["query_embedding"] == [0.1, 0.2]
        assert kwargs["total_count"] == 15
        assert kwargs["lever_filter"] == ["direct_address"]
        assert kwargs["archetype_filter"] is None
        service.embeddings.embed.assert_not_awaited()

        assert result.stats.total_corpus == 500
        assert result.stats.candidates_returned == 2
        assert result.stats.avg_similarity == pytest.approx(0.8)
        assert result.stats.lever_matches == 1

    @pytest.mark.asyncio
    async def test_no_levers_means_no_filter(self):
        service = _service(_creator())
        await service.retrieve_for_model("m1", diversify=False, hook_type_filter="confession")

        kwargs = service.corpus_repo.match_hybrid.call_args.kwargs
        assert kwargs["lever_filter"] is None
        assert kwargs["archetype_filter"] is None
        assert kwargs["hook_type_filter"] == "confession"

    @pytest.mark.asyncio
    async def test_thematic_query_embeds_theme_and_bio(self):
        service = _service(_creator(embedding=None))
        await service.retrieve_for_model("m1", thematic_query="gym crush")

        service.embeddings.embed.assert_awaited_once_with("gym crush\n\nVoice style: Texas gym girl")
        assert service.corpus_repo.match_diversified.call_args.kwargs["query_embedding"] == [0.9, 0.9]

    @pytest.mark.asyncio
    async def test_missing_model_raises(self):
        with pytest.raises(ValueError, match="Model not found"):
            await _service(None).retrieve_for_model("missing")

    @pytest.mark.asyncio
    async def test_missing_embedding_raises(self):
        with pytest.raises(EmbeddingError):
            await _service(_creator(embedding=None)).retrieve_for_model("m1")

    @pytest.mark.asyncio
    async def test_preloaded_model_skips_fetch(self):
        service = _service(None)
        await service.retrieve_for_model("m1", model=_creator())
        service.model_repo.get_model.assert_not_called()


class TestFindSimilarEntries:

    @pytest.mark.asyncio
    async def test_excludes_self(self):
        service = _service(matches=[_match("e1"), _match("e2"), _match("e3")])
        service.corpus_repo.get_embedding.return_value = "[0.5, 0.5]"

        matches = await service.find_similar_entries("e1", limit=2)

        assert [m.id for m in matches] == ["e2", "e3"]
        kwargs = service.corpus_repo.match_hybrid.call_args.kwargs
        assert kwargs["match_count"] == 3
        assert kwargs["min_similarity"] == 0.5

    @pytest.mark.asyncio
    async def test_entry_without_embedding_raises(self):
        service = _service()
        service.corpus_repo.get_embedding.return_value = None
        with pytest.raises(ValueError):
            await service.find_similar_entries("e1")

    @pytest.mark.asyncio
    async def test_search_by_theme(self):
        service = _service(matches=[_match("x")])
        matches = await service.search_by_theme("coffee dates", limit=4)
        assert [m.id for m in matches] == ["x"]
        service.embeddings.embed.assert_awaited_once_with("coffee dates")

"""
Tests for the Supabase repositories using a chainable mock client.
"""

from types import SimpleNamespace

import pytest
from unittest.mock import MagicMock

from viralscripts.core.models import (
    CorpusEntry,
    CorpusMatch,
    HookRecord,
    ScriptBatchRecord,
    ScriptRecord,
)
from viralscripts.repositories import (
    BatchRepository,
    CorpusRepository,
    HookRepository,
    ModelRepository,
    ScriptRepository,
)
from viralscripts.repositories.corpus_repository import cap_per_hook_type

CHAIN_METHODS = ["select", "eq", "limit", "order", "insert", "update", "is_"]


def _supabase(data=None, count=None):
    chain = MagicMock()
    for name in CHAIN_METHODS:
        getattr(chain, name).return_value = chain
    chain.not_ = chain
    chain.execute.return_value = SimpleNamespace(data=data, count=count)

    client = MagicMock()
    client.table.return_value = chain
    client.rpc.return_value = chain
    return client, chain


class TestModelRepository:

    def test_get_model(self):
        client, chain = _supabase(data=[{
            "id": "m1", "name": "Anna", "voice_profile": '{"identity": {"quick_bio": "hi"}}',
            "embedding": "[0.1]",
        }])

        model = ModelRepository(client).get_model("m1")

        client.table.assert_called_with("models")
        chain.eq.assert_called_with("id", "m1")
        assert model.name == "Anna"
        assert model.voice_profile.identity.quick_bio == "hi"

    def test_missing_model(self):
        client, _ = _supabase(data=[])
        assert ModelRepository(client).get_model("m1") is None

    def test_database_error(self):
        client, chain = _supabase()
        chain.execute.side_effect = ConnectionError("refused")
        with pytest.raises(RuntimeError, match="Failed to fetch model m1"):
            ModelRepository(client).get_model("m1")

    def test_create_model(self):
        client, chain = _supabase(data=[{"id": "m9", "name": "Anna", "stage_name": "Anna Rose"}])

        model = ModelRepository(client).create_model({"name": "Anna", "stage_name": "Anna Rose"})

        chain.insert.assert_called_once_with({"name": "Anna", "stage_name": "Anna Rose"})
        assert model.id == "m9"
        assert model.display_name == "Anna Rose"

    def test_create_model_without_row(self):
        client, _ = _supabase(data=[])
        with pytest.raises(RuntimeError, match="no row returned"):
            ModelRepository(client).create_model({"name": "Anna"})

    def test_update_model(self):
        client, chain = _supabase(data=[{"id": "m1", "name": "Anna", "voice_profile": {"sample_speech": ["hi"]}}])

        model = ModelRepository(client).update_model("m1", {"voice_profile": {"sample_speech": ["hi"]}})

        chain.update.assert_called_once_with({"voice_profile": {"sample_speech": ["hi"]}})
        chain.eq.assert_called_with("id", "m1")
        assert model.voice_profile.sample_speech == ["hi"]

    def test_update_embedding(self):
        client, chain = _supabase(data=[])

        ModelRepository(client).update_embedding("m1", [0.1, 0.2])

        chain.update.assert_called_once_with({"embedding": [0.1, 0.2]})
        chain.eq.assert_called_with("id", "m1")


class TestCorpusRepository:

    def test_diversified_rpc_params(self):
        client, _ = _supabase(data=[{"id": "c1", "content": "x", "similarity_score": 0.8}])

        matches = CorpusRepository(client).match_diversified(
            query_embedding=[0.1], min_similarity=0.3, total_count=15, per_hook_type=3,
            lever_filter=["direct_address"],
        )

        name, params = client.rpc.call_args.args
        assert name == "match_corpus_diversified"
        assert params["archetype_filter"] is None
        assert params["lever_filter"] == ["direct_address"]
        assert params["per_hook_type"] == 3
        assert matches[0].similarity_score == 0.8

    def test_diversified_caps_per_hook_type(self):
        rows = [
            {"id": f"{t}{i}", "content": "x", "hook_type": t, "similarity_score": 0.9 - n * 0.01}
            for n, (t, i) in enumerate((t, i) for i in range(3) for t in "abcde")
        ]
        client, _ = _supabase(data=rows)

        matches = CorpusRepository(client).match_diversified(
            query_embedding=[0.1], min_similarity=0.3, total_count=10, per_hook_type=2,
        )

        assert len(matches) == 10
        counts = {}
        for m in matches:
            counts[m.hook_type] = counts.get(m.hook_type, 0) + 1
        assert max(counts.values()) <= 2
        assert [m.similarity_score for m in matches] == sorted(
            (m.similarity_score for m in matches), reverse=True
        )

    def test_hybrid_rpc_params(self):
        client, _ = _supabase(data=None)

        matches = CorpusRepository(client).match_hybrid(
            query_embedding=[0.1], match_count=6, min_similarity=0.5, hook_type_filter="question",
        )

        name, params = client.rpc.call_args.args
        assert name == "match_corpus_hybrid"
        assert params["match_count"] == 6
        assert params["hook_type_filter"] == "question"
        assert matches == []

    def test_counts(self):
        client, _ = _supabase(data=[], count=42)
        repo = CorpusRepository(client)
        assert repo.count_embedded() == 42
        assert repo.count_all() == 42

    def test_insert_entries(self):
        client, chain = _supabase(data=[{"id": "1"}, {"id": "2"}])
        entries = [CorpusEntry(content="a long enough script"), CorpusEntry(content="another one here")]

        assert CorpusRepository(client).insert_entries(entries) == 2
        assert len(chain.insert.call_args.args[0]) == 2

    def test_get_embedding(self):
        client, _ = _supabase(data=[{"embedding": "[0.5]"}])
        assert CorpusRepository(client).get_embedding("c1") == "[0.5]"

        client, _ = _supabase(data=[])
        assert CorpusRepository(client).get_embedding("c1") is None


class TestScriptRepository:

    def _record(self):
        return ScriptRecord(
            model_id="m1", hook="h", hook_type="question", content="body",
            word_count=50, duration_seconds=20, voice_fidelity_score=88,
        )

    def test_insert_returns_ids(self):
        client, chain = _supabase(data=[{"id": "s1"}])

        assert ScriptRepository(client).insert_scripts([self._record()]) == ["s1"]
        row = chain.insert.call_args.args[0][0]
        assert row["status"] == "draft"
        assert "batch_id" not in row

    def test_insert_failure(self):
        client, chain = _supabase()
        chain.execute.side_effect = RuntimeError("timeout")
        with pytest.raises(RuntimeError, match="Failed to save scripts"):
            ScriptRepository(client).insert_scripts([self._record()])

    def test_approved_excerpts(self):
        client, chain = _supabase(data=[{"content": "x" * 300}, {"content": ""}, {"content": "short"}])

        excerpts = ScriptRepository(client).get_approved_excerpts("m1", limit=5, chars=100)

        assert excerpts == ["x" * 100, "short"]
        chain.eq.assert_any_call("status", "approved")
        chain.limit.assert_called_with(5)


class TestHookRepository:

    def test_recent_hooks(self):
        client, _ = _supabase(data=[{"content": "a"}, {"content": None}, {"content": "b"}])
        assert HookRepository(client).get_recent_hooks("m1") == ["a", "b"]

    def test_insert_hooks(self):
        client, _ = _supabase(data=None)
        records = [HookRecord(content="a", hook_type="question", model_id="m1")]
        assert HookRepository(client).insert_hooks(records) == 1


class TestBatchRepository:

    def test_insert_batch(self):
        client, chain = _supabase()
        record = ScriptBatchRecord(
            batch_id="batch_1", model_id="m1", hooks_requested=10,
            scripts_generated=10, scripts_passed=4, scripts_failed=2,
        )

        BatchRepository(client).insert_batch(record)

        row = chain.insert.call_args.args[0]
        assert row["batch_id"] == "batch_1"
        assert "created_at" not in row

    def test_list_recent_failure(self):
        client, chain = _supabase()
        chain.execute.side_effect = RuntimeError("down")
        with pytest.raises(RuntimeError, match="Failed to fetch recent batches"):
            BatchRepository(client).list_recent("m1")


class TestCapPerHookType:

    def _match(self, i, hook_type):
        return CorpusMatch(id=str(i), content="x", hook_type=hook_type)

    def test_total_count_wins(self):
        matches = [self._match(i, f"t{i}") for i in range(5)]
        assert [m.id for m in cap_per_hook_type(matches, 2, 3)] == ["0", "1", "2"]

    def test_untyped_rows_share_a_cap(self):
        matches = [self._match(i, None) for i in range(4)]
        assert len(cap_per_hook_type(matches, 2, 10)) == 2

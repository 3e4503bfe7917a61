"""
Tests for ScriptValidationService - verdict rules, priority backfill, index
resolution, summary aggregation and pairing by script_index.
"""

import json

import pytest
from unittest.mock import AsyncMock, MagicMock

from viralscripts.core.llm import LLMResponse, LLMResponseError
from viralscripts.core.models import CreatorModel
from viralscripts.pipelines.script_generation.models import (
    RevisionPriority,
    TransformedScript,
    ValidationResult,
    Verdict,
)
from viralscripts.pipelines.script_generation.services.script_validation import (
    ScriptValidationService,
    calculate_summary,
    get_failed_scripts,
    get_passing_scripts,
    get_scripts_needing_revision,
    normalize_priority,
    normalize_verdict,
    process_validation_result,
    resolve_script_index,
)


def _script(i):
    return TransformedScript(
        script_index=i, original_hook=f"hook {i}", transformed_script=f"hook {i} body", word_count=3
    )


def _validation(i, verdict, score=85, **extra):
    return ValidationResult(script_index=i, voice_fidelity_score=score, verdict=verdict, **extra)


class TestNormalizeVerdict:

    def test_pass_at_threshold(self):
        assert normalize_verdict(80, []) == Verdict.PASS

    def test_revise_between_thresholds(self):
        assert normalize_verdict(79, []) == Verdict.REVISE
        assert normalize_verdict(60, []) == Verdict.REVISE

    def test_fail_below_60(self):
        assert normalize_verdict(59, []) == Verdict.FAIL

    def test_violation_always_fails(self):
        assert normalize_verdict(100, ["mentions ex by name"]) == Verdict.FAIL

    def test_custom_pass_threshold(self):
        assert normalize_verdict(85, [], pass_threshold=90) == Verdict.REVISE
        assert normalize_verdict(90, [], pass_threshold=90) == Verdict.PASS


class TestNormalizePriority:

    def test_pass_is_none(self):
        assert normalize_priority("high", Verdict.PASS, 95) == RevisionPriority.NONE

    def test_valid_llm_value_kept(self):
        assert normalize_priority("HIGH", Verdict.REVISE, 78) == RevisionPriority.HIGH

    def test_revise_backfill_by_score_band(self):
        assert normalize_priority(None, Verdict.REVISE, 76) == RevisionPriority.LOW
        assert normalize_priority("urgent", Verdict.REVISE, 65) == RevisionPriority.MEDIUM

    def test_fail_backfill_high(self):
        assert normalize_priority(None, Verdict.FAIL, 40) == RevisionPriority.HIGH


class TestProcessValidationResult:

    def test_llm_verdict_overridden(self):
        raw = {"script_index": 0, "voice_fidelity_score": 55, "verdict": "PASS"}
        result = process_validation_result(raw, 0)
        assert result.verdict == Verdict.FAIL
        assert result.revision_priority == RevisionPriority.HIGH

    def test_resolved_index_used(self):
        raw = {"script_index": 0, "voice_fidelity_score": 90}
        assert process_validation_result(raw, 2).script_index == 2

    def test_lists_coerced(self):
        raw = {"voice_fidelity_score": 81, "ai_tells_found": "honestly opener", "boundary_violations": None}
        result = process_validation_result(raw, 0)
        assert result.ai_tells_found == ["honestly opener"]
        assert result.boundary_violations == []
        assert result.verdict == Verdict.PASS


class TestResolveScriptIndex:

    def test_reported_index_kept(self):
        assert resolve_script_index(2, 0, 3, set()) == 2

    def test_zero_is_a_real_index(self):
        assert resolve_script_index(0, 1, 2, {1}) == 0

    def test_missing_or_out_of_range_uses_position(self):
        assert resolve_script_index(None, 1, 3, set()) == 1
        assert resolve_script_index(7, 1, 3, set()) == 1
        assert resolve_script_index("x", 2, 3, set()) == 2

    def test_claimed_index_falls_back_to_first_free(self):
        assert resolve_script_index(0, 1, 3, {0}) == 1
        assert resolve_script_index(0, 1, 3, {0, 1}) == 2

    def test_none_when_every_script_has_a_verdict(self):
        assert resolve_script_index(0, 2, 2, {0, 1}) is None


class TestCalculateSummary:

    def test_counts_and_average(self):
        summary = calculate_summary([
            _validation(0, Verdict.PASS, 90),
            _validation(1, Verdict.REVISE, 70),
            _validation(2, Verdict.FAIL, 41),
        ])
        assert (summary.total, summary.passed, summary.needs_revision, summary.failed) == (3, 1, 1, 1)
        assert summary.avg_fidelity_score == 67

    def test_common_issues_need_two_occurrences(self):
        summary = calculate_summary([
            _validation(0, Verdict.REVISE, 70, ai_tells_found=["Honestly opener in sentence 1"]),
            _validation(1, Verdict.REVISE, 70, ai_tells_found=["honestly opener in sentence 3"]),
            _validation(2, Verdict.REVISE, 70, improvements=["add a catchphrase"]),
        ])
        assert summary.common_issues == ["honestly opener"]

    def test_empty(self):
        assert calculate_summary([]).total == 0


class TestPairing:

    def test_pairs_by_script_index_not_position(self):
        scripts = [_script(0), _script(1), _script(2)]
        validations = [
            _validation(2, Verdict.REVISE, 70),
            _validation(0, Verdict.PASS),
            _validation(1, Verdict.FAIL, 30),
        ]
        revise = get_scripts_needing_revision(scripts, validations)
        assert [(s.original_hook, v.script_index) for s, v in revise] == [("hook 2", 2)]
        assert [s.original_hook for s in get_passing_scripts(scripts, validations)] == ["hook 0"]
        assert [s.original_hook for s, _ in get_failed_scripts(scripts, validations)] == ["hook 1"]

    def test_missing_script_skipped(self):
        assert get_scripts_needing_revision([_script(0)], [_validation(5, Verdict.REVISE, 70)]) == []


class TestValidateScripts:

    @pytest.mark.asyncio
    async def test_single_call_and_summary(self):
        llm = MagicMock()
        llm.complete = AsyncMock(return_value=LLMResponse(
            text="```json\n" + json.dumps([
                {"script_index": 0, "voice_fidelity_score": 92, "verdict": "PASS"},
                {"script_index": 1, "voice_fidelity_score": 72, "verdict": "PASS"},
            ]) + "\n```",
            output_tokens=321,
        ))
        service = ScriptValidationService(llm, model="haiku-test")

        result = await service.validate_scripts(
            CreatorModel(id="m1", name="Anna"), [_script(0), _script(1)]
        )

        assert llm.complete.await_count == 1
        assert llm.complete.await_args.kwargs["temperature"] == 0.3
        assert [v.verdict for v in result.validations] == [Verdict.PASS, Verdict.REVISE]
        assert result.summary.passed == 1
        assert result.tokens_used == 321

    @pytest.mark.asyncio
    async def test_empty_input_skips_llm(self):
        llm = MagicMock()
        llm.complete = AsyncMock()
        result = await ScriptValidationService(llm, model="x").validate_scripts(
            CreatorModel(id="m1", name="Anna"), []
        )
        llm.complete.assert_not_awaited()
        assert result.validations == []

    @pytest.mark.asyncio
    async def test_non_array_reply_raises(self):
        llm = MagicMock()
        llm.complete = AsyncMock(return_value=LLMResponse(text='{"oops": true}'))
        with pytest.raises(LLMResponseError):
            await ScriptValidationService(llm, model="x").validate_scripts(
                CreatorModel(id="m1", name="Anna"), [_script(0)]
            )

    @pytest.mark.asyncio
    async def test_reordered_reply_pairs_each_script_once(self):
        llm = MagicMock()
        llm.complete = AsyncMock(return_value=LLMResponse(text=json.dumps([
            {"script_index": 1, "voice_fidelity_score": 90},
            {"script_index": 0, "voice_fidelity_score": 70},
        ])))

        result = await ScriptValidationService(llm, model="x").validate_scripts(
            CreatorModel(id="m1", name="Anna"), [_script(0), _script(1)]
        )

        assert [v.script_index for v in result.validations] == [1, 0]
        assert [v.verdict for v in result.validations] == [Verdict.PASS, Verdict.REVISE]

    @pytest.mark.asyncio
    async def test_duplicate_index_reassigned_and_extras_dropped(self):
        llm = MagicMock()
        llm.complete = AsyncMock(return_value=LLMResponse(text=json.dumps([
            {"script_index": 0, "voice_fidelity_score": 90},
            {"script_index": 0, "voice_fidelity_score": 88},
            {"script_index": 0, "voice_fidelity_score": 95},
        ])))

        result = await ScriptValidationService(llm, model="x").validate_scripts(
            CreatorModel(id="m1", name="Anna"), [_script(0), _script(1)]
        )

        assert [v.script_index for v in result.validations] == [0, 1]
        assert result.summary.total == 2

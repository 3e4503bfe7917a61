"""
Script Validation Service - Voice fidelity verdicts for transformed scripts.

One fast-tier call scores the whole list. The verdict is always derived from
the score and boundary violations so a sloppy or missing LLM verdict cannot
let a script through.
"""

import logging
import re
import time
from collections import Counter
from typing import Any, Dict, List, Optional, Set, Tuple

from ....core.config import Config
from ....core.llm import LLMGateway, parse_json_array
from ....core.models import CreatorModel
from ..models import (
    RevisionPriority,
    TransformedScript,
    ValidationBatchResult,
    ValidationResult,
    ValidationSummary,
    Verdict,
)
from ..prompts.script_validation import build_validation_prompt
from ..utils import string_list

logger = logging.getLogger(__name__)

VALIDATION_MAX_TOKENS = 4096
DEFAULT_PASS_THRESHOLD = 80
DEFAULT_FAIL_THRESHOLD = 60
LOW_PRIORITY_MIN_SCORE = 75
COMMON_ISSUE_MIN_COUNT = 2
COMMON_ISSUE_LIMIT = 5

_SENTENCE_REF = re.compile(r"\s*in sentence \d+")


def normalize_verdict(
    score: int,
    violations: List[str],
    pass_threshold: int = DEFAULT_PASS_THRESHOLD,
    fail_threshold: int = DEFAULT_FAIL_THRESHOLD,
) -> Verdict:
    """
    Derive the verdict from score and boundary violations.

    PASS needs score >= pass_threshold and no violations. FAIL on any
    violation or score < fail_threshold. Everything else is REVISE.
    """
    if violations or score < fail_threshold:
        return Verdict.FAIL
    if score >= pass_threshold:
        return Verdict.PASS
    return Verdict.REVISE


def normalize_priority(raw: Any, verdict: Verdict, score: int) -> RevisionPriority:
    """Keep a valid LLM priority; otherwise backfill from verdict and score band."""
    if verdict == Verdict.PASS:
        return RevisionPriority.NONE

    if isinstance(raw, str):
        try:
            return RevisionPriority(raw.strip().lower())
        except ValueError:
            pass

    if verdict == Verdict.REVISE:
        return RevisionPriority.LOW if score >= LOW_PRIORITY_MIN_SCORE else RevisionPriority.MEDIUM
    return RevisionPriority.HIGH


def _score(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return int(min(100, max(0, value)))


def resolve_script_index(
    raw_index: Any,
    position: int,
    total: int,
    used: Set[int],
) -> Optional[int]:
    """
    Pick the script a verdict belongs to.

    The reported index wins when it is in range and not yet claimed. Otherwise
    the verdict's position is used, then the first unclaimed script. None
    means every script already has a verdict.
    """
    try:
        idx = int(raw_index)
    except (TypeError, ValueError):
        idx = -1
    if 0 <= idx < total and idx not in used:
        return idx
    if position < total and position not in used:
        return position
    return next((i for i in range(total) if i not in used), None)


def process_validation_result(
    raw: Dict[str, Any],
    script_index: int,
    pass_threshold: int = DEFAULT_PASS_THRESHOLD,
) -> ValidationResult:
    """Normalize one raw LLM verdict entry."""
    score = _score(raw.get("voice_fidelity_score"))
    violations = string_list(raw.get("boundary_violations"))
    verdict = normalize_verdict(score, violations, pass_threshold)

    return ValidationResult(
        script_index=script_index,
        voice_fidelity_score=score,
        ai_tells_found=string_list(raw.get("ai_tells_found")),
        boundary_violations=violations,
        strengths=string_list(raw.get("strengths")),
        improvements=string_list(raw.get("improvements")),
        verdict=verdict,
        revision_priority=normalize_priority(raw.get("revision_priority"), verdict, score),
    )


def calculate_summary(validations: List[ValidationResult]) -> ValidationSummary:
    """Verdict counts, mean fidelity and the issues that recur across scripts."""
    if not validations:
        return ValidationSummary()

    issues: Counter = Counter()
    for v in validations:
        for tell in v.ai_tells_found:
            issues[_SENTENCE_REF.sub("", tell.lower()).strip()] += 1
        for improvement in v.improvements:
            issues[improvement.lower().strip()] += 1

    common = [
        issue for issue, count in issues.most_common()
        if issue and count >= COMMON_ISSUE_MIN_COUNT
    ][:COMMON_ISSUE_LIMIT]

    return ValidationSummary(
        total=len(validations),
        passed=sum(1 for v in validations if v.verdict == Verdict.PASS),
        needs_revision=sum(1 for v in validations if v.verdict == Verdict.REVISE),
        failed=sum(1 for v in validations if v.verdict == Verdict.FAIL),
        avg_fidelity_score=round(sum(v.voice_fidelity_score for v in validations) / len(validations)),
        common_issues=common,
    )


# ============================================================================
# Pairing helpers - always by script_index, never by list position
# ============================================================================

def get_passing_scripts(
    scripts: List[TransformedScript],
    validations: List[ValidationResult],
) -> List[TransformedScript]:
    passing = {v.script_index for v in validations if v.verdict == Verdict.PASS}
    return [s for i, s in enumerate(scripts) if i in passing]


def _paired(
    scripts: List[TransformedScript],
    validations: List[ValidationResult],
    verdict: Verdict,
) -> List[Tuple[TransformedScript, ValidationResult]]:
    pairs = []
    for v in validations:
        if v.verdict != verdict:
            continue
        if 0 <= v.script_index < len(scripts):
            pairs.append((scripts[v.script_index], v))
        else:
            logger.warning(f"Validation references missing script_index {v.script_index}")
    return pairs


def get_scripts_needing_revision(
    scripts: List[TransformedScript],
    validations: List[ValidationResult],
) -> List[Tuple[TransformedScript, ValidationResult]]:
    return _paired(scripts, validations, Verdict.REVISE)


def get_failed_scripts(
    scripts: List[TransformedScript],
    validations: List[ValidationResult],
) -> List[Tuple[TransformedScript, ValidationResult]]:
    return _paired(scripts, validations, Verdict.FAIL)


class ScriptValidationService:
    """Scores transformed scripts against the creator's voice profile."""

    def __init__(self, llm: LLMGateway, model: Optional[str] = None):
        self.llm = llm
        self.model = model or Config.get_model("script_validation")

    async def validate_scripts(
        self,
        model: CreatorModel,
        scripts: List[TransformedScript],
        pass_threshold: int = DEFAULT_PASS_THRESHOLD,
        temperature: float = 0.3,
    ) -> ValidationBatchResult:
        """
        Validate scripts in a single LLM call.

        Args:
            model: Creator model
            scripts: Transformed scripts (script_index of each result is a position in this list)
            pass_threshold: Minimum fidelity score for PASS
            temperature: Sampling temperature

        Returns:
            ValidationBatchResult

        Raises:
            LLMResponseError: If the reply is not a JSON array
        """
        start = time.time()
        if not scripts:
            return ValidationBatchResult(model_id=model.id)

        prompt = build_validation_prompt(
            model_name=model.display_name,
            voice_profile=model.voice_profile,
            scripts=scripts,
            pass_threshold=pass_threshold,
        )
        response = await self.llm.complete(
            prompt, model=self.model, temperature=temperature, max_tokens=VALIDATION_MAX_TOKENS
        )
        raw_results = parse_json_array(response.text)

        used: Set[int] = set()
        validations = []
        for position, raw in enumerate(raw_results):
            if not isinstance(raw, dict):
                continue
            index = resolve_script_index(raw.get("script_index"), position, len(scripts), used)
            if index is None:
                logger.warning(f"Extra validation entry at position {position}, skipping")
                continue
            used.add(index)
            validations.append(process_validation_result(raw, index, pass_threshold))

        unvalidated = [i for i in range(len(scripts)) if i not in used]
        if unvalidated:
            logger.warning(f"No verdict returned for script_index {unvalidated}")
        summary = calculate_summary(validations)

        logger.info(
            f"Validated {summary.total} scripts: {summary.passed} pass, "
            f"{summary.needs_revision} revise, {summary.failed} fail"
        )

        return ValidationBatchResult(
            model_id=model.id,
            validations=validations,
            summary=summary,
            tokens_used=response.output_tokens,
            validation_time_ms=int((time.time() - start) * 1000),
        )

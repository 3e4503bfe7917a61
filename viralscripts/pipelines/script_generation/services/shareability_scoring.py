"""
Shareability Scoring Service - Predicts why and how content gets shared.

Two paths:
- score_contents(): LLM rubric scoring (specificity, emotional punch, share
  trigger, authenticity; 0-25 each)
- estimate_from_patterns(): offline indicator matching, no API call
"""

import logging
import time
from collections import Counter
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ....core.config import Config
from ....core.llm import LLMGateway, parse_json_array
from ..models import PatternEstimate, ShareabilityResult, ShareabilityScore, ShareabilityStats
from ..prompts.share_triggers import (
    SHARE_TRIGGER_PATTERNS,
    SPECIFICITY_PHRASES,
    VIRAL_POTENTIAL_BANDS,
    viral_potential_for,
)
from ..prompts.shareability import build_shareability_prompt

logger = logging.getLogger(__name__)

SHAREABILITY_MAX_TOKENS = 4096

# Offline estimate weights
BASELINE_SCORE = 35
POINTS_PER_MATCH = 8
MAX_MATCH_POINTS = 30
MULTI_TRIGGER_BONUS = 10
POINTS_PER_SPECIFICITY = 5
MAX_ESTIMATED_SCORE = 85

_POTENTIAL_LABELS = {label for _, label in VIRAL_POTENTIAL_BANDS}
_RUBRIC_FIELDS = (
    "specificity_score",
    "emotional_punch_score",
    "share_trigger_score",
    "authenticity_score",
)


def _opt_int(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value)


def process_share_score(raw: Dict[str, Any], content: str, content_type: str, index: int) -> ShareabilityScore:
    """Build a ShareabilityScore from one raw LLM entry."""
    parts = {f: _opt_int(raw.get(f)) for f in _RUBRIC_FIELDS}
    total = _opt_int(raw.get("total_score"))
    if total is None:
        total = sum(v for v in parts.values() if v is not None)
    total = min(100, max(0, total))

    potential = str(raw.get("viral_potential") or "").lower()
    if potential not in _POTENTIAL_LABELS:
        potential = viral_potential_for(total)

    return ShareabilityScore(
        index=index,
        content=content,
        content_type=content_type,
        total_score=total,
        primary_trigger=raw.get("primary_trigger") or None,
        secondary_trigger=raw.get("secondary_trigger") or None,
        share_prediction=str(raw.get("share_prediction") or ""),
        emotional_response=raw.get("emotional_response") or None,
        viral_potential=potential,
        reasoning=str(raw.get("reasoning") or ""),
        **parts,
    )


def calculate_share_stats(scores: List[ShareabilityScore], tokens_used: int, elapsed_ms: int) -> ShareabilityStats:
    if not scores:
        return ShareabilityStats(tokens_used=tokens_used, scoring_time_ms=elapsed_ms)

    triggers = Counter(s.primary_trigger for s in scores if s.primary_trigger)
    return ShareabilityStats(
        scored=len(scores),
        avg_score=round(sum(s.total_score for s in scores) / len(scores)),
        high_potential_count=sum(1 for s in scores if s.is_high_potential),
        primary_triggers=dict(triggers),
        tokens_used=tokens_used,
        scoring_time_ms=elapsed_ms,
    )


def estimate_from_patterns(content: str) -> PatternEstimate:
    """
    Rough shareability estimate from indicator phrases.

    Capped below the "viral" band; that call needs human or LLM judgment.
    """
    lowered = (content or "").lower()

    trigger_matches: Dict[str, int] = {}
    for trigger, data in SHARE_TRIGGER_PATTERNS.items():
        matches = sum(1 for indicator in data["indicators"] if indicator in lowered)
        if matches:
            trigger_matches[trigger] = matches

    detected = list(trigger_matches)
    score = BASELINE_SCORE + min(sum(trigger_matches.values()) * POINTS_PER_MATCH, MAX_MATCH_POINTS)
    if len(detected) >= 2:
        score += MULTI_TRIGGER_BONUS
    if len(detected) >= 3:
        score += MULTI_TRIGGER_BONUS
    score += POINTS_PER_SPECIFICITY * sum(1 for phrase in SPECIFICITY_PHRASES if phrase in lowered)
    score = min(score, MAX_ESTIMATED_SCORE)

    strongest = None
    best = 0
    for trigger, matches in trigger_matches.items():
        if matches > best:
            best = matches
            strongest = trigger

    if len(detected) >= 2:
        confidence = "high"
    elif len(detected) == 1:
        confidence = "medium"
    else:
        confidence = "low"

    return PatternEstimate(
        estimated_score=score,
        detected_triggers=detected,
        confidence=confidence,
        strongest_trigger=strongest,
    )


class ShareabilityScoringService:
    """LLM rubric scoring for hooks and scripts."""

    def __init__(self, llm: LLMGateway, model: Optional[str] = None):
        self.llm = llm
        self.model = model or Config.get_model("shareability")

    async def score_contents(
        self,
        contents: Sequence[Tuple[str, str]],
        temperature: float = 0.3,
    ) -> ShareabilityResult:
        """
        Score content for share potential.

        Args:
            contents: (content, content_type) pairs, content_type 'hook' or 'script'
            temperature: Sampling temperature

        Returns:
            ShareabilityResult; each score's index is a position in contents
        """
        start = time.time()
        contents = list(contents)
        if not contents:
            return ShareabilityResult()

        prompt = build_shareability_prompt(contents)
        response = await self.llm.complete(
            prompt, model=self.model, temperature=temperature, max_tokens=SHAREABILITY_MAX_TOKENS
        )
        raw_scores = parse_json_array(response.text)

        scores = []
        for position, raw in enumerate(raw_scores):
            if not isinstance(raw, dict):
                continue
            index = _opt_int(raw.get("index"))
            if index is None or not 0 <= index < len(contents):
                index = position
            if index >= len(contents):
                logger.warning(f"Shareability result {position} has no matching content, skipping")
                continue
            content, content_type = contents[index]
            scores.append(process_share_score(raw, content, content_type, index))

        stats = calculate_share_stats(scores, response.output_tokens, int((time.time() - start) * 1000))
        logger.info(
            f"Scored {stats.scored} items for shareability "
            f"(avg {stats.avg_score}, {stats.high_potential_count} high potential)"
        )
        return ShareabilityResult(scores=scores, stats=stats)

    async def score_hooks(self, hooks: Sequence[str]) -> ShareabilityResult:
        return await self.score_contents([(h, "hook") for h in hooks])

"""
Voice Transformation Service - Expanded scripts rewritten in the creator's voice.

This is the quality-critical stage. The LLM is good at matching fillers and
vocabulary but routinely opens with generic filler ("okay so like") in front
of the hook, so every result goes through preserve_hook_opener() before it
is accepted.

Batches are retried with exponential backoff (1s, 2s, 4s, ...). A batch
that still fails is logged and skipped; the remaining batches carry on.
"""

import asyncio
import logging
import re
import time
from typing import Any, Dict, List, Optional, Tuple

from ....core.config import Config
from ....core.llm import LLMGateway, parse_json_array
from ....core.models import CreatorModel
from ....repositories import ScriptRepository
from ..models import (
    ExpandedScript,
    TransformationStats,
    TransformedScript,
    VoiceTransformationResult,
)
from ..prompts.voice_transformation import build_voice_transformation_prompt
from ..utils import (
    collapse_paragraphs,
    count_words,
    global_index,
    iter_batches,
    normalize_text,
    safe_local_index,
    string_list,
)

logger = logging.getLogger(__name__)

TRANSFORMATION_MAX_TOKENS = 8192
RETRY_BASE_DELAY_SECONDS = 1.0
BATCH_DELAY_SECONDS = 1.0

HOOK_WORDS_CONSIDERED = 5
HOOK_WORDS_MATCHED = 4
MAX_FILLER_PASSES = 10
OPENER_SEARCH_CHARS = 100

# Multi-word openers first so "okay so like," is removed whole rather than
# leaving "so like," behind.
FILLER_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"^okay\s+so\s+like\b,?\s*",
        r"^so\s+like\b,?\s*",
        r"^um\b,?\s+okay\s+so\s+like\b,?\s*",
        r"^um\b,?\s+so\s+like\b,?\s*",
        r"^um\b,?\s+like\b,?\s*",
        r"^so\b,?\s+",
        r"^like\b,?\s*",
        r"^okay\s+so\b,?\s*",
        r"^um\b,?\s*",
    )
]


def _strip_filler_pass(text: str) -> str:
    for pattern in FILLER_PATTERNS:
        text = pattern.sub("", text, count=1).lstrip()
    return text


def strip_leading_fillers(text: str) -> str:
    """Remove stacked filler openers. Running it on clean text is a no-op."""
    text = (text or "").strip()
    for _ in range(MAX_FILLER_PASSES):
        stripped = _strip_filler_pass(text)
        if stripped == text:
            break
        text = stripped
    return text


def _hook_pattern(hook: str) -> str:
    words = normalize_text(hook).split()[:HOOK_WORDS_CONSIDERED]
    return " ".join(words[:HOOK_WORDS_MATCHED])


def _starts_with_pattern(text: str, pattern: str) -> bool:
    return (normalize_text(text) + " ").startswith(pattern + " ")


def _normalize_with_offsets(text: str) -> Tuple[str, List[int]]:
    """
    Same folding as normalize_text, but remembers where each kept character
    came from in the original string.
    """
    chars: List[str] = []
    offsets: List[int] = []
    pending_space = False

    for i, ch in enumerate(text):
        for c in ch.lower():
            if c.isspace():
                pending_space = bool(chars)
                continue
            if not (("a" <= c <= "z") or ("0" <= c <= "9")):
                continue
            if pending_space:
                chars.append(" ")
                offsets.append(i)
                pending_space = False
            chars.append(c)
            offsets.append(i)

    return "".join(chars), offsets


def _slice_to_pattern(text: str, pattern: str) -> Optional[str]:
    """Cut everything before the hook opener if it appears near the start."""
    normalized, offsets = _normalize_with_offsets(text)
    idx = (" " + normalized).find(" " + pattern)
    if idx < 0 or idx >= OPENER_SEARCH_CHARS:
        return None

    sliced = text[offsets[idx]:].strip()
    if not _starts_with_pattern(sliced, pattern):
        return None
    return sliced


def preserve_hook_opener(script: str, hook: str) -> str:
    """
    Make sure a transformed script opens with the hook's opening words.

    Args:
        script: Transformed script text
        hook: The hook the script was expanded from

    Returns:
        The script starting with the hook opener, or the filler-stripped
        script if the opener could not be found
    """
    original = (script or "").strip()
    pattern = _hook_pattern(hook)
    if not pattern or _starts_with_pattern(original, pattern):
        return original

    # Check after every single pattern: hooks can open with a filler word
    # themselves ("So this guy...", "Like I said...").
    text = original
    for _ in range(MAX_FILLER_PASSES):
        changed = False
        for filler in FILLER_PATTERNS:
            stripped = filler.sub("", text, count=1).lstrip()
            if stripped == text:
                continue
            text, changed = stripped, True
            if _starts_with_pattern(text, pattern):
                return text
        if not changed:
            break

    sliced = _slice_to_pattern(original, pattern)
    if sliced is not None:
        return sliced

    logger.warning(f'Hook opener "{pattern}" not found in transformed script, keeping stripped text')
    return text


def _clamp_score(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return int(min(100, max(0, value)))


def process_transformed_script(
    raw: Dict[str, Any],
    original_hook: str,
    script_index: int,
) -> TransformedScript:
    """Clean one raw LLM entry: single paragraph, hook opener restored, counts recomputed."""
    text = collapse_paragraphs(str(raw.get("transformed_script") or ""))
    text = preserve_hook_opener(text, original_hook)

    return TransformedScript(
        script_index=script_index,
        original_hook=original_hook,
        transformed_script=text,
        word_count=count_words(text),
        changes_made=string_list(raw.get("changes_made")),
        voice_fidelity_score=_clamp_score(raw.get("voice_fidelity_score")),
        ai_tells_removed=string_list(raw.get("ai_tells_removed")),
        voice_elements_added=string_list(raw.get("voice_elements_added")),
    )


def calculate_stats(
    scripts: List[TransformedScript],
    failed_batches: int,
    tokens_used: int,
    elapsed_ms: int,
) -> TransformationStats:
    n = len(scripts)
    if not n:
        return TransformationStats(
            failed_batches=failed_batches, tokens_used=tokens_used, transformation_time_ms=elapsed_ms
        )
    return TransformationStats(
        total_transformed=n,
        avg_fidelity_score=round(sum(s.voice_fidelity_score for s in scripts) / n),
        avg_ai_tells_removed=round(sum(len(s.ai_tells_removed) for s in scripts) / n, 1),
        avg_voice_elements_added=round(sum(len(s.voice_elements_added) for s in scripts) / n, 1),
        failed_batches=failed_batches,
        tokens_used=tokens_used,
        transformation_time_ms=elapsed_ms,
    )


class VoiceTransformationService:
    """Rewrites expanded scripts so they sound like the creator."""

    def __init__(
        self,
        llm: LLMGateway,
        script_repo: Optional[ScriptRepository] = None,
        model: Optional[str] = None,
    ):
        self.llm = llm
        self.script_repo = script_repo
        self.model = model or Config.get_model("voice_transformation")

    def get_approved_samples(self, model_id: str) -> List[str]:
        """Openings of recently approved scripts, used as extra voice samples."""
        if not self.script_repo:
            return []
        try:
            return self.script_repo.get_approved_excerpts(model_id, limit=5, chars=100)
        except Exception as e:
            logger.warning(f"Could not load approved script samples for {model_id}: {e}")
            return []

    async def _transform_batch(
        self,
        creator: CreatorModel,
        batch: List[ExpandedScript],
        batch_start: int,
        temperature: float,
        approved_samples: List[str],
    ) -> Tuple[List[TransformedScript], int]:
        prompt = build_voice_transformation_prompt(
            model_name=creator.display_name,
            voice_profile=creator.voice_profile,
            scripts=batch,
            approved_samples=approved_samples,
        )
        response = await self.llm.complete(
            prompt, model=self.model, temperature=temperature, max_tokens=TRANSFORMATION_MAX_TOKENS
        )
        raw_scripts = parse_json_array(response.text)

        used = set()
        results = []
        for position, raw in enumerate(raw_scripts):
            if not isinstance(raw, dict):
                continue
            local = safe_local_index(raw.get("script_index"), position, len(batch))
            if local in used:
                logger.warning(f"Duplicate script_index {local} in transformation batch at {batch_start}, skipping")
                continue
            used.add(local)
            results.append(process_transformed_script(
                raw, batch[local].hook, global_index(batch_start, local, len(batch))
            ))
        return results, response.output_tokens

    async def transform_scripts(
        self,
        model: CreatorModel,
        scripts: List[ExpandedScript],
        batch_size: int = 5,
        temperature: float = 0.7,
        max_retries: int = 2,
        approved_samples: Optional[List[str]] = None,
    ) -> VoiceTransformationResult:
        """
        Transform scripts into the creator's voice.

        Args:
            model: Creator model
            scripts: Expanded scripts (script_index refers to positions in this list)
            batch_size: Scripts per LLM call
            temperature: Sampling temperature
            max_retries: Retries per batch after the first attempt
            approved_samples: Extra voice samples; fetched from approved scripts when None

        Returns:
            VoiceTransformationResult (abandoned batches are simply absent)
        """
        start = time.time()
        if approved_samples is None:
            approved_samples = self.get_approved_samples(model.id)

        transformed: List[TransformedScript] = []
        total_tokens = 0
        failed_batches = 0

        for batch_start, batch in iter_batches(scripts, batch_size):
            batch_no = batch_start // batch_size + 1

            for attempt in range(max_retries + 1):
                try:
                    results, tokens = await self._transform_batch(
                        model, list(batch), batch_start, temperature, approved_samples
                    )
                    total_tokens += tokens
                    transformed.extend(results)
                    break
                except Exception as e:
                    logger.warning(f"Transformation batch {batch_no} attempt {attempt + 1} failed: {e}")
                    if attempt < max_retries:
                        await asyncio.sleep(RETRY_BASE_DELAY_SECONDS * (2 ** attempt))
            else:
                failed_batches += 1
                logger.error(f"Transformation batch {batch_no} failed after {max_retries + 1} attempts")

            if batch_start + batch_size < len(scripts):
                await asyncio.sleep(BATCH_DELAY_SECONDS)

        stats = calculate_stats(
            transformed, failed_batches, total_tokens, int((time.time() - start) * 1000)
        )
        logger.info(
            f"Transformed {stats.total_transformed}/{len(scripts)} scripts "
            f"(avg fidelity {stats.avg_fidelity_score})"
        )
        return VoiceTransformationResult(model_id=model.id, scripts=transformed, stats=stats)

    async def transform_single_script(
        self,
        model: CreatorModel,
        script: ExpandedScript,
        temperature: float = 0.7,
        max_retries: int = 2,
    ) -> Optional[TransformedScript]:
        """Transform one script; None if every attempt failed."""
        result = await self.transform_scripts(
            model, [script], batch_size=1, temperature=temperature, max_retries=max_retries
        )
        return result.scripts[0] if result.scripts else None

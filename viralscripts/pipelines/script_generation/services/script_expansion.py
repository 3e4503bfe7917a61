"""
Script Expansion Service - Hooks expanded into full scripts.

Hooks are expanded in batches. A batch whose LLM call or parse fails is
logged and skipped so the rest of the run still yields scripts. Each
script's hook_index is re-based from the batch-local index the LLM reports
to the hook's position in the full list.

Validation here is advisory: issues are attached to the script, nothing is
discarded.
"""

import asyncio
import logging
import re
import time
from typing import Any, Dict, List, Optional, Tuple

from ....core.config import Config
from ....core.llm import LLMGateway, parse_json_array
from ....core.models import Boundaries, CorpusMatch, CreatorModel
from ..models import (
    ExpandedScript,
    ExpansionStats,
    GeneratedHook,
    ScriptExpansionResult,
    StructureBreakdown,
)
from ..prompts.cta import AUTO_CTA
from ..prompts.script_expansion import DURATION_GUIDELINES, build_script_expansion_prompt
from ..utils import (
    count_words,
    global_index,
    iter_batches,
    normalize_text,
    safe_local_index,
    string_list,
)

logger = logging.getLogger(__name__)

EXPANSION_MAX_TOKENS = 8192
BATCH_DELAY_SECONDS = 0.5
HOOK_PREFIX_CHARS = 30
SCRIPT_START_CHARS = 200


def parse_duration_seconds(value: Any, default: int) -> int:
    """Read an LLM duration such as 45, 45.0 or "45 seconds"; default when absent or unreadable."""
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return int(value) if value > 0 else default
    match = re.search(r"\d+", str(value or ""))
    return int(match.group()) if match else default


def validate_script(
    script: ExpandedScript,
    target_duration: str,
    boundaries: Boundaries,
) -> List[str]:
    """
    Structural checks on one expanded script.

    Returns:
        Human-readable issues (empty if the script looks right)
    """
    issues: List[str] = []
    guide = DURATION_GUIDELINES[target_duration]
    band = f"{guide['min_words']}-{guide['max_words']}"

    if script.word_count < guide["min_words"] - 10:
        issues.append(f"Script too short: {script.word_count} words (target: {band})")
    if script.word_count > guide["max_words"] + 20:
        issues.append(f"Script too long: {script.word_count} words (target: {band})")

    hook_prefix = normalize_text(script.hook)[:HOOK_PREFIX_CHARS]
    script_start = normalize_text(script.script[:SCRIPT_START_CHARS])
    if hook_prefix not in script_start:
        issues.append("Script may not start with the hook")

    lowered = script.script.lower()
    for hard_no in boundaries.hard_nos:
        if hard_no and hard_no.lower() in lowered:
            issues.append(f'Contains hard no: "{hard_no}"')
    for topic in boundaries.topics_to_avoid:
        if topic and topic.lower() in lowered:
            issues.append(f'Contains topic to avoid: "{topic}"')

    for part in script.structure_breakdown.missing_parts():
        issues.append(f"Missing structure: {part}")

    return issues


def process_expanded_script(
    raw: Dict[str, Any],
    hook_index: int,
    source_hook: GeneratedHook,
    target_duration: str,
    boundaries: Boundaries,
) -> ExpandedScript:
    """Build an ExpandedScript from one raw LLM entry and attach its issues."""
    text = str(raw.get("script") or "").strip()
    breakdown = raw.get("structure_breakdown")

    script = ExpandedScript(
        hook_index=hook_index,
        hook=str(raw.get("hook") or source_hook.hook),
        script=text,
        word_count=count_words(text),
        estimated_duration_seconds=parse_duration_seconds(
            raw.get("estimated_duration_seconds"), DURATION_GUIDELINES[target_duration]["target_seconds"]
        ),
        structure_breakdown=StructureBreakdown.model_validate(breakdown) if isinstance(breakdown, dict) else StructureBreakdown(),
        parasocial_levers_used=string_list(raw.get("parasocial_levers_used")),
        cta_type=raw.get("cta_type") or None,
    )
    script.validation_issues = validate_script(script, target_duration, boundaries)
    return script


class ScriptExpansionService:
    """Expands hooks into duration-targeted scripts."""

    def __init__(self, llm: LLMGateway, model: Optional[str] = None):
        self.llm = llm
        self.model = model or Config.get_model("script_expansion")

    async def _expand_batch(
        self,
        creator: CreatorModel,
        batch: List[GeneratedHook],
        batch_start: int,
        corpus_matches: List[CorpusMatch],
        target_duration: str,
        cta_type: str,
        temperature: float,
    ) -> Tuple[List[ExpandedScript], int]:
        prompt = build_script_expansion_prompt(
            model_name=creator.display_name,
            voice_profile=creator.voice_profile,
            hooks=batch,
            corpus_examples=corpus_matches,
            target_duration=target_duration,
            cta_type=cta_type,
        )
        response = await self.llm.complete(
            prompt, model=self.model, temperature=temperature, max_tokens=EXPANSION_MAX_TOKENS
        )
        raw_scripts = parse_json_array(response.text)

        boundaries = creator.effective_boundaries()
        used = set()
        scripts = []
        for position, raw in enumerate(raw_scripts):
            if not isinstance(raw, dict):
                continue
            local = safe_local_index(raw.get("hook_index"), position, len(batch))
            if local in used:
                logger.warning(f"Duplicate hook_index {local} in expansion batch at {batch_start}, skipping")
                continue
            try:
                script = process_expanded_script(
                    raw, global_index(batch_start, local, len(batch)), batch[local], target_duration, boundaries
                )
            except (TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed expansion entry {local} in batch at {batch_start}: {e}")
                continue
            used.add(local)
            scripts.append(script)
        return scripts, response.output_tokens

    async def expand_scripts(
        self,
        model: CreatorModel,
        hooks: List[GeneratedHook],
        corpus_matches: Optional[List[CorpusMatch]] = None,
        target_duration: str = "medium",
        cta_type: str = AUTO_CTA,
        batch_size: int = 10,
        temperature: float = 0.8,
    ) -> ScriptExpansionResult:
        """
        Expand hooks into full scripts.

        Args:
            model: Creator model
            hooks: Hooks to expand (hook_index refers to positions in this list)
            corpus_matches: Exemplars for structure reference
            target_duration: short, medium or long
            cta_type: A CTA type, or 'auto' to let the LLM pick per hook
            batch_size: Hooks per LLM call
            temperature: Sampling temperature

        Returns:
            ScriptExpansionResult (failed batches are simply absent)
        """
        if target_duration not in DURATION_GUIDELINES:
            raise ValueError(f"target_duration must be one of {list(DURATION_GUIDELINES)}, got {target_duration}")

        start = time.time()
        all_scripts: List[ExpandedScript] = []
        total_tokens = 0
        failed_batches = 0

        for batch_start, batch in iter_batches(hooks, batch_size):
            try:
                scripts, tokens = await self._expand_batch(
                    model, list(batch), batch_start, corpus_matches or [],
                    target_duration, cta_type, temperature,
                )
                total_tokens += tokens
                all_scripts.extend(scripts)
            except Exception as e:
                failed_batches += 1
                logger.warning(f"Expansion batch {batch_start // batch_size + 1} failed, skipping: {e}")

            if batch_start + batch_size < len(hooks):
                await asyncio.sleep(BATCH_DELAY_SECONDS)

        n = len(all_scripts)
        stats = ExpansionStats(
            total_expanded=n,
            avg_word_count=round(sum(s.word_count for s in all_scripts) / n) if n else 0,
            avg_duration_seconds=round(sum(s.estimated_duration_seconds for s in all_scripts) / n) if n else 0,
            scripts_with_issues=sum(1 for s in all_scripts if s.validation_issues),
            failed_batches=failed_batches,
            tokens_used=total_tokens,
            expansion_time_ms=int((time.time() - start) * 1000),
        )
        logger.info(f"Expanded {n}/{len(hooks)} hooks ({stats.scripts_with_issues} with issues)")

        return ScriptExpansionResult(model_id=model.id, scripts=all_scripts, stats=stats)

    async def expand_single_hook(
        self,
        model: CreatorModel,
        hook: GeneratedHook,
        corpus_matches: Optional[List[CorpusMatch]] = None,
        target_duration: str = "medium",
        cta_type: str = AUTO_CTA,
    ) -> Optional[ExpandedScript]:
        """Expand one hook; None if the LLM call failed."""
        result = await self.expand_scripts(
            model, [hook], corpus_matches, target_duration, cta_type, batch_size=1
        )
        return result.scripts[0] if result.scripts else None

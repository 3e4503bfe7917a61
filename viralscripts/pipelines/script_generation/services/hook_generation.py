"""
Hook Generation Service - Scroll-stopping hook candidates in a creator's voice.

The per-type hook counts are computed before the LLM call so the prompt can
ask for exact numbers. Returned hooks go through deterministic validation
(required fields, length, duplicates) before anything downstream sees them.
"""

import logging
import time
import uuid
from typing import Any, Dict, List, Optional, Tuple

from ....core.config import Config
from ....core.llm import LLMGateway, LLMResponseError, parse_json_array
from ....core.models import CorpusMatch, CreatorModel, HookRecord, HookSource, VoiceProfile
from ....repositories import HookRepository
from ..models import GeneratedHook, HookGenerationResult, HookGenerationStats, HookVariationSet
from ..prompts.hook_generation import build_hook_generation_prompt
from ..prompts.hook_types import ALL_HOOK_TYPES, DEFAULT_ARCHETYPE, affine_hook_types
from ..utils import round_half_up

logger = logging.getLogger(__name__)

MAX_HOOK_WORDS = 25
RETRY_TEMPERATURE = 0.7
HOOK_MAX_TOKENS = 8192


def get_hook_type_distribution(
    count: int,
    voice_profile: VoiceProfile,
    requested_types: Optional[List[str]] = None,
) -> Dict[str, int]:
    """
    Split a hook count across hook types.

    Types the creator's primary archetype favors get weight 2, the rest
    weight 1. Each type receives round(weight / total * count), capped by
    what is left; any remainder is handed out round-robin in type order.

    Args:
        count: Total hooks
        voice_profile: Creator profile (primary archetype drives affinities)
        requested_types: Restrict to these hook types

    Returns:
        Ordered dict of hook_type -> count, summing to count
    """
    types = requested_types or ALL_HOOK_TYPES
    archetype = voice_profile.primary_archetype or DEFAULT_ARCHETYPE
    affinities = affine_hook_types(archetype)

    weighted = [(t, 2 if t in affinities else 1) for t in types]
    total_weight = sum(w for _, w in weighted)

    distribution: Dict[str, int] = {}
    remaining = count
    for hook_type, weight in weighted:
        share = round_half_up(weight / total_weight * count)
        distribution[hook_type] = min(share, remaining)
        remaining -= distribution[hook_type]

    i = 0
    while remaining > 0:
        hook_type = weighted[i % len(weighted)][0]
        distribution[hook_type] += 1
        remaining -= 1
        i += 1

    return distribution


def validate_hooks(raw_hooks: List[Any]) -> List[GeneratedHook]:
    """
    Keep only well-formed, unique hooks.

    Drops entries missing hook/hook_type, empty hooks, hooks over 25 words
    and case-insensitive duplicates (first occurrence wins).
    """
    seen = set()
    valid: List[GeneratedHook] = []

    for raw in raw_hooks:
        if not isinstance(raw, dict):
            continue
        text = raw.get("hook")
        hook_type = raw.get("hook_type")
        if not text or not isinstance(text, str):
            continue
        if not hook_type or not isinstance(hook_type, str):
            continue

        clean = text.strip()
        if not clean or len(clean.split()) > MAX_HOOK_WORDS:
            continue

        key = clean.lower()
        if key in seen:
            continue
        seen.add(key)

        levers = raw.get("parasocial_levers")
        valid.append(GeneratedHook(
            hook=clean,
            hook_type=hook_type,
            parasocial_levers=[str(l) for l in levers] if isinstance(levers, list) else [],
            why_it_works=raw.get("why_it_works") or "",
            pcm_type=raw.get("pcm_type") or None,
            concept_id=raw.get("concept_id") or None,
            variation_strategy=raw.get("variation_strategy") or None,
        ))

    return valid


def _parse_recommended(values: Any) -> List[int]:
    if not isinstance(values, list) or not values:
        return [0, 1]
    indices = []
    for v in values:
        try:
            indices.append(int(str(v).replace("variation_index_", "")))
        except ValueError:
            continue
    return indices or [0, 1]


def parse_hooks_response(
    text: str,
    variation_mode: bool = False,
) -> Tuple[List[Dict[str, Any]], Optional[List[Dict[str, Any]]]]:
    """
    Parse a hook generation reply.

    In variation mode the reply is a list of concept groups; their variations
    are flattened into the hook list, each tagged with its concept_id.

    Returns:
        (raw hook dicts, raw concept groups or None)

    Raises:
        LLMResponseError: If the reply is not a JSON array
    """
    parsed = parse_json_array(text)

    if variation_mode and parsed and isinstance(parsed[0], dict) and "variations" in parsed[0]:
        sets = []
        hooks: List[Dict[str, Any]] = []
        for group in parsed:
            concept_id = str(group.get("concept_id") or f"concept_{len(sets)}")
            variations = [
                {**v, "concept_id": concept_id}
                for v in group.get("variations") or [] if isinstance(v, dict)
            ]
            sets.append({
                "concept_id": concept_id,
                "concept": group.get("concept") or "",
                "recommended_for_testing": _parse_recommended(group.get("recommended_for_testing")),
            })
            hooks.extend(variations)
        return hooks, sets

    return parsed, None


class HookGenerationService:
    """Generates, validates and tracks hooks for a creator."""

    def __init__(
        self,
        llm: LLMGateway,
        hook_repo: Optional[HookRepository] = None,
        model: Optional[str] = None,
    ):
        self.llm = llm
        self.hook_repo = hook_repo
        self.model = model or Config.get_model("hook_generation")

    async def generate_hooks(
        self,
        model: CreatorModel,
        corpus_matches: List[CorpusMatch],
        count: int = 30,
        hook_types: Optional[List[str]] = None,
        temperature: float = 0.9,
        variations_per_concept: int = 1,
        enable_pcm_tracking: bool = False,
        recent_hooks: Optional[List[str]] = None,
    ) -> HookGenerationResult:
        """
        Generate hooks for a creator.

        One retry at temperature 0.7 if the first reply cannot be parsed;
        a second failure propagates.

        Args:
            model: Creator model
            corpus_matches: Exemplars to show the LLM
            count: Hooks requested
            hook_types: Restrict to these hook types
            temperature: First-attempt temperature
            variations_per_concept: >1 switches to concept/variation mode
            enable_pcm_tracking: Tag and count PCM personality types
            recent_hooks: Hooks to avoid repeating

        Returns:
            HookGenerationResult
        """
        start = time.time()
        variation_mode = variations_per_concept > 1

        distribution = get_hook_type_distribution(count, model.voice_profile, hook_types)
        prompt = build_hook_generation_prompt(
            model_name=model.display_name,
            voice_profile=model.voice_profile,
            corpus_examples=corpus_matches,
            distribution=distribution,
            count=count,
            recent_hooks=recent_hooks,
            variations_per_concept=variations_per_concept,
            enable_pcm_tracking=enable_pcm_tracking,
        )

        tokens_used = 0
        raw_hooks: List[Dict[str, Any]] = []
        raw_sets: Optional[List[Dict[str, Any]]] = None

        for attempt, temp in enumerate((temperature, RETRY_TEMPERATURE)):
            try:
                response = await self.llm.complete(
                    prompt, model=self.model, temperature=temp, max_tokens=HOOK_MAX_TOKENS
                )
                tokens_used += response.output_tokens
                raw_hooks, raw_sets = parse_hooks_response(response.text, variation_mode)
                break
            except LLMResponseError as e:
                logger.error(f"Hook generation attempt {attempt + 1} failed: {e}")
                if attempt == 1:
                    raise

        hooks = validate_hooks(raw_hooks)

        variation_sets = None
        if raw_sets is not None:
            variation_sets = [
                HookVariationSet(
                    concept_id=s["concept_id"],
                    concept=s["concept"],
                    variations=[h for h in hooks if h.concept_id == s["concept_id"]],
                    recommended_for_testing=s["recommended_for_testing"],
                )
                for s in raw_sets
            ]

        by_type: Dict[str, int] = {}
        for hook in hooks:
            by_type[hook.hook_type] = by_type.get(hook.hook_type, 0) + 1

        by_pcm_type = None
        if enable_pcm_tracking:
            by_pcm_type = {}
            for hook in hooks:
                if hook.pcm_type:
                    by_pcm_type[hook.pcm_type] = by_pcm_type.get(hook.pcm_type, 0) + 1

        logger.info(f"Generated {len(hooks)}/{count} valid hooks for {model.display_name}")

        return HookGenerationResult(
            model_id=model.id,
            hooks=hooks,
            variation_sets=variation_sets,
            stats=HookGenerationStats(
                total_generated=len(hooks),
                by_type=by_type,
                by_pcm_type=by_pcm_type,
                variation_sets_count=len(variation_sets) if variation_sets is not None else None,
                tokens_used=tokens_used,
                generation_time_ms=int((time.time() - start) * 1000),
            ),
        )

    def get_recent_hooks(self, model_id: str, limit: int = 100) -> List[str]:
        """Recently generated hooks for a creator (empty if tracking is off)."""
        if self.hook_repo is None:
            return []
        return self.hook_repo.get_recent_hooks(model_id, limit=limit)

    def save_generated_hooks(self, model_id: str, hooks: List[GeneratedHook]) -> int:
        """
        Record generated hooks for future de-duplication.

        Variations of one concept share a variation_group_id.

        Returns:
            Number of hooks saved (0 on failure; failures are logged, not raised)
        """
        if self.hook_repo is None or not hooks:
            return 0

        group_ids: Dict[str, str] = {}
        records = []
        for hook in hooks:
            group_id = None
            if hook.concept_id:
                group_id = group_ids.setdefault(hook.concept_id, str(uuid.uuid4()))
            records.append(HookRecord(
                content=hook.hook,
                hook_type=hook.hook_type,
                model_id=model_id,
                source=HookSource.GENERATED,
                variation_group_id=group_id,
                pcm_type=hook.pcm_type,
            ))

        try:
            return self.hook_repo.insert_hooks(records)
        except Exception as e:
            logger.warning(f"Failed to save hooks for tracking: {e}")
            return 0

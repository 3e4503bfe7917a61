"""
Hook generation prompt.

Asks for an exact per-type hook count (computed before the call) and, in
variation mode, for concept groups with N stylistic variations each.
"""

import math
from typing import Dict, List, Optional

from ....core.models import CorpusMatch, VoiceProfile
from .hook_types import HOOK_TYPE_FRAMEWORKS, PARASOCIAL_LEVER_DESCRIPTIONS
from .pcm import PCM_HOOK_PATTERNS, VARIATION_STRATEGIES
from .voice import (
    format_boundaries,
    format_corpus_examples,
    format_levers_to_avoid,
    format_samples,
    format_voice_section,
)

MAX_RECENT_HOOKS_IN_PROMPT = 30


def _distribution_section(distribution: Dict[str, int]) -> str:
    lines = []
    for hook_type, n in distribution.items():
        if n <= 0:
            continue
        framework = HOOK_TYPE_FRAMEWORKS.get(hook_type, {})
        lines.append(
            f"### {hook_type} x{n}\n"
            f"- {framework.get('description', hook_type)}\n"
            f"- Pattern: {framework.get('pattern', 'free form')}\n"
            f"- Example: \"{framework.get('example', '')}\""
        )
    return "\n".join(lines)


def _pcm_section() -> str:
    lines = ["## PCM PERSONALITY TYPES (spread hooks roughly by population share)"]
    for pcm_type, data in PCM_HOOK_PATTERNS.items():
        vocab = ", ".join(data["vocabulary"])
        lines.append(
            f"- {pcm_type} ({data['population_pct']}%): {data['hook_style']}. Words: {vocab}"
        )
    return "\n".join(lines)


def _output_format(variation_mode: bool, variations_per_concept: int,
                   concept_count: int, enable_pcm_tracking: bool) -> str:
    pcm_field = ',\n    "pcm_type": "harmonizer|thinker|rebel|persister|imaginer|promoter"' if enable_pcm_tracking else ""

    if variation_mode:
        strategies = "\n".join(f"- {k}: {v}" for k, v in VARIATION_STRATEGIES.items())
        return f"""## VARIATION MODE

Generate {concept_count} distinct concepts with {variations_per_concept} variations each.
Variation strategies:
{strategies}

## OUTPUT FORMAT
Return ONLY a JSON array:
```json
[
  {{
    "concept_id": "short_unique_id",
    "concept": "Brief description of the concept",
    "variations": [
      {{
        "hook": "The hook text",
        "hook_type": "bold_statement",
        "parasocial_levers": ["lever1", "lever2"],
        "why_it_works": "Why this variation works",
        "variation_strategy": "angle_shift"{pcm_field}
      }}
    ],
    "recommended_for_testing": ["variation_index_0", "variation_index_2"]
  }}
]
```"""

    return f"""## OUTPUT FORMAT
Return ONLY a JSON array:
```json
[
  {{
    "hook": "The hook text",
    "hook_type": "bold_statement",
    "parasocial_levers": ["lever1", "lever2"],
    "why_it_works": "One sentence on why this fits her voice"{pcm_field}
  }}
]
```"""


def build_hook_generation_prompt(
    model_name: str,
    voice_profile: VoiceProfile,
    corpus_examples: List[CorpusMatch],
    distribution: Dict[str, int],
    count: int,
    recent_hooks: Optional[List[str]] = None,
    variations_per_concept: int = 1,
    enable_pcm_tracking: bool = False,
) -> str:
    """
    Build the hook generation prompt.

    Args:
        model_name: Creator display name
        voice_profile: Creator voice profile
        corpus_examples: Ranked exemplars from the corpus
        distribution: Exact hook count per hook type
        count: Total hooks requested
        recent_hooks: Hooks already generated for this creator (avoid repeats)
        variations_per_concept: >1 switches to concept/variation output
        enable_pcm_tracking: Ask for a pcm_type tag per hook

    Returns:
        Prompt text
    """
    variation_mode = variations_per_concept > 1
    concept_count = math.ceil(count / variations_per_concept) if variation_mode else count

    strengths = voice_profile.lever_strengths
    lever_lines = "\n".join(
        f"- {lever}: {PARASOCIAL_LEVER_DESCRIPTIONS.get(lever, lever.replace('_', ' '))}"
        for lever in (strengths or list(PARASOCIAL_LEVER_DESCRIPTIONS)[:5])
    )

    sections = [
        f"You write scroll-stopping short-form video hooks for {model_name}. "
        "Every hook must qualify the viewer and make him feel chosen, in her exact voice. "
        "Hooks are 5-12 words and never longer than 25.",
        format_voice_section(model_name, voice_profile),
        format_samples(voice_profile.sample_speech),
        format_corpus_examples(corpus_examples),
        f"## HOOK TYPES TO GENERATE ({count} total)\n{_distribution_section(distribution)}",
        f"## PARASOCIAL LEVERS TO LEAN ON\n{lever_lines}",
        format_levers_to_avoid(voice_profile),
        format_boundaries(voice_profile.boundaries),
    ]

    if enable_pcm_tracking:
        sections.append(_pcm_section())

    if recent_hooks:
        recent = "\n".join(f'- "{h}"' for h in recent_hooks[:MAX_RECENT_HOOKS_IN_PROMPT])
        sections.append(f"## ALREADY USED (do not repeat or closely paraphrase)\n{recent}")

    sections.append(_output_format(variation_mode, variations_per_concept, concept_count, enable_pcm_tracking))

    if variation_mode:
        sections.append(f"Generate exactly {concept_count} concepts. Return ONLY the JSON array.")
    else:
        sections.append(f"Generate exactly {count} hooks. Return ONLY the JSON array.")

    return "\n\n".join(s for s in sections if s)

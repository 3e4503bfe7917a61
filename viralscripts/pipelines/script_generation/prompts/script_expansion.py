"""
Script expansion prompt.

One call expands a batch of hooks. Hook indices in the prompt are local to
the batch; the service offsets them afterwards.
"""

from typing import Dict, List

from ....core.models import CorpusMatch, VoiceProfile
from ..models.hooks import GeneratedHook
from .cta import AUTO_CTA, CTA_TYPE_DESCRIPTIONS, recommended_ctas
from .voice import (
    format_boundaries,
    format_corpus_examples,
    format_samples,
    format_voice_section,
)

DURATION_GUIDELINES: Dict[str, Dict[str, int]] = {
    "short": {"min_words": 30, "max_words": 45, "min_sentences": 2, "max_sentences": 3, "target_seconds": 12},
    "medium": {"min_words": 45, "max_words": 65, "min_sentences": 4, "max_sentences": 5, "target_seconds": 20},
    "long": {"min_words": 65, "max_words": 90, "min_sentences": 5, "max_sentences": 7, "target_seconds": 30},
}


def _cta_instructions(hooks: List[GeneratedHook], cta_type: str) -> str:
    if cta_type != AUTO_CTA:
        return (
            f"## CLOSING CTA\nEnd every script with a {cta_type} close: "
            f"{CTA_TYPE_DESCRIPTIONS.get(cta_type, '')}. Never mention links, subscriptions or platforms."
        )

    catalog = "\n".join(f"- {name}: {desc}" for name, desc in CTA_TYPE_DESCRIPTIONS.items())
    per_hook = "\n".join(
        f"[{i}] {', '.join(recommended_ctas(h.hook_type, h.parasocial_levers)) or 'any'}"
        for i, h in enumerate(hooks)
    )
    return (
        "## CLOSING CTA (organic, never salesy)\n"
        f"{catalog}\n\nRecommended per hook:\n{per_hook}"
    )


def build_script_expansion_prompt(
    model_name: str,
    voice_profile: VoiceProfile,
    hooks: List[GeneratedHook],
    corpus_examples: List[CorpusMatch],
    target_duration: str = "medium",
    cta_type: str = AUTO_CTA,
) -> str:
    """Build the prompt that expands one batch of hooks."""
    guide = DURATION_GUIDELINES[target_duration]

    hooks_section = "\n".join(
        f"[{i}] ({h.hook_type}; levers: {', '.join(h.parasocial_levers) or 'any'}) \"{h.hook}\""
        for i, h in enumerate(hooks)
    )

    structure = (
        "## STRUCTURE\n"
        "1. HOOK: the hook, word for word, as the first sentence\n"
        "2. TENSION: build intrigue or stakes\n"
        "3. PAYLOAD: the point, the reveal or the punchline\n"
        "4. CLOSER: a final punch in the last 5-10 words\n"
        "Write it as one continuous spoken flow with no line breaks."
    )

    length = (
        f"## LENGTH\n{guide['min_words']}-{guide['max_words']} words, "
        f"{guide['min_sentences']}-{guide['max_sentences']} sentences, "
        f"about {guide['target_seconds']} seconds spoken."
    )

    output = """## OUTPUT FORMAT
Return ONLY a JSON array with one object per hook:
```json
[
  {
    "hook_index": 0,
    "hook": "The original hook text",
    "script": "The full script as one continuous flow",
    "word_count": 55,
    "estimated_duration_seconds": 20,
    "structure_breakdown": {
      "hook": "First sentence (the hook)",
      "tension": "What builds intrigue",
      "payload": "The main point",
      "closer": "Final punch"
    },
    "parasocial_levers_used": ["direct_address"],
    "cta_type": "rhetorical_close"
  }
]
```"""

    sections = [
        f"You expand hooks into complete short-form video scripts for {model_name}. "
        "Each script must open with its hook exactly as written.",
        format_voice_section(model_name, voice_profile),
        format_samples(voice_profile.sample_speech),
        format_corpus_examples(corpus_examples, limit=5),
        f"## HOOKS TO EXPAND\n{hooks_section}",
        structure,
        length,
        _cta_instructions(hooks, cta_type),
        format_boundaries(voice_profile.boundaries),
        output,
        f"Expand all {len(hooks)} hooks. Return ONLY the JSON array.",
    ]
    return "\n\n".join(s for s in sections if s)

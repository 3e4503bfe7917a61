"""
Voice transformation prompt.

Rewrites a batch of scripts in the creator's voice. The opening words of
each hook must survive; the service enforces this after the call anyway.
"""

from typing import List, Optional

from ....core.models import VoiceProfile
from ..models.scripts import ExpandedScript
from .voice import format_boundaries, format_samples, format_voice_section

AI_TELLS = [
    '"Honestly," or "Literally," as an opener',
    '"right?" or "you know?" on every sentence',
    "Perfectly balanced grammar and parallel clauses",
    "Paragraph breaks or list-like structure",
    "Generic words where she has her own term",
    "Summarizing the point at the end",
]


def build_voice_transformation_prompt(
    model_name: str,
    voice_profile: VoiceProfile,
    scripts: List[ExpandedScript],
    approved_samples: Optional[List[str]] = None,
) -> str:
    """Build the prompt that rewrites one batch of scripts."""
    scripts_section = "\n\n".join(
        f"[{i}] HOOK: \"{s.hook}\"\nSCRIPT: \"{s.script}\""
        for i, s in enumerate(scripts)
    )

    samples = list(voice_profile.sample_speech) + list(approved_samples or [])
    fillers = voice_profile.high_frequency_fillers
    filler_rule = (
        f"Use her high-frequency fillers ({', '.join(fillers)}) inside sentences, never stacked at the start."
        if fillers else "Use natural fillers inside sentences, never stacked at the start."
    )

    tells = "\n".join(f"- {t}" for t in AI_TELLS)

    output = """## OUTPUT FORMAT
Return ONLY a JSON array with one object per script:
```json
[
  {
    "script_index": 0,
    "original_hook": "The original hook text",
    "transformed_script": "One continuous flow in her voice with no line breaks",
    "word_count": 52,
    "changes_made": ["Added her catchphrase"],
    "voice_fidelity_score": 90,
    "ai_tells_removed": ["honestly opener"],
    "voice_elements_added": ["like x3", "catchphrase"]
  }
]
```"""

    sections = [
        f"You rewrite scripts so they sound exactly like {model_name} talking to camera.",
        format_voice_section(model_name, voice_profile),
        format_samples(samples, limit=10),
        "## RULES\n"
        "- The script MUST begin with the hook's opening words. No filler before the hook.\n"
        f"- {filler_rule}\n"
        "- Use her sentence starters, enders and catchphrases where they fit.\n"
        "- Use her vocabulary instead of generic terms.\n"
        "- One continuous paragraph. No line breaks.\n"
        "- Keep roughly the same length and meaning.",
        f"## AI TELLS TO REMOVE\n{tells}",
        format_boundaries(voice_profile.boundaries),
        f"## SCRIPTS\n{scripts_section}",
        output,
        f"Transform all {len(scripts)} scripts. Return ONLY the JSON array.",
    ]
    return "\n\n".join(s for s in sections if s)

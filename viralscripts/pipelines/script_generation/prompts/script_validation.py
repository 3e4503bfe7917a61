"""
Script validation prompt.

Scores every script in one call. Verdicts returned by the model are
advisory; the service derives the final verdict from the score.
"""

from typing import List

from ....core.models import VoiceProfile
from ..models.scripts import TransformedScript
from .voice import (
    format_boundaries,
    format_levers_to_avoid,
    format_samples,
    format_voice_section,
)


def build_validation_prompt(
    model_name: str,
    voice_profile: VoiceProfile,
    scripts: List[TransformedScript],
    pass_threshold: int = 80,
) -> str:
    """Build the prompt that scores a list of transformed scripts."""
    audience = voice_profile.audience
    target_viewer = audience.target_viewer_description or "Male viewers 18-35"
    fantasy = audience.fantasy_fulfilled or "Girlfriend experience and direct attention"

    scripts_section = "\n\n".join(
        f"[{i}] \"{s.transformed_script}\"" for i, s in enumerate(scripts)
    )

    output = f"""## OUTPUT FORMAT
Return ONLY a JSON array with one object per script, using the bracketed index:
```json
[
  {{
    "script_index": 0,
    "voice_fidelity_score": 87,
    "ai_tells_found": ["right? ender in sentence 3"],
    "boundary_violations": [],
    "strengths": ["Natural filler use"],
    "improvements": ["Add a more specific detail"],
    "verdict": "PASS",
    "revision_priority": "low"
  }}
]
```
Verdicts: PASS (score >= {pass_threshold}, no violations), REVISE (fixable), FAIL (score < 60 or any boundary violation)."""

    sections = [
        f"You are a strict quality reviewer for {model_name}'s short-form scripts. "
        "Score how authentically each script sounds like her (0-100).",
        format_voice_section(model_name, voice_profile),
        format_samples(voice_profile.sample_speech),
        f"## AUDIENCE\nTarget viewer: {target_viewer}\nFantasy fulfilled: {fantasy}",
        format_boundaries(voice_profile.boundaries),
        format_levers_to_avoid(voice_profile),
        "## CHECK FOR\n"
        "- AI tells (stock openers, balanced grammar, repeated 'right?' enders)\n"
        "- Generic vocabulary where she has her own term\n"
        "- Paragraph breaks (scripts must be one flow)\n"
        "- Whether the viewer is addressed and qualified\n"
        "- Any boundary violation",
        f"## SCRIPTS\n{scripts_section}",
        output,
        f"Score all {len(scripts)} scripts. Return ONLY the JSON array.",
    ]
    return "\n\n".join(s for s in sections if s)

"""
Voice profile extraction prompt.

Turns an interview transcript into the JSON voice profile stored on
models.voice_profile. Only the creator's lines count; interviewer speech
is ignored.
"""

from typing import Optional, Tuple

from .hook_types import ARCHETYPE_HOOK_AFFINITIES, PARASOCIAL_LEVER_DESCRIPTIONS

VALID_ARCHETYPES: Tuple[str, ...] = tuple(ARCHETYPE_HOOK_AFFINITIES)
VALID_PARASOCIAL_LEVERS: Tuple[str, ...] = tuple(PARASOCIAL_LEVER_DESCRIPTIONS)
VALID_EXPLICITNESS_LEVELS: Tuple[str, ...] = ("subtle", "medium", "full_send")

DEFAULT_INTERVIEWER = "The Interviewer"

VOICE_PROFILE_SCHEMA = """{
  "identity": {
    "name": "string | null - real name if mentioned",
    "stage_name": "string - creator/stage name",
    "nicknames_fans_use": ["nicknames fans call her"],
    "origin_location": "string | null",
    "age_range": "string | null - 20s, 30s, ...",
    "quick_bio": "string - 2-3 sentences capturing her essence"
  },
  "voice_mechanics": {
    "filler_words": [{"word": "like", "frequency": "high|medium|low"}],
    "sentence_starters": ["okay so", "honestly"],
    "sentence_enders": ["or whatever", "but yeah"],
    "avg_sentence_length": "short|medium|long",
    "sentence_style": "fragmented|complete|run-on",
    "question_frequency": "high|medium|low",
    "self_interruption_patterns": ["wait no", "actually"],
    "swear_words": ["words she actually uses"],
    "swear_frequency": "high|medium|low|none",
    "catchphrases": ["phrases she repeats"],
    "cta_style": "string - how she asks for follows or engagement",
    "emphasis_style": {"uses_caps": false, "stretches_words": false, "uses_repetition": false},
    "text_style": {
      "lowercase_preference": false,
      "emoji_usage": "heavy|moderate|minimal|none",
      "abbreviations": ["rn", "ngl"],
      "grammar_strictness": "strict|relaxed|chaotic"
    }
  },
  "personality": {
    "self_described_traits": ["verbatim if possible"],
    "friend_described_traits": ["how she says others describe her"],
    "humor_style": "roaster|hype_girl|both|absurdist|self_deprecating",
    "energy_level": "high|medium|low",
    "toxic_trait": "string | null",
    "hot_takes": ["strong opinions she expressed"],
    "conflict_style": "string | null"
  },
  "content": {
    "niche_topics": ["dating", "fitness"],
    "can_talk_hours_about": ["topics she is passionate about"],
    "content_types": ["storytime", "talking to camera"],
    "differentiator": "string - what sets her apart",
    "strong_opinions_on": ["things she has takes about"],
    "trends_she_hates": ["things she refuses to do"],
    "brand_anchors": ["brands or things she is obsessed with"]
  },
  "audience": {
    "target_viewer_description": "string | null",
    "fantasy_fulfilled": "string | null",
    "how_fans_talk_to_her": "string | null",
    "best_performing_content": "string | null"
  },
  "spicy": {
    "explicitness_level": "subtle|medium|full_send",
    "flirting_style": "string",
    "turn_ons_discussed": ["only what she said"],
    "her_type": "string | null",
    "bedroom_dynamic": "string | null",
    "sexual_vocabulary": {
      "body_part_euphemisms": {"category": ["her own terms"]},
      "act_euphemisms": {"category": ["her own terms"]},
      "intensity_markers": ["how explicit she gets"],
      "signature_spicy_phrases": ["her repeated spicy lines"]
    }
  },
  "boundaries": {
    "hard_nos": ["only what she EXPLICITLY refuses - [] if not discussed"],
    "topics_to_avoid": ["only topics she EXPLICITLY rules out - [] if not discussed"]
  },
  "aesthetic": {
    "visual_style": "string | null",
    "colors_vibes": "string | null",
    "content_energy": "string | null"
  },
  "archetype_assignment": {
    "primary": "one archetype from the valid list",
    "secondary": "archetype from the valid list | null",
    "mix": {"primary_archetype": 0.6, "secondary_archetype": 0.4},
    "confidence": 0.85
  },
  "parasocial_config": {
    "strengths": ["levers she uses naturally"],
    "avoid": ["levers that do not fit her"],
    "custom_levers": ["connection tactics unique to her"]
  },
  "voice_transformation_rules": {
    "always_include": ["things every script should have"],
    "never_include": ["things scripts must avoid"],
    "tone_calibration": {"baseline": "string", "spicy_content": "string", "vulnerability": "string"}
  },
  "sample_speech": ["5-10 VERBATIM quotes with fillers, disfluencies and cursing intact"]
}"""


def _bullets(values) -> str:
    return "\n".join(f"- {v}" for v in values)


def build_profile_extraction_prompt(
    transcript: str,
    model_name: Optional[str] = None,
    interviewer_name: Optional[str] = None,
) -> str:
    """
    Build the extraction prompt for one interview transcript.

    Args:
        transcript: Raw interview transcript (speaker-labelled lines)
        model_name: Creator whose voice is extracted; "the creator" when unknown
        interviewer_name: Speaker label whose lines are ignored

    Returns:
        Prompt asking for a single JSON object matching VOICE_PROFILE_SCHEMA
    """
    creator = model_name or "the creator"
    interviewer = interviewer_name or DEFAULT_INTERVIEWER

    levers = "\n".join(
        f"- {name}: {description}" for name, description in PARASOCIAL_LEVER_DESCRIPTIONS.items()
    )

    return f"""You are extracting a complete voice profile from a creator interview transcript. The profile drives script generation, so scripts must end up sounding exactly like {creator}.

## SPEAKERS
- The interviewer is "{interviewer}". Ignore their lines entirely, including any words they echo back.
- Extract the profile for {creator} only.

## RULES
1. Use only what {creator} actually says. Use null or [] when the transcript has no data.
2. sample_speech holds VERBATIM quotes from {creator}: keep filler words, disfluencies and cursing.
3. Audience fields are clean synthesized descriptions, not quotes. Leave them null when nothing supports them.
4. Boundaries: list only limits {creator} states explicitly. Empty arrays are correct when none are stated. Never invent a boundary.
5. Keep archetype confidence above 0.8 only when the evidence is clear.
6. Voice mechanics matter most: HOW she talks, not only WHAT she says.

Hallucinated data is worse than missing data. When in doubt, use null.

## VALID ARCHETYPES (primary and secondary must come from this list)
{_bullets(VALID_ARCHETYPES)}

## VALID PARASOCIAL LEVERS (for parasocial_config.strengths and .avoid)
{levers}

## VALID EXPLICITNESS LEVELS
{_bullets(VALID_EXPLICITNESS_LEVELS)}

## OUTPUT SCHEMA
{VOICE_PROFILE_SCHEMA}

## INTERVIEW TRANSCRIPT
```
{transcript}
```

Return ONLY valid JSON. No markdown, no explanations."""

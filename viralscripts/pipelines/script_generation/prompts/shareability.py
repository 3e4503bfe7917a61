"""Shareability scoring prompt."""

from typing import List, Tuple

from .share_triggers import EMOTIONAL_RESPONSES, SHAREABILITY_RUBRIC, SHARE_TRIGGER_PATTERNS

SHAREABILITY_PROMPT_HEADER = (
    "You are a viral content analyst predicting share potential for short-form creator content. "
    "The audience is mostly women who send content to their partners, and men who save "
    "content that speaks to them."
)


def build_shareability_prompt(contents: List[Tuple[str, str]]) -> str:
    """
    Build the shareability scoring prompt.

    Args:
        contents: (content, content_type) pairs; index = list position
    """
    triggers = "\n".join(
        f"### {name.upper().replace('_', ' ')}\n"
        f"- {data['description']}\n"
        f"- Indicators: {', '.join(data['indicators'][:5])}\n"
        f"- Share prediction: \"{data['share_prediction_template']}\""
        for name, data in SHARE_TRIGGER_PATTERNS.items()
    )

    rubric = "\n".join(
        f"- {name} (0-25): {data['description']} 0 = {data['low']}; 25 = {data['high']}"
        for name, data in SHAREABILITY_RUBRIC.items()
    )

    emotions = "\n".join(f"- {k}: {v}" for k, v in EMOTIONAL_RESPONSES.items())

    items = "\n\n".join(
        f"[{i}] [{content_type.upper()}] \"{content}\"" for i, (content, content_type) in enumerate(contents)
    )

    output = """## OUTPUT FORMAT
Return ONLY a JSON array with one object per item:
```json
[
  {
    "index": 0,
    "specificity_score": 20,
    "emotional_punch_score": 25,
    "share_trigger_score": 20,
    "authenticity_score": 15,
    "total_score": 80,
    "primary_trigger": "fantasy_projection",
    "secondary_trigger": "tag_friend",
    "emotional_response": "desire",
    "share_prediction": "Women will send this to their man as a hint",
    "viral_potential": "high",
    "reasoning": "Specific imagery plus direct address"
  }
]
```
Viral potential: 0-30 low, 31-50 medium, 51-70 high, 71-100 viral."""

    return "\n\n".join([
        SHAREABILITY_PROMPT_HEADER,
        f"## SHARE TRIGGERS\n{triggers}",
        f"## RUBRIC (total 0-100)\n{rubric}",
        f"## EMOTIONAL RESPONSES\n{emotions}",
        f"## CONTENT TO SCORE\n{items}",
        output,
        f"Score all {len(contents)} items. Return ONLY the JSON array.",
    ])

"""
Share trigger patterns for shareability scoring.

Indicators are lowercase substrings matched against content for the
offline estimate; the LLM rubric uses the descriptions.
"""

from typing import Dict, List, Tuple, Union

SHARE_TRIGGER_PATTERNS: Dict[str, Dict[str, Union[str, List[str]]]] = {
    "tag_friend": {
        "description": "'Send to your man' or 'tag a friend who' energy, advice men need to see",
        "indicators": ["men should", "men need to", "if your man", "ladies if", "tell him",
                       "your boyfriend", "if he doesn't"],
        "share_prediction_template": "Women will tag their man or send this as a hint",
    },
    "self_identification": {
        "description": "'This is so me' or 'omg same' reaction to a relatable experience",
        "indicators": ["do you ever", "am i the only one", "i cannot be the only", "pov:",
                       "when you", "that feeling when", "me when"],
        "share_prediction_template": "Women will tag friends who relate or comment 'me'",
    },
    "controversy_bait": {
        "description": "Hot take that demands a response or debate",
        "indicators": ["i don't care what", "unpopular opinion", "i said what i said", "fight me",
                       "i will die on this hill", "controversial but"],
        "share_prediction_template": "Comments will be filled with debates and hot takes",
    },
    "fantasy_projection": {
        "description": "Makes the viewer imagine themselves in the scenario",
        "indicators": ["i want a man who", "imagine if", "picture this", "i need a man",
                       "if only", "i just want"],
        "share_prediction_template": "Men will save this, women will share it as 'goals'",
    },
    "validation_seeking": {
        "description": "'Am I the only one?' or 'is this normal?' energy",
        "indicators": ["is that so hard", "am i asking for too much", "is this a red flag",
                       "where are the", "why is it so hard", "am i wrong for"],
        "share_prediction_template": "Comments will validate with 'no you're right' energy",
    },
    "humor_share": {
        "description": "Pure entertainment value that makes people laugh",
        "indicators": ["i-", "bruh", "i'm screaming", "dead", "i can't", "help", "lmaooo", "the way i"],
        "share_prediction_template": "Shared for pure entertainment, 'you need to see this'",
    },
    "educational_value": {
        "description": "'You need to learn this' tip or advice",
        "indicators": ["here's how", "the key to", "tip:", "you need to", "this is why",
                       "let me teach you"],
        "share_prediction_template": "Saved and shared as helpful advice to friends",
    },
    "aspirational": {
        "description": "Relationship or lifestyle 'goals'",
        "indicators": ["marriage material", "wife him", "that's a keeper", "hold on to him",
                       "never let go", "goals"],
        "share_prediction_template": "Shared as relationship 'goals' content",
    },
}

SHAREABILITY_RUBRIC: Dict[str, Dict[str, str]] = {
    "specificity": {
        "description": "How specific and vivid is the imagery?",
        "low": "Generic, could be said by anyone",
        "high": "Hyper-specific details that feel real and memorable",
    },
    "emotional_punch": {
        "description": "How strong is the gut reaction?",
        "low": "No emotional response",
        "high": "Visceral reaction that demands engagement",
    },
    "share_trigger": {
        "description": "Is there a clear reason to share?",
        "low": "No reason to share",
        "high": "Irresistible urge to share, 'I need to send this'",
    },
    "authenticity": {
        "description": "Does it sound human and natural?",
        "low": "Clearly AI or scripted sounding",
        "high": "Unmistakably authentic, like overhearing a real conversation",
    },
}

EMOTIONAL_RESPONSES: Dict[str, str] = {
    "desire": "Romantic wanting",
    "recognition": "'Omg same' identification",
    "controversy": "Debate or disagreement",
    "amusement": "Laughter or entertainment",
    "validation": "Feeling seen or understood",
    "curiosity": "Need to know more",
    "fomo": "Fear of missing out",
}

# (upper bound inclusive, label)
VIRAL_POTENTIAL_BANDS: List[Tuple[int, str]] = [
    (30, "low"),
    (50, "medium"),
    (70, "high"),
    (100, "viral"),
]

SPECIFICITY_PHRASES: List[str] = ["when he", "when she", "that moment", "the way", "imagine"]


def viral_potential_for(score: float) -> str:
    """Map a 0-100 total score to its viral potential label."""
    for upper, label in VIRAL_POTENTIAL_BANDS:
        if score <= upper:
            return label
    return "viral"

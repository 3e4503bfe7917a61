"""
Hook type taxonomy and personality-archetype affinities.

Hook types are viewer-qualifying openers: the viewer should feel the creator
is talking about someone like them. Archetype affinities decide which types
get double weight when the hook distribution is computed.
"""

from typing import Dict, List

ALL_HOOK_TYPES: List[str] = [
    "bold_statement",
    "question",
    "confession",
    "challenge",
    "relatable",
    "fantasy",
    "hot_take",
    "storytime",
]

HOOK_TYPE_FRAMEWORKS: Dict[str, Dict[str, str]] = {
    "bold_statement": {
        "description": "Statement about what she wants from the viewer or a type of man",
        "pattern": "I [want/need/love] a man who [specific behavior]",
        "example": "I need a man who remembers how I take my coffee without asking",
    },
    "question": {
        "description": "Question that qualifies the viewer or asks whether they relate",
        "pattern": "Do you ever [thought/behavior]? / Are you the type who [trait]?",
        "example": "Do you ever hear a man's voice note and just have to sit down?",
    },
    "confession": {
        "description": "Admission about what gets to her about a type of man (not a life story)",
        "pattern": "My toxic trait is [how she reacts to a type of man]",
        "example": "My toxic trait is if you hold the door and hold eye contact, I'm yours",
    },
    "challenge": {
        "description": "Directly dares the viewer to be the type she wants",
        "pattern": "If you [do/don't do X]... [reward/judgment]",
        "example": "If you plan the whole date without asking me first? Marry me immediately.",
    },
    "relatable": {
        "description": "Everyday thought that makes the viewer think she wants someone like him",
        "pattern": "When a man [does X], I immediately [reaction]",
        "example": "When a man puts his hand on my lower back in public, I forget my own name",
    },
    "fantasy": {
        "description": "Specific scenario she wants a man to create (viewer imagines being him)",
        "pattern": "I want a man who will [very specific act]",
        "example": "I want a man who will pull me close at a party and whisper that we're leaving",
    },
    "hot_take": {
        "description": "Polarizing opinion that qualifies the men she wants",
        "pattern": "Guys who [do X] are [verdict]... and I mean that",
        "example": "Guys who can cook? Immediate marriage material. I don't make the rules.",
    },
    "storytime": {
        "description": "Short story that makes the viewer imagine being the man in it",
        "pattern": "So this guy [did something] and now I [reaction]",
        "example": "So he looked at me across the table and said 'you're stuck with me' and now I'm obsessed",
    },
}

DEFAULT_ARCHETYPE = "girl_next_door"

ARCHETYPE_HOOK_AFFINITIES: Dict[str, List[str]] = {
    "chaotic_unhinged": ["confession", "hot_take", "storytime", "bold_statement"],
    "southern_belle": ["relatable", "bold_statement", "confession", "fantasy"],
    "bratty_princess": ["challenge", "hot_take", "bold_statement", "question"],
    "girl_next_door": ["relatable", "confession", "question", "fantasy"],
    "gym_baddie": ["bold_statement", "challenge", "hot_take", "relatable"],
    "alt_egirl": ["confession", "storytime", "question", "hot_take"],
    "classy_mysterious": ["question", "fantasy", "bold_statement", "storytime"],
    "party_girl": ["storytime", "confession", "relatable", "bold_statement"],
    "nerdy_gamer_girl": ["relatable", "question", "confession", "challenge"],
    "spicy_latina": ["bold_statement", "hot_take", "challenge", "confession"],
    "cool_girl": ["bold_statement", "relatable", "hot_take", "question"],
    "soft_sensual": ["fantasy", "confession", "question", "relatable"],
    "dominant": ["challenge", "bold_statement", "hot_take", "question"],
}

PARASOCIAL_LEVER_DESCRIPTIONS: Dict[str, str] = {
    "direct_address": "Speaking directly to the viewer as if in conversation",
    "sexual_tension": "Building anticipation and desire through suggestion",
    "relatability": "Shared experiences that trigger 'omg same' reactions",
    "vulnerability": "Authentic admissions that create emotional connection",
    "confession": "Secrets or admissions that feel exclusive to the viewer",
    "exclusivity": "Making the viewer feel like they're getting special access",
    "challenge": "Provoking or calling out the viewer directly",
    "praise": "Complimenting or validating the viewer",
    "dominance": "Taking control of the dynamic with confidence",
    "playful_self_deprecation": "Self-aware humor about own flaws",
    "inside_reference": "Callbacks that reward loyal followers",
    "aspiration": "Inspiring desire for a lifestyle or experience",
    "pseudo_intimacy": "Creating the illusion of a close relationship",
    "boyfriend_fantasy": "Playing into romantic relationship dynamics",
    "protector_dynamic": "Making the viewer feel cared for or protected",
}


def affine_hook_types(archetype: str) -> List[str]:
    """Preferred hook types for an archetype; unknown archetypes get the first four types."""
    return ARCHETYPE_HOOK_AFFINITIES.get(archetype, ALL_HOOK_TYPES[:4])

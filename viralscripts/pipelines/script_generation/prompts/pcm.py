"""
Process Communication Model (PCM) personality types.

Used to spread hook styles across the six PCM types roughly in proportion
to their share of the population, and to describe variation strategies for
A/B concept groups.
"""

from typing import Dict, List, Union

PCM_HOOK_PATTERNS: Dict[str, Dict[str, Union[int, str, List[str]]]] = {
    "harmonizer": {
        "population_pct": 30,
        "description": "Perceives the world through emotions, values compassion and connection",
        "hook_style": "Emotional connection, feelings-first language",
        "vocabulary": ["feel", "love", "care", "connect", "together", "heart", "warm"],
    },
    "thinker": {
        "population_pct": 25,
        "description": "Perceives the world through logic and data, values facts",
        "hook_style": "Logic-based, specific detail, 'studies show' energy",
        "vocabulary": ["actually", "specifically", "scientifically", "literally", "exactly", "technically"],
    },
    "rebel": {
        "population_pct": 20,
        "description": "Perceives the world through reactions, values humor and spontaneity",
        "hook_style": "Humor-driven reactions, 'I-' energy",
        "vocabulary": ["literally", "I-", "omg", "bruh", "like", "lmao"],
    },
    "persister": {
        "population_pct": 10,
        "description": "Perceives the world through opinions and values, principled",
        "hook_style": "Opinion-based, 'I believe', values-driven",
        "vocabulary": ["should", "believe", "right", "wrong", "deserve", "respect", "values"],
    },
    "imaginer": {
        "population_pct": 10,
        "description": "Perceives the world through reflection and imagination",
        "hook_style": "Dreamy and imaginative, 'picture this' energy",
        "vocabulary": ["imagine", "dream", "picture", "what if", "fantasy", "perfect"],
    },
    "promoter": {
        "population_pct": 5,
        "description": "Perceives the world through action, values charm and getting things done",
        "hook_style": "Action-oriented, direct, challenge-based",
        "vocabulary": ["now", "do", "make", "get", "take", "action", "move"],
    },
}

VARIATION_STRATEGIES: Dict[str, str] = {
    "angle_shift": "Same concept, different hook type (bold_statement -> question -> confession)",
    "intensity_modulation": "Dial the tension or vulnerability level up or down",
    "opener_swap": "Change the opening pattern ('I want...' vs 'Why do...' vs 'My toxic trait is...')",
    "specificity_change": "Make the imagery more or less specific",
    "lever_rotation": "Emphasize different parasocial levers",
}

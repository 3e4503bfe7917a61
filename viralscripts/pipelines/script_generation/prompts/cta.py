"""
Organic call-to-action (CTA) taxonomy.

CTAs close a script without sounding like an ad. The selection guide maps
hook types and parasocial levers to the CTA types that fit them best.
"""

from typing import Dict, List

CTA_TYPE_DESCRIPTIONS: Dict[str, str] = {
    "fantasy_invitation": "Makes the viewer feel chosen by qualifying them for a fantasy",
    "qualifier_challenge": "Challenges the viewer to prove they're worthy of her attention",
    "exclusivity_signal": "Creates an in-group feeling for those who 'get it'",
    "direct_desire": "Directly expresses wanting the viewer who fits the description",
    "loyalty_reward": "Rewards loyal followers with insider connection",
    "consequence_lock": "Playful possessiveness, 'now you're stuck with me'",
    "rhetorical_close": "Ends with a question that validates the content and invites agreement",
    "outcome_promise": "Promises the result if the viewer does what she described",
    "emotional_bond": "Simple, direct emotional connection that builds the parasocial relationship",
    "none": "Let the script end naturally without an explicit CTA",
}

CTA_TYPES: List[str] = list(CTA_TYPE_DESCRIPTIONS.keys())

AUTO_CTA = "auto"

CTA_SELECTION_GUIDE: Dict[str, Dict[str, List[str]]] = {
    "hook_types": {
        "bold_statement": ["qualifier_challenge", "rhetorical_close", "exclusivity_signal"],
        "question": ["rhetorical_close", "fantasy_invitation", "emotional_bond"],
        "confession": ["emotional_bond", "consequence_lock", "rhetorical_close"],
        "challenge": ["qualifier_challenge", "direct_desire", "exclusivity_signal"],
        "relatable": ["emotional_bond", "exclusivity_signal", "rhetorical_close"],
        "fantasy": ["fantasy_invitation", "direct_desire", "outcome_promise"],
        "hot_take": ["qualifier_challenge", "rhetorical_close", "none"],
        "storytime": ["consequence_lock", "outcome_promise", "emotional_bond"],
    },
    "levers": {
        "sexual_tension": ["fantasy_invitation", "direct_desire", "outcome_promise"],
        "vulnerability": ["emotional_bond", "rhetorical_close", "loyalty_reward"],
        "direct_address": ["fantasy_invitation", "direct_desire", "emotional_bond"],
        "exclusivity": ["exclusivity_signal", "loyalty_reward", "consequence_lock"],
    },
}


def recommended_ctas(hook_type: str, levers: List[str]) -> List[str]:
    """CTA types that suit a hook type and its levers, hook type first, no duplicates."""
    recommended: List[str] = list(CTA_SELECTION_GUIDE["hook_types"].get(hook_type, []))
    for lever in levers:
        for cta in CTA_SELECTION_GUIDE["levers"].get(lever, []):
            if cta not in recommended:
                recommended.append(cta)
    return recommended

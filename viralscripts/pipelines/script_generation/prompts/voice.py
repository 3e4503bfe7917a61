"""Voice profile sections shared by the stage prompts."""

from typing import List, Optional

from ....core.models import Boundaries, CorpusMatch, VoiceProfile


def _bullets(items: List[str], empty: str = "- None specified") -> str:
    if not items:
        return empty
    return "\n".join(f'- "{item}"' for item in items)


def format_voice_section(name: str, profile: VoiceProfile) -> str:
    """Identity, speech mechanics and personality as a prompt block."""
    mechanics = profile.voice_mechanics
    fillers = ", ".join(f'"{f.word}" ({f.frequency})' for f in mechanics.filler_words) or "natural fillers"

    archetype_mix = ", ".join(
        f"{arch.replace('_', ' ')}: {round(pct * 100)}%"
        for arch, pct in sorted(profile.archetype_assignment.mix.items(), key=lambda kv: -kv[1])
    ) or (profile.primary_archetype or "not assigned")

    lines = [
        f"## {name.upper()}'S VOICE",
        f"Bio: {profile.identity.quick_bio or 'not provided'}",
        f"Archetype mix: {archetype_mix}",
        f"Energy: {profile.personality.energy_level or 'medium'}",
        f"Humor: {profile.personality.humor_style or 'mixed'}",
        f"Sentence style: {mechanics.sentence_style or 'natural'}",
        f"Filler words: {fillers}",
        f"Sentence starters: {', '.join(mechanics.sentence_starters) or 'none identified'}",
        f"Sentence enders: {', '.join(mechanics.sentence_enders) or 'none identified'}",
        f"Catchphrases: {', '.join(mechanics.catchphrases) or 'none identified'}",
    ]

    glossary = profile.glossary_terms()
    if glossary:
        lines.append("")
        lines.append(f"## {name.upper()}'S VOCABULARY (use these exact terms)")
        for category, terms in glossary.items():
            lines.append(f"- {category.replace('_', ' ')}: {', '.join(terms)}")

    return "\n".join(lines)


def format_samples(samples: List[str], limit: int = 5, heading: str = "## HOW SHE ACTUALLY TALKS") -> str:
    picked = [s for s in samples if s][:limit]
    if not picked:
        return ""
    quoted = "\n".join(f'{i + 1}. "{s}"' for i, s in enumerate(picked))
    return f"{heading}\n{quoted}"


def format_boundaries(boundaries: Boundaries) -> str:
    return (
        "## BOUNDARIES (never include)\n"
        f"Hard nos:\n{_bullets(boundaries.hard_nos)}\n"
        f"Topics to avoid:\n{_bullets(boundaries.topics_to_avoid)}"
    )


def format_levers_to_avoid(profile: VoiceProfile) -> str:
    avoid = profile.lever_avoid
    if not avoid:
        return ""
    return "## PARASOCIAL LEVERS TO AVOID\n" + "\n".join(f"- {a.replace('_', ' ')}" for a in avoid)


def format_corpus_examples(matches: List[CorpusMatch], limit: Optional[int] = None) -> str:
    """Proven viral exemplars, with their hook type and levers."""
    picked = matches[:limit] if limit else matches
    if not picked:
        return ""
    blocks = []
    for i, match in enumerate(picked):
        levers = ", ".join(match.parasocial_levers) or "general appeal"
        blocks.append(
            f"Example {i + 1} ({match.hook_type or 'mixed'}; levers: {levers}):\n"
            f"Hook: \"{match.hook or match.content[:80]}\"\n"
            f"Script: \"{match.content}\""
        )
    return "## PROVEN VIRAL EXAMPLES (structure only, never copy wording)\n" + "\n\n".join(blocks)

"""
Pydantic models for database tables

Rows come back from Supabase as plain dicts; repositories validate them into
these records so the pipeline never handles untyped rows.
"""

import json
from typing import Optional, List, Dict, Any
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator


# ============================================================================
# Enums
# ============================================================================

class ScriptStatus(str, Enum):
    """Lifecycle of a saved script"""
    DRAFT = "draft"
    APPROVED = "approved"
    POSTED = "posted"
    ARCHIVED = "archived"


class HookSource(str, Enum):
    """Where a tracked hook came from"""
    CORPUS = "corpus"
    GENERATED = "generated"
    MODEL_SPECIFIC = "model_specific"


def _list_or_empty(v: Any) -> List[Any]:
    """Coerce None / scalars to a list; boundary and lever lists never stay null."""
    if v is None:
        return []
    if isinstance(v, list):
        return v
    return [v]


# ============================================================================
# Voice Profile (JSONB on models.voice_profile)
# ============================================================================

class FillerWord(BaseModel):
    """A filler word and how often the creator uses it"""
    word: str
    frequency: str = "medium"  # high, medium, low


class Identity(BaseModel):
    name: Optional[str] = None
    stage_name: Optional[str] = None
    nicknames_fans_use: List[str] = Field(default_factory=list)
    origin_location: Optional[str] = None
    age_range: Optional[str] = None
    quick_bio: Optional[str] = None


class VoiceMechanics(BaseModel):
    filler_words: List[FillerWord] = Field(default_factory=list)
    sentence_starters: List[str] = Field(default_factory=list)
    sentence_enders: List[str] = Field(default_factory=list)
    avg_sentence_length: Optional[str] = None
    sentence_style: Optional[str] = None  # fragmented, complete, run-on
    question_frequency: Optional[str] = None
    self_interruption_patterns: List[str] = Field(default_factory=list)
    swear_words: List[str] = Field(default_factory=list)
    swear_frequency: Optional[str] = None
    catchphrases: List[str] = Field(default_factory=list)
    cta_style: Optional[str] = None

    @field_validator('filler_words', mode='before')
    @classmethod
    def coerce_filler_words(cls, v: Any) -> List[Any]:
        """Accept bare strings as medium-frequency fillers"""
        items = _list_or_empty(v)
        return [{"word": item} if isinstance(item, str) else item for item in items]

    @field_validator(
        'sentence_starters', 'sentence_enders', 'self_interruption_patterns',
        'swear_words', 'catchphrases', mode='before'
    )
    @classmethod
    def coerce_lists(cls, v: Any) -> List[Any]:
        return _list_or_empty(v)


class Personality(BaseModel):
    self_described_traits: List[str] = Field(default_factory=list)
    friend_described_traits: List[str] = Field(default_factory=list)
    humor_style: Optional[str] = None
    energy_level: Optional[str] = None
    toxic_trait: Optional[str] = None
    hot_takes: List[str] = Field(default_factory=list)


class ContentFocus(BaseModel):
    niche_topics: List[str] = Field(default_factory=list)
    can_talk_hours_about: List[str] = Field(default_factory=list)
    differentiator: Optional[str] = None
    strong_opinions_on: List[str] = Field(default_factory=list)
    brand_anchors: List[str] = Field(default_factory=list)


class Audience(BaseModel):
    """Audience targeting. Every field stays None unless the source transcript supports it."""
    target_viewer_description: Optional[str] = None
    fantasy_fulfilled: Optional[str] = None
    how_fans_talk_to_her: Optional[str] = None
    best_performing_content: Optional[str] = None


class Spicy(BaseModel):
    explicitness_level: Optional[str] = None  # subtle, medium, full_send
    flirting_style: Optional[str] = None
    # Creator glossary: category -> term list, or category -> {subcategory -> term list}
    sexual_vocabulary: Dict[str, Any] = Field(default_factory=dict)

    @field_validator('sexual_vocabulary', mode='before')
    @classmethod
    def coerce_vocabulary(cls, v: Any) -> Dict[str, Any]:
        return v if isinstance(v, dict) else {}


class Boundaries(BaseModel):
    """Hard limits. Empty means none were stated; they are never invented."""
    hard_nos: List[str] = Field(default_factory=list)
    topics_to_avoid: List[str] = Field(default_factory=list)

    @field_validator('hard_nos', 'topics_to_avoid', mode='before')
    @classmethod
    def coerce_lists(cls, v: Any) -> List[Any]:
        return _list_or_empty(v)


class ParasocialConfig(BaseModel):
    strengths: List[str] = Field(default_factory=list)
    avoid: List[str] = Field(default_factory=list)

    @field_validator('strengths', 'avoid', mode='before')
    @classmethod
    def coerce_lists(cls, v: Any) -> List[Any]:
        return _list_or_empty(v)


class ArchetypeAssignment(BaseModel):
    primary: Optional[str] = None
    secondary: Optional[str] = None
    mix: Dict[str, float] = Field(default_factory=dict)
    confidence: Optional[float] = None


class VoiceProfile(BaseModel):
    """Structured description of one creator's speech"""
    identity: Identity = Field(default_factory=Identity)
    voice_mechanics: VoiceMechanics = Field(default_factory=VoiceMechanics)
    personality: Personality = Field(default_factory=Personality)
    content: ContentFocus = Field(default_factory=ContentFocus)
    audience: Audience = Field(default_factory=Audience)
    spicy: Spicy = Field(default_factory=Spicy)
    boundaries: Boundaries = Field(default_factory=Boundaries)
    parasocial: ParasocialConfig = Field(default_factory=ParasocialConfig)
    parasocial_config: Optional[ParasocialConfig] = None
    archetype_assignment: ArchetypeAssignment = Field(default_factory=ArchetypeAssignment)
    sample_speech: List[str] = Field(default_factory=list)

    model_config = {"extra": "allow"}

    @field_validator(
        'identity', 'voice_mechanics', 'personality', 'content', 'audience',
        'spicy', 'boundaries', 'parasocial', 'archetype_assignment', mode='before'
    )
    @classmethod
    def null_section_to_default(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator('sample_speech', mode='before')
    @classmethod
    def coerce_samples(cls, v: Any) -> List[Any]:
        return _list_or_empty(v)

    @property
    def lever_strengths(self) -> List[str]:
        """Parasocial strengths, preferring the parasocial_config alias when populated"""
        if self.parasocial_config and self.parasocial_config.strengths:
            return list(self.parasocial_config.strengths)
        return list(self.parasocial.strengths)

    @property
    def lever_avoid(self) -> List[str]:
        if self.parasocial_config and self.parasocial_config.avoid:
            return list(self.parasocial_config.avoid)
        return list(self.parasocial.avoid)

    @property
    def primary_archetype(self) -> Optional[str]:
        return self.archetype_assignment.primary

    @property
    def high_frequency_fillers(self) -> List[str]:
        return [f.word for f in self.voice_mechanics.filler_words if f.frequency == "high"]

    def glossary_terms(self) -> Dict[str, List[str]]:
        """Flatten the creator vocabulary glossary to category -> terms."""
        flat: Dict[str, List[str]] = {}
        for category, value in self.spicy.sexual_vocabulary.items():
            if isinstance(value, list):
                terms = [str(t) for t in value if t]
                if terms:
                    flat[category] = terms
            elif isinstance(value, dict):
                for sub, terms in value.items():
                    if isinstance(terms, list) and terms:
                        flat[f"{category}.{sub}"] = [str(t) for t in terms if t]
        return flat


# ============================================================================
# Table Records
# ============================================================================

class CreatorModel(BaseModel):
    """Row from the models table (one creator and their voice profile)"""
    id: str
    name: str
    stage_name: Optional[str] = None
    voice_profile: VoiceProfile = Field(default_factory=VoiceProfile)
    archetype_tags: List[str] = Field(default_factory=list)
    niche_tags: List[str] = Field(default_factory=list)
    boundaries: Optional[Boundaries] = None
    explicitness_level: Optional[str] = None
    embedding: Optional[Any] = None  # list of floats, or a JSON string from PostgREST

    @field_validator('voice_profile', mode='before')
    @classmethod
    def parse_voice_profile(cls, v: Any) -> Any:
        if v is None:
            return {}
        if isinstance(v, str):
            return json.loads(v)
        return v

    @field_validator('archetype_tags', 'niche_tags', mode='before')
    @classmethod
    def coerce_lists(cls, v: Any) -> List[Any]:
        return _list_or_empty(v)

    @property
    def display_name(self) -> str:
        return self.stage_name or self.name

    def effective_boundaries(self) -> Boundaries:
        """Voice-profile boundaries merged with the row-level column."""
        hard_nos = list(self.voice_profile.boundaries.hard_nos)
        topics = list(self.voice_profile.boundaries.topics_to_avoid)
        if self.boundaries:
            hard_nos += [b for b in self.boundaries.hard_nos if b not in hard_nos]
            topics += [t for t in self.boundaries.topics_to_avoid if t not in topics]
        return Boundaries(hard_nos=hard_nos, topics_to_avoid=topics)


class CorpusMatch(BaseModel):
    """One ranked exemplar returned by a corpus similarity RPC"""
    id: str
    content: str
    hook: Optional[str] = None
    hook_type: Optional[str] = None
    script_archetype: Optional[str] = None
    parasocial_levers: List[str] = Field(default_factory=list)
    quality_score: Optional[float] = None
    similarity_score: float = 0.0
    match_reasons: List[str] = Field(default_factory=list)

    model_config = {"frozen": True}

    @field_validator('parasocial_levers', 'match_reasons', mode='before')
    @classmethod
    def coerce_lists(cls, v: Any) -> List[Any]:
        return _list_or_empty(v)


class CorpusEntry(BaseModel):
    """Insert shape for the corpus table"""
    content: str
    creator: Optional[str] = None
    duration_seconds: Optional[int] = None
    hook: Optional[str] = None
    hook_type: Optional[str] = None
    script_archetype: Optional[str] = None
    parasocial_levers: Optional[List[str]] = None
    quality_score: float = 0.7
    is_active: bool = True


class ScriptRecord(BaseModel):
    """Insert shape for the scripts table"""
    model_id: str
    hook: str
    hook_type: str
    content: str
    word_count: int
    duration_seconds: int
    voice_fidelity_score: float
    parasocial_levers: List[str] = Field(default_factory=list)
    status: ScriptStatus = ScriptStatus.DRAFT
    batch_id: Optional[str] = None
    variation_group_id: Optional[str] = None
    shareability_score: Optional[float] = None
    share_trigger: Optional[str] = None
    share_prediction: Optional[str] = None
    emotional_response: Optional[str] = None
    cta_type: Optional[str] = None
    pcm_type: Optional[str] = None


class HookRecord(BaseModel):
    """Insert shape for the hooks tracking table"""
    content: str
    hook_type: str
    model_id: str
    source: HookSource = HookSource.GENERATED
    variation_group_id: Optional[str] = None
    pcm_type: Optional[str] = None


class ScriptBatchRecord(BaseModel):
    """Row in script_batches: one pipeline run's aggregate stats"""
    batch_id: str
    model_id: str
    hooks_requested: int
    scripts_generated: int
    scripts_passed: int
    scripts_failed: int
    avg_voice_fidelity: Optional[float] = None
    avg_word_count: Optional[float] = None
    total_time_ms: Optional[int] = None
    total_tokens: Optional[int] = None
    estimated_cost_usd: Optional[float] = None
    pipeline_version: str = "1.0"
    created_at: Optional[datetime] = None

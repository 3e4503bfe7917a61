"""Script expansion and voice transformation contracts."""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class StructureBreakdown(BaseModel):
    """The four beats every script is built from"""
    hook: str = ""
    tension: str = ""
    payload: str = ""
    closer: str = ""

    @field_validator("hook", "tension", "payload", "closer", mode="before")
    @classmethod
    def null_to_empty(cls, v):
        return "" if v is None else str(v)

    def missing_parts(self) -> List[str]:
        return [name for name in ("hook", "tension", "payload", "closer")
                if not getattr(self, name).strip()]


class ExpandedScript(BaseModel):
    """
    A hook expanded into a full script.

    hook_index is the position of the source hook in the full hook list,
    not within the LLM batch that produced it.
    """
    hook_index: int
    hook: str
    script: str
    word_count: int = 0
    estimated_duration_seconds: int = 0
    structure_breakdown: StructureBreakdown = Field(default_factory=StructureBreakdown)
    parasocial_levers_used: List[str] = Field(default_factory=list)
    cta_type: Optional[str] = None
    validation_issues: List[str] = Field(default_factory=list)

    @field_validator('structure_breakdown', mode='before')
    @classmethod
    def null_breakdown(cls, v):
        return v or {}

    @field_validator('parasocial_levers_used', mode='before')
    @classmethod
    def coerce_levers(cls, v):
        if v is None:
            return []
        return v if isinstance(v, list) else [v]


class ExpansionStats(BaseModel):
    total_expanded: int = 0
    avg_word_count: float = 0
    avg_duration_seconds: float = 0
    scripts_with_issues: int = 0
    failed_batches: int = 0
    tokens_used: int = 0
    expansion_time_ms: int = 0


class ScriptExpansionResult(BaseModel):
    model_id: str
    scripts: List[ExpandedScript] = Field(default_factory=list)
    stats: ExpansionStats = Field(default_factory=ExpansionStats)


class TransformedScript(BaseModel):
    """
    A script rewritten in the creator's voice.

    script_index is the position of the source script in the list passed to
    the transformation call. Text is a single paragraph and word_count is
    always recomputed from it.
    """
    script_index: int
    original_hook: str
    transformed_script: str
    word_count: int = 0
    changes_made: List[str] = Field(default_factory=list)
    voice_fidelity_score: int = 0
    ai_tells_removed: List[str] = Field(default_factory=list)
    voice_elements_added: List[str] = Field(default_factory=list)


class TransformationStats(BaseModel):
    total_transformed: int = 0
    avg_fidelity_score: float = 0
    avg_ai_tells_removed: float = 0
    avg_voice_elements_added: float = 0
    failed_batches: int = 0
    tokens_used: int = 0
    transformation_time_ms: int = 0


class VoiceTransformationResult(BaseModel):
    model_id: str
    scripts: List[TransformedScript] = Field(default_factory=list)
    stats: TransformationStats = Field(default_factory=TransformationStats)

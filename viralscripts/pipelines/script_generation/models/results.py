"""Pipeline options, per-stage statistics and the final result."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..prompts.cta import AUTO_CTA, CTA_TYPES
from .enums import TargetDuration
from .hooks import GeneratedHook, HookVariationSet


class PipelineOptions(BaseModel):
    """Run configuration for run_script_pipeline()."""
    hook_count: int = Field(30, ge=1, le=100)
    target_duration: TargetDuration = TargetDuration.MEDIUM
    min_fidelity_score: int = Field(80, ge=0, le=100)
    auto_revise: bool = True
    max_revision_attempts: int = Field(2, ge=0, le=5)
    corpus_limit: int = Field(15, ge=0, le=50)
    thematic_query: Optional[str] = None
    variations_per_concept: int = Field(1, ge=1, le=5)
    enable_shareability: bool = True
    cta_style: str = AUTO_CTA
    enable_pcm_tracking: bool = True
    retry_failed_stages: bool = False
    max_retries: int = Field(2, ge=0, le=5)

    @field_validator('cta_style')
    @classmethod
    def validate_cta_style(cls, v: str) -> str:
        if v != AUTO_CTA and v not in CTA_TYPES:
            raise ValueError(f"cta_style must be 'auto' or one of {CTA_TYPES}, got {v}")
        return v


# ============================================================================
# Stage Statistics
# ============================================================================

class StageStats(BaseModel):
    """Timing and token usage common to every stage"""
    time_ms: int = 0
    tokens_used: int = 0


class CorpusStageStats(StageStats):
    matches: int = 0
    avg_similarity: float = 0


class HookStageStats(StageStats):
    generated: int = 0
    by_pcm_type: Optional[Dict[str, int]] = None
    variation_sets_count: Optional[int] = None


class ShareabilityStageStats(StageStats):
    scored: int = 0
    avg_score: int = 0
    high_potential_count: int = 0


class ExpansionStageStats(StageStats):
    expanded: int = 0
    avg_words: float = 0


class TransformationStageStats(StageStats):
    transformed: int = 0
    avg_fidelity: float = 0


class ValidationStageStats(StageStats):
    passed: int = 0
    revised: int = 0
    failed: int = 0
    avg_fidelity: float = 0


class RevisionStageStats(StageStats):
    attempts: int = 0
    scripts_revised: int = 0


class PipelineStats(BaseModel):
    corpus_retrieval: CorpusStageStats = Field(default_factory=CorpusStageStats)
    hook_generation: HookStageStats = Field(default_factory=HookStageStats)
    shareability_scoring: Optional[ShareabilityStageStats] = None
    script_expansion: ExpansionStageStats = Field(default_factory=ExpansionStageStats)
    voice_transformation: TransformationStageStats = Field(default_factory=TransformationStageStats)
    validation: ValidationStageStats = Field(default_factory=ValidationStageStats)
    revision: RevisionStageStats = Field(default_factory=RevisionStageStats)

    def tokens_by_stage(self) -> Dict[str, int]:
        """Output tokens per LLM stage, keyed by stage name."""
        return {
            "hook_generation": self.hook_generation.tokens_used,
            "shareability_scoring": (
                self.shareability_scoring.tokens_used if self.shareability_scoring else 0
            ),
            "script_expansion": self.script_expansion.tokens_used,
            "voice_transformation": self.voice_transformation.tokens_used,
            "validation": self.validation.tokens_used,
            "revision": self.revision.tokens_used,
        }


# ============================================================================
# Result
# ============================================================================

class FinalScript(BaseModel):
    """An accepted (PASS) script with everything needed to save it"""
    id: Optional[str] = None
    hook: str
    hook_type: str
    script: str
    word_count: int
    estimated_duration_seconds: int
    voice_fidelity_score: int
    parasocial_levers: List[str] = Field(default_factory=list)
    concept_id: Optional[str] = None
    variation_strategy: Optional[str] = None
    pcm_type: Optional[str] = None
    shareability_score: Optional[int] = None
    share_trigger: Optional[str] = None
    share_prediction: Optional[str] = None
    emotional_response: Optional[str] = None
    cta_type: Optional[str] = None


class ShareabilitySummary(BaseModel):
    avg_score: int = 0
    high_potential_count: int = 0
    top_triggers: Dict[str, int] = Field(default_factory=dict)


class PipelineResult(BaseModel):
    model_id: str
    model_name: str
    scripts: List[FinalScript] = Field(default_factory=list)
    stages: PipelineStats = Field(default_factory=PipelineStats)
    hooks: List[GeneratedHook] = Field(default_factory=list)
    variation_sets: Optional[List[HookVariationSet]] = None
    pcm_distribution: Optional[Dict[str, int]] = None
    shareability_summary: Optional[ShareabilitySummary] = None
    validation_failed_count: int = 0
    total_time_ms: int = 0
    total_tokens_used: int = 0
    final_script_count: int = 0


class SavedPipelineResult(BaseModel):
    result: PipelineResult
    saved_script_ids: List[str] = Field(default_factory=list)
    batch_id: str

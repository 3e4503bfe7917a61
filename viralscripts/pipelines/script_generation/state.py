"""
Script Pipeline State - dataclass passed through all pipeline nodes.

Index spaces:
- hooks: GeneratedHook list; ExpandedScript.hook_index points into it
- expanded_scripts: TransformedScript.script_index points into it
- transformed_scripts: ValidationResult.script_index points into it

Revision replaces entries of transformed_scripts in place, so validations
always refer to positions in the current list.
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from ...core.models import CorpusMatch, CreatorModel
from .models import (
    ExpandedScript,
    GeneratedHook,
    HookVariationSet,
    PipelineOptions,
    PipelineStats,
    ShareabilityScore,
    TransformedScript,
    ValidationBatchResult,
    ValidationResult,
    ValidationSummary,
)

# Typed fields rebuilt by from_dict(): name -> (model class, container)
_MODEL_FIELDS = {
    "model": (CreatorModel, None),
    "corpus_matches": (CorpusMatch, list),
    "hooks": (GeneratedHook, list),
    "variation_sets": (HookVariationSet, list),
    "share_scores": (ShareabilityScore, dict),
    "expanded_scripts": (ExpandedScript, list),
    "transformed_scripts": (TransformedScript, list),
    "validations": (ValidationResult, list),
    "validation_summary": (ValidationSummary, None),
    "stages": (PipelineStats, None),
}


def _dump(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, list):
        return [_dump(v) for v in value]
    if isinstance(value, dict):
        return {k: _dump(v) for k, v in value.items()}
    return value


@dataclass
class ScriptPipelineState:
    """
    State passed through all script generation nodes.

    Lifecycle:
        1. run_script_pipeline() creates it from PipelineOptions
        2. Each node reads what it needs and writes its outputs
        3. FinalizeNode returns the PipelineResult via End()
    """

    # === REQUIRED INPUT ===
    model_id: str

    # === CONFIGURATION (set at creation, not changed by nodes) ===
    hook_count: int = 30
    target_duration: str = "medium"
    min_fidelity_score: int = 80
    auto_revise: bool = True
    max_revision_attempts: int = 2
    corpus_limit: int = 15
    thematic_query: Optional[str] = None
    variations_per_concept: int = 1
    enable_shareability: bool = True
    cta_style: str = "auto"
    enable_pcm_tracking: bool = True
    retry_failed_stages: bool = False
    max_retries: int = 2

    # === POPULATED BY NODES ===

    # InitializeNode
    model: Optional[CreatorModel] = None
    started_at: Optional[float] = None

    # RetrieveCorpusNode
    corpus_matches: List[CorpusMatch] = field(default_factory=list)

    # GenerateHooksNode
    hooks: List[GeneratedHook] = field(default_factory=list)
    variation_sets: Optional[List[HookVariationSet]] = None

    # ScoreShareabilityNode (keyed by hook text)
    share_scores: Dict[str, ShareabilityScore] = field(default_factory=dict)

    # ExpandScriptsNode
    expanded_scripts: List[ExpandedScript] = field(default_factory=list)

    # TransformVoiceNode
    approved_samples: List[str] = field(default_factory=list)
    transformed_scripts: List[TransformedScript] = field(default_factory=list)

    # ValidateScriptsNode / ReviseScriptsNode
    validations: List[ValidationResult] = field(default_factory=list)
    validation_summary: Optional[ValidationSummary] = None
    revision_attempts: int = 0
    scripts_revised: int = 0

    # Per-stage timing and tokens
    stages: PipelineStats = field(default_factory=PipelineStats)

    # === TRACKING ===
    current_step: str = "pending"
    error: Optional[str] = None
    error_step: Optional[str] = None

    @classmethod
    def from_options(cls, model_id: str, options: PipelineOptions) -> "ScriptPipelineState":
        """Build initial state from validated run options."""
        return cls(
            model_id=model_id,
            hook_count=options.hook_count,
            target_duration=options.target_duration.value,
            min_fidelity_score=options.min_fidelity_score,
            auto_revise=options.auto_revise,
            max_revision_attempts=options.max_revision_attempts,
            corpus_limit=options.corpus_limit,
            thematic_query=options.thematic_query,
            variations_per_concept=options.variations_per_concept,
            enable_shareability=options.enable_shareability,
            cta_style=options.cta_style,
            enable_pcm_tracking=options.enable_pcm_tracking,
            retry_failed_stages=options.retry_failed_stages,
            max_retries=options.max_retries,
        )

    @property
    def total_tokens(self) -> int:
        return sum(self.stages.tokens_by_stage().values())

    def apply_validation(self, result: ValidationBatchResult) -> None:
        """
        Record a validation pass over transformed_scripts.

        Counts reflect the latest pass; time and tokens accumulate across
        re-validations during revision.
        """
        self.validations = result.validations
        self.validation_summary = result.summary

        stats = self.stages.validation
        stats.passed = result.summary.passed
        stats.failed = result.summary.failed
        stats.revised = self.scripts_revised
        stats.avg_fidelity = result.summary.avg_fidelity_score
        stats.time_ms += result.validation_time_ms
        stats.tokens_used += result.tokens_used

    def mark_step_complete(self, step_name: str) -> None:
        """Mark a step as complete and update current_step."""
        self.current_step = f"{step_name}_complete"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize state for persistence (pydantic values become plain dicts)."""
        result = {}
        for f in dataclasses.fields(self):
            result[f.name] = _dump(getattr(self, f.name))
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScriptPipelineState":
        """Deserialize state from persistence."""
        field_names = {f.name for f in dataclasses.fields(cls)}
        filtered = {k: v for k, v in data.items() if k in field_names}

        for name, (model_cls, container) in _MODEL_FIELDS.items():
            value = filtered.get(name)
            if value is None:
                continue
            if container is list:
                filtered[name] = [model_cls.model_validate(v) for v in value]
            elif container is dict:
                filtered[name] = {k: model_cls.model_validate(v) for k, v in value.items()}
            else:
                filtered[name] = model_cls.model_validate(value)

        return cls(**filtered)

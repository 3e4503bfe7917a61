"""
Typed stage contracts for the script generation pipeline.
"""

from .enums import (
    PcmType,
    PipelineStage,
    RevisionPriority,
    TargetDuration,
    Verdict,
)
from .hooks import (
    GeneratedHook,
    HookGenerationResult,
    HookGenerationStats,
    HookVariationSet,
)
from .retrieval import RetrievalResult, RetrievalStats
from .scripts import (
    ExpandedScript,
    ExpansionStats,
    ScriptExpansionResult,
    StructureBreakdown,
    TransformationStats,
    TransformedScript,
    VoiceTransformationResult,
)
from .shareability import (
    PatternEstimate,
    ShareabilityResult,
    ShareabilityScore,
    ShareabilityStats,
)
from .validation import ValidationBatchResult, ValidationResult, ValidationSummary
from .results import (
    CorpusStageStats,
    ExpansionStageStats,
    FinalScript,
    HookStageStats,
    PipelineOptions,
    PipelineResult,
    PipelineStats,
    RevisionStageStats,
    SavedPipelineResult,
    ShareabilityStageStats,
    ShareabilitySummary,
    StageStats,
    TransformationStageStats,
    ValidationStageStats,
)

__all__ = [
    "PcmType", "PipelineStage", "RevisionPriority", "TargetDuration", "Verdict",
    "GeneratedHook", "HookGenerationResult", "HookGenerationStats", "HookVariationSet",
    "RetrievalResult", "RetrievalStats",
    "ExpandedScript", "ExpansionStats", "ScriptExpansionResult", "StructureBreakdown",
    "TransformationStats", "TransformedScript", "VoiceTransformationResult",
    "PatternEstimate", "ShareabilityResult", "ShareabilityScore", "ShareabilityStats",
    "ValidationBatchResult", "ValidationResult", "ValidationSummary",
    "CorpusStageStats", "ExpansionStageStats", "FinalScript", "HookStageStats",
    "PipelineOptions", "PipelineResult", "PipelineStats", "RevisionStageStats",
    "SavedPipelineResult", "ShareabilityStageStats", "ShareabilitySummary", "StageStats",
    "TransformationStageStats", "ValidationStageStats",
]

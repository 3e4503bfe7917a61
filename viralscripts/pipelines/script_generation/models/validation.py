"""Script validation contracts."""

from typing import List

from pydantic import BaseModel, Field

from .enums import RevisionPriority, Verdict


class ValidationResult(BaseModel):
    """Quality verdict for one transformed script"""
    script_index: int
    voice_fidelity_score: int
    ai_tells_found: List[str] = Field(default_factory=list)
    boundary_violations: List[str] = Field(default_factory=list)
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    verdict: Verdict
    revision_priority: RevisionPriority = RevisionPriority.NONE


class ValidationSummary(BaseModel):
    total: int = 0
    passed: int = 0
    needs_revision: int = 0
    failed: int = 0
    avg_fidelity_score: int = 0
    common_issues: List[str] = Field(default_factory=list)


class ValidationBatchResult(BaseModel):
    model_id: str
    validations: List[ValidationResult] = Field(default_factory=list)
    summary: ValidationSummary = Field(default_factory=ValidationSummary)
    tokens_used: int = 0
    validation_time_ms: int = 0

"""Shareability scoring contracts."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class ShareabilityScore(BaseModel):
    """Rubric scores and share prediction for one piece of content"""
    index: int
    content: str
    content_type: str = "hook"
    total_score: int = 0
    specificity_score: Optional[int] = None
    emotional_punch_score: Optional[int] = None
    share_trigger_score: Optional[int] = None
    authenticity_score: Optional[int] = None
    primary_trigger: Optional[str] = None
    secondary_trigger: Optional[str] = None
    share_prediction: str = ""
    emotional_response: Optional[str] = None
    viral_potential: str = "low"
    reasoning: str = ""

    @property
    def is_high_potential(self) -> bool:
        return self.viral_potential in ("high", "viral")


class ShareabilityStats(BaseModel):
    scored: int = 0
    avg_score: int = 0
    high_potential_count: int = 0
    primary_triggers: Dict[str, int] = Field(default_factory=dict)
    tokens_used: int = 0
    scoring_time_ms: int = 0


class ShareabilityResult(BaseModel):
    scores: List[ShareabilityScore] = Field(default_factory=list)
    stats: ShareabilityStats = Field(default_factory=ShareabilityStats)


class PatternEstimate(BaseModel):
    """Offline shareability estimate from indicator phrases"""
    estimated_score: int
    detected_triggers: List[str] = Field(default_factory=list)
    confidence: str = "low"
    strongest_trigger: Optional[str] = None

"""Hook generation contracts."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class GeneratedHook(BaseModel):
    """One validated hook candidate"""
    hook: str
    hook_type: str
    parasocial_levers: List[str] = Field(default_factory=list)
    why_it_works: str = ""
    pcm_type: Optional[str] = None
    concept_id: Optional[str] = None
    variation_strategy: Optional[str] = None

    @property
    def word_count(self) -> int:
        return len(self.hook.split())


class HookVariationSet(BaseModel):
    """A concept and its stylistic variations, for A/B selection"""
    concept_id: str
    concept: str = ""
    variations: List[GeneratedHook] = Field(default_factory=list)
    recommended_for_testing: List[int] = Field(default_factory=lambda: [0, 1])


class HookGenerationStats(BaseModel):
    total_generated: int = 0
    by_type: Dict[str, int] = Field(default_factory=dict)
    by_pcm_type: Optional[Dict[str, int]] = None
    variation_sets_count: Optional[int] = None
    tokens_used: int = 0
    generation_time_ms: int = 0


class HookGenerationResult(BaseModel):
    model_id: str
    hooks: List[GeneratedHook] = Field(default_factory=list)
    variation_sets: Optional[List[HookVariationSet]] = None
    stats: HookGenerationStats = Field(default_factory=HookGenerationStats)

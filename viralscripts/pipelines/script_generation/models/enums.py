"""Enumerations shared across the script generation stages."""

from enum import Enum


class TargetDuration(str, Enum):
    """Script length tier"""
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class Verdict(str, Enum):
    """Validation outcome for one script"""
    PASS = "PASS"
    REVISE = "REVISE"
    FAIL = "FAIL"


class RevisionPriority(str, Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class PipelineStage(str, Enum):
    """Stage names reported in errors and callbacks"""
    INITIALIZATION = "initialization"
    CORPUS_RETRIEVAL = "corpus_retrieval"
    HOOK_GENERATION = "hook_generation"
    SHAREABILITY_SCORING = "shareability_scoring"
    SCRIPT_EXPANSION = "script_expansion"
    VOICE_TRANSFORMATION = "voice_transformation"
    VALIDATION = "validation"
    REVISION = "revision"
    SAVE = "save"


class PcmType(str, Enum):
    """Process Communication Model personality types"""
    HARMONIZER = "harmonizer"
    THINKER = "thinker"
    REBEL = "rebel"
    PERSISTER = "persister"
    IMAGINER = "imaginer"
    PROMOTER = "promoter"

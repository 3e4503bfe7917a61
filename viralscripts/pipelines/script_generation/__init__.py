"""
Script Generation Pipeline - corpus-grounded hooks expanded into
voice-matched short-form scripts.

Stages: corpus retrieval -> hook generation -> shareability scoring
(optional) -> script expansion -> voice transformation -> validation ->
bounded auto-revision -> final PASS scripts.

Usage:
    from viralscripts.pipelines.script_generation import (
        PipelineOptions, run_script_pipeline,
    )

    result = await run_script_pipeline(model_id, PipelineOptions(hook_count=10))
"""

from .callbacks import PipelineCallbacks
from .dependencies import PipelineDependencies
from .errors import ModelNotFoundError, PipelineError, StageFailedError
from .models import (
    FinalScript,
    PipelineOptions,
    PipelineResult,
    PipelineStage,
    SavedPipelineResult,
)
from .orchestrator import (
    run_pipeline_and_save,
    run_script_pipeline,
    save_scripts_to_database,
    script_generation_graph,
)
from .state import ScriptPipelineState

__all__ = [
    "PipelineCallbacks",
    "PipelineDependencies",
    "PipelineError",
    "ModelNotFoundError",
    "StageFailedError",
    "FinalScript",
    "PipelineOptions",
    "PipelineResult",
    "PipelineStage",
    "SavedPipelineResult",
    "ScriptPipelineState",
    "run_script_pipeline",
    "run_pipeline_and_save",
    "save_scripts_to_database",
    "script_generation_graph",
]

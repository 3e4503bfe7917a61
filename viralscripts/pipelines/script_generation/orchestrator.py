"""
Script Generation Pipeline Orchestrator - Graph definition and entry points.

Defines the pydantic-graph pipeline and provides:
- run_script_pipeline(): run the graph and return the PipelineResult
- save_scripts_to_database(): persist final scripts as drafts
- run_pipeline_and_save(): run, record the batch and save in one call
"""

import logging
import uuid
from typing import Dict, List, Optional

from pydantic_graph import Graph

from ...core.models import ScriptRecord, ScriptStatus
from ...core.observability import get_logfire
from ...repositories import ScriptRepository
from .callbacks import PipelineCallbacks
from .dependencies import PipelineDependencies
from .errors import PipelineError, StageFailedError
from .models import (
    FinalScript,
    PipelineOptions,
    PipelineResult,
    PipelineStage,
    SavedPipelineResult,
)
from .state import ScriptPipelineState
from .nodes.initialize import InitializeNode
from .nodes.retrieve_corpus import RetrieveCorpusNode
from .nodes.generate_hooks import GenerateHooksNode
from .nodes.score_shareability import ScoreShareabilityNode
from .nodes.expand_scripts import ExpandScriptsNode
from .nodes.transform_voice import TransformVoiceNode
from .nodes.validate_scripts import ValidateScriptsNode
from .nodes.revise_scripts import ReviseScriptsNode
from .nodes.finalize import FinalizeNode

logger = logging.getLogger(__name__)

# ============================================================================
# Graph Definition
# ============================================================================

PIPELINE_NODES = (
    InitializeNode,
    RetrieveCorpusNode,
    GenerateHooksNode,
    ScoreShareabilityNode,
    ExpandScriptsNode,
    TransformVoiceNode,
    ValidateScriptsNode,
    ReviseScriptsNode,
    FinalizeNode,
)

script_generation_graph = Graph(
    nodes=PIPELINE_NODES,
    name="script_generation_pipeline"
)

# current_step (without "_complete") -> stage reported for unexpected errors
_STEP_STAGES: Dict[str, PipelineStage] = {
    "pending": PipelineStage.INITIALIZATION,
    "initialize": PipelineStage.INITIALIZATION,
    "retrieve_corpus": PipelineStage.CORPUS_RETRIEVAL,
    "generate_hooks": PipelineStage.HOOK_GENERATION,
    "score_shareability": PipelineStage.SHAREABILITY_SCORING,
    "expand_scripts": PipelineStage.SCRIPT_EXPANSION,
    "transform_voice": PipelineStage.VOICE_TRANSFORMATION,
    "validate_scripts": PipelineStage.VALIDATION,
    "revise_scripts": PipelineStage.REVISION,
    "finalize": PipelineStage.REVISION,
}


def _stage_for_step(step: str) -> PipelineStage:
    base = step[:-len("_complete")] if step.endswith("_complete") else step
    return _STEP_STAGES.get(base, PipelineStage.INITIALIZATION)


# ============================================================================
# Convenience Functions
# ============================================================================

async def run_script_pipeline(
    model_id: str,
    options: Optional[PipelineOptions] = None,
    deps: Optional[PipelineDependencies] = None,
    callbacks: Optional[PipelineCallbacks] = None,
) -> PipelineResult:
    """
    Run the complete script generation pipeline for one creator model.

    Args:
        model_id: Creator model UUID
        options: Run configuration (defaults to PipelineOptions())
        deps: Optional PipelineDependencies (creates if not provided)
        callbacks: Optional progress hooks for this run

    Returns:
        PipelineResult with the PASS scripts and per-stage stats

    Raises:
        ValueError: If model_id is empty
        PipelineError: If any critical stage fails; the original exception
            is kept as __cause__
    """
    if not model_id:
        raise ValueError("model_id is required")

    options = options or PipelineOptions()

    logger.info(f"=== STARTING SCRIPT PIPELINE for model {model_id} ===")
    logger.info(
        f"Generating {options.hook_count} hooks, duration={options.target_duration.value}, "
        f"min_fidelity={options.min_fidelity_score}, auto_revise={options.auto_revise}"
    )

    if deps is None:
        deps = PipelineDependencies.create()
    if callbacks is not None:
        deps = deps.with_callbacks(callbacks)

    state = ScriptPipelineState.from_options(model_id, options)

    with get_logfire().span("script_pipeline", model_id=model_id):
        try:
            result = await script_generation_graph.run(
                InitializeNode(),
                state=state,
                deps=deps,
            )
            return result.output

        except PipelineError as e:
            logger.error(f"Script pipeline failed at {e.stage}: {e}")
            raise

        except Exception as e:
            stage = (
                PipelineStage(state.error_step) if state.error_step
                else _stage_for_step(state.current_step)
            )
            state.error = str(e)
            state.error_step = stage.value
            logger.error(f"Script pipeline failed at {stage.value}: {e}")
            raise StageFailedError(stage, e) from e


def _variation_group_ids(scripts: List[FinalScript]) -> Dict[str, str]:
    """One new group id per concept, so variations of a concept stay linked."""
    groups: Dict[str, str] = {}
    for script in scripts:
        if script.concept_id and script.concept_id not in groups:
            groups[script.concept_id] = str(uuid.uuid4())
    return groups


def build_script_records(
    model_id: str,
    scripts: List[FinalScript],
    batch_id: Optional[str] = None,
    variation_group_id: Optional[str] = None,
) -> List[ScriptRecord]:
    """Map final scripts to draft rows for the scripts table."""
    groups = {} if variation_group_id else _variation_group_ids(scripts)

    records = []
    for script in scripts:
        records.append(ScriptRecord(
            model_id=model_id,
            hook=script.hook,
            hook_type=script.hook_type,
            content=script.script,
            word_count=script.word_count,
            duration_seconds=script.estimated_duration_seconds,
            voice_fidelity_score=script.voice_fidelity_score,
            parasocial_levers=script.parasocial_levers,
            status=ScriptStatus.DRAFT,
            batch_id=batch_id,
            variation_group_id=variation_group_id or groups.get(script.concept_id or ""),
            shareability_score=script.shareability_score,
            share_trigger=script.share_trigger,
            share_prediction=script.share_prediction,
            emotional_response=script.emotional_response,
            cta_type=script.cta_type,
            pcm_type=script.pcm_type,
        ))
    return records


async def save_scripts_to_database(
    model_id: str,
    scripts: List[FinalScript],
    script_repo: ScriptRepository,
    batch_id: Optional[str] = None,
    variation_group_id: Optional[str] = None,
    callbacks: Optional[PipelineCallbacks] = None,
) -> List[str]:
    """
    Save final scripts as drafts.

    Args:
        model_id: Creator model UUID
        scripts: Scripts from PipelineResult.scripts
        script_repo: Scripts table repository
        batch_id: Batch the scripts belong to
        variation_group_id: Group id applied to every script; when omitted,
            scripts sharing a concept_id get a shared generated id
        callbacks: Optional progress hooks

    Returns:
        New script ids, in the order of scripts

    Raises:
        StageFailedError: If the insert fails (stage "save")
    """
    callbacks = callbacks or PipelineCallbacks()
    stage = PipelineStage.SAVE
    await callbacks.stage_start(stage)

    if not scripts:
        await callbacks.stage_complete(stage, {"saved": 0})
        return []

    records = build_script_records(model_id, scripts, batch_id, variation_group_id)
    try:
        ids = script_repo.insert_scripts(records)
    except Exception as e:
        error = StageFailedError(stage, e)
        await callbacks.stage_error(stage, error)
        raise error from e

    logger.info(f"Saved {len(ids)} scripts for model {model_id}")
    await callbacks.stage_complete(stage, {"saved": len(ids)})
    return ids


async def run_pipeline_and_save(
    model_id: str,
    options: Optional[PipelineOptions] = None,
    deps: Optional[PipelineDependencies] = None,
    callbacks: Optional[PipelineCallbacks] = None,
    pricing: Optional[Dict[str, float]] = None,
) -> SavedPipelineResult:
    """
    Run the pipeline, record the batch and save the PASS scripts.

    Args:
        model_id: Creator model UUID
        options: Run configuration
        deps: Optional PipelineDependencies (creates if not provided)
        callbacks: Optional progress hooks
        pricing: Optional overrides for cost estimation rates

    Returns:
        SavedPipelineResult with the result (script ids filled in), the
        saved ids and the batch id
    """
    options = options or PipelineOptions()
    if deps is None:
        deps = PipelineDependencies.create()

    result = await run_script_pipeline(model_id, options=options, deps=deps, callbacks=callbacks)

    batch_id = deps.batches.create_batch(model_id, options.hook_count, result, pricing=pricing)
    saved_ids = await save_scripts_to_database(
        model_id,
        result.scripts,
        deps.script_repo,
        batch_id=batch_id,
        callbacks=callbacks,
    )

    if len(saved_ids) == len(result.scripts):
        result.scripts = [
            script.model_copy(update={"id": script_id})
            for script, script_id in zip(result.scripts, saved_ids)
        ]

    logger.info(f"=== SCRIPT PIPELINE SAVED: batch {batch_id}, {len(saved_ids)} scripts ===")
    return SavedPipelineResult(result=result, saved_script_ids=saved_ids, batch_id=batch_id)

"""
Generate command - run the script pipeline for one creator model.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import click

from ..core.config import load_pipeline_defaults
from ..pipelines.script_generation import (
    PipelineCallbacks,
    PipelineOptions,
    PipelineResult,
    run_pipeline_and_save,
    run_script_pipeline,
)
from ..pipelines.metadata import describe_nodes
from ..pipelines.script_generation.orchestrator import PIPELINE_NODES
from ..pipelines.script_generation.prompts.cta import AUTO_CTA, CTA_TYPES
from ..pipelines.script_generation.services.cost_estimation import calculate_estimated_cost

logger = logging.getLogger(__name__)


def build_options(config_path: Optional[str], overrides: Dict[str, Any]) -> PipelineOptions:
    """
    Merge YAML defaults with command-line overrides.

    Overrides set to None were not given on the command line and leave the
    file (or PipelineOptions) default in place.
    """
    values: Dict[str, Any] = load_pipeline_defaults(config_path) if config_path else {}
    values.update({k: v for k, v in overrides.items() if v is not None})
    return PipelineOptions(**values)


def _echo_stage_start(stage: str) -> None:
    click.echo(f"⏳ {stage}...")


def _echo_stage_complete(stage: str, stats: Dict[str, Any]) -> None:
    tokens = stats.get('tokens_used')
    suffix = f" ({tokens} tokens)" if tokens else ""
    click.echo(f"✅ {stage} done{suffix}")


def _echo_stage_error(stage: str, error: BaseException) -> None:
    click.echo(f"⚠️  {stage}: {error}", err=True)


def _display_result(result: PipelineResult, batch_id: Optional[str] = None) -> None:
    click.echo("\n" + "=" * 60)
    click.echo(f"📊 Results for {result.model_name or result.model_id}")
    click.echo("=" * 60 + "\n")

    for i, script in enumerate(result.scripts, 1):
        click.echo(f"{i}. [{script.hook_type}] {script.hook}")
        click.echo(f"   {script.script}")
        details = f"   {script.word_count} words, ~{script.estimated_duration_seconds}s, fidelity {script.voice_fidelity_score}"
        if script.shareability_score is not None:
            details += f", shareability {script.shareability_score}"
        click.echo(details)
        click.echo()

    click.echo("=" * 60)
    click.echo("📈 Summary")
    click.echo("=" * 60 + "\n")
    click.echo(f"   Hooks generated:  {result.stages.hook_generation.generated}")
    click.echo(f"   Scripts passed:   {result.final_script_count}")
    click.echo(f"   Scripts failed:   {result.validation_failed_count}")
    click.echo(f"   Revision attempts: {result.stages.revision.attempts}")
    click.echo(f"   Tokens:           {result.total_tokens_used}")
    click.echo(f"   Time:             {result.total_time_ms / 1000:.1f}s")
    click.echo(f"   Est. cost:        ${calculate_estimated_cost(result.stages):.4f}")
    if batch_id:
        click.echo(f"   Batch:            {batch_id}")
    click.echo()


@click.command(name='generate')
@click.argument('model_id')
@click.option('--config', 'config_path', type=click.Path(exists=True, dir_okay=False),
              help='YAML file with pipeline option defaults')
@click.option('--hooks', 'hook_count', type=int, help='Number of hooks to generate (1-100)')
@click.option('--duration', 'target_duration', type=click.Choice(['short', 'medium', 'long']),
              help='Target script length')
@click.option('--min-fidelity', 'min_fidelity_score', type=int, help='Voice fidelity pass threshold (0-100)')
@click.option('--no-revise', 'no_revise', is_flag=True, help='Disable the auto-revision loop')
@click.option('--max-revisions', 'max_revision_attempts', type=int, help='Max revision attempts (0-5)')
@click.option('--variations', 'variations_per_concept', type=int, help='Hook variations per concept (1-5)')
@click.option('--theme', 'thematic_query', help='Retrieve corpus examples for this theme')
@click.option('--no-shareability', 'no_shareability', is_flag=True, help='Skip shareability scoring')
@click.option('--cta', 'cta_style', type=click.Choice([AUTO_CTA] + list(CTA_TYPES)), help='CTA style')
@click.option('--retry', 'retry_failed_stages', is_flag=True,
              help='Retry failed stages with exponential backoff')
@click.option('--save/--no-save', default=True, help='Save PASS scripts and record the batch')
@click.option('--json', 'as_json', is_flag=True, help='Print the result as JSON')
def generate_command(
    model_id: str,
    config_path: Optional[str],
    hook_count: Optional[int],
    target_duration: Optional[str],
    min_fidelity_score: Optional[int],
    no_revise: bool,
    max_revision_attempts: Optional[int],
    variations_per_concept: Optional[int],
    thematic_query: Optional[str],
    no_shareability: bool,
    cta_style: Optional[str],
    retry_failed_stages: bool,
    save: bool,
    as_json: bool,
):
    """
    Generate voice-matched scripts for a creator model.

    Examples:
        viralscripts generate <model-uuid>
        viralscripts generate <model-uuid> --hooks 10 --duration short --no-save
        viralscripts generate <model-uuid> --theme "gym confidence" --json
    """
    try:
        options = build_options(config_path, {
            'hook_count': hook_count,
            'target_duration': target_duration,
            'min_fidelity_score': min_fidelity_score,
            'auto_revise': False if no_revise else None,
            'max_revision_attempts': max_revision_attempts,
            'variations_per_concept': variations_per_concept,
            'thematic_query': thematic_query,
            'enable_shareability': False if no_shareability else None,
            'cta_style': cta_style,
            'retry_failed_stages': True if retry_failed_stages else None,
        })
    except (ValueError, FileNotFoundError) as e:
        click.echo(f"❌ Invalid options: {e}", err=True)
        raise SystemExit(1)

    callbacks = None if as_json else PipelineCallbacks(
        on_stage_start=_echo_stage_start,
        on_stage_complete=_echo_stage_complete,
        on_stage_error=_echo_stage_error,
    )

    try:
        batch_id = None
        if save:
            saved = asyncio.run(run_pipeline_and_save(model_id, options=options, callbacks=callbacks))
            result, batch_id = saved.result, saved.batch_id
        else:
            result = asyncio.run(run_script_pipeline(model_id, options=options, callbacks=callbacks))
    except Exception as e:
        logger.error(f"Generation failed: {e}")
        click.echo(f"❌ Error: {e}", err=True)
        raise SystemExit(1)

    if as_json:
        payload = result.model_dump(mode='json')
        if batch_id:
            payload['batch_id'] = batch_id
        click.echo(json.dumps(payload, indent=2))
    else:
        _display_result(result, batch_id)


@click.command(name='stages')
def stages_command():
    """
    Print the pipeline stage plan: what each node reads, writes and calls.

    Examples:
        viralscripts stages
    """
    for i, entry in enumerate(describe_nodes(PIPELINE_NODES), 1):
        stage = entry.get('stage') or 'finalize'
        click.echo(f"{i}. {entry['node']} ({stage})")
        click.echo(f"   Reads:  {', '.join(entry.get('inputs', [])) or '-'}")
        click.echo(f"   Writes: {', '.join(entry.get('outputs', [])) or '-'}")
        if entry.get('services'):
            click.echo(f"   Calls:  {', '.join(entry['services'])}")
        if entry.get('uses_llm'):
            click.echo(f"   LLM:    {entry['llm']} - {entry['llm_purpose']}")

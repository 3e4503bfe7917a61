"""
Batch CLI Commands

Per-run summaries recorded by `viralscripts generate --save`.
"""

import logging

import click

from ..core.database import create_supabase_client
from ..pipelines.script_generation.services.batch_tracking import BatchTrackingService
from ..repositories import BatchRepository

logger = logging.getLogger(__name__)


def _batch_service() -> BatchTrackingService:
    return BatchTrackingService(BatchRepository(create_supabase_client()))


@click.group(name='batches')
def batches_group():
    """Pipeline run history"""
    pass


@batches_group.command(name='stats')
@click.argument('model_id')
def batch_stats(model_id: str):
    """
    Totals and passed-weighted averages across every batch for a model.

    Examples:
        viralscripts batches stats <model-uuid>
    """
    try:
        stats = _batch_service().get_batch_stats(model_id)
    except Exception as e:
        click.echo(f"❌ Error: {e}", err=True)
        raise SystemExit(1)

    click.echo("=" * 60)
    click.echo(f"📊 Batch Stats for {model_id}")
    click.echo("=" * 60)
    click.echo(f"   Batches:          {stats.total_batches}")
    click.echo(f"   Scripts generated: {stats.total_scripts_generated}")
    click.echo(f"   Scripts passed:   {stats.total_scripts_passed}")
    click.echo(f"   Avg fidelity:     {stats.avg_voice_fidelity}")
    click.echo(f"   Avg words:        {stats.avg_word_count}")
    click.echo(f"   Total tokens:     {stats.total_tokens}")
    click.echo(f"   Total time:       {stats.total_time_ms / 1000:.1f}s")
    click.echo(f"   Est. cost:        ${stats.total_estimated_cost:.4f}")


@batches_group.command(name='recent')
@click.argument('model_id')
@click.option('--limit', default=10, type=int, help='Number of batches to show')
def recent_batches(model_id: str, limit: int):
    """
    Most recent batches for a model, newest first.

    Examples:
        viralscripts batches recent <model-uuid> --limit 5
    """
    try:
        rows = _batch_service().get_recent_batches(model_id, limit=limit)
    except Exception as e:
        click.echo(f"❌ Error: {e}", err=True)
        raise SystemExit(1)

    if not rows:
        click.echo("No batches found")
        return

    for row in rows:
        fidelity = row.get('avg_voice_fidelity')
        cost = row.get('estimated_cost_usd') or 0
        click.echo(
            f"{row.get('batch_id')}  passed={row.get('scripts_passed', 0)}  "
            f"fidelity={fidelity if fidelity is not None else '-'}  "
            f"cost=${cost:.4f}  {row.get('created_at', '')}"
        )

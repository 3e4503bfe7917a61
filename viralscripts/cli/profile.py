"""
Profile CLI Commands

Extract a creator voice profile from an interview transcript and store it on
a new or existing model.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import click

from ..core.database import create_supabase_client
from ..core.embeddings import EmbeddingService
from ..core.llm import LLMGateway
from ..pipelines.script_generation.services.profile_extraction import (
    ProfileExtractionError,
    ProfileExtractionResult,
    ProfileExtractionService,
)
from ..repositories import ModelRepository

logger = logging.getLogger(__name__)


def _display_profile(result: ProfileExtractionResult) -> None:
    profile = result.voice_profile
    identity = profile.identity

    click.echo("\n" + "=" * 60)
    click.echo(f"🎙️  Voice profile: {identity.stage_name or identity.name or 'unknown'}")
    click.echo("=" * 60 + "\n")
    if identity.quick_bio:
        click.echo(f"   {identity.quick_bio}\n")

    archetype = profile.archetype_assignment
    secondary = f" / {archetype.secondary}" if archetype.secondary else ""
    click.echo(f"   Archetype:     {archetype.primary}{secondary}")
    click.echo(f"   Explicitness:  {profile.spicy.explicitness_level or 'n/a'}")
    fillers = ', '.join(f.word for f in profile.voice_mechanics.filler_words) or 'none'
    click.echo(f"   Fillers:       {fillers}")
    click.echo(f"   Strengths:     {', '.join(profile.lever_strengths) or 'none'}")
    click.echo(f"   Hard nos:      {', '.join(profile.boundaries.hard_nos) or 'none stated'}")
    click.echo(f"   Sample quotes: {len(profile.sample_speech)}")
    click.echo(f"   Tokens:        {result.tokens_used}")
    click.echo()


@click.group(name='profile')
def profile_group():
    """Build creator voice profiles"""
    pass


@profile_group.command(name='extract')
@click.argument('transcript_path', type=click.Path(exists=True, dir_okay=False))
@click.option('--name', default=None, help='Creator name (defaults to the name found in the transcript)')
@click.option('--stage-name', default=None, help='Creator stage name')
@click.option('--interviewer', default=None, help='Interviewer speaker label to ignore')
@click.option('--model-id', default=None, help='Replace the profile of an existing model instead of creating one')
@click.option('--save/--no-save', default=True, help='Store the profile in the models table')
@click.option('--json', 'as_json', is_flag=True, help='Print the extracted profile as JSON')
def extract_profile(
    transcript_path: str,
    name: Optional[str],
    stage_name: Optional[str],
    interviewer: Optional[str],
    model_id: Optional[str],
    save: bool,
    as_json: bool,
):
    """
    Extract a voice profile from an interview transcript.

    Examples:
        viralscripts profile extract interviews/anna.txt --stage-name "Anna Rose"
        viralscripts profile extract anna.txt --model-id <uuid>
        viralscripts profile extract anna.txt --no-save --json
    """
    if save and not (name or stage_name or model_id):
        raise click.UsageError("Name or stage name is required when saving a new model")

    transcript = Path(transcript_path).read_text(encoding='utf-8')

    try:
        model_repo = ModelRepository(create_supabase_client()) if save else None
        embeddings = EmbeddingService() if save else None
        service = ProfileExtractionService(LLMGateway(), model_repo=model_repo, embeddings=embeddings)
        result = asyncio.run(service.extract_voice_profile(
            transcript, model_name=stage_name or name, interviewer_name=interviewer,
        ))
    except ProfileExtractionError as e:
        click.echo(f"❌ Extraction failed: {e}", err=True)
        for error in e.validation_errors:
            click.echo(f"   - {error}", err=True)
        raise SystemExit(1)
    except Exception as e:
        click.echo(f"❌ Error: {e}", err=True)
        raise SystemExit(1)

    if as_json:
        click.echo(json.dumps(result.profile, indent=2))
    else:
        _display_profile(result)

    if not save:
        return

    try:
        model = service.save_profile(
            result, transcript, name=name, stage_name=stage_name, model_id=model_id
        )
    except Exception as e:
        click.echo(f"❌ Failed to save profile: {e}", err=True)
        raise SystemExit(1)

    action = "Updated" if model_id else "Created"
    click.echo(f"✅ {action} model {model.id} ({model.display_name})", err=as_json)

    if asyncio.run(service.embed_voice_profile(model)):
        click.echo("✅ Voice embedding generated", err=as_json)
    else:
        click.echo(
            "⚠️  No voice embedding stored; retrieval for this model fails until one exists",
            err=True,
        )

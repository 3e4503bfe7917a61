"""
Corpus Management CLI Commands

Commands for loading the viral script corpus, backfilling embeddings and
searching it.
"""

import asyncio
import csv
import logging
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import click

from ..core.database import create_supabase_client
from ..core.embeddings import EmbeddingService, build_corpus_embedding_text
from ..core.models import CorpusEntry, CorpusMatch
from ..pipelines.script_generation.services.corpus_retrieval import CorpusRetrievalService
from ..repositories import CorpusRepository, ModelRepository

logger = logging.getLogger(__name__)

MIN_CONTENT_CHARS = 20
DEFAULT_QUALITY_SCORE = 0.7
INSERT_CHUNK_SIZE = 100
EMBED_BATCH_PAUSE_SECONDS = 0.1

SKIP_PATTERNS = [
    re.compile(r'^thanks for watching', re.IGNORECASE),
    re.compile(r'^subscribe', re.IGNORECASE),
    re.compile(r'^like and subscribe', re.IGNORECASE),
    re.compile(r'^follow me', re.IGNORECASE),
]


# ============================================================================
# Ingestion helpers
# ============================================================================

def skip_reason(content: Optional[str]) -> Optional[str]:
    """Why a corpus row should be skipped, or None to keep it."""
    text = (content or '').strip()
    if not text:
        return 'Empty content'
    if len(text) < MIN_CONTENT_CHARS:
        return f'Too short ({len(text)} chars)'
    for pattern in SKIP_PATTERNS:
        if pattern.search(text):
            return f'Matches skip pattern: {pattern.pattern}'
    return None


def _clean(value: Optional[str]) -> Optional[str]:
    value = (value or '').strip()
    return value or None


def _parse_int(value: Optional[str]) -> Optional[int]:
    try:
        return int((value or '').strip())
    except ValueError:
        return None


def _parse_quality(value: Optional[str]) -> float:
    try:
        return float((value or '').strip())
    except ValueError:
        return DEFAULT_QUALITY_SCORE


def parse_corpus_row(row: Dict[str, Any]) -> Optional[CorpusEntry]:
    """
    Convert one TSV/CSV row to a CorpusEntry.

    Expected columns: text, hook, duration_seconds, creator, hook_type,
    script_archetype, parasocial_levers (pipe-delimited), quality_score.

    Returns:
        CorpusEntry, or None if the row should be skipped
    """
    if skip_reason(row.get('text')):
        return None

    levers = [l.strip() for l in (row.get('parasocial_levers') or '').split('|') if l.strip()]

    return CorpusEntry(
        content=row['text'].strip(),
        creator=_clean(row.get('creator')),
        duration_seconds=_parse_int(row.get('duration_seconds')),
        hook=_clean(row.get('hook')),
        hook_type=_clean(row.get('hook_type')),
        script_archetype=_clean(row.get('script_archetype')),
        parasocial_levers=levers or None,
        quality_score=_parse_quality(row.get('quality_score')),
        is_active=True,
    )


def read_corpus_file(path: str, delimiter: str) -> Tuple[List[CorpusEntry], List[Tuple[int, str]]]:
    """
    Read and filter a corpus file.

    Returns:
        (entries to insert, [(file row number, skip reason)])
    """
    entries: List[CorpusEntry] = []
    skipped: List[Tuple[int, str]] = []

    with open(path, 'r', encoding='utf-8', newline='') as f:
        reader = csv.DictReader(f, delimiter=delimiter)
        # Row 1 is the header
        for row_number, row in enumerate(reader, start=2):
            reason = skip_reason(row.get('text'))
            if reason:
                skipped.append((row_number, reason))
                continue
            entries.append(parse_corpus_row(row))

    return entries, skipped


def _chunks(items: List[Any], size: int) -> Iterable[List[Any]]:
    for i in range(0, len(items), size):
        yield items[i:i + size]


def insert_in_chunks(repo: CorpusRepository, entries: List[CorpusEntry]) -> Tuple[int, int]:
    """
    Insert entries in chunks of INSERT_CHUNK_SIZE.

    A failed chunk is counted and skipped.

    Returns:
        (inserted, failed)
    """
    inserted = failed = 0
    for number, chunk in enumerate(_chunks(entries, INSERT_CHUNK_SIZE), 1):
        try:
            inserted += repo.insert_entries(chunk)
        except Exception as e:
            logger.error(f"Corpus chunk {number} failed: {e}")
            failed += len(chunk)
    return inserted, failed


async def backfill_embeddings(
    repo: CorpusRepository,
    embeddings: EmbeddingService,
    batch_size: int = 50,
) -> Tuple[int, int]:
    """
    Embed every corpus row that has no embedding yet.

    Returns:
        (embedded, failed)
    """
    rows = repo.list_missing_embeddings()
    embedded = failed = 0

    for number, batch in enumerate(_chunks(rows, batch_size), 1):
        try:
            vectors = await embeddings.embed_batch([build_corpus_embedding_text(r) for r in batch])
        except Exception as e:
            logger.error(f"Embedding batch {number} failed: {e}")
            failed += len(batch)
            continue

        for row, vector in zip(batch, vectors):
            try:
                repo.update_embedding(row['id'], vector)
                embedded += 1
            except Exception as e:
                logger.error(f"Failed to update embedding for {row['id']}: {e}")
                failed += 1

        logger.info(f"Embedding batch {number}: {len(batch)} rows")
        await asyncio.sleep(EMBED_BATCH_PAUSE_SECONDS)

    return embedded, failed


def _retrieval_service() -> CorpusRetrievalService:
    supabase = create_supabase_client()
    return CorpusRetrievalService(
        CorpusRepository(supabase),
        ModelRepository(supabase),
        EmbeddingService(),
    )


def _display_matches(matches: List[CorpusMatch]) -> None:
    if not matches:
        click.echo("No matches found")
        return
    for i, match in enumerate(matches, 1):
        click.echo(f"{i}. [{match.hook_type or 'unknown'}] similarity {match.similarity_score:.3f}")
        if match.hook:
            click.echo(f"   Hook: {match.hook}")
        click.echo(f"   {match.content[:200]}")
        click.echo(f"   ID: {match.id}")
        click.echo()


# ============================================================================
# Commands
# ============================================================================

@click.group(name='corpus')
def corpus_group():
    """Manage the viral script corpus"""
    pass


@corpus_group.command(name='ingest')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--delimiter', default=None, help='Field delimiter (default: tab for .tsv, comma otherwise)')
def ingest_corpus(path: str, delimiter: Optional[str]):
    """
    Load corpus scripts from a TSV or CSV file.

    Rows that are empty, shorter than 20 characters or outro boilerplate
    ("thanks for watching", "subscribe", ...) are skipped.

    Examples:
        viralscripts corpus ingest docs/corpus_cleaned.tsv
        viralscripts corpus ingest corpus.csv --delimiter ,
    """
    if delimiter is None:
        delimiter = '\t' if Path(path).suffix.lower() == '.tsv' else ','

    click.echo("=" * 60)
    click.echo("📚 Corpus Ingestion")
    click.echo("=" * 60)
    click.echo()

    entries, skipped = read_corpus_file(path, delimiter)
    click.echo(f"Valid rows to insert: {len(entries)}")
    click.echo(f"Skipped rows: {len(skipped)}")

    if skipped and len(skipped) <= 20:
        for row_number, reason in skipped:
            click.echo(f"   Row {row_number}: {reason}")
    click.echo()

    try:
        repo = CorpusRepository(create_supabase_client())
    except ValueError as e:
        click.echo(f"❌ Error: {e}", err=True)
        raise SystemExit(1)

    inserted, failed = insert_in_chunks(repo, entries)

    click.echo("=" * 40)
    click.echo(f"Inserted:  {inserted}")
    click.echo(f"Skipped:   {len(skipped)}")
    click.echo(f"Errors:    {failed}")
    click.echo("=" * 40)
    click.echo(f"\nTotal corpus entries in database: {repo.count_all()}")


@corpus_group.command(name='embed')
@click.option('--batch-size', default=50, type=int, help='Rows per embedding request')
def embed_corpus(batch_size: int):
    """
    Backfill embeddings for corpus rows that have none.

    Examples:
        viralscripts corpus embed
        viralscripts corpus embed --batch-size 100
    """
    try:
        repo = CorpusRepository(create_supabase_client())
        embeddings = EmbeddingService()
        embedded, failed = asyncio.run(backfill_embeddings(repo, embeddings, batch_size))
    except Exception as e:
        click.echo(f"❌ Error: {e}", err=True)
        raise SystemExit(1)

    if embedded == 0 and failed == 0:
        click.echo("✅ All corpus entries have embeddings!")
    else:
        click.echo(f"✅ Embedded: {embedded}")
        if failed:
            click.echo(f"⚠️  Failed: {failed}")
    click.echo(f"Total embedded: {repo.count_embedded()}")


@corpus_group.command(name='search')
@click.argument('query')
@click.option('--limit', default=10, type=int, help='Maximum number of matches')
def search_corpus(query: str, limit: int):
    """
    Semantic search over the corpus by theme.

    Examples:
        viralscripts corpus search "morning routine confessions"
    """
    try:
        matches = asyncio.run(_retrieval_service().search_by_theme(query, limit=limit))
    except Exception as e:
        click.echo(f"❌ Error: {e}", err=True)
        raise SystemExit(1)
    _display_matches(matches)


@corpus_group.command(name='similar')
@click.argument('entry_id')
@click.option('--limit', default=5, type=int, help='Maximum number of matches')
def similar_entries(entry_id: str, limit: int):
    """
    Corpus entries similar to an existing entry.

    Examples:
        viralscripts corpus similar <entry-uuid> --limit 10
    """
    try:
        matches = asyncio.run(_retrieval_service().find_similar_entries(entry_id, limit=limit))
    except Exception as e:
        click.echo(f"❌ Error: {e}", err=True)
        raise SystemExit(1)
    _display_matches(matches)

"""
Batch Tracking Service - One summary record per pipeline run.

Averages on a batch cover passed scripts only. Aggregates across batches are
weighted by each batch's passed count.
"""

import logging
import random
import string
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from ....core.models import ScriptBatchRecord
from ....repositories import BatchRepository
from ..models import PipelineResult
from .cost_estimation import calculate_estimated_cost

logger = logging.getLogger(__name__)

PIPELINE_VERSION = "1.0"
BATCH_ID_SUFFIX_LENGTH = 6
_BATCH_ID_ALPHABET = string.ascii_lowercase + string.digits


class BatchStats(BaseModel):
    """Aggregate stats across every batch for one model"""
    total_batches: int = 0
    total_scripts_generated: int = 0
    total_scripts_passed: int = 0
    avg_voice_fidelity: float = 0
    avg_word_count: float = 0
    total_time_ms: int = 0
    total_tokens: int = 0
    total_estimated_cost: float = 0


def generate_batch_id(now: Optional[datetime] = None) -> str:
    """batch_YYYYMMDD_xxxxxx with a random lowercase alphanumeric suffix."""
    now = now or datetime.now(timezone.utc)
    suffix = "".join(random.choices(_BATCH_ID_ALPHABET, k=BATCH_ID_SUFFIX_LENGTH))
    return f"batch_{now.strftime('%Y%m%d')}_{suffix}"


def build_batch_record(
    batch_id: str,
    model_id: str,
    hooks_requested: int,
    result: PipelineResult,
    pricing: Optional[Dict[str, float]] = None,
) -> ScriptBatchRecord:
    """Summarize a finished run. Averages cover the passed (final) scripts only."""
    passed = result.scripts
    n = len(passed)
    avg_fidelity = sum(s.voice_fidelity_score for s in passed) / n if n else 0
    avg_words = sum(s.word_count for s in passed) / n if n else 0

    return ScriptBatchRecord(
        batch_id=batch_id,
        model_id=model_id,
        hooks_requested=hooks_requested,
        scripts_generated=result.stages.hook_generation.generated,
        scripts_passed=result.final_script_count,
        scripts_failed=result.stages.validation.failed,
        avg_voice_fidelity=round(avg_fidelity, 2),
        avg_word_count=round(avg_words, 1),
        total_time_ms=result.total_time_ms,
        total_tokens=result.total_tokens_used,
        estimated_cost_usd=calculate_estimated_cost(result.stages, pricing),
        pipeline_version=PIPELINE_VERSION,
    )


def aggregate_batches(rows: List[Dict[str, Any]]) -> BatchStats:
    """Totals plus passed-weighted averages over script_batches rows."""
    if not rows:
        return BatchStats()

    total_passed = sum(r.get("scripts_passed") or 0 for r in rows)
    if total_passed:
        avg_fidelity = sum(
            (r.get("avg_voice_fidelity") or 0) * (r.get("scripts_passed") or 0) for r in rows
        ) / total_passed
        avg_words = sum(
            (r.get("avg_word_count") or 0) * (r.get("scripts_passed") or 0) for r in rows
        ) / total_passed
    else:
        avg_fidelity = avg_words = 0

    return BatchStats(
        total_batches=len(rows),
        total_scripts_generated=sum(r.get("scripts_generated") or 0 for r in rows),
        total_scripts_passed=total_passed,
        avg_voice_fidelity=round(avg_fidelity, 2),
        avg_word_count=round(avg_words, 1),
        total_time_ms=sum(r.get("total_time_ms") or 0 for r in rows),
        total_tokens=sum(r.get("total_tokens") or 0 for r in rows),
        total_estimated_cost=round(sum(r.get("estimated_cost_usd") or 0 for r in rows), 4),
    )


class BatchTrackingService:
    """Records and reports per-run batch summaries."""

    def __init__(self, batch_repo: BatchRepository):
        self.batch_repo = batch_repo

    def create_batch(
        self,
        model_id: str,
        hooks_requested: int,
        result: PipelineResult,
        pricing: Optional[Dict[str, float]] = None,
    ) -> str:
        """
        Persist the summary record for one run.

        Returns:
            The new batch_id

        Raises:
            RuntimeError: If the insert fails
        """
        batch_id = generate_batch_id()
        record = build_batch_record(batch_id, model_id, hooks_requested, result, pricing)
        self.batch_repo.insert_batch(record)
        logger.info(
            f"Recorded {batch_id}: {record.scripts_passed}/{record.scripts_generated} passed, "
            f"~${record.estimated_cost_usd}"
        )
        return batch_id

    def get_batch_stats(self, model_id: str) -> BatchStats:
        return aggregate_batches(self.batch_repo.list_batches(model_id))

    def get_recent_batches(self, model_id: str, limit: int = 10) -> List[Dict[str, Any]]:
        return self.batch_repo.list_recent(model_id, limit=limit)

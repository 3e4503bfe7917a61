"""
Batch Repository - One summary row per pipeline run in script_batches.
"""

import logging
from typing import Any, Dict, List

from supabase import Client

from ..core.models import ScriptBatchRecord

logger = logging.getLogger(__name__)


class BatchRepository:
    """Typed access to the script_batches table."""

    def __init__(self, supabase_client: Client):
        self.supabase = supabase_client

    def insert_batch(self, record: ScriptBatchRecord) -> None:
        row = record.model_dump(mode="json", exclude={"created_at"})
        try:
            self.supabase.table("script_batches").insert(row).execute()
        except Exception as e:
            logger.error(f"Failed to create batch record: {e}")
            raise RuntimeError(f"Failed to create batch record: {e}") from e

    def list_batches(self, model_id: str) -> List[Dict[str, Any]]:
        try:
            result = self.supabase.table("script_batches").select("*").eq(
                "model_id", model_id
            ).execute()
        except Exception as e:
            raise RuntimeError(f"Failed to fetch batch stats: {e}") from e
        return result.data or []

    def list_recent(self, model_id: str, limit: int = 10) -> List[Dict[str, Any]]:
        try:
            result = self.supabase.table("script_batches").select(
                "batch_id, scripts_passed, avg_voice_fidelity, estimated_cost_usd, created_at"
            ).eq("model_id", model_id).order("created_at", desc=True).limit(limit).execute()
        except Exception as e:
            raise RuntimeError(f"Failed to fetch recent batches: {e}") from e
        return result.data or []

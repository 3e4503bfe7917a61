"""
Script Repository - Saved scripts and generated-hook tracking.
"""

import logging
from typing import List

from supabase import Client

from ..core.models import HookRecord, ScriptRecord, ScriptStatus

logger = logging.getLogger(__name__)


class ScriptRepository:
    """Typed access to the scripts table."""

    def __init__(self, supabase_client: Client):
        self.supabase = supabase_client

    def insert_scripts(self, records: List[ScriptRecord]) -> List[str]:
        """
        Insert scripts.

        Returns:
            New script ids, in insert order
        """
        if not records:
            return []

        rows = [r.model_dump(mode="json", exclude_none=True) for r in records]
        try:
            result = self.supabase.table("scripts").insert(rows).execute()
        except Exception as e:
            logger.error(f"Failed to save scripts: {e}")
            raise RuntimeError(f"Failed to save scripts: {e}") from e

        return [row["id"] for row in (result.data or [])]

    def get_approved_excerpts(self, model_id: str, limit: int = 5, chars: int = 100) -> List[str]:
        """
        Opening excerpts of the creator's most recent approved scripts.

        Args:
            model_id: Model UUID
            limit: Max scripts to read
            chars: Characters kept from the start of each script

        Returns:
            Non-empty excerpts, newest first
        """
        result = self.supabase.table("scripts").select("content").eq(
            "model_id", model_id
        ).eq("status", ScriptStatus.APPROVED.value).order(
            "created_at", desc=True
        ).limit(limit).execute()

        excerpts = []
        for row in result.data or []:
            content = (row.get("content") or "")[:chars]
            if content:
                excerpts.append(content)
        return excerpts


class HookRepository:
    """Typed access to the hooks tracking table."""

    def __init__(self, supabase_client: Client):
        self.supabase = supabase_client

    def insert_hooks(self, records: List[HookRecord]) -> int:
        if not records:
            return 0
        rows = [r.model_dump(mode="json", exclude_none=True) for r in records]
        result = self.supabase.table("hooks").insert(rows).execute()
        return len(result.data) if result.data else len(rows)

    def get_recent_hooks(self, model_id: str, limit: int = 100) -> List[str]:
        """Most recent hook texts for a model, newest first."""
        result = self.supabase.table("hooks").select("content").eq(
            "model_id", model_id
        ).order("created_at", desc=True).limit(limit).execute()
        return [row["content"] for row in (result.data or []) if row.get("content")]

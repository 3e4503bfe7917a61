"""
Model Repository - Creator records, voice profiles and voice embeddings.
"""

import logging
from typing import Any, Dict, List, Optional

from supabase import Client

from ..core.models import CreatorModel

logger = logging.getLogger(__name__)

MODEL_COLUMNS = (
    "id, name, stage_name, voice_profile, archetype_tags, niche_tags, "
    "boundaries, explicitness_level, embedding"
)


class ModelRepository:
    """Typed access to the models table."""

    def __init__(self, supabase_client: Client):
        self.supabase = supabase_client

    def get_model(self, model_id: str) -> Optional[CreatorModel]:
        """
        Fetch one creator model.

        Args:
            model_id: Model UUID as string

        Returns:
            CreatorModel, or None if no row matches
        """
        try:
            result = self.supabase.table("models").select(MODEL_COLUMNS).eq(
                "id", model_id
            ).limit(1).execute()
        except Exception as e:
            logger.error(f"Failed to fetch model {model_id}: {e}")
            raise RuntimeError(f"Failed to fetch model {model_id}: {e}") from e

        if not result.data:
            return None

        return CreatorModel.model_validate(result.data[0])

    def update_embedding(self, model_id: str, embedding: List[float]) -> None:
        """Store a regenerated voice embedding."""
        try:
            self.supabase.table("models").update(
                {"embedding": embedding}
            ).eq("id", model_id).execute()
        except Exception as e:
            logger.error(f"Failed to update embedding for model {model_id}: {e}")
            raise RuntimeError(f"Failed to update embedding for model {model_id}: {e}") from e

    def create_model(self, record: Dict[str, Any]) -> CreatorModel:
        """
        Insert a new creator model.

        Args:
            record: Column values (see build_model_record)

        Returns:
            The stored CreatorModel
        """
        try:
            result = self.supabase.table("models").insert(record).execute()
        except Exception as e:
            logger.error(f"Failed to create model {record.get('name')}: {e}")
            raise RuntimeError(f"Failed to create model {record.get('name')}: {e}") from e

        if not result.data:
            raise RuntimeError(f"Failed to create model {record.get('name')}: no row returned")

        model = CreatorModel.model_validate(result.data[0])
        logger.info(f"Created model {model.id} ({model.display_name})")
        return model

    def update_model(self, model_id: str, record: Dict[str, Any]) -> CreatorModel:
        """Overwrite the given columns of an existing model and return the stored row."""
        try:
            result = self.supabase.table("models").update(record).eq("id", model_id).execute()
        except Exception as e:
            logger.error(f"Failed to update model {model_id}: {e}")
            raise RuntimeError(f"Failed to update model {model_id}: {e}") from e

        if not result.data:
            raise RuntimeError(f"Failed to update model {model_id}: no row returned")
        return CreatorModel.model_validate(result.data[0])

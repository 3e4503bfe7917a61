"""
Configuration management for ViralScripts
"""

import os
import yaml
from pathlib import Path
from typing import Optional, Dict, Any
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Application configuration"""

    # Supabase
    SUPABASE_URL: str = os.getenv('SUPABASE_URL', '')
    SUPABASE_SERVICE_KEY: str = os.getenv('SUPABASE_SERVICE_KEY', '')

    # Anthropic (hooks, expansion, voice transformation, validation)
    ANTHROPIC_API_KEY: str = os.getenv('ANTHROPIC_API_KEY', '')

    # OpenAI (embeddings only)
    OPENAI_API_KEY: str = os.getenv('OPENAI_API_KEY', '')
    EMBEDDING_MODEL: str = os.getenv('EMBEDDING_MODEL', 'text-embedding-3-small')
    EMBEDDING_DIMENSIONS: int = 1536

    # Timeouts (seconds) applied to every outbound model call
    LLM_TIMEOUT_SECONDS: float = float(os.getenv('LLM_TIMEOUT_SECONDS', '120'))
    EMBEDDING_TIMEOUT_SECONDS: float = float(os.getenv('EMBEDDING_TIMEOUT_SECONDS', '30'))

    @classmethod
    def validate(cls, require_llm: bool = False, require_embeddings: bool = False) -> bool:
        """Validate required configuration"""
        required = {
            'SUPABASE_URL': cls.SUPABASE_URL,
            'SUPABASE_SERVICE_KEY': cls.SUPABASE_SERVICE_KEY,
        }
        if require_llm:
            required['ANTHROPIC_API_KEY'] = cls.ANTHROPIC_API_KEY
        if require_embeddings:
            required['OPENAI_API_KEY'] = cls.OPENAI_API_KEY

        missing = [k for k, v in required.items() if not v]

        if missing:
            raise ValueError(f"Missing required configuration: {', '.join(missing)}")

        return True

    @classmethod
    def get(cls, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get configuration value"""
        return getattr(cls, key, default)

    # ========================================================================
    # Model Configuration
    # ========================================================================

    # Tiers: fast (validation), default (hooks/expansion/scoring), complex (voice)
    FAST_MODEL = "claude-3-5-haiku-20241022"
    DEFAULT_MODEL = "claude-sonnet-4-20250514"
    COMPLEX_MODEL = "claude-opus-4-20250514"

    @classmethod
    def get_model(cls, key: str) -> str:
        """
        Get the configured LLM model for a pipeline stage.

        Resolution Order:
        1. Environment Variable: {KEY}_MODEL (e.g. VOICE_TRANSFORMATION_MODEL)
        2. Default mapping in this method
        3. Config.DEFAULT_MODEL

        Args:
            key: stage name (e.g., 'hook_generation', 'script_validation').
                 Keys are case-insensitive.

        Returns:
            Anthropic model identifier
        """
        key_upper = key.upper()

        env_model = os.getenv(f"{key_upper}_MODEL")
        if env_model:
            return env_model

        mappings = {
            "FAST": cls.FAST_MODEL,
            "DEFAULT": cls.DEFAULT_MODEL,
            "COMPLEX": cls.COMPLEX_MODEL,

            # Stage mappings
            "HOOK_GENERATION": cls.DEFAULT_MODEL,
            "SCRIPT_EXPANSION": cls.DEFAULT_MODEL,
            "SHAREABILITY": cls.DEFAULT_MODEL,
            "VOICE_TRANSFORMATION": cls.COMPLEX_MODEL,
            "SCRIPT_VALIDATION": cls.FAST_MODEL,
            "PROFILE_EXTRACTION": cls.DEFAULT_MODEL,
        }

        return mappings.get(key_upper, cls.DEFAULT_MODEL)

    @staticmethod
    def get_tier(model: str) -> str:
        """
        Map a model identifier to its pricing tier.

        Args:
            model: Anthropic model identifier

        Returns:
            "haiku", "sonnet" or "opus" (unknown models price as sonnet)
        """
        name = (model or "").lower()
        for tier in ("haiku", "opus", "sonnet"):
            if tier in name:
                return tier
        return "sonnet"


def load_pipeline_defaults(path: str) -> Dict[str, Any]:
    """
    Load pipeline option overrides from a YAML file.

    The file holds a flat mapping of PipelineOptions field names, optionally
    nested under a top-level ``pipeline`` key:

        pipeline:
          hook_count: 20
          target_duration: short
          max_revision_attempts: 1

    Args:
        path: Path to the YAML file

    Returns:
        Dict of option overrides (empty if the file is empty)
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Pipeline config not found: {path}")

    with open(config_path, 'r') as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Pipeline config must be a mapping, got {type(data).__name__}")

    return dict(data.get('pipeline', data))

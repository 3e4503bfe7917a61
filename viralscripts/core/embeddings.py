"""
Embedding Infrastructure for corpus retrieval

Provides text embedding generation using OpenAI text-embedding-3-small, plus
the text builders that decide what gets embedded for creators and corpus rows.
"""

import asyncio
import json
import logging
import os
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI

from .config import Config
from .models import VoiceProfile

logger = logging.getLogger(__name__)

MAX_INPUT_CHARS = 8000
MAX_BATCH_INPUTS = 2048


class EmbeddingError(ValueError):
    """Raised when an embedding is missing, malformed or cannot be generated."""


class EmbeddingService:
    """
    Async OpenAI embedding client.

    Inputs are truncated to MAX_INPUT_CHARS; batches are split into requests
    of at most MAX_BATCH_INPUTS texts.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        max_attempts: int = 3,
        client: Optional[Any] = None,
    ):
        """
        Initialize the EmbeddingService.

        Args:
            api_key: OpenAI API key (defaults to OPENAI_API_KEY env var)
            model: Embedding model (defaults to Config.EMBEDDING_MODEL)
            timeout: Per-request timeout in seconds
            max_attempts: Attempts per request before giving up
            client: Pre-built client, mainly for tests
        """
        self.model = model or Config.EMBEDDING_MODEL
        self.timeout = timeout if timeout is not None else Config.EMBEDDING_TIMEOUT_SECONDS
        self.max_attempts = max_attempts

        if client is not None:
            self.client = client
            return

        key = api_key or os.getenv("OPENAI_API_KEY")
        if not key:
            logger.warning("OPENAI_API_KEY not set - embedding functions will fail")
            self.client = None
        else:
            self.client = AsyncOpenAI(api_key=key)

    def _ensure_client(self):
        """Raise error if OpenAI client not configured."""
        if not self.client:
            raise EmbeddingError(
                "OpenAI client not configured. Set OPENAI_API_KEY environment variable."
            )

    async def _create(self, inputs: Any) -> List[List[float]]:
        last_error: Optional[Exception] = None

        for attempt in range(self.max_attempts):
            try:
                response = await asyncio.wait_for(
                    self.client.embeddings.create(model=self.model, input=inputs),
                    timeout=self.timeout,
                )
                return [item.embedding for item in response.data]
            except Exception as e:
                last_error = e
                if attempt < self.max_attempts - 1:
                    wait_time = 2 ** attempt
                    logger.warning(f"Embedding request failed (attempt {attempt + 1}), retrying in {wait_time}s: {e}")
                    await asyncio.sleep(wait_time)

        raise EmbeddingError(f"Embedding request failed after {self.max_attempts} attempts: {last_error}") from last_error

    async def embed(self, text: str) -> List[float]:
        """
        Generate embedding for a single text.

        Args:
            text: Text to embed (truncated to 8000 chars)

        Returns:
            Embedding vector
        """
        self._ensure_client()
        vectors = await self._create(text[:MAX_INPUT_CHARS])
        return vectors[0]

    async def embed_batch(self, texts: List[str]) -> List[List[float]]:
        """
        Generate embeddings for multiple texts.

        Args:
            texts: Texts to embed, each truncated to 8000 chars

        Returns:
            One vector per input, in input order
        """
        if not texts:
            return []

        self._ensure_client()
        vectors: List[List[float]] = []
        for i in range(0, len(texts), MAX_BATCH_INPUTS):
            chunk = [t[:MAX_INPUT_CHARS] for t in texts[i:i + MAX_BATCH_INPUTS]]
            vectors.extend(await self._create(chunk))

        logger.debug(f"Embedded {len(vectors)} texts")
        return vectors


def parse_embedding(value: Any) -> List[float]:
    """
    Decode a stored embedding.

    PostgREST can return vector columns as JSON strings; lists pass through.

    Raises:
        EmbeddingError: If the value is missing or cannot be decoded
    """
    if value is None or (isinstance(value, (list, str)) and len(value) == 0):
        raise EmbeddingError("Model has no embedding. Save the model again to generate one.")

    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise EmbeddingError(
                "Model embedding is malformed and cannot be parsed. "
                f"Re-save the model to regenerate embedding. Details: {e}"
            ) from e

    if not isinstance(value, list) or not all(isinstance(x, (int, float)) for x in value):
        raise EmbeddingError(
            "Model embedding is malformed and cannot be parsed. "
            "Re-save the model to regenerate embedding. Details: not a numeric array"
        )

    return [float(x) for x in value]


def build_voice_fingerprint(profile: VoiceProfile) -> str:
    """
    Build the text embedded as a creator's voice fingerprint.

    Combines sample speech, catchphrases, bio, humor, energy, explicitness,
    high-frequency fillers, the first five sentence starters, parasocial
    strengths and audience targeting.
    """
    parts: List[str] = []
    mechanics = profile.voice_mechanics

    if profile.sample_speech:
        parts.append("VOICE SAMPLES:")
        parts.append(" | ".join(profile.sample_speech))

    if mechanics.catchphrases:
        parts.append("CATCHPHRASES: " + ", ".join(mechanics.catchphrases))

    if profile.identity.quick_bio:
        parts.append("PERSONALITY: " + profile.identity.quick_bio)

    if profile.personality.humor_style:
        parts.append("HUMOR: " + profile.personality.humor_style)

    if profile.personality.energy_level:
        parts.append("ENERGY: " + profile.personality.energy_level)

    if profile.spicy.explicitness_level:
        parts.append("EXPLICITNESS: " + profile.spicy.explicitness_level)

    fillers = profile.high_frequency_fillers
    if fillers:
        parts.append("SPEECH PATTERNS: " + ", ".join(fillers))

    if mechanics.sentence_starters:
        parts.append("SENTENCE STARTERS: " + ", ".join(mechanics.sentence_starters[:5]))

    strengths = profile.lever_strengths
    if strengths:
        parts.append("CONNECTION STYLE: " + ", ".join(strengths))

    if profile.audience.target_viewer_description:
        parts.append("TARGET AUDIENCE: " + profile.audience.target_viewer_description)
    if profile.audience.fantasy_fulfilled:
        parts.append("FANTASY FULFILLED: " + profile.audience.fantasy_fulfilled)

    return "\n".join(parts)


def build_corpus_embedding_text(row: Dict[str, Any]) -> str:
    """Text embedded for a corpus row: hook, type and style labels, then the script."""
    parts = []
    if row.get("hook"):
        parts.append(f"HOOK: {row['hook']}")
    if row.get("hook_type"):
        parts.append(f"TYPE: {row['hook_type']}")
    if row.get("script_archetype"):
        parts.append(f"STYLE: {row['script_archetype']}")
    parts.append(f"SCRIPT: {row.get('content', '')}")
    return "\n".join(parts)

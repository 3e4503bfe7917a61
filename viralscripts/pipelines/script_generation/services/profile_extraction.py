"""
Profile Extraction Service - Structured voice profiles from interview transcripts.

One default-tier call reads the transcript and returns the full profile as
JSON. The reply is sanitized, checked against the allowed archetypes and
explicitness levels, then mapped to the shape stored on models.voice_profile.
Audience and boundary fields are only ever what the model reported; nothing
is filled in when they come back empty.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from ....core.config import Config
from ....core.embeddings import EmbeddingService, build_voice_fingerprint
from ....core.llm import LLMGateway, LLMResponseError, parse_json_response
from ....core.models import CreatorModel, VoiceProfile
from ....repositories import ModelRepository
from ..prompts.profile_extraction import (
    VALID_ARCHETYPES,
    VALID_EXPLICITNESS_LEVELS,
    VALID_PARASOCIAL_LEVERS,
    build_profile_extraction_prompt,
)

logger = logging.getLogger(__name__)

MIN_TRANSCRIPT_CHARS = 100
MIN_SAMPLE_QUOTES = 3
MIN_FINGERPRINT_CHARS = 50
EXTRACTION_MAX_TOKENS = 8192
EXTRACTION_TEMPERATURE = 0.3

REQUIRED_SECTIONS = (
    "identity",
    "voice_mechanics",
    "personality",
    "content",
    "audience",
    "spicy",
    "boundaries",
    "archetype_assignment",
    "sample_speech",
)
AUDIENCE_FIELDS = (
    "target_viewer_description",
    "fantasy_fulfilled",
    "how_fans_talk_to_her",
    "best_performing_content",
)
BOUNDARY_FIELDS = ("hard_nos", "topics_to_avoid")

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


class ProfileExtractionError(ValueError):
    """
    Raised when a transcript cannot be turned into a usable voice profile.

    Attributes:
        raw_response: Model reply (or sanitized profile JSON) that failed
        validation_errors: Every problem found by validate_profile()
    """

    def __init__(
        self,
        message: str,
        raw_response: Optional[str] = None,
        validation_errors: Optional[List[str]] = None,
    ):
        self.raw_response = raw_response
        self.validation_errors = validation_errors or []
        super().__init__(message)


class ProfileExtractionResult(BaseModel):
    """Extracted profile as returned by the model, after sanitizing."""
    profile: Dict[str, Any]
    tokens_used: int = 0

    @property
    def db_profile(self) -> Dict[str, Any]:
        return to_db_voice_profile(self.profile)

    @property
    def voice_profile(self) -> VoiceProfile:
        return VoiceProfile.model_validate(self.db_profile)


def parse_profile_response(text: str) -> Dict[str, Any]:
    """
    Parse the model reply into a profile dict.

    Accepts bare JSON, a fenced reply, or JSON fenced somewhere inside prose.

    Raises:
        ProfileExtractionError: If no JSON object can be recovered
    """
    if not (text or "").strip():
        raise ProfileExtractionError("Empty response from model")

    try:
        parsed = parse_json_response(text)
    except LLMResponseError:
        match = _FENCED_BLOCK.search(text)
        if not match:
            raise ProfileExtractionError(
                "Failed to parse voice profile JSON from response", raw_response=text
            ) from None
        try:
            parsed = json.loads(match.group(1).strip())
        except json.JSONDecodeError as e:
            raise ProfileExtractionError(
                f"Failed to parse JSON from code block: {e}", raw_response=text
            ) from e

    if not isinstance(parsed, dict):
        raise ProfileExtractionError("Profile is not an object", raw_response=text)
    return parsed


def sanitize_profile(profile: Dict[str, Any]) -> Dict[str, Any]:
    """
    Normalize the fields the model most often gets sloppy with.

    Blank audience strings become None. Boundary fields become lists of
    non-blank strings; a missing or malformed boundary list is empty, never
    guessed.
    """
    audience = profile.get("audience")
    if isinstance(audience, dict):
        for field in AUDIENCE_FIELDS:
            value = audience.get(field)
            if isinstance(value, str) and not value.strip():
                audience[field] = None

    boundaries = profile.get("boundaries")
    if isinstance(boundaries, dict):
        for field in BOUNDARY_FIELDS:
            value = boundaries.get(field)
            if not isinstance(value, list):
                boundaries[field] = []
            else:
                boundaries[field] = [str(v).strip() for v in value if v is not None and str(v).strip()]

    return profile


def _warn_nonstandard_levers(levers: Any, field: str) -> None:
    if not isinstance(levers, list):
        return
    for lever in levers:
        if isinstance(lever, str) and lever not in VALID_PARASOCIAL_LEVERS:
            # Custom levers are allowed
            logger.warning(f"Non-standard parasocial lever in {field}: {lever}")


def validate_profile(profile: Any) -> List[str]:
    """
    Check an extracted profile for required sections and allowed values.

    Returns:
        Human-readable problems; empty when the profile is usable
    """
    if not isinstance(profile, dict):
        return ["Profile is not an object"]

    errors = [
        f"Missing required section: {section}"
        for section in REQUIRED_SECTIONS
        if not profile.get(section)
    ]

    identity = profile.get("identity")
    if isinstance(identity, dict) and not (identity.get("stage_name") or identity.get("name")):
        errors.append("identity must have at least stage_name or name")

    archetype = profile.get("archetype_assignment")
    if isinstance(archetype, dict):
        primary = archetype.get("primary")
        if not primary:
            errors.append("archetype_assignment.primary is required")
        elif primary not in VALID_ARCHETYPES:
            errors.append(
                f"Invalid archetype: {primary}. Must be one of: {', '.join(VALID_ARCHETYPES)}"
            )
        secondary = archetype.get("secondary")
        if secondary and secondary not in VALID_ARCHETYPES:
            errors.append(f"Invalid secondary archetype: {secondary}")

    parasocial = profile.get("parasocial_config")
    if isinstance(parasocial, dict):
        _warn_nonstandard_levers(parasocial.get("strengths"), "strengths")
        _warn_nonstandard_levers(parasocial.get("avoid"), "avoid")

    samples = profile.get("sample_speech")
    if samples:
        if not isinstance(samples, list):
            errors.append("sample_speech must be an array")
        elif len(samples) < MIN_SAMPLE_QUOTES:
            errors.append(f"sample_speech should have at least {MIN_SAMPLE_QUOTES} verbatim quotes")

    mechanics = profile.get("voice_mechanics")
    if isinstance(mechanics, dict) and not mechanics.get("swear_frequency"):
        errors.append("voice_mechanics.swear_frequency is required")

    spicy = profile.get("spicy")
    if isinstance(spicy, dict):
        level = spicy.get("explicitness_level")
        if level and level not in VALID_EXPLICITNESS_LEVELS:
            errors.append(
                f"Invalid explicitness_level: {level}. Must be: {', '.join(VALID_EXPLICITNESS_LEVELS)}"
            )

    return errors


def to_db_voice_profile(extracted: Dict[str, Any]) -> Dict[str, Any]:
    """
    Map an extracted profile to the models.voice_profile JSON shape.

    parasocial_config becomes the stored ``parasocial`` section with only
    strengths and avoid. Missing sections are left out rather than defaulted.
    """
    parasocial = extracted.get("parasocial_config") or {}
    db_profile = {
        section: extracted[section]
        for section in (
            "identity", "voice_mechanics", "personality", "content", "audience",
            "spicy", "boundaries", "aesthetic", "archetype_assignment", "sample_speech",
        )
        if section in extracted
    }
    db_profile["parasocial"] = {
        "strengths": parasocial.get("strengths") or [],
        "avoid": parasocial.get("avoid") or [],
    }
    if extracted.get("voice_transformation_rules"):
        db_profile["voice_transformation_rules"] = extracted["voice_transformation_rules"]
    return db_profile


def build_model_record(
    extracted: Dict[str, Any],
    transcript: Optional[str] = None,
    name: Optional[str] = None,
    stage_name: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Row values for the models table built from an extracted profile.

    Explicit name and stage_name win over what the transcript revealed. The
    embedding is cleared so it is regenerated from the new profile.
    """
    identity = extracted.get("identity") or {}
    archetype = extracted.get("archetype_assignment") or {}
    content = extracted.get("content") or {}
    spicy = extracted.get("spicy") or {}

    return {
        "name": name or identity.get("name") or identity.get("stage_name") or "Unknown",
        "stage_name": stage_name or identity.get("stage_name"),
        "transcript_raw": transcript,
        "transcript_summary": identity.get("quick_bio"),
        "voice_profile": to_db_voice_profile(extracted),
        "archetype_tags": [a for a in (archetype.get("primary"), archetype.get("secondary")) if a],
        "niche_tags": content.get("niche_topics") or [],
        "boundaries": extracted.get("boundaries"),
        "explicitness_level": spicy.get("explicitness_level"),
        "embedding": None,
    }


class ProfileExtractionService:
    """Builds creator voice profiles from interview transcripts."""

    def __init__(
        self,
        llm: LLMGateway,
        model_repo: Optional[ModelRepository] = None,
        embeddings: Optional[EmbeddingService] = None,
        model: Optional[str] = None,
    ):
        self.llm = llm
        self.model_repo = model_repo
        self.embeddings = embeddings
        self.model = model or Config.get_model("profile_extraction")

    async def extract_voice_profile(
        self,
        transcript: str,
        model_name: Optional[str] = None,
        interviewer_name: Optional[str] = None,
    ) -> ProfileExtractionResult:
        """
        Extract a voice profile from one interview transcript.

        Args:
            transcript: Speaker-labelled interview transcript
            model_name: Creator whose lines are extracted
            interviewer_name: Speaker whose lines are ignored

        Returns:
            ProfileExtractionResult with the sanitized profile

        Raises:
            ProfileExtractionError: Transcript too short, unparseable reply or
                a profile that fails validation
        """
        if not transcript or len(transcript.strip()) < MIN_TRANSCRIPT_CHARS:
            raise ProfileExtractionError(
                f"Transcript too short. Need at least {MIN_TRANSCRIPT_CHARS} characters "
                "for meaningful extraction."
            )

        prompt = build_profile_extraction_prompt(
            transcript, model_name=model_name, interviewer_name=interviewer_name
        )
        logger.info(f"Extracting voice profile from {len(transcript)} character transcript")
        response = await self.llm.complete(
            prompt, model=self.model, temperature=EXTRACTION_TEMPERATURE,
            max_tokens=EXTRACTION_MAX_TOKENS,
        )

        profile = sanitize_profile(parse_profile_response(response.text))
        errors = validate_profile(profile)
        if errors:
            raise ProfileExtractionError(
                f"Profile validation failed: {', '.join(errors)}",
                raw_response=json.dumps(profile, indent=2),
                validation_errors=errors,
            )

        archetype = profile["archetype_assignment"]
        logger.info(
            f"Extracted profile: archetype {archetype.get('primary')}, "
            f"{len(profile['sample_speech'])} sample quotes"
        )
        return ProfileExtractionResult(profile=profile, tokens_used=response.output_tokens)

    def save_profile(
        self,
        result: ProfileExtractionResult,
        transcript: Optional[str] = None,
        name: Optional[str] = None,
        stage_name: Optional[str] = None,
        model_id: Optional[str] = None,
    ) -> CreatorModel:
        """
        Store an extracted profile.

        Creates a new model row, or replaces the profile of model_id when given.
        """
        if not self.model_repo:
            raise ValueError("ProfileExtractionService needs a ModelRepository to save profiles")

        record = build_model_record(result.profile, transcript, name=name, stage_name=stage_name)
        if model_id:
            if not name:
                record.pop("name")
            if not stage_name:
                record.pop("stage_name")
            return self.model_repo.update_model(model_id, record)
        return self.model_repo.create_model(record)

    async def embed_voice_profile(self, creator: CreatorModel) -> bool:
        """
        Generate and store the voice embedding for a saved model.

        Failures are logged, not raised: the profile is already stored and
        the embedding can be regenerated later.

        Returns:
            True when an embedding was stored
        """
        if not (self.embeddings and self.model_repo):
            return False

        fingerprint = build_voice_fingerprint(creator.voice_profile)
        if len(fingerprint) <= MIN_FINGERPRINT_CHARS:
            logger.warning(f"Voice fingerprint for model {creator.id} too short to embed")
            return False

        try:
            vector = await self.embeddings.embed(fingerprint)
            self.model_repo.update_embedding(creator.id, vector)
        except Exception as e:
            logger.error(f"Failed to generate voice embedding for model {creator.id}: {e}")
            return False

        logger.info(f"Generated voice embedding for model {creator.id}")
        return True

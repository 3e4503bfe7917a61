"""
Tests for ProfileExtractionService - transcript length check, reply parsing,
archetype and explicitness validation, sanitizing and the stored profile shape.
"""

import copy
import json

import pytest
from unittest.mock import AsyncMock, MagicMock

from viralscripts.core.llm import LLMResponse
from viralscripts.core.models import CreatorModel
from viralscripts.pipelines.script_generation.prompts.profile_extraction import (
    VALID_ARCHETYPES,
    VALID_PARASOCIAL_LEVERS,
    build_profile_extraction_prompt,
)
from viralscripts.pipelines.script_generation.services.profile_extraction import (
    ProfileExtractionError,
    ProfileExtractionResult,
    ProfileExtractionService,
    build_model_record,
    parse_profile_response,
    sanitize_profile,
    to_db_voice_profile,
    validate_profile,
)

TRANSCRIPT = (
    "Interviewer: So tell me about yourself.\n"
    "Anna: Okay so like, I'm literally obsessed with Taco Bell, I'm not even kidding, "
    "and honestly I will not shut up about my ex. Like ever. It's a problem.\n"
)

PROFILE = {
    "identity": {"name": "Anna", "stage_name": "Anna Rose", "quick_bio": "Chaotic Taco Bell girl."},
    "voice_mechanics": {
        "filler_words": [{"word": "like", "frequency": "high"}],
        "sentence_starters": ["okay so"],
        "swear_frequency": "medium",
    },
    "personality": {"energy_level": "high"},
    "content": {"niche_topics": ["dating", "fast food"]},
    "audience": {
        "target_viewer_description": "",
        "fantasy_fulfilled": "The funny friend who is secretly into you",
        "how_fans_talk_to_her": "   ",
        "best_performing_content": None,
    },
    "spicy": {"explicitness_level": "medium", "flirting_style": "teasing"},
    "boundaries": {"hard_nos": None},
    "aesthetic": {"visual_style": "sweatpants"},
    "archetype_assignment": {"primary": "chaotic_unhinged", "secondary": "girl_next_door", "confidence": 0.8},
    "parasocial_config": {"strengths": ["relatability", "confession"], "avoid": ["dominance"]},
    "voice_transformation_rules": {"always_include": ["one filler in the first sentence"]},
    "sample_speech": [
        "Okay so like, I'm literally obsessed with Taco Bell",
        "I will not shut up about my ex",
        "Like ever. It's a problem.",
    ],
}


def _profile(**overrides):
    profile = copy.deepcopy(PROFILE)
    profile.update(overrides)
    return profile


def _service(reply, tokens=1500):
    llm = MagicMock()
    llm.complete = AsyncMock(return_value=LLMResponse(text=reply, output_tokens=tokens))
    return ProfileExtractionService(llm, model="test-model"), llm


class TestPrompt:

    def test_lists_allowed_values_and_transcript(self):
        prompt = build_profile_extraction_prompt(TRANSCRIPT, model_name="Anna", interviewer_name="Interviewer")

        assert "Anna: Okay so like" in prompt
        assert 'The interviewer is "Interviewer"' in prompt
        for archetype in VALID_ARCHETYPES:
            assert archetype in prompt
        for lever in VALID_PARASOCIAL_LEVERS:
            assert lever in prompt

    def test_allowed_values_cover_hook_archetypes(self):
        assert len(VALID_ARCHETYPES) == 13
        assert "chaotic_unhinged" in VALID_ARCHETYPES
        assert "protector_dynamic" in VALID_PARASOCIAL_LEVERS


class TestParseProfileResponse:

    def test_bare_json(self):
        assert parse_profile_response(json.dumps(PROFILE))["identity"]["name"] == "Anna"

    def test_fenced_inside_prose(self):
        text = "Here is the profile:\n```json\n" + json.dumps(PROFILE) + "\n```\nHope it helps!"
        assert parse_profile_response(text)["archetype_assignment"]["primary"] == "chaotic_unhinged"

    def test_empty_reply(self):
        with pytest.raises(ProfileExtractionError, match="Empty response"):
            parse_profile_response("  ")

    def test_unparseable_reply_keeps_raw_text(self):
        with pytest.raises(ProfileExtractionError) as exc_info:
            parse_profile_response("I could not build a profile from this.")
        assert exc_info.value.raw_response == "I could not build a profile from this."

    def test_array_rejected(self):
        with pytest.raises(ProfileExtractionError, match="not an object"):
            parse_profile_response("[1, 2]")


class TestSanitizeProfile:

    def test_blank_audience_fields_become_none(self):
        audience = sanitize_profile(_profile())["audience"]

        assert audience["target_viewer_description"] is None
        assert audience["how_fans_talk_to_her"] is None
        assert audience["fantasy_fulfilled"] == "The funny friend who is secretly into you"

    def test_boundaries_never_filled_in(self):
        boundaries = sanitize_profile(_profile())["boundaries"]
        assert boundaries == {"hard_nos": [], "topics_to_avoid": []}

    def test_blank_boundary_entries_dropped(self):
        profile = _profile(boundaries={"hard_nos": ["no feet", "", None, "  "], "topics_to_avoid": "family"})
        boundaries = sanitize_profile(profile)["boundaries"]

        assert boundaries["hard_nos"] == ["no feet"]
        assert boundaries["topics_to_avoid"] == []


class TestValidateProfile:

    def test_valid_profile(self):
        assert validate_profile(sanitize_profile(_profile())) == []

    def test_not_an_object(self):
        assert validate_profile(["nope"]) == ["Profile is not an object"]

    def test_missing_sections(self):
        profile = _profile()
        del profile["spicy"]
        profile["sample_speech"] = []

        errors = validate_profile(profile)

        assert "Missing required section: spicy" in errors
        assert "Missing required section: sample_speech" in errors

    def test_identity_needs_a_name(self):
        errors = validate_profile(_profile(identity={"quick_bio": "hi"}))
        assert "identity must have at least stage_name or name" in errors

    def test_invalid_archetypes(self):
        errors = validate_profile(_profile(archetype_assignment={"primary": "vampire", "secondary": "pirate"}))

        assert any(e.startswith("Invalid archetype: vampire") for e in errors)
        assert "Invalid secondary archetype: pirate" in errors

    def test_missing_primary_archetype(self):
        errors = validate_profile(_profile(archetype_assignment={"secondary": "cool_girl"}))
        assert "archetype_assignment.primary is required" in errors

    def test_custom_levers_only_warn(self, caplog):
        profile = _profile(parasocial_config={"strengths": ["taco_talk"], "avoid": []})

        assert validate_profile(profile) == []
        assert "Non-standard parasocial lever in strengths: taco_talk" in caplog.text

    def test_too_few_quotes(self):
        errors = validate_profile(_profile(sample_speech=["one", "two"]))
        assert "sample_speech should have at least 3 verbatim quotes" in errors

    def test_swear_frequency_required(self):
        errors = validate_profile(_profile(voice_mechanics={"filler_words": []}))
        assert "voice_mechanics.swear_frequency is required" in errors

    def test_invalid_explicitness(self):
        errors = validate_profile(_profile(spicy={"explicitness_level": "extreme"}))
        assert errors == ["Invalid explicitness_level: extreme. Must be: subtle, medium, full_send"]


class TestDbShape:

    def test_parasocial_config_renamed(self):
        db = to_db_voice_profile(_profile())

        assert db["parasocial"] == {"strengths": ["relatability", "confession"], "avoid": ["dominance"]}
        assert "parasocial_config" not in db
        assert db["voice_transformation_rules"]["always_include"] == ["one filler in the first sentence"]
        assert db["aesthetic"]["visual_style"] == "sweatpants"

    def test_missing_parasocial_config(self):
        profile = _profile()
        del profile["parasocial_config"]
        del profile["voice_transformation_rules"]

        db = to_db_voice_profile(profile)

        assert db["parasocial"] == {"strengths": [], "avoid": []}
        assert "voice_transformation_rules" not in db

    def test_model_record(self):
        record = build_model_record(sanitize_profile(_profile()), TRANSCRIPT, stage_name="Anna R")

        assert record["name"] == "Anna"
        assert record["stage_name"] == "Anna R"
        assert record["archetype_tags"] == ["chaotic_unhinged", "girl_next_door"]
        assert record["niche_tags"] == ["dating", "fast food"]
        assert record["explicitness_level"] == "medium"
        assert record["boundaries"] == {"hard_nos": [], "topics_to_avoid": []}
        assert record["transcript_summary"] == "Chaotic Taco Bell girl."
        assert record["embedding"] is None

    def test_stored_profile_loads_as_voice_profile(self):
        result = ProfileExtractionResult(profile=sanitize_profile(_profile()))
        model = CreatorModel.model_validate({"id": "m1", "name": "Anna", "voice_profile": result.db_profile})

        assert model.voice_profile.lever_strengths == ["relatability", "confession"]
        assert model.voice_profile.primary_archetype == "chaotic_unhinged"
        assert model.voice_profile.audience.target_viewer_description is None


@pytest.mark.asyncio
async def test_extract_voice_profile():
    service, llm = _service("```json\n" + json.dumps(PROFILE) + "\n```")

    result = await service.extract_voice_profile(TRANSCRIPT, model_name="Anna", interviewer_name="Interviewer")

    assert result.tokens_used == 1500
    assert result.profile["audience"]["target_viewer_description"] is None
    assert result.voice_profile.identity.stage_name == "Anna Rose"
    prompt = llm.complete.call_args.args[0]
    assert "Anna: Okay so like" in prompt
    assert llm.complete.call_args.kwargs["model"] == "test-model"


@pytest.mark.asyncio
async def test_short_transcript_is_fatal():
    service, llm = _service(json.dumps(PROFILE))

    with pytest.raises(ProfileExtractionError, match="Transcript too short"):
        await service.extract_voice_profile("Anna: hi")

    llm.complete.assert_not_awaited()


@pytest.mark.asyncio
async def test_invalid_profile_reports_every_error():
    bad = _profile(archetype_assignment={"primary": "vampire"}, sample_speech=["just one"])
    service, _ = _service(json.dumps(bad))

    with pytest.raises(ProfileExtractionError) as exc_info:
        await service.extract_voice_profile(TRANSCRIPT)

    errors = exc_info.value.validation_errors
    assert len(errors) == 2
    assert json.loads(exc_info.value.raw_response)["archetype_assignment"]["primary"] == "vampire"


class TestSaveProfile:

    def test_creates_new_model(self):
        repo = MagicMock()
        repo.create_model.return_value = CreatorModel(id="m9", name="Anna")
        service = ProfileExtractionService(MagicMock(), model_repo=repo, model="test-model")

        model = service.save_profile(
            ProfileExtractionResult(profile=_profile()), TRANSCRIPT, stage_name="Anna Rose"
        )

        assert model.id == "m9"
        record = repo.create_model.call_args.args[0]
        assert record["stage_name"] == "Anna Rose"
        assert record["transcript_raw"] == TRANSCRIPT
        repo.update_model.assert_not_called()

    def test_updates_existing_model_without_renaming(self):
        repo = MagicMock()
        repo.update_model.return_value = CreatorModel(id="m1", name="Anna")
        service = ProfileExtractionService(MagicMock(), model_repo=repo, model="test-model")

        service.save_profile(ProfileExtractionResult(profile=_profile()), model_id="m1")

        model_id, record = repo.update_model.call_args.args
        assert model_id == "m1"
        assert "name" not in record
        assert "stage_name" not in record
        assert record["voice_profile"]["parasocial"]["avoid"] == ["dominance"]

    def test_needs_repository(self):
        service = ProfileExtractionService(MagicMock(), model="test-model")
        with pytest.raises(ValueError):
            service.save_profile(ProfileExtractionResult(profile=_profile()))


class TestEmbedVoiceProfile:

    def _saved(self):
        result = ProfileExtractionResult(profile=sanitize_profile(_profile()))
        return CreatorModel.model_validate({"id": "m9", "name": "Anna", "voice_profile": result.db_profile})

    @pytest.mark.asyncio
    async def test_stores_embedding(self):
        repo = MagicMock()
        embeddings = MagicMock()
        embeddings.embed = AsyncMock(return_value=[0.1, 0.2])
        service = ProfileExtractionService(MagicMock(), model_repo=repo, embeddings=embeddings, model="test-model")

        assert await service.embed_voice_profile(self._saved()) is True

        fingerprint = embeddings.embed.await_args.args[0]
        assert fingerprint.startswith("VOICE SAMPLES:")
        assert "CONNECTION STYLE: relatability, confession" in fingerprint
        repo.update_embedding.assert_called_once_with("m9", [0.1, 0.2])

    @pytest.mark.asyncio
    async def test_thin_profile_skipped(self):
        repo = MagicMock()
        embeddings = MagicMock()
        embeddings.embed = AsyncMock()
        service = ProfileExtractionService(MagicMock(), model_repo=repo, embeddings=embeddings, model="test-model")

        assert await service.embed_voice_profile(CreatorModel(id="m9", name="Anna")) is False
        embeddings.embed.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_embedding_failure_is_not_fatal(self):
        repo = MagicMock()
        embeddings = MagicMock()
        embeddings.embed = AsyncMock(side_effect=RuntimeError("rate limited"))
        service = ProfileExtractionService(MagicMock(), model_repo=repo, embeddings=embeddings, model="test-model")

        assert await service.embed_voice_profile(self._saved()) is False
        repo.update_embedding.assert_not_called()

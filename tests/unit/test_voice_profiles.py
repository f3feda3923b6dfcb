"""Unit tests for custom voice profiles and voice resolution."""

import json
import pytest
from pathlib import Path

from voxbridge.errors import CustomVoiceNotConfigured, SynthesisFailed, VoiceProfileNotFound
from voxbridge.languages import registry
from voxbridge.models.session import VoiceSelection, VoiceKind
from voxbridge.services import CustomVoiceResolver, CustomVoiceStore


@pytest.mark.unit
class TestCustomVoiceStore:
    """Test cases for CustomVoiceStore."""

    def test_add_and_get_voice(self, voice_store):
        profile = voice_store.add_voice("  Narrator ", " abc123 ")

        assert profile.name == "Narrator"
        assert profile.voice_id == "abc123"
        assert voice_store.get_voice(profile.id) == profile

    def test_add_voice_requires_name_and_id(self, voice_store):
        with pytest.raises(ValueError):
            voice_store.add_voice("", "abc123")
        with pytest.raises(ValueError):
            voice_store.add_voice("Narrator", "   ")

    def test_rename_keeps_identity(self, voice_store):
        profile = voice_store.add_voice("Narrator", "abc123")

        renamed = voice_store.rename_voice(profile.id, "Storyteller")

        assert renamed.id == profile.id
        assert renamed.voice_id == "abc123"
        assert voice_store.get_voice(profile.id).name == "Storyteller"

    def test_rename_unknown_voice_raises(self, voice_store):
        with pytest.raises(VoiceProfileNotFound):
            voice_store.rename_voice("missing", "Name")

    def test_active_voice_selection(self, voice_store):
        assert voice_store.active_voice() is None
        profile = voice_store.add_voice("Narrator", "abc123")

        voice_store.set_active_voice(profile.id)
        assert voice_store.active_voice() == profile

        voice_store.clear_active_voice()
        assert voice_store.active_voice() is None

    def test_set_active_unknown_voice_raises(self, voice_store):
        with pytest.raises(VoiceProfileNotFound):
            voice_store.set_active_voice("missing")

    def test_delete_active_voice_clears_selection(self, voice_store):
        profile = voice_store.add_voice("Narrator", "abc123")
        voice_store.set_active_voice(profile.id)

        voice_store.delete_voice(profile.id)

        assert voice_store.get_voice(profile.id) is None
        assert voice_store.active_voice() is None

    def test_list_voices_newest_first(self, temp_data_dir):
        path = Path(temp_data_dir) / "custom_voices.json"
        path.write_text(json.dumps({
            "voices": [
                {"id": "old", "name": "Old", "voice_id": "v1", "date_added": "2024-01-01T10:00:00"},
                {"id": "new", "name": "New", "voice_id": "v2", "date_added": "2024-06-01T10:00:00"},
            ],
            "active_voice_id": None,
        }))

        voices = CustomVoiceStore(str(path)).list_voices()

        assert [voice.id for voice in voices] == ["new", "old"]

    def test_profiles_persist_across_instances(self, temp_data_dir):
        path = str(Path(temp_data_dir) / "voices" / "custom_voices.json")
        store = CustomVoiceStore(path)
        profile = store.add_voice("Narrator", "abc123")
        store.set_active_voice(profile.id)

        reloaded = CustomVoiceStore(path)

        assert reloaded.get_voice(profile.id) == profile
        assert reloaded.active_voice() == profile

    def test_stale_active_id_is_cleared(self, temp_data_dir):
        path = Path(temp_data_dir) / "custom_voices.json"
        path.write_text(json.dumps({"voices": [], "active_voice_id": "gone"}))

        store = CustomVoiceStore(str(path))

        assert store.active_voice() is None
        assert json.loads(path.read_text())["active_voice_id"] is None

    def test_corrupt_file_starts_empty(self, temp_data_dir):
        path = Path(temp_data_dir) / "custom_voices.json"
        path.write_text("{not json")

        store = CustomVoiceStore(str(path))

        assert store.list_voices() == []


@pytest.mark.unit
class TestCustomVoiceResolver:
    """Test cases for CustomVoiceResolver."""

    def test_male_and_female_use_language_defaults(self, voice_store):
        resolver = CustomVoiceResolver(voice_store)

        assert resolver.resolve(VoiceSelection.male(), "fr") == registry.default_voice_id("fr", female=False)
        assert resolver.resolve(VoiceSelection.female(), "fr-FR") == registry.default_voice_id("fr", female=True)

    def test_unknown_language_falls_back_to_english(self, voice_store):
        resolver = CustomVoiceResolver(voice_store)

        assert resolver.resolve(VoiceSelection.female(), "xx") == registry.default_voice_id("en", female=True)

    def test_custom_uses_active_profile(self, voice_store):
        profile = voice_store.add_voice("Narrator", "abc123")
        voice_store.set_active_voice(profile.id)

        assert CustomVoiceResolver(voice_store).resolve(VoiceSelection.custom(), "es") == "abc123"

    def test_custom_with_explicit_profile(self, voice_store):
        active = voice_store.add_voice("Active", "active-id")
        chosen = voice_store.add_voice("Chosen", "chosen-id")
        voice_store.set_active_voice(active.id)

        assert CustomVoiceResolver(voice_store).resolve(VoiceSelection.custom(chosen.id), "es") == "chosen-id"

    def test_custom_without_active_profile_raises(self, voice_store):
        with pytest.raises(CustomVoiceNotConfigured) as exc_info:
            CustomVoiceResolver(voice_store).resolve(VoiceSelection.custom(), "es")

        assert isinstance(exc_info.value, SynthesisFailed)

    def test_custom_with_deleted_profile_raises(self, voice_store):
        with pytest.raises(CustomVoiceNotConfigured):
            CustomVoiceResolver(voice_store).resolve(VoiceSelection.custom("deleted-id"), "es")


@pytest.mark.unit
class TestVoiceSelection:
    """Test cases for parsing voice selections."""

    @pytest.mark.parametrize("value,expected", [
        ("male", VoiceSelection(VoiceKind.MALE)),
        ("Female", VoiceSelection(VoiceKind.FEMALE)),
        ("custom", VoiceSelection(VoiceKind.CUSTOM)),
        ("custom:abc", VoiceSelection(VoiceKind.CUSTOM, "abc")),
    ])
    def test_parse(self, value, expected):
        assert VoiceSelection.parse(value) == expected

    def test_parse_rejects_unknown_kind(self):
        with pytest.raises(ValueError):
            VoiceSelection.parse("robot")

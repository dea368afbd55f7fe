"""Tests for profile decoding and pulse encoding."""

from datetime import datetime, timedelta, timezone

import pytest

from codestats.models import (
    LanguageInfo,
    LanguageXP,
    MachineInfo,
    Pulse,
    UserProfile,
    parse_language_xp,
)

PROFILE_JSON = {
    "user": "testuser",
    "total_xp": 1000,
    "new_xp": 50,
    "machines": {"laptop": {"xps": 800, "new_xps": 30}},
    "languages": {
        "Go": {"xps": 600, "new_xps": 25},
        "Python": {"xps": 9000, "new_xps": 0},
        "Rust": {"xps": 600, "new_xps": 1},
    },
    "dates": {"2023-01-01": 50},
}


class TestUserProfileFromDict:
    def test_fields_match_json(self):
        profile = UserProfile.from_dict(PROFILE_JSON)
        assert profile.user == "testuser"
        assert profile.total_xp == 1000
        assert profile.new_xp == 50
        assert profile.machines == {"laptop": MachineInfo(xps=800, new_xps=30)}
        assert profile.languages["Go"] == LanguageInfo(xps=600, new_xps=25)
        assert profile.dates == {"2023-01-01": 50}

    def test_missing_keys_default(self):
        profile = UserProfile.from_dict({"user": "bare"})
        assert profile.total_xp == 0
        assert profile.new_xp == 0
        assert profile.machines == {}
        assert profile.languages == {}
        assert profile.dates == {}

    def test_null_maps_default(self):
        profile = UserProfile.from_dict({"user": "u", "machines": None, "languages": None, "dates": None})
        assert profile.machines == {}
        assert profile.dates == {}

    def test_non_object_raises(self):
        with pytest.raises(TypeError):
            UserProfile.from_dict([1, 2, 3])

    def test_string_xp_raises(self):
        with pytest.raises(TypeError):
            UserProfile.from_dict({"user": "u", "total_xp": "1000"})

    def test_bad_language_entry_raises(self):
        with pytest.raises(TypeError):
            UserProfile.from_dict({"user": "u", "languages": {"Go": 5}})

    def test_is_frozen(self):
        profile = UserProfile.from_dict(PROFILE_JSON)
        with pytest.raises(AttributeError):
            profile.total_xp = 5


class TestUserProfileHelpers:
    def test_level(self):
        assert UserProfile(user="u", total_xp=6400).level == 2

    def test_level_percentage(self):
        assert UserProfile(user="u", total_xp=4000).level_percentage == pytest.approx(0.5)

    def test_top_languages_sorted_by_xp_then_name(self):
        profile = UserProfile.from_dict(PROFILE_JSON)
        names = [name for name, _ in profile.top_languages()]
        assert names == ["Python", "Go", "Rust"]

    def test_top_languages_limit(self):
        profile = UserProfile.from_dict(PROFILE_JSON)
        assert len(profile.top_languages(1)) == 1


class TestPulse:
    def test_to_dict_shape(self):
        coded_at = datetime(2026, 10, 18, 12, 30, tzinfo=timezone.utc)
        pulse = Pulse(coded_at=coded_at, xps=[LanguageXP("Python", 12), LanguageXP("Go", 3)])
        assert pulse.to_dict() == {
            "coded_at": "2026-10-18T12:30:00+00:00",
            "xps": [{"language": "Python", "xp": 12}, {"language": "Go", "xp": 3}],
        }

    def test_duplicate_languages_pass_through(self):
        pulse = Pulse(datetime.now(timezone.utc), [LanguageXP("Go", 1), LanguageXP("Go", 2)])
        assert [e["language"] for e in pulse.to_dict()["xps"]] == ["Go", "Go"]

    def test_naive_timestamp_gets_local_offset(self):
        pulse = Pulse(coded_at=datetime(2026, 10, 18, 12, 0), xps=[])
        assert pulse.aware_coded_at.tzinfo is not None
        assert datetime.fromisoformat(pulse.to_dict()["coded_at"]).tzinfo is not None

    def test_now_is_recent_and_aware(self):
        pulse = Pulse.now([LanguageXP("Python", 1)])
        assert pulse.coded_at.tzinfo is not None
        assert datetime.now(timezone.utc) - pulse.coded_at < timedelta(seconds=5)


class TestParseLanguageXp:
    def test_simple(self):
        assert parse_language_xp("Python=12") == LanguageXP("Python", 12)

    def test_whitespace(self):
        assert parse_language_xp(" C++ = 7 ") == LanguageXP("C++", 7)

    def test_language_with_equals(self):
        assert parse_language_xp("a=b=3") == LanguageXP("a=b", 3)

    @pytest.mark.parametrize("text", ["Python", "=5", "Python=", "Python=abc"])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_language_xp(text)

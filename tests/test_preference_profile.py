"""Preference profile validation and setters."""

import pytest

from models.preferences import PreferenceProfile
from models.recommendation import PhotoAnalysisResult
from models.taxonomy import CHOICES, QUICK_PICK_STYLES, matches_quick_pick


def test_defaults_are_valid_and_complete() -> None:
    profile = PreferenceProfile()

    assert profile.occasion == "casual"
    assert profile.gender == "female"
    assert profile.generation == "genz"
    assert profile.body_type == "average"
    assert profile.complexion == "medium"
    assert profile.fabric == "cotton"
    assert profile.country_style == "Parisian Chic"
    assert profile.weather is None


@pytest.mark.parametrize("field_name", sorted(CHOICES))
def test_every_closed_field_rejects_unknown_values(field_name: str) -> None:
    with pytest.raises(ValueError):
        PreferenceProfile().update(**{field_name: "not-a-real-value"})


def test_setters_return_new_profile_and_keep_original() -> None:
    original = PreferenceProfile()
    updated = original.set_occasion("wedding").set_fabric("silk").set_body_type("plus-size")

    assert updated.occasion == "wedding"
    assert updated.fabric == "silk"
    assert updated.body_type == "plus-size"
    assert original.occasion == "casual"


def test_failed_update_is_all_or_nothing() -> None:
    profile = PreferenceProfile()

    with pytest.raises(ValueError):
        profile.update(occasion="party", complexion="green")

    assert profile.occasion == "casual"
    assert profile.complexion == "medium"


def test_free_text_fields() -> None:
    profile = PreferenceProfile().set_country_style("  Korean street  ").set_weather("Sunny 28°C")
    assert profile.country_style == "Korean street"
    assert profile.weather == "Sunny 28°C"

    assert profile.set_weather("   ").weather is None
    with pytest.raises(ValueError):
        profile.set_country_style("   ")


def test_unknown_field_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown profile fields"):
        PreferenceProfile().update(shoe_size="42")


def test_merge_analysis_overwrites_only_three_fields() -> None:
    profile = PreferenceProfile(
        occasion="date",
        gender="male",
        generation="millennial",
        body_type="slim",
        complexion="fair",
        fabric="linen",
        country_style="American",
        weather="Windy",
    )

    merged = profile.merge_analysis(
        PhotoAnalysisResult(body_type="curvy", complexion="tan", suggested_style="Korean")
    )

    assert (merged.body_type, merged.complexion, merged.country_style) == ("curvy", "tan", "Korean")
    assert merged.occasion == "date"
    assert merged.gender == "male"
    assert merged.generation == "millennial"
    assert merged.fabric == "linen"
    assert merged.weather == "Windy"


def test_quick_pick_highlight_is_case_insensitive_substring() -> None:
    assert QUICK_PICK_STYLES == ("Indian", "American", "Korean")
    assert matches_quick_pick("south indian festive", "Indian")
    assert not matches_quick_pick("Parisian Chic", "Korean")

"""Preference profile data model."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Optional

from models.recommendation import PhotoAnalysisResult
from models.taxonomy import CHOICES, validate_choice


def _clean_text(field_name: str, value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string, got {type(value).__name__}")
    cleaned = value.strip()
    if not cleaned:
        raise ValueError(f"{field_name} cannot be blank")
    return cleaned


@dataclass(frozen=True)
class PreferenceProfile:
    """The full style brief for one session.

    Instances are immutable. Every setter returns a new, fully validated
    profile, so a rejected value never leaves a half-updated brief behind.
    """

    occasion: str = "casual"
    gender: str = "female"
    generation: str = "genz"
    body_type: str = "average"
    complexion: str = "medium"
    fabric: str = "cotton"
    country_style: str = "Parisian Chic"
    weather: Optional[str] = None

    def __post_init__(self) -> None:
        for name in CHOICES:
            validate_choice(name, getattr(self, name))
        object.__setattr__(self, "country_style", _clean_text("country_style", self.country_style))
        if self.weather is not None:
            if not isinstance(self.weather, str):
                raise ValueError("weather must be a string")
            object.__setattr__(self, "weather", self.weather.strip() or None)

    def update(self, **changes: Any) -> "PreferenceProfile":
        """Apply several field changes at once; all or nothing."""

        known = {f.name for f in fields(self)}
        unknown = sorted(set(changes) - known)
        if unknown:
            raise ValueError(f"Unknown profile fields: {unknown}")
        return replace(self, **changes)

    def set_occasion(self, value: str) -> "PreferenceProfile":
        return self.update(occasion=value)

    def set_gender(self, value: str) -> "PreferenceProfile":
        return self.update(gender=value)

    def set_generation(self, value: str) -> "PreferenceProfile":
        return self.update(generation=value)

    def set_body_type(self, value: str) -> "PreferenceProfile":
        return self.update(body_type=value)

    def set_complexion(self, value: str) -> "PreferenceProfile":
        return self.update(complexion=value)

    def set_fabric(self, value: str) -> "PreferenceProfile":
        return self.update(fabric=value)

    def set_country_style(self, value: str) -> "PreferenceProfile":
        return self.update(country_style=value)

    def set_weather(self, value: Optional[str]) -> "PreferenceProfile":
        return self.update(weather=value)

    def merge_analysis(self, result: PhotoAnalysisResult) -> "PreferenceProfile":
        """Overwrite body type, complexion and regional style from a photo analysis."""

        return self.update(
            body_type=result.body_type,
            complexion=result.complexion,
            country_style=result.suggested_style,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = ["PreferenceProfile"]

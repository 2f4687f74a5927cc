"""Pydantic contracts for provider responses.

The generative model is asked for JSON matching a declared schema, but its
answer is still untrusted text. These models re-check every required key, every
type and every closed value before anything reaches the domain layer.
"""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from models.recommendation import OutfitItem, OutfitRecommendation, PhotoAnalysisResult
from models.taxonomy import BodyType, Complexion


class _ProviderContract(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, strict=True)


class OutfitItemPayload(_ProviderContract):
    category: str
    item: str
    reason: str


class RecommendationPayload(_ProviderContract):
    """Shape of the outfit JSON returned by the text model."""

    title: str = Field(min_length=1)
    description: str
    items: List[OutfitItemPayload] = Field(min_length=1)
    styling_tips: List[str] = Field(alias="stylingTips")
    color_palette: List[str] = Field(alias="colorPalette")
    image_prompt: str = Field(alias="imagePrompt", min_length=1)

    def to_recommendation(self) -> OutfitRecommendation:
        return OutfitRecommendation(
            title=self.title,
            description=self.description,
            items=tuple(
                OutfitItem(category=entry.category, item=entry.item, reason=entry.reason)
                for entry in self.items
            ),
            styling_tips=tuple(self.styling_tips),
            color_palette=tuple(self.color_palette),
            image_prompt=self.image_prompt,
        )


class PhotoAnalysisPayload(_ProviderContract):
    """Shape of the photo analysis JSON; closed fields are never coerced."""

    body_type: BodyType = Field(alias="bodyType")
    complexion: Complexion
    suggested_style: str = Field(alias="suggestedStyle")

    @field_validator("suggested_style")
    @classmethod
    def _require_style(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("suggestedStyle cannot be blank")
        return cleaned

    def to_result(self) -> PhotoAnalysisResult:
        return PhotoAnalysisResult(
            body_type=self.body_type,
            complexion=self.complexion,
            suggested_style=self.suggested_style,
        )


def describe_validation_error(exc: ValidationError) -> List[Dict[str, Any]]:
    """Flatten pydantic errors into loggable ``{location, message}`` pairs."""

    return [
        {"location": ".".join(str(part) for part in error.get("loc", ())), "message": error.get("msg")}
        for error in exc.errors()
    ]


__all__ = [
    "OutfitItemPayload",
    "RecommendationPayload",
    "PhotoAnalysisPayload",
    "describe_validation_error",
]

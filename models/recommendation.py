"""Outfit recommendation, photo analysis and illustration models."""

from __future__ import annotations

import base64
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class OutfitItem:
    category: str
    item: str
    reason: str


@dataclass(frozen=True)
class OutfitRecommendation:
    """A complete outfit suggestion produced by the stylist model.

    Only built from a payload that passed every contract check; there is no
    partially filled recommendation.
    """

    title: str
    description: str
    items: Tuple[OutfitItem, ...]
    styling_tips: Tuple[str, ...]
    color_palette: Tuple[str, ...]
    image_prompt: str

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["items"] = [asdict(item) for item in self.items]
        payload["styling_tips"] = list(self.styling_tips)
        payload["color_palette"] = list(self.color_palette)
        return payload


@dataclass(frozen=True)
class PhotoAnalysisResult:
    """Traits read from a user photo, used only to patch the profile."""

    body_type: str
    complexion: str
    suggested_style: str


@dataclass(frozen=True)
class Illustration:
    """An inline image returned by the image model."""

    data: bytes = field(repr=False)
    mime_type: str = "image/png"

    def as_data_url(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


__all__ = ["OutfitItem", "OutfitRecommendation", "PhotoAnalysisResult", "Illustration"]

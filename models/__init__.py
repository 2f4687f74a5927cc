"""Model package exports."""

from models.taxonomy import *  # noqa: F401,F403
from models.preferences import PreferenceProfile
from models.recommendation import (
    Illustration,
    OutfitItem,
    OutfitRecommendation,
    PhotoAnalysisResult,
)

__all__ = [
    "PreferenceProfile",
    "Illustration",
    "OutfitItem",
    "OutfitRecommendation",
    "PhotoAnalysisResult",
]

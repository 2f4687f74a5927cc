"""Instruction text sent to the generative provider."""

from __future__ import annotations

from typing import List

from models.preferences import PreferenceProfile
from models.taxonomy import BODY_TYPES, COMPLEXIONS

STYLIST_GUIDANCE: List[str] = [
    "Name specific garments, footwear and accessories rather than generic categories.",
    "Explain why each piece works for the stated body type and complexion.",
    "Respect the occasion, the preferred fabric and the regional style.",
    "Account for the weather when it is given.",
]

EDITORIAL_PREAMBLE = "A high-end fashion editorial photography of: "
EDITORIAL_SUFFIX = ". Professional lighting, minimalist background, 8k resolution, vogue style."

IMAGE_PROMPT_DESCRIPTION = (
    "A highly descriptive prompt for an AI image generator to visualize this outfit on a model."
)


def recommendation_prompt(profile: PreferenceProfile) -> str:
    """Compose the outfit request, embedding every field of the brief."""

    lines = [
        "As a world-class fashion stylist, suggest a complete outfit for a "
        f"{profile.gender} from the {profile.generation} generation.",
        f"Occasion: {profile.occasion}",
        f"Body Type: {profile.body_type}",
        f"Complexion: {profile.complexion}",
        f"Preferred Fabric: {profile.fabric}",
        f"Cultural Style/Country: {profile.country_style}",
    ]
    if profile.weather:
        lines.append(f"Current Weather: {profile.weather}")
    lines.append("")
    lines.append(
        "Provide a detailed recommendation including specific items, why they work for this "
        "body type and complexion, and styling tips."
    )
    lines.extend(f"- {bullet}" for bullet in STYLIST_GUIDANCE)
    return "\n".join(lines)


def photo_analysis_instruction() -> str:
    return (
        "Analyze this person's photo for fashion styling. Identify their body type "
        f"({', '.join(BODY_TYPES)}), complexion ({', '.join(COMPLEXIONS)}), and suggest a "
        "regional style (e.g., Indian, Korean, American) that would suit them based on their features."
    )


def illustration_prompt(image_prompt: str) -> str:
    """Wrap an outfit description in the editorial photography preamble."""

    return f"{EDITORIAL_PREAMBLE}{image_prompt.strip()}{EDITORIAL_SUFFIX}"


__all__ = [
    "STYLIST_GUIDANCE",
    "EDITORIAL_PREAMBLE",
    "EDITORIAL_SUFFIX",
    "IMAGE_PROMPT_DESCRIPTION",
    "recommendation_prompt",
    "photo_analysis_instruction",
    "illustration_prompt",
]

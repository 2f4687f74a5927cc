"""Canonical value sets for the style brief.

Each closed field of the preference profile is declared once as a ``Literal``
type so the same set drives dataclass validation, the pydantic response
contracts and the provider-side enum schema.
"""

from typing import Dict, Literal, Tuple, get_args

Occasion = Literal["casual", "office", "party", "wedding", "date", "gym"]
Gender = Literal["male", "female", "non-binary"]
Generation = Literal["alpha", "genz", "millennial", "genx"]
BodyType = Literal["slim", "athletic", "average", "curvy", "plus-size"]
Complexion = Literal["fair", "medium", "olive", "tan", "deep"]
Fabric = Literal["cotton", "linen", "silk", "wool", "denim", "synthetic"]

OCCASIONS: Tuple[str, ...] = get_args(Occasion)
GENDERS: Tuple[str, ...] = get_args(Gender)
GENERATIONS: Tuple[str, ...] = get_args(Generation)
BODY_TYPES: Tuple[str, ...] = get_args(BodyType)
COMPLEXIONS: Tuple[str, ...] = get_args(Complexion)
FABRICS: Tuple[str, ...] = get_args(Fabric)

CHOICES: Dict[str, Tuple[str, ...]] = {
    "occasion": OCCASIONS,
    "gender": GENDERS,
    "generation": GENERATIONS,
    "body_type": BODY_TYPES,
    "complexion": COMPLEXIONS,
    "fabric": FABRICS,
}

# Swatches shown next to each complexion option.
COMPLEXION_SWATCHES: Dict[str, str] = {
    "fair": "#FDF5E6",
    "medium": "#E6C1A3",
    "olive": "#C59A6F",
    "tan": "#A67B5B",
    "deep": "#4A2C2A",
}

FABRIC_LABELS: Dict[str, str] = {
    "cotton": "Cotton (Breathable)",
    "linen": "Linen (Lightweight)",
    "silk": "Silk (Luxurious)",
    "wool": "Wool (Warm)",
    "denim": "Denim (Durable)",
    "synthetic": "Synthetic (Performance)",
}

QUICK_PICK_STYLES: Tuple[str, ...] = ("Indian", "American", "Korean")


def validate_choice(field_name: str, value: str) -> str:
    """Return ``value`` if it belongs to the closed set for ``field_name``.

    Raises a :class:`ValueError` otherwise. Values are matched exactly; no case
    folding or synonym mapping is applied.
    """

    allowed = CHOICES[field_name]
    if value not in allowed:
        raise ValueError(f"Unsupported {field_name} '{value}'. Allowed: {list(allowed)}")
    return value


def matches_quick_pick(country_style: str, pick: str) -> bool:
    """Whether a quick-pick button should read as selected for ``country_style``."""

    return pick.lower() in country_style.lower()


__all__ = [
    "Occasion",
    "Gender",
    "Generation",
    "BodyType",
    "Complexion",
    "Fabric",
    "OCCASIONS",
    "GENDERS",
    "GENERATIONS",
    "BODY_TYPES",
    "COMPLEXIONS",
    "FABRICS",
    "CHOICES",
    "COMPLEXION_SWATCHES",
    "FABRIC_LABELS",
    "QUICK_PICK_STYLES",
    "validate_choice",
    "matches_quick_pick",
]

"""Canonical taxonomy definitions for wardrobe items.

This module centralises the canonical labels for categories, seasons, styles
and occasions together with the material sustainability table. Helper
functions keep validation logic consistent across the store, the adapters
and the HTTP schemas.
"""

import math
from typing import Dict, List, Optional


def _normalize_key(value: str) -> str:
    """Normalise a free-form string into a taxonomy key."""

    return value.strip().lower()


CATEGORIES: List[str] = ["tops", "bottoms", "dresses", "outerwear", "shoes", "accessories"]
SEASONS: List[str] = ["summer", "winter", "spring", "fall", "all-season"]
STYLES: List[str] = ["casual", "formal", "sporty", "business"]
OCCASIONS: List[str] = ["casual", "formal", "work", "party", "sport", "travel"]
UNITS: List[str] = ["metric", "imperial"]

ALL_SEASON = "all-season"
DEFAULT_SUSTAINABILITY_SCORE = 60

MATERIAL_SCORES: Dict[str, int] = {
    "cotton": 80,
    "organic cotton": 95,
    "wool": 85,
    "linen": 90,
    "hemp": 95,
    "polyester": 50,
    "nylon": 45,
    "acrylic": 40,
    "spandex": 30,
    "leather": 60,
    "faux leather": 50,
    "denim": 70,
}


def is_valid_category(value: Optional[str]) -> bool:
    return value is not None and _normalize_key(value) in CATEGORIES


def validate_category(value: str) -> str:
    """Validate and normalise a category value.

    Raises a :class:`ValueError` if the category is not part of the canonical
    taxonomy.
    """

    key = _normalize_key(value)
    if key not in CATEGORIES:
        raise ValueError(f"Unsupported category '{value}'. Allowed: {CATEGORIES}")
    return key


def normalize_season(value: Optional[str]) -> Optional[str]:
    """Lower-case a season tag, mapping 'autumn' onto 'fall'."""

    if value is None:
        return None
    key = _normalize_key(value)
    if key == "autumn":
        return "fall"
    return key


def material_score(material: Optional[str]) -> int:
    """Look up a material's sustainability score, defaulting to 60."""

    if not material:
        return DEFAULT_SUSTAINABILITY_SCORE
    return MATERIAL_SCORES.get(_normalize_key(material), DEFAULT_SUSTAINABILITY_SCORE)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up."""

    return int(math.floor(value + 0.5))


def clamp_score(value: object, default: int = DEFAULT_SUSTAINABILITY_SCORE) -> int:
    """Coerce a loosely typed score into an int within [0, 100]."""

    if value is None or isinstance(value, bool):
        return default
    try:
        score = round_half_up(float(value))  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return default
    return max(0, min(100, score))


__all__ = [
    "CATEGORIES",
    "SEASONS",
    "STYLES",
    "OCCASIONS",
    "UNITS",
    "ALL_SEASON",
    "DEFAULT_SUSTAINABILITY_SCORE",
    "MATERIAL_SCORES",
    "is_valid_category",
    "validate_category",
    "normalize_season",
    "material_score",
    "clamp_score",
    "round_half_up",
]

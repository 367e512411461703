"""Wardrobe item data model and helpers."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any, Dict, Optional

from models.taxonomy import normalize_season

IMMUTABLE_FIELDS = frozenset({"id", "user_id", "created_at"})


@dataclass
class WardrobeItem:
    """A single catalogued garment owned by one user."""

    user_id: int
    name: str
    category: str
    type: str = "unknown"
    color: Optional[str] = None
    material: Optional[str] = None
    style: Optional[str] = None
    image_url: Optional[str] = None
    image_data: Optional[str] = None
    sustainability_score: Optional[int] = None
    attributes: Optional[Dict[str, Any]] = None
    occasion: Optional[str] = None
    season: Optional[str] = None
    last_worn: Optional[datetime] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        self.category = str(self.category).strip().lower()
        self.season = normalize_season(self.season)
        if self.attributes is not None:
            self.attributes = dict(self.attributes)


WARDROBE_ITEM_FIELDS = frozenset(f.name for f in fields(WardrobeItem))


@dataclass
class ClothingAnalysis:
    """Normalised result of an image analysis call."""

    category: str = "unknown"
    type: str = "unknown"
    color: str = "unknown"
    material: str = "unknown"
    style: str = "casual"
    occasion: str = "casual"
    season: str = "all-season"
    sustainability_score: int = 60
    attributes: Dict[str, Any] = field(
        default_factory=lambda: {"detectedBy": "default", "confidenceLevel": "low"}
    )


__all__ = ["WardrobeItem", "ClothingAnalysis", "WARDROBE_ITEM_FIELDS", "IMMUTABLE_FIELDS"]

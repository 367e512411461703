"""Outfit records and recommendation results."""

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import List, Optional


@dataclass
class Outfit:
    """A named, ordered set of wardrobe item ids owned by one user."""

    user_id: int
    name: str
    items: List[int] = field(default_factory=list)
    occasion: Optional[str] = None
    season: Optional[str] = None
    sustainability_score: Optional[int] = None
    is_favorite: bool = False
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        self.items = [int(item_id) for item_id in self.items]


OUTFIT_FIELDS = frozenset(f.name for f in fields(Outfit))


@dataclass
class OutfitCandidate:
    """A recommended outfit, not yet saved to the store."""

    name: str
    items: List[int]
    sustainability_score: int
    season: Optional[str] = None
    rationale: str = ""
    occasion: Optional[str] = None
    source: str = "ai"


__all__ = ["Outfit", "OutfitCandidate", "OUTFIT_FIELDS"]

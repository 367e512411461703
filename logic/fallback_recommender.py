"""Deterministic outfit recommendations used when the model returns nothing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from models.outfit import OutfitCandidate
from models.taxonomy import ALL_SEASON, DEFAULT_SUSTAINABILITY_SCORE, round_half_up
from models.wardrobe_item import WardrobeItem

HOT_THRESHOLD_C = 25
COLD_THRESHOLD_C = 10
SPRING_THRESHOLD_C = 15
MAX_OUTFITS = 3
MIN_OUTFIT_ITEMS = 2


@dataclass(frozen=True)
class TemperatureBand:
    name: str
    label: str
    season: str
    extra_category: Optional[str]
    rationale_template: str

    def rationale(self, temperature: float) -> str:
        return self.rationale_template.format(temperature=temperature, season=self.season)


def temperature_band(temperature: float) -> TemperatureBand:
    """Map a Celsius temperature to hot, cold or mild (Spring/Fall)."""

    if temperature >= HOT_THRESHOLD_C:
        return TemperatureBand(
            "hot", "Summer", "summer", None, "Light outfit suitable for hot weather ({temperature}°C)"
        )
    if temperature < COLD_THRESHOLD_C:
        return TemperatureBand(
            "cold", "Winter", "winter", "outerwear", "Warm layered outfit for cold weather ({temperature}°C)"
        )
    label = "Spring" if temperature >= SPRING_THRESHOLD_C else "Fall"
    return TemperatureBand(
        "mild",
        label,
        label.lower(),
        "accessories",
        "Comfortable outfit for mild {season} weather ({temperature}°C)",
    )


def mean_score(items: Sequence[WardrobeItem]) -> int:
    """Half-up rounded mean of item scores, counting unscored items as 60."""

    scores = [
        item.sustainability_score if item.sustainability_score is not None else DEFAULT_SUSTAINABILITY_SCORE
        for item in items
    ]
    return round_half_up(sum(scores) / len(scores))


def _in_season(item: WardrobeItem, season: str) -> bool:
    tag = (item.season or "").lower()
    return tag in (season, ALL_SEASON)


def _by_category(items: Sequence[WardrobeItem], category: str) -> List[WardrobeItem]:
    return [item for item in items if (item.category or "").lower() == category]


def recommend_fallback(
    items: Sequence[WardrobeItem], temperature: float, occasion: str
) -> List[OutfitCandidate]:
    """Pair the i-th top with the i-th bottom (plus a band extra) for i in 0..2.

    Only items whose season matches the band or is ``all-season`` take part,
    and an outfit is emitted only when it has at least two pieces.
    """

    band = temperature_band(temperature)
    relevant = [item for item in items if _in_season(item, band.season)]
    partitions = [_by_category(relevant, "tops"), _by_category(relevant, "bottoms")]
    if band.extra_category:
        partitions.append(_by_category(relevant, band.extra_category))

    outfits: List[OutfitCandidate] = []
    for index in range(MAX_OUTFITS):
        pieces = [partition[index] for partition in partitions if index < len(partition)]
        if len(pieces) < MIN_OUTFIT_ITEMS:
            continue
        outfits.append(
            OutfitCandidate(
                name=f"{band.label} {occasion} Outfit {index + 1}",
                items=[piece.id for piece in pieces],  # type: ignore[misc]
                sustainability_score=mean_score(pieces),
                season=band.season,
                rationale=band.rationale(temperature),
                occasion=occasion,
                source="fallback",
            )
        )
    return outfits


__all__ = ["TemperatureBand", "temperature_band", "mean_score", "recommend_fallback"]

"""Outfit stylist agent: model-generated outfits with a rule-based fallback."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional

from logic.fallback_recommender import recommend_fallback
from models.outfit import OutfitCandidate
from models.taxonomy import clamp_score
from models.wardrobe_item import WardrobeItem
from tools.entity_store import EntityStore
from tools.gemini_adapters import OutfitGenerator
from tools.weather_provider import WeatherProvider
from wardrobe_app.config import DEFAULT_LOCATION
from wardrobe_app.logging_config import get_logger, log_event, operation_context

logger = get_logger(__name__)


class OutfitStylistAgent:
    """Produces up to three outfit candidates for a user and occasion.

    Weather is fetched first and its failure propagates, so a caller never
    receives outfits built without a temperature. The generator is asked
    next; when it yields nothing usable the deterministic fallback runs.
    """

    def __init__(
        self,
        store: EntityStore,
        weather_provider: WeatherProvider,
        generator: Optional[OutfitGenerator] = None,
        default_location: str = DEFAULT_LOCATION,
    ) -> None:
        self.store = store
        self.weather_provider = weather_provider
        self.generator = generator
        self.default_location = default_location

    def resolve_location(self, user_id: int) -> str:
        preference = self.store.get_weather_preferences(user_id)
        if preference is not None and preference.location:
            return preference.location
        return self.default_location

    def get_recommendations(self, user_id: int, occasion: str = "casual") -> List[OutfitCandidate]:
        with operation_context("agent:stylist.get_recommendations", user_id=user_id) as correlation_id:
            weather = self.weather_provider.get_current_weather(self.resolve_location(user_id))
            wardrobe = self.store.list_wardrobe_items(user_id)
            if not wardrobe:
                log_event(
                    logger,
                    logging.INFO,
                    "recommendations_empty_wardrobe",
                    correlation_id=correlation_id,
                    user_id=user_id,
                )
                return []

            candidates: List[OutfitCandidate] = []
            if self.generator is not None:
                candidates = self._sanitize(self.generator.generate(wardrobe, weather, occasion), wardrobe)

            source = "ai"
            if not candidates:
                source = "fallback"
                candidates = recommend_fallback(wardrobe, weather.temperature, occasion)

            log_event(
                logger,
                logging.INFO,
                "recommendations_built",
                correlation_id=correlation_id,
                user_id=user_id,
                occasion=occasion,
                source=source,
                temperature=weather.temperature,
                wardrobe_size=len(wardrobe),
                outfit_count=len(candidates),
            )
            return candidates

    @staticmethod
    def _sanitize(candidates: List[OutfitCandidate], wardrobe: List[WardrobeItem]) -> List[OutfitCandidate]:
        """Keep only ids from this wardrobe and scores inside [0, 100]."""

        owned = {item.id for item in wardrobe}
        kept: List[OutfitCandidate] = []
        for candidate in candidates:
            item_ids = [item_id for item_id in candidate.items if item_id in owned]
            if len(item_ids) != len(candidate.items):
                logger.warning(
                    "Dropped unknown item ids from generated outfit",
                    extra={"outfit_name": candidate.name, "dropped": len(candidate.items) - len(item_ids)},
                )
            if not item_ids:
                continue
            kept.append(
                replace(candidate, items=item_ids, sustainability_score=clamp_score(candidate.sustainability_score))
            )
        return kept


__all__ = ["OutfitStylistAgent"]

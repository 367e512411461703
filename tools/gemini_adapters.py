"""Gemini-backed adapters for garment analysis, outfit ideas and material scoring.

All three adapters are soft: a failing model call is logged as a warning and
replaced with a documented default so that wardrobe writes and
recommendations keep working without the model.
"""

from __future__ import annotations

import base64
import binascii
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from logic.prompts import (
    clothing_analysis_prompt,
    material_sustainability_prompt,
    outfit_recommendation_prompt,
)
from models.outfit import OutfitCandidate
from models.sustainability import DEFAULT_EXPLANATION, DEFAULT_TIPS, MaterialSustainability
from models.taxonomy import clamp_score, material_score, normalize_season
from models.wardrobe_item import ClothingAnalysis, WardrobeItem
from models.weather import WeatherSnapshot
from tools.gemini_client import GeminiClient
from tools.observability import instrument_adapter
from wardrobe_app.errors import UpstreamUnavailableError, ValidationFailedError
from wardrobe_app.logging_config import get_logger

LOGGER = get_logger(__name__)

_DEFAULT_MIME = "image/jpeg"


def decode_image_data(image_data: str) -> Tuple[str, bytes]:
    """Return ``(mime_type, raw_bytes)`` for a data URL or bare base64 string."""

    if not image_data or not image_data.strip():
        raise ValidationFailedError("image_data is required", field="image_data")
    mime_type = _DEFAULT_MIME
    encoded = image_data.strip()
    if encoded.startswith("data:"):
        header, _, encoded = encoded.partition(",")
        declared = header[len("data:"):].split(";", 1)[0]
        if declared:
            mime_type = declared
    try:
        return mime_type, base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationFailedError("image_data is not valid base64", field="image_data") from exc


class _AnalysisPayload(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True, coerce_numbers_to_str=True)

    category: Optional[str] = None
    type: Optional[str] = None
    color: Optional[str] = None
    material: Optional[str] = None
    style: Optional[str] = None
    occasion: Optional[str] = None
    season: Optional[str] = None
    sustainability_score: Any = Field(default=None, alias="sustainabilityScore")


class _OutfitPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str
    items: List[int]
    sustainability_score: Any = Field(default=None, alias="sustainabilityScore")
    season: Optional[str] = None
    rationale: str = ""


def _item_for_prompt(item: WardrobeItem) -> Dict[str, Any]:
    return {
        "id": item.id,
        "name": item.name,
        "category": item.category,
        "type": item.type,
        "color": item.color,
        "material": item.material,
        "style": item.style,
        "occasion": item.occasion,
        "season": item.season,
        "sustainabilityScore": item.sustainability_score,
    }


def _weather_for_prompt(weather: WeatherSnapshot) -> Dict[str, Any]:
    return {
        "location": weather.location,
        "temperature": weather.temperature,
        "description": weather.description,
        "main": weather.condition_main,
        "humidity": weather.humidity,
        "windSpeed": weather.wind_speed,
        "feelsLike": weather.feels_like,
        "timeOfDay": weather.time_of_day,
    }


class ClothingImageAnalyzer:
    """Classifies a garment photo into the wardrobe taxonomy."""

    def __init__(self, client: GeminiClient) -> None:
        self.client = client

    @instrument_adapter("gemini_clothing_analysis")
    def analyze(self, image_data: str) -> ClothingAnalysis:
        try:
            mime_type, raw = decode_image_data(image_data)
            payload = self.client.generate_json(
                [clothing_analysis_prompt(), {"mime_type": mime_type, "data": raw}],
                temperature=0.2,
                max_output_tokens=1024,
                use_safety_settings=True,
            )
            parsed = _AnalysisPayload.model_validate(payload)
        except (UpstreamUnavailableError, ValidationFailedError, ValidationError) as exc:
            LOGGER.warning("Clothing analysis unavailable, using defaults", extra={"reason": str(exc)})
            return ClothingAnalysis()

        raw_score = parsed.sustainability_score
        score = material_score(parsed.material) if raw_score is None else clamp_score(raw_score)
        fields = parsed.model_dump(exclude={"sustainability_score"}, exclude_none=True)
        attributes = {
            **payload,
            "sustainabilityScore": score,
            "detectedBy": "Google Gemini Vision",
            "confidenceLevel": "high",
        }
        return ClothingAnalysis(
            category=str(fields.get("category") or "unknown").strip().lower(),
            type=fields.get("type") or "unknown",
            color=fields.get("color") or "unknown",
            material=fields.get("material") or "unknown",
            style=fields.get("style") or "casual",
            occasion=fields.get("occasion") or "casual",
            season=normalize_season(fields.get("season")) or "all-season",
            sustainability_score=score,
            attributes=attributes,
        )


class OutfitGenerator:
    """Asks the model for outfit candidates drawn from a user's wardrobe."""

    def __init__(self, client: GeminiClient, count: int = 3) -> None:
        self.client = client
        self.count = count

    @instrument_adapter("gemini_outfit_generation")
    def generate(
        self, items: List[WardrobeItem], weather: WeatherSnapshot, occasion: str
    ) -> List[OutfitCandidate]:
        prompt = outfit_recommendation_prompt(
            [_item_for_prompt(item) for item in items],
            _weather_for_prompt(weather),
            occasion,
            count=self.count,
        )
        try:
            payload = self.client.generate_json([prompt], temperature=0.4, max_output_tokens=2048)
        except UpstreamUnavailableError as exc:
            LOGGER.warning("Outfit generation unavailable", extra={"reason": str(exc)})
            return []

        entries = payload.get("outfits")
        if not isinstance(entries, list):
            LOGGER.warning("Outfit generation returned no outfit list")
            return []

        candidates: List[OutfitCandidate] = []
        for index, entry in enumerate(entries):
            try:
                parsed = _OutfitPayload.model_validate(entry)
            except ValidationError:
                LOGGER.warning("Skipping malformed outfit entry", extra={"index": index})
                continue
            candidates.append(
                OutfitCandidate(
                    name=parsed.name,
                    items=list(parsed.items),
                    sustainability_score=clamp_score(parsed.sustainability_score),
                    season=normalize_season(parsed.season),
                    rationale=parsed.rationale,
                    occasion=occasion,
                    source="ai",
                )
            )
        return candidates


class MaterialAnalyzer:
    """Scores a fabric for sustainability and suggests care tips."""

    def __init__(self, client: GeminiClient) -> None:
        self.client = client

    @instrument_adapter("gemini_material_analysis")
    def analyze(self, material: str) -> MaterialSustainability:
        try:
            payload = self.client.generate_json(
                [material_sustainability_prompt(material)], temperature=0.2, max_output_tokens=1024
            )
        except UpstreamUnavailableError as exc:
            LOGGER.warning("Material analysis unavailable, using defaults", extra={"reason": str(exc)})
            return MaterialSustainability(material=material)

        explanation = payload.get("explanation")
        tips = payload.get("tips")
        if not isinstance(tips, list) or not tips:
            tips = list(DEFAULT_TIPS)
        return MaterialSustainability(
            material=material,
            score=clamp_score(payload.get("score")),
            explanation=explanation if isinstance(explanation, str) and explanation else DEFAULT_EXPLANATION,
            tips=[str(tip) for tip in tips],
        )


__all__ = ["ClothingImageAnalyzer", "OutfitGenerator", "MaterialAnalyzer", "decode_image_data"]

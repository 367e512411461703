"""Wardrobe ingestion agent for turning submitted garments into stored items."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from models.taxonomy import is_valid_category
from models.wardrobe_item import IMMUTABLE_FIELDS, WARDROBE_ITEM_FIELDS, ClothingAnalysis, WardrobeItem
from tools.entity_store import EntityStore
from tools.gemini_adapters import ClothingImageAnalyzer
from wardrobe_app.errors import ValidationFailedError
from wardrobe_app.logging_config import get_logger, log_event, operation_context

logger = get_logger(__name__)

# Submitted values for these fields win over what the image analysis detects.
_SUBMISSION_WINS = ("color", "material", "type", "style")


class WardrobeIngestionAgent:
    """Enriches a submitted item with image analysis, then persists it.

    The analyzer is fail-open, so a broken model call degrades the stored
    record to default analysis values instead of blocking the write.
    """

    def __init__(self, store: EntityStore, analyzer: Optional[ClothingImageAnalyzer] = None) -> None:
        self.store = store
        self.analyzer = analyzer

    def ingest(self, user_id: int, fields: Dict[str, Any]) -> WardrobeItem:
        with operation_context("agent:wardrobe_ingestion.ingest", user_id=user_id) as correlation_id:
            merged = {key: value for key, value in fields.items() if value is not None}
            analysis: Optional[ClothingAnalysis] = None
            if merged.get("image_data") and self.analyzer is not None:
                analysis = self.analyzer.analyze(merged["image_data"])
                merged = self._merge_analysis(merged, analysis)

            if not merged.get("category"):
                raise ValidationFailedError(
                    "category is required when it cannot be detected from the image", field="category"
                )
            merged.setdefault("type", "unknown")
            if not merged.get("name"):
                raise ValidationFailedError("name is required", field="name")

            record = {
                key: value
                for key, value in merged.items()
                if key in WARDROBE_ITEM_FIELDS and key not in IMMUTABLE_FIELDS
            }
            stored = self.store.create_wardrobe_item(WardrobeItem(user_id=user_id, **record))
            log_event(
                logger,
                logging.INFO,
                "wardrobe_item_ingested",
                correlation_id=correlation_id,
                user_id=user_id,
                item_id=stored.id,
                category=stored.category,
                analyzed=analysis is not None,
                detected_by=(analysis.attributes.get("detectedBy") if analysis else None),
            )
            return stored

    @staticmethod
    def _merge_analysis(submitted: Dict[str, Any], analysis: ClothingAnalysis) -> Dict[str, Any]:
        merged = dict(submitted)
        for key in _SUBMISSION_WINS:
            if not merged.get(key):
                merged[key] = getattr(analysis, key)
        if not merged.get("category") and is_valid_category(analysis.category):
            merged["category"] = analysis.category
        for key in ("occasion", "season"):
            merged.setdefault(key, getattr(analysis, key))
        merged["attributes"] = dict(analysis.attributes)
        merged["sustainability_score"] = analysis.sustainability_score
        return merged


__all__ = ["WardrobeIngestionAgent"]

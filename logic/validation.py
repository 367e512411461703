"""Pydantic schemas and helpers for validating request payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from models.taxonomy import normalize_season, validate_category
from wardrobe_app.errors import ValidationFailedError

Occasion = Literal["casual", "formal", "work", "party", "sport", "travel"]
Unit = Literal["metric", "imperial"]

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class _Schema(BaseModel):
    """Accept snake_case or camelCase keys and reject unknown ones."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


def _reject_nulls(model: BaseModel, names: tuple) -> None:
    for name in names:
        if name in model.model_fields_set and getattr(model, name) is None:
            raise ValueError(f"{name} cannot be null")


class _WardrobeItemFields(_Schema):
    type: Optional[str] = None
    color: Optional[str] = None
    material: Optional[str] = None
    style: Optional[str] = None
    image_url: Optional[str] = None
    image_data: Optional[str] = None
    sustainability_score: Optional[int] = Field(default=None, ge=0, le=100)
    attributes: Optional[Dict[str, Any]] = None
    occasion: Optional[str] = None
    season: Optional[str] = None
    last_worn: Optional[datetime] = None

    @field_validator("season")
    @classmethod
    def _normalize_season(cls, value: Optional[str]) -> Optional[str]:
        return normalize_season(value)


class WardrobeItemCreate(_WardrobeItemFields):
    """Input contract for adding a garment.

    ``category`` may be omitted when ``image_data`` is supplied; image
    analysis then fills it in.
    """

    name: str = Field(min_length=1)
    category: Optional[str] = None

    @field_validator("category")
    @classmethod
    def _validate_category(cls, value: Optional[str]) -> Optional[str]:
        return validate_category(value) if value is not None else None

    @model_validator(mode="after")
    def _category_or_image(self) -> "WardrobeItemCreate":
        if self.category is None and not self.image_data:
            raise ValueError("category is required unless image_data is provided")
        return self


class WardrobeItemUpdate(_WardrobeItemFields):
    """Partial patch for a garment; unset fields are left untouched."""

    name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = None

    @field_validator("category")
    @classmethod
    def _validate_category(cls, value: Optional[str]) -> Optional[str]:
        return validate_category(value) if value is not None else None

    @model_validator(mode="after")
    def _required_fields_not_null(self) -> "WardrobeItemUpdate":
        _reject_nulls(self, ("name", "category", "type"))
        return self


class OutfitCreate(_Schema):
    name: str = Field(min_length=1)
    items: List[int] = Field(min_length=1)
    occasion: Optional[str] = None
    season: Optional[str] = None
    sustainability_score: Optional[int] = Field(default=None, ge=0, le=100)
    is_favorite: bool = False


class OutfitUpdate(_Schema):
    name: Optional[str] = Field(default=None, min_length=1)
    items: Optional[List[int]] = Field(default=None, min_length=1)
    occasion: Optional[str] = None
    season: Optional[str] = None
    sustainability_score: Optional[int] = Field(default=None, ge=0, le=100)
    is_favorite: Optional[bool] = None

    @model_validator(mode="after")
    def _required_fields_not_null(self) -> "OutfitUpdate":
        _reject_nulls(self, ("name", "items", "is_favorite"))
        return self


class WeatherPreferenceInput(_Schema):
    """Upsert payload; omitted fields keep their stored values."""

    location: Optional[str] = Field(default=None, min_length=1)
    unit: Optional[Unit] = None
    min_temperature: Optional[int] = None
    max_temperature: Optional[int] = None

    @model_validator(mode="after")
    def _validate_range(self) -> "WeatherPreferenceInput":
        if (
            self.min_temperature is not None
            and self.max_temperature is not None
            and self.min_temperature > self.max_temperature
        ):
            raise ValueError("min_temperature cannot exceed max_temperature")
        return self


class AnalyzeClothingRequest(_Schema):
    image_data: str = Field(min_length=1)


class RecommendationQuery(_Schema):
    occasion: Occasion = "casual"


def validation_errors(exc: Any) -> List[Dict[str, Any]]:
    """JSON-safe view of a pydantic or FastAPI request validation error list."""

    return [
        {"loc": [str(part) for part in error["loc"]], "msg": error["msg"], "type": error["type"]}
        for error in exc.errors()
    ]


def validate_payload(schema: Type[SchemaT], payload: Any) -> SchemaT:
    """Validate ``payload`` against ``schema`` or raise :class:`ValidationFailedError`."""

    if isinstance(payload, schema):
        return payload
    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        errors = validation_errors(exc)
        field = errors[0]["loc"][0] if errors and errors[0]["loc"] else None
        raise ValidationFailedError(f"Invalid {schema.__name__} payload", field=field, errors=errors) from exc


__all__ = [
    "Occasion",
    "Unit",
    "WardrobeItemCreate",
    "WardrobeItemUpdate",
    "OutfitCreate",
    "OutfitUpdate",
    "WeatherPreferenceInput",
    "AnalyzeClothingRequest",
    "RecommendationQuery",
    "validate_payload",
    "validation_errors",
]

"""EcoWardrobe app bootstrap."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from agents.ingestion_agent import WardrobeIngestionAgent
from agents.stylist_agent import OutfitStylistAgent
from logic.validation import (
    AnalyzeClothingRequest,
    OutfitCreate,
    OutfitUpdate,
    RecommendationQuery,
    WardrobeItemCreate,
    WardrobeItemUpdate,
    WeatherPreferenceInput,
    validate_payload,
)
from models.outfit import Outfit, OutfitCandidate
from models.sustainability import MaterialSustainability
from models.user import User, hash_password
from models.wardrobe_item import ClothingAnalysis, WardrobeItem
from models.weather import DailyForecast, WeatherPreference, WeatherSnapshot
from tools.demo_data import seed_demo_data
from tools.entity_store import EntityStore, InMemoryEntityStore, SQLiteEntityStore
from tools.gemini_adapters import ClothingImageAnalyzer, MaterialAnalyzer, OutfitGenerator
from tools.gemini_client import GeminiClient
from tools.weather_provider import OpenWeatherProvider, WeatherProvider
from wardrobe_app.config import AppConfig
from wardrobe_app.errors import (
    AuthenticationError,
    ForbiddenError,
    NotFoundError,
    ValidationFailedError,
)
from wardrobe_app.logging_config import configure_logging, get_logger, log_event, operation_context

LOGGER = get_logger(__name__)


class WardrobeApp:
    """Wires together the store, adapters and agents behind one facade.

    Every method that takes a ``user_id`` acts on behalf of that user:
    records owned by someone else raise :class:`ForbiddenError` and unknown
    ids raise :class:`NotFoundError`.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        store: EntityStore | None = None,
        weather_provider: WeatherProvider | None = None,
        gemini_client: GeminiClient | None = None,
    ) -> None:
        self.config = config or AppConfig.from_env()
        configure_logging(self.config.log_level)

        self.store = store or self._build_store()
        self.weather_provider = weather_provider or OpenWeatherProvider(
            api_key=self.config.openweather_api_key,
            timeout_seconds=self.config.weather_timeout_seconds,
        )
        self.gemini_client = gemini_client or GeminiClient(
            api_key=self.config.gemini_api_key, model_name=self.config.model
        )
        self.image_analyzer = ClothingImageAnalyzer(self.gemini_client)
        self.outfit_generator = OutfitGenerator(self.gemini_client)
        self.material_analyzer = MaterialAnalyzer(self.gemini_client)

        self.stylist = OutfitStylistAgent(
            store=self.store,
            weather_provider=self.weather_provider,
            generator=self.outfit_generator,
            default_location=self.config.default_location,
        )
        self.ingestion = WardrobeIngestionAgent(store=self.store, analyzer=self.image_analyzer)

        self.demo_user: Optional[User] = None
        if self.config.seed_demo_data:
            self.demo_user = seed_demo_data(self.store, default_location=self.config.default_location)

        log_event(
            LOGGER,
            logging.INFO,
            "app_started",
            store_backend=self.config.store_backend,
            environment=self.config.environment or "local",
            model=self.config.model,
            gemini_configured=bool(self.config.gemini_api_key),
            weather_configured=bool(self.config.openweather_api_key),
        )

    def _build_store(self) -> EntityStore:
        if self.config.store_backend == "sqlite":
            return SQLiteEntityStore(self.config.store_path or "data/wardrobe.db")
        if self.config.store_backend != "memory":
            raise ValueError(f"Unsupported store backend '{self.config.store_backend}'")
        return InMemoryEntityStore()

    # Users
    def authenticate(self, user_id: Any) -> User:
        """Resolve the requesting subject or raise :class:`AuthenticationError`."""

        try:
            resolved = int(user_id)
        except (TypeError, ValueError):
            raise AuthenticationError() from None
        user = self.store.get_user(resolved)
        if user is None:
            raise AuthenticationError()
        return user

    def get_user(self, user_id: int) -> User:
        user = self.store.get_user(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    def register_user(
        self,
        username: str,
        password: str,
        *,
        display_name: str | None = None,
        email: str | None = None,
        avatar_url: str | None = None,
    ) -> User:
        if not username or not username.strip():
            raise ValidationFailedError("username is required", field="username")
        if not password:
            raise ValidationFailedError("password is required", field="password")
        return self.store.create_user(
            User(
                username=username.strip(),
                password_hash=hash_password(password),
                display_name=display_name,
                email=email,
                avatar_url=avatar_url,
            )
        )

    # Wardrobe
    def list_wardrobe(self, user_id: int) -> List[WardrobeItem]:
        return self.store.list_wardrobe_items(user_id)

    def get_wardrobe_item(self, user_id: int, item_id: int) -> WardrobeItem:
        item = self.store.get_wardrobe_item(item_id)
        if item is None:
            raise NotFoundError("Wardrobe item", item_id)
        if item.user_id != user_id:
            raise ForbiddenError()
        return item

    def create_wardrobe_item(self, user_id: int, fields: Dict[str, Any]) -> WardrobeItem:
        payload = validate_payload(WardrobeItemCreate, fields)
        return self.ingestion.ingest(user_id, payload.model_dump(exclude_none=True))

    def update_wardrobe_item(self, user_id: int, item_id: int, fields: Dict[str, Any]) -> WardrobeItem:
        self.get_wardrobe_item(user_id, item_id)
        payload = validate_payload(WardrobeItemUpdate, fields)
        updated = self.store.update_wardrobe_item(item_id, payload.model_dump(exclude_unset=True))
        if updated is None:
            raise NotFoundError("Wardrobe item", item_id)
        return updated

    def delete_wardrobe_item(self, user_id: int, item_id: int) -> None:
        self.get_wardrobe_item(user_id, item_id)
        self.store.delete_wardrobe_item(item_id)
        log_event(LOGGER, logging.INFO, "wardrobe_item_deleted", user_id=user_id, item_id=item_id)

    # Outfits
    def list_outfits(self, user_id: int) -> List[Outfit]:
        return self.store.list_outfits(user_id)

    def get_outfit(self, user_id: int, outfit_id: int) -> Outfit:
        outfit = self.store.get_outfit(outfit_id)
        if outfit is None:
            raise NotFoundError("Outfit", outfit_id)
        if outfit.user_id != user_id:
            raise ForbiddenError()
        return outfit

    def create_outfit(self, user_id: int, fields: Dict[str, Any]) -> Outfit:
        payload = validate_payload(OutfitCreate, fields)
        return self.store.create_outfit(Outfit(user_id=user_id, **payload.model_dump()))

    def update_outfit(self, user_id: int, outfit_id: int, fields: Dict[str, Any]) -> Outfit:
        self.get_outfit(user_id, outfit_id)
        payload = validate_payload(OutfitUpdate, fields)
        updated = self.store.update_outfit(outfit_id, payload.model_dump(exclude_unset=True))
        if updated is None:
            raise NotFoundError("Outfit", outfit_id)
        return updated

    def delete_outfit(self, user_id: int, outfit_id: int) -> None:
        self.get_outfit(user_id, outfit_id)
        self.store.delete_outfit(outfit_id)
        log_event(LOGGER, logging.INFO, "outfit_deleted", user_id=user_id, outfit_id=outfit_id)

    # Recommendations
    def get_recommendations(self, user_id: int, occasion: str | None = None) -> List[OutfitCandidate]:
        query = validate_payload(RecommendationQuery, {"occasion": occasion} if occasion else {})
        return self.stylist.get_recommendations(user_id, query.occasion)

    # Weather
    def get_weather_preference(self, user_id: int) -> Optional[WeatherPreference]:
        return self.store.get_weather_preferences(user_id)

    def set_weather_preference(self, user_id: int, fields: Dict[str, Any]) -> WeatherPreference:
        payload = validate_payload(WeatherPreferenceInput, fields)
        with operation_context("app:set_weather_preference", user_id=user_id):
            return self.store.set_weather_preferences(user_id, payload.model_dump(exclude_none=True))

    def _location_for(self, location: str | None, user_id: int | None) -> str:
        if location and location.strip():
            return location.strip()
        if user_id is not None:
            return self.stylist.resolve_location(user_id)
        return self.config.default_location

    def get_weather(self, location: str | None = None, *, user_id: int | None = None) -> WeatherSnapshot:
        return self.weather_provider.get_current_weather(self._location_for(location, user_id))

    def get_forecast(self, location: str | None = None, *, user_id: int | None = None) -> List[DailyForecast]:
        return self.weather_provider.get_forecast(self._location_for(location, user_id))

    # Analysis
    def analyze_clothing(self, image_data: str) -> ClothingAnalysis:
        payload = validate_payload(AnalyzeClothingRequest, {"image_data": image_data})
        return self.image_analyzer.analyze(payload.image_data)

    def analyze_material(self, material: str) -> MaterialSustainability:
        if not material or not material.strip():
            raise ValidationFailedError("material name is required", field="name")
        return self.material_analyzer.analyze(material.strip())


__all__ = ["WardrobeApp"]

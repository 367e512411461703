"""Model package exports."""

from models.taxonomy import *  # noqa: F401,F403
from models.outfit import Outfit, OutfitCandidate
from models.user import User
from models.wardrobe_item import ClothingAnalysis, WardrobeItem
from models.weather import DailyForecast, WeatherPreference, WeatherSnapshot

__all__ = [
    "ClothingAnalysis",
    "DailyForecast",
    "Outfit",
    "OutfitCandidate",
    "User",
    "WardrobeItem",
    "WeatherPreference",
    "WeatherSnapshot",
]

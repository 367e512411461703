"""Weather preference records and weather snapshots."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class WeatherPreference:
    """Per-user location preference; at most one per user.

    ``min_temperature`` and ``max_temperature`` describe a personal comfort
    band. They are stored and returned but do not influence recommendations.
    """

    user_id: int
    location: str
    unit: str = "metric"
    min_temperature: Optional[int] = None
    max_temperature: Optional[int] = None
    id: Optional[int] = None


@dataclass
class WeatherSnapshot:
    location: str
    temperature: int
    description: str
    humidity: int
    wind_speed: float
    feels_like: int
    condition_main: str
    time_of_day: str
    timestamp: str
    icon: Optional[str] = None
    clothing_guidance: Optional[str] = None


@dataclass
class DailyForecast:
    date: str
    avg_temperature: int
    condition_main: str
    description: str
    icon: Optional[str] = None


__all__ = ["WeatherPreference", "WeatherSnapshot", "DailyForecast"]

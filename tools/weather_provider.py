"""Weather provider abstractions and implementations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, Dict, List

import requests
from pydantic import BaseModel, ValidationError

from models.taxonomy import round_half_up
from models.weather import DailyForecast, WeatherSnapshot
from tools.observability import instrument_adapter
from wardrobe_app.errors import WeatherUnavailableError
from wardrobe_app.logging_config import get_logger

LOGGER = get_logger(__name__)

CURRENT_WEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"
FORECAST_URL = "https://api.openweathermap.org/data/2.5/forecast"
FORECAST_DAYS = 5


class _WeatherCondition(BaseModel):
    main: str = "Unknown"
    description: str = "unknown"
    icon: str | None = None


class _Wind(BaseModel):
    speed: float = 0.0


class _CurrentMain(BaseModel):
    temp: float
    feels_like: float
    humidity: int = 0


class _Sys(BaseModel):
    sunrise: int = 0
    sunset: int = 0


class _CurrentResponse(BaseModel):
    name: str
    main: _CurrentMain
    weather: List[_WeatherCondition]
    wind: _Wind = _Wind()
    sys: _Sys = _Sys()


class _ForecastMain(BaseModel):
    temp: float


class _ForecastEntry(BaseModel):
    dt: int
    main: _ForecastMain
    weather: List[_WeatherCondition]


class _ForecastResponse(BaseModel):
    list: List[_ForecastEntry] = []


def clothing_guidance(temperature: float) -> str:
    """Short dressing hint for a temperature in Celsius."""

    if temperature >= 30:
        return "Light t-shirt + shorts + sun hat"
    if temperature >= 25:
        return "T-shirt + light pants + sun protection"
    if temperature >= 20:
        return "Light sweater + jeans + sneakers"
    if temperature >= 15:
        return "Sweater + jeans + light jacket"
    if temperature >= 10:
        return "Long sleeve + jeans + jacket"
    if temperature >= 5:
        return "Sweater + heavy jacket + scarf"
    if temperature >= 0:
        return "Sweater + heavy coat + scarf + gloves"
    return "Heavy layers + winter coat + hat + gloves + scarf"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _most_frequent(values: List[str]) -> str:
    # Ties go to the value that reached the highest count first.
    counts: Dict[str, int] = {}
    best, best_count = values[0], 0
    for value in values:
        counts[value] = counts.get(value, 0) + 1
        if counts[value] > best_count:
            best, best_count = value, counts[value]
    return best


def _format_day(day: str) -> str:
    parsed = datetime.strptime(day, "%Y-%m-%d")
    return f"{parsed:%a}, {parsed:%b} {parsed.day}"


class WeatherProvider(ABC):
    """Abstract weather provider interface."""

    @abstractmethod
    def get_current_weather(self, location: str) -> WeatherSnapshot:
        """Return the current conditions for ``location``."""

    @abstractmethod
    def get_forecast(self, location: str) -> List[DailyForecast]:
        """Return up to five daily summaries for ``location``."""


class OpenWeatherProvider(WeatherProvider):
    """OpenWeather provider with schema validation.

    Unlike the soft AI adapters this one fails closed: any problem raises
    :class:`WeatherUnavailableError` because there is no safe default
    temperature to recommend against.
    """

    def __init__(
        self,
        api_key: str | None = None,
        timeout_seconds: float = 5.0,
        units: str = "metric",
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.units = units
        self._clock = clock

    def _fetch(self, url: str, location: str) -> dict:
        if not location or not location.strip():
            raise WeatherUnavailableError("location is required for weather lookups")
        if not self.api_key:
            raise WeatherUnavailableError("OPENWEATHER_API_KEY is not configured")

        params = {"q": location, "appid": self.api_key, "units": self.units}
        try:
            response = requests.get(url, params=params, timeout=self.timeout_seconds)
            response.raise_for_status()
            return response.json()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else "unknown"
            LOGGER.error("Weather API returned an error", extra={"status": status})
            raise WeatherUnavailableError(f"OpenWeather API error ({status})") from exc
        except requests.RequestException as exc:
            LOGGER.error("Weather API unreachable", exc_info=exc)
            raise WeatherUnavailableError("OpenWeather API unreachable") from exc
        except ValueError as exc:
            raise WeatherUnavailableError("OpenWeather API returned invalid JSON") from exc

    @instrument_adapter("openweather_current")
    def get_current_weather(self, location: str) -> WeatherSnapshot:
        payload = self._fetch(CURRENT_WEATHER_URL, location)
        try:
            parsed = _CurrentResponse.model_validate(payload)
        except ValidationError as exc:
            LOGGER.error("Weather payload schema validation failed", exc_info=exc)
            raise WeatherUnavailableError("malformed current weather payload") from exc
        if not parsed.weather:
            raise WeatherUnavailableError("current weather payload has no conditions")

        now = self._clock()
        now_seconds = now.timestamp()
        condition = parsed.weather[0]
        time_of_day = "day" if parsed.sys.sunrise < now_seconds < parsed.sys.sunset else "night"
        temperature = round_half_up(parsed.main.temp)
        return WeatherSnapshot(
            location=parsed.name,
            temperature=temperature,
            description=condition.description,
            icon=condition.icon,
            humidity=parsed.main.humidity,
            wind_speed=parsed.wind.speed,
            feels_like=round_half_up(parsed.main.feels_like),
            condition_main=condition.main,
            time_of_day=time_of_day,
            timestamp=now.isoformat(),
            clothing_guidance=clothing_guidance(temperature),
        )

    @instrument_adapter("openweather_forecast")
    def get_forecast(self, location: str) -> List[DailyForecast]:
        payload = self._fetch(FORECAST_URL, location)
        try:
            parsed = _ForecastResponse.model_validate(payload)
        except ValidationError as exc:
            LOGGER.error("Forecast payload schema validation failed", exc_info=exc)
            raise WeatherUnavailableError("malformed forecast payload") from exc

        # OpenWeather returns three-hourly entries; bucket them by UTC day.
        days: Dict[str, List[_ForecastEntry]] = {}
        for entry in parsed.list:
            if not entry.weather:
                continue
            day = datetime.fromtimestamp(entry.dt, tz=timezone.utc).date().isoformat()
            days.setdefault(day, []).append(entry)

        forecasts: List[DailyForecast] = []
        for day, entries in list(days.items())[:FORECAST_DAYS]:
            temps = [entry.main.temp for entry in entries]
            conditions = [entry.weather[0] for entry in entries]
            main = _most_frequent([condition.main for condition in conditions])
            descriptions = [condition.description for condition in conditions]
            icons = [condition.icon for condition in conditions if condition.icon]
            forecasts.append(
                DailyForecast(
                    date=_format_day(day),
                    avg_temperature=round_half_up(sum(temps) / len(temps)),
                    condition_main=main,
                    description=next((d for d in descriptions if main.lower() in d), descriptions[0]),
                    icon=next((i for i in icons if main.lower()[:1] in i), icons[0] if icons else None),
                )
            )
        return forecasts


class MockWeatherProvider(WeatherProvider):
    """Offline deterministic weather provider for tests and local runs."""

    def __init__(
        self,
        temperature: int = 18,
        condition_main: str = "Clouds",
        description: str = "scattered clouds",
        forecast: List[DailyForecast] | None = None,
    ) -> None:
        self.temperature = temperature
        self.condition_main = condition_main
        self.description = description
        self.forecast = forecast
        self.calls: List[str] = []

    def get_current_weather(self, location: str) -> WeatherSnapshot:
        LOGGER.info("Returning mock weather", extra={"location": location})
        self.calls.append(location)
        return WeatherSnapshot(
            location=location,
            temperature=self.temperature,
            description=self.description,
            icon="03d",
            humidity=60,
            wind_speed=3.5,
            feels_like=self.temperature,
            condition_main=self.condition_main,
            time_of_day="day",
            timestamp=_utc_now().isoformat(),
            clothing_guidance=clothing_guidance(self.temperature),
        )

    def get_forecast(self, location: str) -> List[DailyForecast]:
        self.calls.append(location)
        if self.forecast is not None:
            return list(self.forecast)
        return [
            DailyForecast(
                date=f"Day {offset + 1}",
                avg_temperature=self.temperature,
                condition_main=self.condition_main,
                description=self.description,
                icon="03d",
            )
            for offset in range(FORECAST_DAYS)
        ]


__all__ = [
    "WeatherProvider",
    "OpenWeatherProvider",
    "MockWeatherProvider",
    "clothing_guidance",
]

"""Recommendation flow: weather first, model next, fallback last."""

import pytest

from agents.stylist_agent import OutfitStylistAgent
from models.wardrobe_item import WardrobeItem
from tools.gemini_adapters import OutfitGenerator
from tools.weather_provider import MockWeatherProvider, WeatherProvider
from wardrobe_app.errors import UpstreamUnavailableError, WeatherUnavailableError


class FailingWeatherProvider(WeatherProvider):
    def __init__(self) -> None:
        self.calls = 0

    def get_current_weather(self, location):
        self.calls += 1
        raise WeatherUnavailableError("OpenWeather API unreachable")

    def get_forecast(self, location):
        raise WeatherUnavailableError("OpenWeather API unreachable")


def _wardrobe(store, user_id):
    specs = [("tops", 80), ("tops", 60), ("bottoms", 70), ("bottoms", 90)]
    return [
        store.create_wardrobe_item(
            WardrobeItem(user_id=user_id, name=f"{category} {score}", category=category,
                         sustainability_score=score, season="all-season")
        )
        for category, score in specs
    ]


def test_empty_wardrobe_returns_empty_list_after_fetching_weather(memory_store, make_user, fake_gemini) -> None:
    user = make_user(memory_store)
    weather = MockWeatherProvider(temperature=30)
    client = fake_gemini()
    agent = OutfitStylistAgent(memory_store, weather, OutfitGenerator(client))

    assert agent.get_recommendations(user.id, "casual") == []
    assert weather.calls == ["New York"]
    assert client._model.calls == []


def test_weather_failure_propagates_without_partial_results(memory_store, make_user, fake_gemini) -> None:
    user = make_user(memory_store)
    _wardrobe(memory_store, user.id)
    client = fake_gemini({"outfits": [{"name": "Never", "items": [1, 3]}]})
    agent = OutfitStylistAgent(memory_store, FailingWeatherProvider(), OutfitGenerator(client))

    with pytest.raises(UpstreamUnavailableError) as excinfo:
        agent.get_recommendations(user.id, "casual")
    assert excinfo.value.service == "weather"
    assert client._model.calls == []


def test_fallback_runs_when_generator_fails(memory_store, make_user, fake_gemini) -> None:
    user = make_user(memory_store)
    _wardrobe(memory_store, user.id)
    agent = OutfitStylistAgent(
        memory_store,
        MockWeatherProvider(temperature=30),
        OutfitGenerator(fake_gemini(RuntimeError("quota exceeded"))),
    )

    outfits = agent.get_recommendations(user.id, "casual")

    assert [o.sustainability_score for o in outfits] == [75, 75]
    assert all(o.source == "fallback" for o in outfits)


def test_generated_outfits_are_returned_with_ids_sanitized(memory_store, make_user, fake_gemini) -> None:
    user = make_user(memory_store)
    other = make_user(memory_store, "bob")
    items = _wardrobe(memory_store, user.id)
    foreign = memory_store.create_wardrobe_item(WardrobeItem(user_id=other.id, name="Bob's", category="tops"))
    reply = {
        "outfits": [
            {"name": "City Walk", "items": [items[0].id, items[2].id, foreign.id], "sustainabilityScore": 140,
             "season": "summer", "rationale": "Breathable layers"},
            {"name": "Phantom", "items": [foreign.id, 999], "sustainabilityScore": 50},
        ]
    }
    agent = OutfitStylistAgent(memory_store, MockWeatherProvider(temperature=22), OutfitGenerator(fake_gemini(reply)))

    outfits = agent.get_recommendations(user.id, "work")

    assert len(outfits) == 1
    assert outfits[0].name == "City Walk"
    assert outfits[0].items == [items[0].id, items[2].id]
    assert outfits[0].sustainability_score == 100
    assert outfits[0].occasion == "work"
    assert outfits[0].source == "ai"


def test_preferred_location_is_used(memory_store, make_user) -> None:
    user = make_user(memory_store)
    memory_store.set_weather_preferences(user.id, {"location": "Lisbon"})
    weather = MockWeatherProvider(temperature=18)
    agent = OutfitStylistAgent(memory_store, weather, generator=None, default_location="Berlin")

    agent.get_recommendations(user.id)

    assert weather.calls == ["Lisbon"]
    assert agent.resolve_location(999) == "Berlin"

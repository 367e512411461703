"""Gemini client parsing and the fail-open adapter defaults."""

import base64

import pytest

from models.sustainability import DEFAULT_EXPLANATION, DEFAULT_TIPS
from models.wardrobe_item import ClothingAnalysis, WardrobeItem
from models.weather import WeatherSnapshot
from tools.gemini_adapters import ClothingImageAnalyzer, MaterialAnalyzer, OutfitGenerator, decode_image_data
from tools.gemini_client import GeminiClient, extract_json_object
from wardrobe_app.errors import UpstreamUnavailableError, ValidationFailedError

IMAGE_B64 = base64.b64encode(b"\xff\xd8\xff\xe0fake-jpeg").decode("ascii")


def _weather(temperature: int = 21) -> WeatherSnapshot:
    return WeatherSnapshot(
        location="Paris",
        temperature=temperature,
        description="clear sky",
        humidity=40,
        wind_speed=2.0,
        feels_like=temperature,
        condition_main="Clear",
        time_of_day="day",
        timestamp="2024-05-01T12:00:00+00:00",
    )


def test_extract_json_prefers_direct_parse_then_span() -> None:
    assert extract_json_object('{"a": 1}') == {"a": 1}
    assert extract_json_object('Sure! Here you go:\n```json\n{"a": {"b": 2}}\n```\nEnjoy') == {"a": {"b": 2}}


@pytest.mark.parametrize("text", ["", "no json here", "[1, 2, 3]", "{not: valid}"])
def test_extract_json_rejects_unusable_text(text) -> None:
    with pytest.raises(UpstreamUnavailableError):
        extract_json_object(text)


def test_client_requests_structured_output(fake_gemini) -> None:
    client = fake_gemini({"ok": True})

    assert client.generate_json(["prompt"], temperature=0.2, max_output_tokens=256) == {"ok": True}
    call = client._model.calls[0]
    assert call["generation_config"]["response_mime_type"] == "application/json"
    assert call["generation_config"]["max_output_tokens"] == 256
    assert call["safety_settings"] is None


def test_client_without_key_is_unavailable() -> None:
    with pytest.raises(UpstreamUnavailableError) as excinfo:
        GeminiClient(api_key=None).generate_json(["prompt"], temperature=0.1, max_output_tokens=10)
    assert excinfo.value.service == "gemini"


def test_client_maps_blocked_response(fake_gemini) -> None:
    with pytest.raises(UpstreamUnavailableError):
        fake_gemini(None).generate_json(["prompt"], temperature=0.1, max_output_tokens=10)


def test_decode_image_data_accepts_data_urls_and_raw_base64() -> None:
    assert decode_image_data(f"data:image/png;base64,{IMAGE_B64}")[0] == "image/png"
    mime, raw = decode_image_data(IMAGE_B64)
    assert mime == "image/jpeg"
    assert raw.startswith(b"\xff\xd8")
    with pytest.raises(ValidationFailedError):
        decode_image_data("%%%not-base64%%%")


def test_image_analysis_parses_model_output(fake_gemini) -> None:
    client = fake_gemini(
        {"category": "Tops", "type": "t-shirt", "color": "white", "material": "cotton", "style": "casual",
         "occasion": "casual", "season": "summer", "sustainabilityScore": 82}
    )

    result = ClothingImageAnalyzer(client).analyze(f"data:image/jpeg;base64,{IMAGE_B64}")

    assert result.category == "tops"
    assert result.sustainability_score == 82
    assert result.attributes["detectedBy"] == "Google Gemini Vision"
    assert result.attributes["confidenceLevel"] == "high"
    assert result.attributes["color"] == "white"
    call = client._model.calls[0]
    assert call["parts"][1]["mime_type"] == "image/jpeg"
    assert call["safety_settings"] is not None


def test_image_analysis_scores_from_material_when_missing(fake_gemini) -> None:
    client = fake_gemini({"category": "bottoms", "material": "Denim"})
    assert ClothingImageAnalyzer(client).analyze(IMAGE_B64).sustainability_score == 70

    client = fake_gemini({"category": "bottoms", "material": "velvet"})
    assert ClothingImageAnalyzer(client).analyze(IMAGE_B64).sustainability_score == 60


def test_zero_scores_are_kept(fake_gemini) -> None:
    client = fake_gemini({"category": "bottoms", "material": "Denim", "sustainabilityScore": 0})
    assert ClothingImageAnalyzer(client).analyze(IMAGE_B64).sustainability_score == 0

    assert MaterialAnalyzer(fake_gemini({"score": 0})).analyze("acrylic").score == 0


def test_image_analysis_clamps_out_of_range_scores(fake_gemini) -> None:
    client = fake_gemini({"category": "tops", "material": "cotton", "sustainabilityScore": 250})
    assert ClothingImageAnalyzer(client).analyze(IMAGE_B64).sustainability_score == 100


@pytest.mark.parametrize("reply", [RuntimeError("network down"), "I cannot help with that", None])
def test_image_analysis_falls_back_to_defaults(fake_gemini, reply) -> None:
    assert ClothingImageAnalyzer(fake_gemini(reply)).analyze(IMAGE_B64) == ClothingAnalysis()


def test_image_analysis_default_record() -> None:
    result = ClothingAnalysis()
    assert (result.category, result.type, result.color, result.material) == ("unknown",) * 4
    assert (result.style, result.occasion, result.season) == ("casual", "casual", "all-season")
    assert result.sustainability_score == 60
    assert result.attributes == {"detectedBy": "default", "confidenceLevel": "low"}


def test_outfit_generator_skips_malformed_entries(fake_gemini) -> None:
    client = fake_gemini(
        {
            "outfits": [
                {"name": "Layered", "items": [1, "2"], "sustainabilityScore": 84.5, "season": "Autumn",
                 "rationale": "Warm and light"},
                {"items": [3]},
                "not an outfit",
                {"name": "No score", "items": [4]},
            ]
        }
    )
    items = [WardrobeItem(id=1, user_id=1, name="Tee", category="tops")]

    outfits = OutfitGenerator(client).generate(items, _weather(), "casual")

    assert [o.name for o in outfits] == ["Layered", "No score"]
    assert outfits[0].items == [1, 2]
    assert outfits[0].sustainability_score == 85
    assert outfits[0].season == "fall"
    assert outfits[1].sustainability_score == 60
    assert '"id": 1' in client._model.calls[0]["parts"][0]


@pytest.mark.parametrize("reply", [RuntimeError("timeout"), {"recommendations": []}, {"outfits": "none"}])
def test_outfit_generator_failure_yields_nothing(fake_gemini, reply) -> None:
    assert OutfitGenerator(fake_gemini(reply)).generate([], _weather(), "casual") == []


def test_material_analysis_uses_model_values(fake_gemini) -> None:
    client = fake_gemini({"score": 91, "explanation": "Linen needs little water.", "tips": ["Air dry"]})
    result = MaterialAnalyzer(client).analyze("linen")
    assert (result.score, result.explanation, result.tips) == (91, "Linen needs little water.", ["Air dry"])


def test_material_analysis_fills_missing_fields_individually(fake_gemini) -> None:
    result = MaterialAnalyzer(fake_gemini({"score": 45})).analyze("nylon")
    assert result.score == 45
    assert result.explanation == DEFAULT_EXPLANATION
    assert result.tips == DEFAULT_TIPS


def test_material_analysis_defaults_on_failure(fake_gemini) -> None:
    result = MaterialAnalyzer(fake_gemini(RuntimeError("boom"))).analyze("silk")
    assert result.material == "silk"
    assert result.score == 60
    assert result.explanation == "Could not analyze the sustainability of this material."
    assert result.tips == ["Wash at lower temperatures", "Repair instead of replace", "Donate when no longer needed"]
